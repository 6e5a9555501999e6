"""SQLite implementation of the storage driver."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ..conditions import ConditionDeserializer, ConditionSerializer, SerializedCondition
from ..contracts import Principal
from ..permissions import PermissionRecord
from .base import Driver

logger = logging.getLogger(__name__)

_INSERT = (
    "INSERT INTO permissions (principal, allow, action, resource_type, resource_id, conditions) "
    "VALUES (?, ?, ?, ?, ?, ?)"
)
_DELETE = (
    "DELETE FROM permissions "
    "WHERE principal = ? AND action = ? AND resource_type IS ? AND resource_id IS ?"
)


class SQLiteDriver(Driver):
    """Persist permission records using SQLite.

    Conditions are stored by class reference and rebuilt on every read, so
    they must be importable module level classes.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._ensure_schema()

    def close(self) -> None:
        self._conn.close()

    # ------------------------------------------------------------------
    # Schema management
    def _ensure_schema(self) -> None:
        cur = self._conn.cursor()
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS permissions (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                principal TEXT NOT NULL,
                allow INTEGER NOT NULL,
                action TEXT NOT NULL,
                resource_type TEXT,
                resource_id TEXT,
                conditions TEXT NOT NULL
            )
            """
        )
        cur.execute(
            "CREATE INDEX IF NOT EXISTS ix_permissions_principal ON permissions (principal)"
        )
        self._conn.commit()

    # ------------------------------------------------------------------
    # Helper methods
    def _execute(self, query: str, *params: Any) -> None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        self._conn.commit()

    def _fetchone(self, query: str, *params: Any) -> sqlite3.Row | None:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchone()

    def _fetchall(self, query: str, *params: Any) -> list[sqlite3.Row]:
        cur = self._conn.cursor()
        cur.execute(query, params)
        return cur.fetchall()

    @staticmethod
    def _encode_id(resource_id: Any) -> Optional[str]:
        return None if resource_id is None else json.dumps(resource_id)

    def _signature_params(
        self, principal: Principal, record: PermissionRecord
    ) -> Tuple[Any, ...]:
        return (
            principal.key,
            record.action,
            record.resource_type,
            self._encode_id(record.resource_id),
        )

    def _to_row(self, principal: Principal, record: PermissionRecord) -> Tuple[Any, ...]:
        conditions = [
            ConditionSerializer.serialize(c).model_dump(mode="json") for c in record.conditions
        ]
        return (
            principal.key,
            int(record.allow),
            record.action,
            record.resource_type,
            self._encode_id(record.resource_id),
            json.dumps(conditions),
        )

    @staticmethod
    def _to_record(row: sqlite3.Row) -> PermissionRecord:
        conditions = [
            ConditionDeserializer.deserialize(SerializedCondition.model_validate(c))
            for c in json.loads(row["conditions"])
        ]
        return PermissionRecord(
            allow=bool(row["allow"]),
            action=row["action"],
            resource_type=row["resource_type"],
            resource_id=(
                json.loads(row["resource_id"]) if row["resource_id"] is not None else None
            ),
            conditions=conditions,
        )

    # ------------------------------------------------------------------
    # Driver API
    def list_records(self, principal: Principal) -> List[PermissionRecord]:
        rows = self._fetchall(
            "SELECT allow, action, resource_type, resource_id, conditions FROM permissions WHERE principal = ? ORDER BY id",
            principal.key,
        )
        return [self._to_record(r) for r in rows]

    def add_record(self, principal: Principal, record: PermissionRecord) -> None:
        self._execute(_INSERT, *self._to_row(principal, record))
        logger.debug(f"Inserted {record.signature} for {principal.key} into {self.db_path}")

    def remove_record(self, principal: Principal, record: PermissionRecord) -> None:
        self._execute(_DELETE, *self._signature_params(principal, record))

    def has_record(self, principal: Principal, record: PermissionRecord) -> bool:
        row = self._fetchone(
            """
            SELECT 1 FROM permissions
            WHERE principal = ? AND action = ? AND resource_type IS ? AND resource_id IS ?
            LIMIT 1
            """,
            *self._signature_params(principal, record),
        )
        return row is not None

    def replace_records(
        self, principal: Principal, records: List[PermissionRecord]
    ) -> None:
        # serialize everything before touching the table
        rows = [self._to_row(principal, record) for record in records]
        with self._conn:
            for record, row in zip(records, rows):
                self._conn.execute(_DELETE, self._signature_params(principal, record))
                self._conn.execute(_INSERT, row)
        logger.debug(
            f"Replaced {[r.signature for r in records]} for {principal.key} in {self.db_path}"
        )
