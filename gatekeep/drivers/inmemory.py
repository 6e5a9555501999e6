"""In-memory implementation of the storage driver."""

from __future__ import annotations

from typing import Dict, List

from ..contracts import Principal
from ..permissions import PermissionRecord
from .base import Driver


class InMemoryDriver(Driver):
    """Store permission records in local memory.

    Useful for tests or when no database is configured. Data is not
    persisted across process restarts.
    """

    def __init__(self) -> None:
        self._records: Dict[str, List[PermissionRecord]] = {}

    # ------------------------------------------------------------------
    def list_records(self, principal: Principal) -> List[PermissionRecord]:
        return list(self._records.get(principal.key, []))

    def add_record(self, principal: Principal, record: PermissionRecord) -> None:
        self._records.setdefault(principal.key, []).append(record)

    def remove_record(self, principal: Principal, record: PermissionRecord) -> None:
        records = self._records.get(principal.key)
        if not records:
            return
        self._records[principal.key] = [
            stored for stored in records if not stored.same_signature(record)
        ]

    def has_record(self, principal: Principal, record: PermissionRecord) -> bool:
        return any(
            stored.same_signature(record)
            for stored in self._records.get(principal.key, [])
        )

    def replace_records(
        self, principal: Principal, records: List[PermissionRecord]
    ) -> None:
        stored = list(self._records.get(principal.key, []))
        for record in records:
            stored = [s for s in stored if not s.same_signature(record)]
            stored.append(record)
        self._records[principal.key] = stored
