"""Storage driver abstraction for permission records."""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from ..contracts import Principal
from ..permissions import PermissionRecord


@runtime_checkable
class Driver(Protocol):
    """Protocol for permission storage backends.

    Records are kept per principal (caller or role) in insertion order.
    Removal and existence checks match on the record signature
    ``(action, resource_type, resource_id)`` only.
    """

    def list_records(self, principal: Principal) -> List[PermissionRecord]:
        """Return the principal's records, oldest first."""

    def add_record(self, principal: Principal, record: PermissionRecord) -> None:
        """Append ``record`` to the principal's records."""

    def remove_record(self, principal: Principal, record: PermissionRecord) -> None:
        """Remove records sharing ``record``'s signature; no-op when absent."""

    def has_record(self, principal: Principal, record: PermissionRecord) -> bool:
        """Return ``True`` if a record with the same signature is stored."""

    def replace_records(
        self, principal: Principal, records: List[PermissionRecord]
    ) -> None:
        """Store ``records``, each replacing any record with its signature.

        Either every record is written or, when an error is raised, the
        principal's records are left as they were.
        """
