"""Exceptions raised by gatekeep."""

from __future__ import annotations


class GatekeepError(Exception):
    """Base class for all gatekeep errors."""


class InvalidArgumentError(GatekeepError, ValueError):
    """Raised for malformed queries or mutations.

    Covers empty action sets, a resource id without a resource type and
    wildcard actions used in queries. No state is changed when raised.
    """


class CycleDetectedError(GatekeepError):
    """Raised when a role inheritance edge would introduce a cycle."""

    def __init__(self, role: str, inherit: str) -> None:
        self.role = role
        self.inherit = inherit
        super().__init__(
            f"Role '{role}' cannot inherit '{inherit}': inheritance cycle detected"
        )


class LockNotSetError(GatekeepError, RuntimeError):
    """Raised when a lock-aware caller is used before a lock is bound."""
