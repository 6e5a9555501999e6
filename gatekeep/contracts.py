"""Core principal and resource contracts for gatekeep."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .constants import CALLER_KEY_PREFIX, ROLE_KEY_PREFIX
from .errors import LockNotSetError

if TYPE_CHECKING:
    from .manager import CallerLock

ResourceId = Union[int, str]


@runtime_checkable
class Condition(Protocol):
    """Runtime predicate attached to a permission record.

    Implementations must be pure: the same inputs always produce the same
    result and evaluation has no side effects visible to the resolver.
    """

    def evaluate(
        self,
        caller: Any,
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[ResourceId] = None,
    ) -> bool: ...


@runtime_checkable
class Resource(Protocol):
    """Anything exposing a resource type and an optional instance id."""

    resource_type: str
    resource_id: Optional[ResourceId]


class ResourceRef(BaseModel):
    """Plain resource reference carrying only a type and an optional id."""

    model_config = ConfigDict(frozen=True)

    resource_type: str
    resource_id: Optional[ResourceId] = None


class Role(BaseModel):
    """A named principal whose records act as a fallback for its holders."""

    model_config = ConfigDict(frozen=True)

    name: str

    @property
    def key(self) -> str:
        return f"{ROLE_KEY_PREFIX}:{self.name}"


class Caller(BaseModel):
    """A principal identified by ``(caller_type, caller_id)``.

    ``roles`` are the role names the host application declares for the
    caller.  Further roles can be assigned at runtime through the
    :class:`~gatekeep.manager.Manager`.  Once bound with :meth:`set_lock`
    the caller can answer permission questions about itself.
    """

    caller_type: str = "user"
    caller_id: ResourceId
    roles: List[str] = Field(default_factory=list)

    _lock: Any = PrivateAttr(default=None)

    @property
    def key(self) -> str:
        # JSON keeps 1 and "1" apart and quotes any ":" in the type or id
        return (
            f"{CALLER_KEY_PREFIX}:{json.dumps(self.caller_type)}:"
            f"{json.dumps(self.caller_id)}"
        )

    # ------------------------------------------------------------------
    # Lock-aware helpers
    def set_lock(self, lock: "CallerLock") -> None:
        """Bind ``lock`` so the permission helpers below can delegate to it."""
        self._lock = lock

    def get_lock(self) -> "CallerLock":
        if self._lock is None:
            raise LockNotSetError(
                f"No lock bound to caller {self.key}; call set_lock() first"
            )
        return self._lock

    def can(self, actions: Any, resource: Any = None, resource_id: Any = None) -> bool:
        return self.get_lock().can(actions, resource, resource_id)

    def cannot(self, actions: Any, resource: Any = None, resource_id: Any = None) -> bool:
        return self.get_lock().cannot(actions, resource, resource_id)

    def allow(
        self,
        actions: Any,
        resource: Any = None,
        resource_id: Any = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        self.get_lock().allow(actions, resource, resource_id, conditions)

    def deny(
        self,
        actions: Any,
        resource: Any = None,
        resource_id: Any = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        self.get_lock().deny(actions, resource, resource_id, conditions)

    def toggle(
        self,
        actions: Any,
        resource: Any = None,
        resource_id: Any = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        self.get_lock().toggle(actions, resource, resource_id, conditions)


Principal = Union[Caller, Role]
