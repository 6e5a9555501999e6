"""Gatekeep: in-process permission resolution for callers, roles and resources."""

from .contracts import Caller, Condition, Resource, ResourceRef, Role
from .drivers import Driver, InMemoryDriver, SQLiteDriver, get_driver
from .errors import (
    CycleDetectedError,
    GatekeepError,
    InvalidArgumentError,
    LockNotSetError,
)
from .manager import CallerLock, Manager, RoleLock
from .permissions import PermissionRecord
from .registry import Alias, AliasRegistry, RoleRegistry
from .resolver import Resolver

__version__ = "0.1.0"
__all__ = [
    "Alias",
    "AliasRegistry",
    "Caller",
    "CallerLock",
    "Condition",
    "CycleDetectedError",
    "Driver",
    "GatekeepError",
    "InMemoryDriver",
    "InvalidArgumentError",
    "LockNotSetError",
    "Manager",
    "PermissionRecord",
    "Resolver",
    "Resource",
    "ResourceRef",
    "Role",
    "RoleLock",
    "RoleRegistry",
    "SQLiteDriver",
    "get_driver",
]
