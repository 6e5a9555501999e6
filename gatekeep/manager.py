"""Facade binding principals to storage, registries and the resolver."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from .config import GatekeepConfig, load_config
from .contracts import Caller, Condition, Principal, ResourceId, Role
from .drivers import Driver, InMemoryDriver, get_driver
from .permissions import (
    PermissionRecord,
    check_conditions,
    normalize_actions,
    resource_scope,
)
from .registry import Alias, AliasRegistry, RoleRegistry
from .resolver import Resolver

logger = logging.getLogger(__name__)


class Manager:
    """Entry point for one authorization context.

    The manager owns the storage driver, the alias and role registries and
    the resolver built on top of them.  Locks obtained from :meth:`caller`
    and :meth:`role` share these collaborators.
    """

    def __init__(
        self,
        driver: Optional[Driver] = None,
        aliases: Optional[AliasRegistry] = None,
        roles: Optional[RoleRegistry] = None,
    ) -> None:
        self.driver = driver if driver is not None else InMemoryDriver()
        self.aliases = aliases if aliases is not None else AliasRegistry()
        self.roles = roles if roles is not None else RoleRegistry()
        self.resolver = Resolver(self.driver, self.aliases, self.roles)

    @classmethod
    def from_config(
        cls, config: Optional[GatekeepConfig] = None, database_url: Optional[str] = None
    ) -> "Manager":
        """Build a manager from configuration, pre-loading aliases and roles."""
        config = config or load_config()
        manager = cls(get_driver(database_url, config))
        for name, actions in config.aliases.items():
            manager.alias(name, actions)
        for name, inherits in config.roles.items():
            manager.set_role(name)
            for parent in inherits:
                manager.set_role(name, parent)
        return manager

    # ------------------------------------------------------------------
    # Locks
    def caller(self, caller: Caller) -> "CallerLock":
        """Return a lock for ``caller``."""
        return CallerLock(self, caller)

    def role(self, role: str | Role) -> "RoleLock":
        """Return a lock for ``role``, registering it if unknown."""
        name = role.name if isinstance(role, Role) else role
        return RoleLock(self, self.roles.register(name))

    # ------------------------------------------------------------------
    # Registries
    def alias(self, name: str, actions: Iterable[str] | str) -> Alias:
        return self.aliases.alias(name, actions)

    def set_role(
        self, names: Iterable[str] | str, inherit: Optional[str] = None
    ) -> List[Role]:
        """Register roles; with ``inherit`` each one inherits that role."""
        return self.roles.set_role(names, inherit)

    def assign_roles(self, caller: Caller, names: Iterable[str] | str) -> None:
        self.roles.assign(caller, names)

    def unassign_roles(self, caller: Caller, names: Iterable[str] | str) -> None:
        self.roles.unassign(caller, names)

    # ------------------------------------------------------------------
    # Role permissions
    def allow_role(
        self,
        roles: Iterable[str] | str,
        actions: Any,
        resource: Any = None,
        resource_id: Optional[ResourceId] = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        for lock in self._role_locks(roles, actions, resource, resource_id):
            lock.allow(actions, resource, resource_id, conditions)

    def deny_role(
        self,
        roles: Iterable[str] | str,
        actions: Any,
        resource: Any = None,
        resource_id: Optional[ResourceId] = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        for lock in self._role_locks(roles, actions, resource, resource_id):
            lock.deny(actions, resource, resource_id, conditions)

    def toggle_role(
        self,
        roles: Iterable[str] | str,
        actions: Any,
        resource: Any = None,
        resource_id: Optional[ResourceId] = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        for lock in self._role_locks(roles, actions, resource, resource_id):
            lock.toggle(actions, resource, resource_id, conditions)

    def _role_locks(
        self, roles: Iterable[str] | str, actions: Any, resource: Any, resource_id: Any
    ) -> List["RoleLock"]:
        # validate before registering any role so bad calls change nothing
        normalize_actions(actions)
        resource_scope(resource, resource_id)
        if isinstance(roles, str):
            roles = [roles]
        return [self.role(name) for name in self.roles.set_role(list(roles))]


class Lock:
    """Permission API for a single principal.

    Mutations write straight through to the manager's driver; queries are
    answered by the manager's resolver.
    """

    def __init__(
        self,
        manager: Manager,
        principal: Principal,
        aliases: Optional[AliasRegistry] = None,
    ) -> None:
        self.manager = manager
        self.principal = principal
        self.aliases = aliases if aliases is not None else manager.aliases

    @property
    def driver(self) -> Driver:
        return self.manager.driver

    @property
    def resolver(self) -> Resolver:
        return self.manager.resolver

    # ------------------------------------------------------------------
    # Queries
    def can(
        self, actions: Any, resource: Any = None, resource_id: Optional[ResourceId] = None
    ) -> bool:
        """Return ``True`` if every action is allowed on the resource."""
        resource_type, resource_id = resource_scope(resource, resource_id)
        return self.resolver.can(
            self.principal,
            actions,
            resource_type,
            resource_id,
            aliases=self.aliases,
        )

    def cannot(
        self, actions: Any, resource: Any = None, resource_id: Optional[ResourceId] = None
    ) -> bool:
        return not self.can(actions, resource, resource_id)

    def allowed(self, action: str, resource_type: str) -> List[ResourceId]:
        """Return the known ids of ``resource_type`` the action is allowed on."""
        return self.resolver.allowed(
            self.principal, action, resource_type, aliases=self.aliases
        )

    def denied(self, action: str, resource_type: str) -> List[ResourceId]:
        return self.resolver.denied(
            self.principal, action, resource_type, aliases=self.aliases
        )

    def permissions(self) -> List[PermissionRecord]:
        return self.driver.list_records(self.principal)

    # ------------------------------------------------------------------
    # Mutations
    def allow(
        self,
        actions: Any,
        resource: Any = None,
        resource_id: Optional[ResourceId] = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        self._store(True, actions, resource, resource_id, conditions)

    def deny(
        self,
        actions: Any,
        resource: Any = None,
        resource_id: Optional[ResourceId] = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        self._store(False, actions, resource, resource_id, conditions)

    def toggle(
        self,
        actions: Any,
        resource: Any = None,
        resource_id: Optional[ResourceId] = None,
        conditions: Optional[List[Condition]] = None,
    ) -> None:
        """Store the opposite of each action's current decision.

        Every decision is read before anything is written, so toggling
        several actions at once flips each of them independently.
        """
        actions = normalize_actions(actions)
        resource_type, resource_id = resource_scope(resource, resource_id)
        conditions = check_conditions(conditions)
        current = {
            action: self.resolver.resolve(
                self.principal,
                action,
                resource_type,
                resource_id,
                aliases=self.aliases,
            )
            for action in actions
        }
        self._write(
            [
                PermissionRecord(
                    allow=not current[action],
                    action=action,
                    resource_type=resource_type,
                    resource_id=resource_id,
                    conditions=conditions,
                )
                for action in actions
            ]
        )

    def remove(
        self, actions: Any, resource: Any = None, resource_id: Optional[ResourceId] = None
    ) -> None:
        """Delete the stored records for ``actions`` on exactly this scope."""
        actions = normalize_actions(actions)
        resource_type, resource_id = resource_scope(resource, resource_id)
        for action in actions:
            self.driver.remove_record(
                self.principal,
                PermissionRecord(
                    allow=False,
                    action=action,
                    resource_type=resource_type,
                    resource_id=resource_id,
                ),
            )

    def clear(self) -> None:
        """Remove every record held by the principal."""
        for record in self.driver.list_records(self.principal):
            self.driver.remove_record(self.principal, record)
        logger.debug(f"Cleared permissions for {self.principal.key}")

    def _store(
        self,
        allow: bool,
        actions: Any,
        resource: Any,
        resource_id: Optional[ResourceId],
        conditions: Optional[List[Condition]],
    ) -> None:
        actions = normalize_actions(actions)
        resource_type, resource_id = resource_scope(resource, resource_id)
        conditions = check_conditions(conditions)
        self._write(
            [
                PermissionRecord(
                    allow=allow,
                    action=action,
                    resource_type=resource_type,
                    resource_id=resource_id,
                    conditions=conditions,
                )
                for action in actions
            ]
        )

    def _write(self, records: List[PermissionRecord]) -> None:
        # the driver stores all of the records or none of them
        self.driver.replace_records(self.principal, records)
        for record in records:
            logger.debug(
                f"Stored {'allow' if record.allow else 'deny'} {record.signature} "
                f"for {self.principal.key}"
            )


class CallerLock(Lock):
    """Lock bound to a caller.

    Besides the caller's own permissions it manages role and alias
    definitions on the manager.  Aliases registered with ``local=True`` only
    apply to queries made through this lock.
    """

    def __init__(self, manager: Manager, caller: Caller) -> None:
        super().__init__(manager, caller, manager.aliases.child())

    @property
    def caller(self) -> Caller:
        return self.principal  # type: ignore[return-value]

    @property
    def roles(self) -> List[str]:
        """The caller's effective roles, declared ones first."""
        return self.manager.roles.roles_for(self.caller)

    def alias(self, name: str, actions: Iterable[str] | str, local: bool = False) -> Alias:
        if local:
            return self.aliases.alias(name, actions)
        return self.manager.alias(name, actions)

    def set_role(
        self, names: Iterable[str] | str, inherit: Optional[str] = None
    ) -> List[Role]:
        """Assign ``names`` to the caller, or make them inherit ``inherit``."""
        if inherit is not None:
            return self.manager.set_role(names, inherit)
        roles = self.manager.set_role(names)
        self.manager.assign_roles(self.caller, [r.name for r in roles])
        return roles

    def allow_role(self, roles: Iterable[str] | str, *args: Any, **kwargs: Any) -> None:
        self.manager.allow_role(roles, *args, **kwargs)

    def deny_role(self, roles: Iterable[str] | str, *args: Any, **kwargs: Any) -> None:
        self.manager.deny_role(roles, *args, **kwargs)

    def toggle_role(self, roles: Iterable[str] | str, *args: Any, **kwargs: Any) -> None:
        self.manager.toggle_role(roles, *args, **kwargs)


class RoleLock(Lock):
    """Lock bound to a role; queries resolve the role and what it inherits."""

    def __init__(self, manager: Manager, role: Role) -> None:
        super().__init__(manager, role)

    @property
    def name(self) -> str:
        return self.principal.name  # type: ignore[union-attr]

    def inherit(self, role: str) -> None:
        self.manager.set_role(self.name, role)
