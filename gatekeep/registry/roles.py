"""Registry of roles, role inheritance and caller role assignments."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from ..contracts import Caller, Principal, Role
from ..errors import CycleDetectedError, InvalidArgumentError

logger = logging.getLogger(__name__)


def _normalize_names(names: Iterable[str] | str) -> List[str]:
    if isinstance(names, str):
        names = [names]
    normalized: List[str] = []
    for name in names:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError(f"Invalid role name: {name!r}")
        if name not in normalized:
            normalized.append(name)
    if not normalized:
        raise InvalidArgumentError("At least one role name is required")
    return normalized


class RoleRegistry:
    """Tracks known roles, what they inherit and which callers hold them.

    Inheritance is stored as a directed graph of role names (child to
    parent).  Edges that would close a cycle are rejected when added, so
    walking the graph always terminates.
    """

    def __init__(self) -> None:
        self._inherits: Dict[str, List[str]] = {}
        self._assignments: Dict[str, List[str]] = {}

    # ------------------------------------------------------------------
    # Roles and inheritance
    def register(self, name: str) -> Role:
        """Make ``name`` a known role. Registering twice is harmless."""
        if name not in self._inherits:
            self._inherits[name] = []
            logger.debug(f"Registered role {name}")
        return Role(name=name)

    def set_role(
        self, names: Iterable[str] | str, inherit: Optional[str] = None
    ) -> List[Role]:
        """Register ``names``; with ``inherit`` each of them inherits that role.

        Raises:
            CycleDetectedError: If any new edge would create a cycle. No role
                is registered and no edge is added in that case.
        """
        names = _normalize_names(names)
        if inherit is not None:
            inherit = _normalize_names(inherit)[0]
            reachable = set(self.ancestors(inherit)) | {inherit}
            for name in names:
                if name in reachable:
                    logger.warning(
                        f"Rejected inheritance {name} -> {inherit}: cycle detected"
                    )
                    raise CycleDetectedError(name, inherit)
            self.register(inherit)

        roles = [self.register(name) for name in names]
        if inherit is not None:
            for name in names:
                parents = self._inherits[name]
                if inherit not in parents:
                    parents.append(inherit)
                    logger.debug(f"Role {name} now inherits {inherit}")
        return roles

    def inherited(self, name: str) -> List[str]:
        """Return the roles ``name`` inherits directly, in assignment order."""
        return list(self._inherits.get(name, []))

    def ancestors(self, name: str) -> List[str]:
        """Return every role reachable from ``name``, depth first."""
        seen: List[str] = []
        stack = list(reversed(self._inherits.get(name, [])))
        while stack:
            current = stack.pop()
            if current in seen:
                continue
            seen.append(current)
            stack.extend(reversed(self._inherits.get(current, [])))
        return seen

    @property
    def roles(self) -> List[str]:
        return list(self._inherits)

    def __contains__(self, name: object) -> bool:
        return name in self._inherits

    # ------------------------------------------------------------------
    # Caller assignments
    def assign(self, caller: Caller, names: Iterable[str] | str) -> None:
        """Assign roles to ``caller`` in addition to its declared roles."""
        names = _normalize_names(names)
        assigned = self._assignments.setdefault(caller.key, [])
        for name in names:
            self.register(name)
            if name not in assigned:
                assigned.append(name)
        logger.debug(f"Assigned roles {names} to {caller.key}")

    def unassign(self, caller: Caller, names: Iterable[str] | str) -> None:
        names = _normalize_names(names)
        assigned = self._assignments.get(caller.key)
        if not assigned:
            return
        self._assignments[caller.key] = [n for n in assigned if n not in names]

    def roles_for(self, caller: Caller) -> List[str]:
        """Return the caller's declared roles followed by assigned ones."""
        roles: List[str] = []
        for name in list(caller.roles) + self._assignments.get(caller.key, []):
            if name not in roles:
                roles.append(name)
        return roles

    def parents_of(self, principal: Principal) -> List[str]:
        """Return the role names consulted when ``principal`` has no own match."""
        if isinstance(principal, Role):
            return self.inherited(principal.name)
        return self.roles_for(principal)
