"""Permission resolution engine."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional

from .constants import WILDCARD_ACTION
from .contracts import Principal, ResourceId, Role
from .drivers.base import Driver
from .errors import InvalidArgumentError
from .permissions import PermissionRecord, check_resource_id, normalize_actions
from .registry import AliasRegistry, RoleRegistry


class Resolver:
    """Decides whether a caller may perform actions on a resource scope.

    For every requested action the resolver collects the principal's own
    records that match the action (directly, through an alias or through
    the ``"all"`` wildcard) and the resource scope, and drops those whose
    conditions fail.  The most specific survivor decides, the most recently
    stored one winning ties.  Only when the principal has no survivor are
    its roles consulted, recursively and by the same rule, the most specific
    role decision winning and earlier roles winning ties.  With nothing left
    the action is denied.

    The resolver holds no state of its own beyond its collaborators and does
    not write to storage.
    """

    def __init__(
        self, driver: Driver, aliases: AliasRegistry, roles: RoleRegistry
    ) -> None:
        self.driver = driver
        self.aliases = aliases
        self.roles = roles

    # ------------------------------------------------------------------
    # Queries
    def can(
        self,
        caller: Principal,
        actions: Iterable[str] | str,
        resource_type: Optional[str] = None,
        resource_id: Optional[ResourceId] = None,
        principal: Optional[Principal] = None,
        aliases: Optional[AliasRegistry] = None,
    ) -> bool:
        """Return ``True`` only if every action in ``actions`` is allowed."""
        actions = normalize_actions(actions)
        for action in actions:
            self._check_query_action(action)
        self._check_scope(resource_type, resource_id)
        return all(
            self.resolve(caller, action, resource_type, resource_id, principal, aliases)
            for action in actions
        )

    def cannot(self, *args: Any, **kwargs: Any) -> bool:
        return not self.can(*args, **kwargs)

    def resolve(
        self,
        caller: Principal,
        action: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[ResourceId] = None,
        principal: Optional[Principal] = None,
        aliases: Optional[AliasRegistry] = None,
    ) -> bool:
        """Resolve a single action for ``principal`` (``caller`` by default).

        Conditions are always evaluated against ``caller``, even for records
        inherited from roles.
        """
        self._check_query_action(action)
        self._check_scope(resource_type, resource_id)
        candidates = self.candidates(action, aliases)
        winner = self._decide(
            principal or caller, caller, action, candidates, resource_type, resource_id
        )
        return winner.allow if winner is not None else False

    def candidates(
        self, action: str, aliases: Optional[AliasRegistry] = None
    ) -> List[str]:
        """Return ``action`` followed by the aliases that contain it."""
        registry = aliases if aliases is not None else self.aliases
        return [action] + [n for n in registry.aliases_for(action) if n != action]

    def allowed(
        self,
        caller: Principal,
        action: str,
        resource_type: str,
        principal: Optional[Principal] = None,
        aliases: Optional[AliasRegistry] = None,
    ) -> List[ResourceId]:
        """Return the ids of ``resource_type`` the action is allowed on.

        Only ids mentioned by a reachable record are considered.
        """
        return [
            resource_id
            for resource_id in self._known_ids(
                caller, action, resource_type, principal, aliases
            )
            if self.resolve(caller, action, resource_type, resource_id, principal, aliases)
        ]

    def denied(
        self,
        caller: Principal,
        action: str,
        resource_type: str,
        principal: Optional[Principal] = None,
        aliases: Optional[AliasRegistry] = None,
    ) -> List[ResourceId]:
        """Return the ids of ``resource_type`` the action is denied on."""
        return [
            resource_id
            for resource_id in self._known_ids(
                caller, action, resource_type, principal, aliases
            )
            if not self.resolve(
                caller, action, resource_type, resource_id, principal, aliases
            )
        ]

    # ------------------------------------------------------------------
    # Internals
    def _decide(
        self,
        principal: Principal,
        caller: Principal,
        action: str,
        candidates: List[str],
        resource_type: Optional[str],
        resource_id: Optional[ResourceId],
    ) -> Optional[PermissionRecord]:
        matching = [
            record
            for record in self.driver.list_records(principal)
            if record.matches_action(candidates)
            and record.matches_scope(resource_type, resource_id)
            and record.conditions_hold(caller, action, resource_type, resource_id)
        ]
        winner = self._most_specific(matching)
        if winner is not None:
            return winner

        best: Optional[PermissionRecord] = None
        for name in self.roles.parents_of(principal):
            found = self._decide(
                Role(name=name), caller, action, candidates, resource_type, resource_id
            )
            # strict comparison keeps the earlier role on ties
            if found is not None and (best is None or found.specificity > best.specificity):
                best = found
        return best

    @staticmethod
    def _most_specific(records: List[PermissionRecord]) -> Optional[PermissionRecord]:
        best: Optional[PermissionRecord] = None
        # records arrive oldest first, so >= lets the newest win ties
        for record in records:
            if best is None or record.specificity >= best.specificity:
                best = record
        return best

    def _known_ids(
        self,
        caller: Principal,
        action: str,
        resource_type: str,
        principal: Optional[Principal],
        aliases: Optional[AliasRegistry],
    ) -> List[ResourceId]:
        self._check_query_action(action)
        if not resource_type:
            raise InvalidArgumentError("A resource type is required")
        candidates = self.candidates(action, aliases)
        principal = principal or caller
        principals: List[Principal] = [principal]
        for name in self.roles.parents_of(principal):
            principals.append(Role(name=name))
            principals.extend(Role(name=n) for n in self.roles.ancestors(name))

        ids: List[ResourceId] = []
        for current in principals:
            for record in self.driver.list_records(current):
                if (
                    record.resource_type == resource_type
                    and record.resource_id is not None
                    and record.matches_action(candidates)
                    and record.resource_id not in ids
                ):
                    ids.append(record.resource_id)
        return ids

    @staticmethod
    def _check_query_action(action: str) -> None:
        if action == WILDCARD_ACTION:
            raise InvalidArgumentError(
                f"'{WILDCARD_ACTION}' can only be stored, not queried"
            )

    @staticmethod
    def _check_scope(
        resource_type: Optional[str], resource_id: Optional[ResourceId]
    ) -> None:
        if resource_id is not None and resource_type is None:
            raise InvalidArgumentError("A resource id requires a resource type")
        check_resource_id(resource_id)
