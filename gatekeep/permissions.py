"""Permission records and the helpers used to match them against queries."""

from __future__ import annotations

from typing import Any, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .constants import WILDCARD_ACTION
from .contracts import Condition, Resource, ResourceId
from .errors import InvalidArgumentError

# Specificity ranks, broadest first.
ACTION_SCOPE = 1
TYPE_SCOPE = 2
INSTANCE_SCOPE = 3

Signature = Tuple[str, Optional[str], Optional[ResourceId]]


class PermissionRecord(BaseModel):
    """A stored allow/deny fact for one action, optionally resource scoped.

    Records are immutable.  Changing a permission means removing the record
    with the same :attr:`signature` and storing a new one.
    """

    model_config = ConfigDict(frozen=True)

    allow: bool
    action: str
    resource_type: Optional[str] = None
    resource_id: Optional[ResourceId] = None
    conditions: List[Any] = Field(default_factory=list)

    @model_validator(mode="after")
    def _instance_requires_type(self) -> "PermissionRecord":
        if self.resource_id is not None and self.resource_type is None:
            raise ValueError("resource_id requires a resource_type")
        return self

    @property
    def signature(self) -> Signature:
        return (self.action, self.resource_type, self.resource_id)

    @property
    def specificity(self) -> int:
        if self.resource_type is None:
            return ACTION_SCOPE
        if self.resource_id is None:
            return TYPE_SCOPE
        return INSTANCE_SCOPE

    def same_signature(self, other: "PermissionRecord") -> bool:
        return self.signature == other.signature

    def matches_action(self, candidates: Iterable[str]) -> bool:
        """Return ``True`` if the record grants or denies any of ``candidates``."""
        return self.action == WILDCARD_ACTION or self.action in candidates

    def matches_scope(
        self, resource_type: Optional[str], resource_id: Optional[ResourceId]
    ) -> bool:
        """Return ``True`` if the record applies to the queried resource scope.

        An action-only record applies everywhere, a type record applies to
        any query of that type (with or without an id) and an instance
        record applies only to the identical ``(type, id)`` pair.
        """
        if self.resource_type is None:
            return True
        if self.resource_type != resource_type:
            return False
        if self.resource_id is None:
            return True
        return resource_id is not None and self.resource_id == resource_id

    def conditions_hold(
        self,
        caller: Any,
        action: str,
        resource_type: Optional[str],
        resource_id: Optional[ResourceId],
    ) -> bool:
        return all(
            condition.evaluate(caller, action, resource_type, resource_id)
            for condition in self.conditions
        )


def normalize_actions(actions: Any) -> List[str]:
    """Turn a single action or an iterable of actions into an ordered list.

    Duplicates are dropped.  An empty result raises
    :class:`~gatekeep.errors.InvalidArgumentError`.
    """
    if isinstance(actions, str):
        actions = [actions]
    elif actions is None:
        actions = []
    normalized: List[str] = []
    for action in actions:
        if not isinstance(action, str) or not action:
            raise InvalidArgumentError(f"Invalid action: {action!r}")
        if action not in normalized:
            normalized.append(action)
    if not normalized:
        raise InvalidArgumentError("At least one action is required")
    return normalized


def resource_scope(
    resource: Any = None, resource_id: Optional[ResourceId] = None
) -> Tuple[Optional[str], Optional[ResourceId]]:
    """Extract ``(resource_type, resource_id)`` from a resource reference.

    ``resource`` may be ``None``, a bare type string or an object satisfying
    :class:`~gatekeep.contracts.Resource`.  An explicit ``resource_id`` wins
    over the id carried by a resource object.
    """
    if resource is None:
        resource_type = None
    elif isinstance(resource, str):
        resource_type = resource
    elif isinstance(resource, Resource):
        resource_type = resource.resource_type
        if resource_id is None:
            resource_id = resource.resource_id
    else:
        raise InvalidArgumentError(f"Unsupported resource reference: {resource!r}")

    if resource_type == "":
        raise InvalidArgumentError("Resource type must be a non-empty string")
    if resource_id is not None and resource_type is None:
        raise InvalidArgumentError("A resource id requires a resource type")
    check_resource_id(resource_id)
    return resource_type, resource_id


def check_resource_id(resource_id: Any) -> None:
    """Reject ids that are neither ``int`` nor ``str``."""
    if resource_id is None:
        return
    if isinstance(resource_id, bool) or not isinstance(resource_id, (int, str)):
        raise InvalidArgumentError(
            f"Resource id must be an int or a str, got {type(resource_id).__name__}"
        )


def check_conditions(conditions: Optional[Iterable[Any]]) -> List[Condition]:
    """Validate that every condition exposes ``evaluate``."""
    checked: List[Condition] = []
    for condition in conditions or []:
        if not isinstance(condition, Condition):
            raise InvalidArgumentError(
                f"Condition {condition!r} does not implement evaluate()"
            )
        checked.append(condition)
    return checked
