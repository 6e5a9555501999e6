"""Registry of action aliases."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from ..errors import InvalidArgumentError
from ..permissions import normalize_actions
from .models import Alias

logger = logging.getLogger(__name__)


class AliasRegistry:
    """Maps alias names to the ordered actions they stand for.

    A registry may be chained to a ``parent``: lookups consult the local
    aliases first and fall back to the parent, so a caller-local registry
    can shadow manager-wide aliases without changing them.
    """

    def __init__(self, parent: Optional["AliasRegistry"] = None) -> None:
        self._aliases: Dict[str, Alias] = {}
        self._parent = parent

    def alias(self, name: str, actions: Iterable[str] | str) -> Alias:
        """Register ``name`` for ``actions``, replacing any previous definition."""
        try:
            entry = Alias(name=name, actions=tuple(normalize_actions(actions)))
        except ValidationError as e:
            raise InvalidArgumentError(str(e)) from e
        self._aliases[name] = entry
        logger.debug(f"Registered alias {name} -> {list(entry.actions)}")
        return entry

    def remove(self, name: str) -> None:
        self._aliases.pop(name, None)

    def get(self, name: str) -> Optional[Alias]:
        if name in self._aliases:
            return self._aliases[name]
        if self._parent is not None:
            return self._parent.get(name)
        return None

    def names(self) -> List[str]:
        """Return every visible alias name, local ones first."""
        names = list(self._aliases)
        if self._parent is not None:
            names.extend(n for n in self._parent.names() if n not in self._aliases)
        return names

    def aliases_for(self, action: str) -> List[str]:
        """Return the names of aliases whose action set contains ``action``.

        Expansion is a single level: aliases listing other aliases are not
        followed.
        """
        found: List[str] = []
        for name in self.names():
            entry = self.get(name)
            if entry is not None and entry.covers(action):
                found.append(name)
        return found

    def child(self) -> "AliasRegistry":
        return AliasRegistry(parent=self)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __len__(self) -> int:
        return len(self.names())
