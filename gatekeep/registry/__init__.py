"""Alias and role registries.

Registries are plain objects passed to the :class:`~gatekeep.manager.Manager`
so several independent authorization contexts can live in one process.
"""

from __future__ import annotations

from .aliases import AliasRegistry
from .models import Alias
from .roles import RoleRegistry

__all__ = [
    "Alias",
    "AliasRegistry",
    "RoleRegistry",
]
