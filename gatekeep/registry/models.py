"""Pydantic models describing registry entities."""

from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from ..constants import WILDCARD_ACTION


class Alias(BaseModel):
    """A named group of concrete actions usable as a single action."""

    model_config = ConfigDict(frozen=True)

    name: str
    actions: Tuple[str, ...]

    @field_validator("name")
    @classmethod
    def _ensure_name(cls, v: str) -> str:
        if not v:
            raise ValueError("alias name must be a non-empty string")
        if v == WILDCARD_ACTION:
            raise ValueError(f"'{WILDCARD_ACTION}' is reserved and cannot be an alias")
        return v

    def covers(self, action: str) -> bool:
        return action in self.actions
