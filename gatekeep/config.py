from __future__ import annotations

import os
from typing import Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class StorageConfig(BaseModel):
    """Storage driver configuration settings."""

    backend: Literal["inmemory", "sqlite"] = "inmemory"
    path: Optional[str] = None


class GatekeepConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageConfig = StorageConfig()
    database_url: Optional[str] = None
    aliases: Dict[str, List[str]] = Field(
        default_factory=dict, description="Alias name to the actions it groups"
    )
    roles: Dict[str, List[str]] = Field(
        default_factory=dict, description="Role name to the roles it inherits"
    )

    def resolved_database_url(self) -> Optional[str]:
        """Return the storage URL implied by this configuration."""
        if self.database_url:
            return self.database_url
        if self.storage.backend == "sqlite" and self.storage.path:
            return f"sqlite://{self.storage.path}"
        return None


def load_config(path: Optional[str] = None) -> GatekeepConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to GATEKEEP_CONFIG env
            variable or 'gatekeep.yaml' in the current directory.
    """

    config_path = path or os.getenv("GATEKEEP_CONFIG", "gatekeep.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = GatekeepConfig(**data)
    else:
        config = GatekeepConfig()

    env_db_url = os.getenv("GATEKEEP_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.database_url = env_db_url
    return config
