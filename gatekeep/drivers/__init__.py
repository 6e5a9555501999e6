"""Storage drivers for gatekeep permission records."""

from __future__ import annotations

import os
from typing import Optional

from ..config import GatekeepConfig, load_config
from .base import Driver
from .inmemory import InMemoryDriver
from .sqlite import SQLiteDriver


def get_driver(
    database_url: Optional[str] = None, config: Optional[GatekeepConfig] = None
) -> Driver:
    """Factory function to obtain a storage driver.

    The backend is selected based on ``database_url`` which can be provided
    explicitly, via environment variable ``GATEKEEP_DATABASE_URL`` or
    ``DATABASE_URL``, or from loaded configuration. When no database is
    configured, an in-memory driver is returned.
    """

    config = config or load_config()
    database_url = (
        database_url
        or os.getenv("GATEKEEP_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or config.resolved_database_url()
    )

    if not database_url:
        return InMemoryDriver()

    if database_url.startswith("sqlite://"):
        path = database_url.replace("sqlite://", "", 1)
        return SQLiteDriver(path)
    raise ValueError(f"Unsupported database backend: {database_url}")


__all__ = [
    "Driver",
    "InMemoryDriver",
    "SQLiteDriver",
    "get_driver",
]
