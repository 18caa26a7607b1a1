"""Application configuration helpers."""

from __future__ import annotations

from .env import env_with_prefix
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import (
    DatabaseConfig,
    StorageConfig,
    get_database_config,
    get_storage_config,
    get_store_uris,
)
from .updater import UpdaterConfig, get_updater_config

__all__ = [
    "ConfigurationError",
    "DatabaseConfig",
    "StorageConfig",
    "UpdaterConfig",
    "configure_logging",
    "env_with_prefix",
    "get_database_config",
    "get_storage_config",
    "get_store_uris",
    "get_updater_config",
]
