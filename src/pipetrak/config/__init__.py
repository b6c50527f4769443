"""Application configuration helpers."""

from __future__ import annotations

from .env import env_float, env_int
from .errors import ConfigurationError, InvalidConfigurationError
from .imports import ImportLimits, get_import_limits
from .storage import StorageConfig, get_database_uri, get_storage_config

__all__ = [
    "ConfigurationError",
    "ImportLimits",
    "InvalidConfigurationError",
    "StorageConfig",
    "env_float",
    "env_int",
    "get_database_uri",
    "get_import_limits",
    "get_storage_config",
]
