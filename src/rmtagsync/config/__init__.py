"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .storage import (
    DIGIKAM_DB_ENV,
    ROOTSMAGIC_DB_ENV,
    DatabaseConfig,
    get_database_config,
    resolve_database_path,
)
from .sync import SyncOptions, get_sync_config

__all__ = [
    "DIGIKAM_DB_ENV",
    "ROOTSMAGIC_DB_ENV",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "SyncOptions",
    "configure_logging",
    "get_database_config",
    "get_sync_config",
    "optional_env_var",
    "require_env_vars",
    "resolve_database_path",
]
