"""Database location configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import require_env_vars

ROOTSMAGIC_DB_ENV: Final[str] = "RMTAGSYNC_ROOTSMAGIC_DB"
DIGIKAM_DB_ENV: Final[str] = "RMTAGSYNC_DIGIKAM_DB"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Paths of the genealogy source and the digiKam tag database."""

    rootsmagic_path: Path
    digikam_path: Path


def resolve_database_path(value: str | Path | None, env_name: str) -> Path:
    """Return ``value`` as a path, falling back to the environment variable ``env_name``."""

    if value is None:
        value = require_env_vars([env_name])[env_name]
    return Path(value).expanduser()


def get_database_config(
    *,
    rootsmagic_path: str | Path | None = None,
    digikam_path: str | Path | None = None,
) -> DatabaseConfig:
    """Resolve both database paths, reporting every missing one at once."""

    needed = [
        name
        for name, value in ((ROOTSMAGIC_DB_ENV, rootsmagic_path), (DIGIKAM_DB_ENV, digikam_path))
        if value is None
    ]
    if needed:
        require_env_vars(needed)
    return DatabaseConfig(
        rootsmagic_path=resolve_database_path(rootsmagic_path, ROOTSMAGIC_DB_ENV),
        digikam_path=resolve_database_path(digikam_path, DIGIKAM_DB_ENV),
    )
