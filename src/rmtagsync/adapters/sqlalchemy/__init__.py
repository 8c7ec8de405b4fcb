"""SQLAlchemy adapter package for the digiKam tag database."""

from __future__ import annotations

from .store import SqlAlchemyTagStore
from .tables import create_tag_tables, metadata, tag_properties_table, tags_table
from .unit_of_work import (
    SqlAlchemyTagUnitOfWork,
    StartupError,
    digikam_database_uri,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyTagStore",
    "SqlAlchemyTagUnitOfWork",
    "StartupError",
    "create_tag_tables",
    "digikam_database_uri",
    "is_started",
    "metadata",
    "shutdown",
    "startup",
    "tag_properties_table",
    "tags_table",
]
