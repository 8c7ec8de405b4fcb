"""SQLAlchemy table metadata for the digiKam tag schema.

Only the tables the synchronizer touches are described. digiKam owns the
schema; ``create_tag_tables`` exists for fresh databases and tests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, MetaData, Table, Text, UniqueConstraint, inspect

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine

metadata = MetaData()

tags_table = Table(
    "Tags",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("pid", Integer, nullable=True),
    Column("name", Text, nullable=False),
    Column("icon", Integer, nullable=True),
    Column("iconkde", Text, nullable=True),
    UniqueConstraint("name", "pid"),
)

tag_properties_table = Table(
    "TagProperties",
    metadata,
    Column("tagid", Integer, nullable=True),
    Column("property", Text, nullable=True),
    Column("value", Text, nullable=True),
)

# Checkpoint copies -------------------------------------------------------------

backup_metadata = MetaData()

tags_backup_table = Table(
    "Tags_Backup",
    backup_metadata,
    Column("id", Integer),
    Column("pid", Integer),
    Column("name", Text),
    Column("icon", Integer),
    Column("iconkde", Text),
)

tag_properties_backup_table = Table(
    "TagProperties_Backup",
    backup_metadata,
    Column("tagid", Integer),
    Column("property", Text),
    Column("value", Text),
)


def create_tag_tables(bind: Engine | Connection) -> None:
    metadata.create_all(bind, checkfirst=True)


def has_tag_tables(bind: Engine | Connection) -> bool:
    existing = set(inspect(bind).get_table_names())
    return {tags_table.name, tag_properties_table.name} <= existing
