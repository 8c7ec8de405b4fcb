"""Checkpoint copies of the synchronized branches.

A checkpoint copies every tag below the named top-level tags (and their
properties) into ``Tags_Backup``/``TagProperties_Backup``. Restoring compares
the live rows against that copy: tags created since are deleted, deleted tags
are re-inserted with their original ids, and changed tags are updated in place.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from itertools import batched
from typing import TYPE_CHECKING, Final

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from rmtagsync.domain.errors import QueryError
from rmtagsync.domain.model import TOP_LEVEL_PARENT_ID

from .tables import (
    backup_metadata,
    tag_properties_backup_table,
    tag_properties_table,
    tags_backup_table,
    tags_table,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from sqlalchemy import ColumnElement, Table
    from sqlalchemy.orm import Session

log = logging.getLogger(__name__)

# Keeps IN (...) lists below SQLite's bound parameter limit.
CHUNK_SIZE: Final[int] = 500

_TAG_COLUMN_NAMES: Final[tuple[str, ...]] = ("id", "pid", "name", "icon", "iconkde")
_PARKED_PREFIX: Final[str] = "\x00rmtagsync-restore-"


def subtree_ids(session: Session, root_names: Sequence[str]) -> list[int]:
    """Return the ids of the named top-level tags and all of their descendants."""

    subtree = (
        select(tags_table.c.id)
        .where(tags_table.c.pid == TOP_LEVEL_PARENT_ID)
        .where(tags_table.c.name.in_(list(root_names)))
        .cte("subtree", recursive=True)
    )
    parent = subtree.alias()
    child = tags_table.alias()
    subtree = subtree.union_all(select(child.c.id).where(child.c.pid == parent.c.id))
    return [int(tag_id) for tag_id in session.execute(select(subtree.c.id)).scalars()]


def create_checkpoint(session: Session, root_names: Sequence[str]) -> int:
    """Replace any previous checkpoint with a copy of the named branches."""

    try:
        bind = session.connection()
        backup_metadata.drop_all(bind, checkfirst=True)
        backup_metadata.create_all(bind)

        scope = subtree_ids(session, root_names)
        for chunk in batched(scope, CHUNK_SIZE):
            session.execute(
                insert(tags_backup_table).from_select(
                    list(_TAG_COLUMN_NAMES),
                    select(*_tag_columns(tags_table)).where(tags_table.c.id.in_(chunk)),
                )
            )
            session.execute(
                insert(tag_properties_backup_table).from_select(
                    ["tagid", "property", "value"],
                    select(
                        tag_properties_table.c.tagid,
                        tag_properties_table.c.property,
                        tag_properties_table.c.value,
                    ).where(tag_properties_table.c.tagid.in_(chunk)),
                )
            )
    except SQLAlchemyError as exc:
        raise QueryError(f"Could not create checkpoint: {exc}") from exc

    log.debug("Checkpoint holds %s tags", len(scope))
    return len(scope)


def restore_checkpoint(session: Session, root_names: Sequence[str]) -> int:
    """Put the named branches back into the state recorded by ``create_checkpoint``.

    Only rows that differ from the backup are written. A tag that still matches
    its backed-up row is never deleted, so digiKam's ``delete_tag`` trigger
    leaves its image associations alone. Returns the number of tags touched.
    """

    try:
        backup = {
            int(row.id): tuple(row)
            for row in session.execute(select(*_tag_columns(tags_backup_table)))
        }
        current = _tag_rows(session, set(subtree_ids(session, root_names)) | set(backup))

        stale = sorted(set(current) - set(backup))
        missing = sorted(set(backup) - set(current))
        changed = sorted(
            tag_id for tag_id in set(current) & set(backup) if current[tag_id] != backup[tag_id]
        )

        _delete_tags(session, stale)
        # Park changed rows on unique names so swapped (name, pid) pairs never collide.
        for tag_id in changed:
            session.execute(
                update(tags_table)
                .where(tags_table.c.id == tag_id)
                .values(name=f"{_PARKED_PREFIX}{tag_id}")
            )
        for chunk in batched(missing, CHUNK_SIZE):
            session.execute(
                insert(tags_table).from_select(
                    list(_TAG_COLUMN_NAMES),
                    select(*_tag_columns(tags_backup_table)).where(
                        tags_backup_table.c.id.in_(chunk)
                    ),
                )
            )
        for tag_id in changed:
            session.execute(
                update(tags_table)
                .where(tags_table.c.id == tag_id)
                .values(dict(zip(_TAG_COLUMN_NAMES[1:], backup[tag_id][1:], strict=True)))
            )

        touched = _restore_properties(session, sorted(backup))
    except SQLAlchemyError as exc:
        raise QueryError(f"Could not restore checkpoint: {exc}") from exc

    count = len(stale) + len(missing) + len(changed)
    log.info(
        "Restored checkpoint: %s tags removed, %s re-created, %s reverted, %s property sets",
        len(stale),
        len(missing),
        len(changed),
        touched,
    )
    return count


def drop_checkpoint(session: Session) -> None:
    try:
        backup_metadata.drop_all(session.connection(), checkfirst=True)
    except SQLAlchemyError as exc:
        raise QueryError(f"Could not drop checkpoint tables: {exc}") from exc


def _tag_columns(table: Table) -> list[ColumnElement[object]]:
    return [table.c[name] for name in _TAG_COLUMN_NAMES]


def _tag_rows(session: Session, tag_ids: Iterable[int]) -> dict[int, tuple[object, ...]]:
    rows: dict[int, tuple[object, ...]] = {}
    for chunk in batched(sorted(tag_ids), CHUNK_SIZE):
        for row in session.execute(
            select(*_tag_columns(tags_table)).where(tags_table.c.id.in_(chunk))
        ):
            rows[int(row.id)] = tuple(row)
    return rows


def _property_sets(
    session: Session, table: Table, tag_ids: Sequence[int]
) -> dict[int, list[tuple[object, ...]]]:
    grouped: dict[int, list[tuple[object, ...]]] = defaultdict(list)
    for chunk in batched(tag_ids, CHUNK_SIZE):
        for row in session.execute(
            select(table.c.tagid, table.c.property, table.c.value).where(table.c.tagid.in_(chunk))
        ):
            grouped[int(row.tagid)].append(tuple(row))
    return {tag_id: sorted(rows, key=repr) for tag_id, rows in grouped.items()}


def _restore_properties(session: Session, tag_ids: Sequence[int]) -> int:
    wanted = _property_sets(session, tag_properties_backup_table, tag_ids)
    present = _property_sets(session, tag_properties_table, tag_ids)
    differing = [tag_id for tag_id in tag_ids if wanted.get(tag_id) != present.get(tag_id)]
    for chunk in batched(differing, CHUNK_SIZE):
        session.execute(
            delete(tag_properties_table).where(tag_properties_table.c.tagid.in_(chunk))
        )
        session.execute(
            insert(tag_properties_table).from_select(
                ["tagid", "property", "value"],
                select(
                    tag_properties_backup_table.c.tagid,
                    tag_properties_backup_table.c.property,
                    tag_properties_backup_table.c.value,
                ).where(tag_properties_backup_table.c.tagid.in_(chunk)),
            )
        )
    return len(differing)


def _delete_tags(session: Session, tag_ids: Iterable[int]) -> None:
    for chunk in batched(tag_ids, CHUNK_SIZE):
        session.execute(delete(tag_properties_table).where(tag_properties_table.c.tagid.in_(chunk)))
        session.execute(delete(tags_table).where(tags_table.c.id.in_(chunk)))
