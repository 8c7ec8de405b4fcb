from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import inspect, select

from rmtagsync.adapters.sqlalchemy import SqlAlchemyTagStore, tag_properties_table, tags_table
from rmtagsync.adapters.sqlalchemy.snapshot import (
    create_checkpoint,
    drop_checkpoint,
    restore_checkpoint,
    subtree_ids,
)
from rmtagsync.domain.errors import QueryError
from rmtagsync.domain.model import IDENTITY_PROPERTY

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

ROOTS = ("RootsMagic", "Lost & Found")


def _dump(session: Session) -> tuple[list[tuple[object, ...]], list[tuple[object, ...]]]:
    tags = session.execute(select(tags_table).order_by(tags_table.c.id)).all()
    properties = session.execute(
        select(tag_properties_table).order_by(
            tag_properties_table.c.tagid, tag_properties_table.c.property
        )
    ).all()
    return [tuple(row) for row in tags], [tuple(row) for row in properties]


@pytest.fixture
def seeded(sqlite_session: Session) -> dict[str, int]:
    store = SqlAlchemyTagStore(sqlite_session)
    ids = {
        "primary": store.create_node("RootsMagic", 0),
        "catch_all": store.create_node("Lost & Found", 0),
        "other": store.create_node("Holidays", 0),
    }
    ids["group"] = store.create_node("Doe Family", ids["primary"])
    ids["jane"] = store.create_node("Jane", ids["group"], icon="user")
    ids["bob"] = store.create_node("Bob", ids["catch_all"], icon="user")
    store.set_property(ids["jane"], IDENTITY_PROPERTY, "7")
    store.set_property(ids["bob"], IDENTITY_PROPERTY, "9")
    sqlite_session.commit()
    return ids


def test_subtree_covers_nested_tags_of_named_roots(
    sqlite_session: Session, seeded: dict[str, int]
) -> None:
    scope = set(subtree_ids(sqlite_session, ROOTS))

    assert scope == {seeded[key] for key in ("primary", "catch_all", "group", "jane", "bob")}


def test_restore_undoes_committed_changes(sqlite_session: Session, seeded: dict[str, int]) -> None:
    before = _dump(sqlite_session)
    assert create_checkpoint(sqlite_session, ROOTS) == 5
    sqlite_session.commit()

    store = SqlAlchemyTagStore(sqlite_session)
    store.rename_node(seeded["jane"], "Jane Doe")
    store.reparent_node(seeded["bob"], seeded["primary"])
    store.delete_node(seeded["group"])
    extra = store.create_node("Brand New", seeded["catch_all"])
    store.set_property(extra, IDENTITY_PROPERTY, "11")
    sqlite_session.commit()

    assert restore_checkpoint(sqlite_session, ROOTS) == 4
    drop_checkpoint(sqlite_session)
    sqlite_session.commit()

    assert _dump(sqlite_session) == before
    assert "Tags_Backup" not in inspect(sqlite_session.connection()).get_table_names()


def test_restore_removes_branch_root_created_after_checkpoint(sqlite_session: Session) -> None:
    create_checkpoint(sqlite_session, ROOTS)
    sqlite_session.commit()
    store = SqlAlchemyTagStore(sqlite_session)
    root = store.create_node("RootsMagic", 0)
    store.create_node("Jane", root)
    sqlite_session.commit()

    restore_checkpoint(sqlite_session, ROOTS)
    sqlite_session.commit()

    assert _dump(sqlite_session) == ([], [])


def test_restore_without_checkpoint_raises(sqlite_session: Session) -> None:
    with pytest.raises(QueryError):
        restore_checkpoint(sqlite_session, ROOTS)


def test_restore_after_rollback_writes_nothing(
    sqlite_session: Session, seeded: dict[str, int]
) -> None:
    before = _dump(sqlite_session)
    create_checkpoint(sqlite_session, ROOTS)
    sqlite_session.commit()
    store = SqlAlchemyTagStore(sqlite_session)
    store.delete_node(seeded["jane"])
    store.create_node("Brand New", seeded["primary"])
    sqlite_session.rollback()

    assert restore_checkpoint(sqlite_session, ROOTS) == 0
    assert _dump(sqlite_session) == before


def test_restore_handles_swapped_sibling_names(
    sqlite_session: Session, seeded: dict[str, int]
) -> None:
    store = SqlAlchemyTagStore(sqlite_session)
    first = store.create_node("A", seeded["primary"])
    second = store.create_node("B", seeded["primary"])
    sqlite_session.commit()
    before = _dump(sqlite_session)
    create_checkpoint(sqlite_session, ROOTS)
    sqlite_session.commit()

    store.rename_node(first, "swap")
    store.rename_node(second, "A")
    store.rename_node(first, "B")
    sqlite_session.commit()

    assert restore_checkpoint(sqlite_session, ROOTS) == 2
    sqlite_session.commit()
    assert _dump(sqlite_session) == before
