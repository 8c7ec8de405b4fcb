"""Tag store implementation backed by a SQLAlchemy session."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from rmtagsync.domain.errors import ConstraintError, QueryError
from rmtagsync.domain.ports.store import NodeRow

from .tables import tag_properties_table, tags_table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import CursorResult, Executable, Result
    from sqlalchemy.orm import Session


class SqlAlchemyTagStore:
    """digiKam ``Tags``/``TagProperties`` access through Core statements.

    Name collisions are checked before writing so that a taken (name, parent)
    pair raises ``ConstraintError`` without poisoning the running transaction.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def _execute(self, stmt: Executable) -> Result[tuple[object, ...]]:
        try:
            return self.session.execute(stmt)
        except IntegrityError as exc:
            raise ConstraintError(str(exc.orig)) from exc
        except SQLAlchemyError as exc:
            raise QueryError(str(exc)) from exc

    # Nodes -----------------------------------------------------------------

    def find_node_by_name(self, name: str, *, parent_id: int | None = None) -> int | None:
        stmt = select(tags_table.c.id).where(tags_table.c.name == name)
        if parent_id is not None:
            stmt = stmt.where(tags_table.c.pid == parent_id)
        row = self._execute(stmt.order_by(tags_table.c.id).limit(1)).first()
        return None if row is None else cast(int, row[0])

    def get_node(self, tag_id: int) -> NodeRow | None:
        stmt = select(tags_table.c.id, tags_table.c.name, tags_table.c.pid).where(
            tags_table.c.id == tag_id
        )
        row = self._execute(stmt).first()
        if row is None:
            return None
        return NodeRow(
            tag_id=cast(int, row[0]),
            name=cast(str, row[1]),
            parent_id=cast(int, row[2] or 0),
        )

    def _require_node(self, tag_id: int) -> NodeRow:
        node = self.get_node(tag_id)
        if node is None:
            raise QueryError(f"Tag {tag_id} does not exist")
        return node

    def _check_free(self, name: str, parent_id: int, *, ignore: int | None = None) -> None:
        holder = self.find_node_by_name(name, parent_id=parent_id)
        if holder is not None and holder != ignore:
            raise ConstraintError(
                f"Tag {name!r} already exists under parent {parent_id} (TagID: {holder})"
            )

    def create_node(self, name: str, parent_id: int, *, icon: str | None = None) -> int:
        self._check_free(name, parent_id)
        stmt = insert(tags_table).values(name=name, pid=parent_id, icon=None, iconkde=icon)
        result = cast("CursorResult[tuple[object, ...]]", self._execute(stmt))
        primary_key = result.inserted_primary_key
        if primary_key is None:
            raise QueryError(f"Insert of tag {name!r} returned no id")
        return int(cast(int, primary_key[0]))

    def rename_node(self, tag_id: int, name: str) -> None:
        node = self._require_node(tag_id)
        self._check_free(name, node.parent_id, ignore=tag_id)
        self._execute(update(tags_table).where(tags_table.c.id == tag_id).values(name=name))

    def reparent_node(self, tag_id: int, parent_id: int) -> None:
        node = self._require_node(tag_id)
        self._check_free(node.name, parent_id, ignore=tag_id)
        self._execute(update(tags_table).where(tags_table.c.id == tag_id).values(pid=parent_id))

    def delete_node(self, tag_id: int) -> None:
        self._execute(delete(tag_properties_table).where(tag_properties_table.c.tagid == tag_id))
        self._execute(delete(tags_table).where(tags_table.c.id == tag_id))

    def list_children(self, parent_id: int) -> Sequence[int]:
        stmt = (
            select(tags_table.c.id).where(tags_table.c.pid == parent_id).order_by(tags_table.c.id)
        )
        return [cast(int, tag_id) for tag_id in self._execute(stmt).scalars()]

    def list_children_with_property(
        self,
        parent_id: int,
        key: str,
        *,
        value: str | None = None,
    ) -> Sequence[int]:
        stmt = (
            select(tags_table.c.id)
            .join(tag_properties_table, tag_properties_table.c.tagid == tags_table.c.id)
            .where(tags_table.c.pid == parent_id)
            .where(tag_properties_table.c.property == key)
        )
        if value is not None:
            stmt = stmt.where(tag_properties_table.c.value == value)
        stmt = stmt.distinct().order_by(tags_table.c.id)
        return [cast(int, tag_id) for tag_id in self._execute(stmt).scalars()]

    # Properties ------------------------------------------------------------

    def get_property(self, tag_id: int, key: str) -> str | None:
        stmt = (
            select(tag_properties_table.c.value)
            .where(tag_properties_table.c.tagid == tag_id)
            .where(tag_properties_table.c.property == key)
            .limit(1)
        )
        row = self._execute(stmt).first()
        if row is None:
            return None
        value = row[0]
        return "" if value is None else str(value)

    def set_property(self, tag_id: int, key: str, value: str) -> None:
        stmt = (
            update(tag_properties_table)
            .where(tag_properties_table.c.tagid == tag_id)
            .where(tag_properties_table.c.property == key)
            .values(value=value)
        )
        result = cast("CursorResult[tuple[object, ...]]", self._execute(stmt))
        if result.rowcount == 0:
            self._execute(
                insert(tag_properties_table).values(tagid=tag_id, property=key, value=value)
            )


if TYPE_CHECKING:
    from rmtagsync.domain.ports.store import TagStore

    def _store_check(session: Session) -> TagStore:
        return SqlAlchemyTagStore(session)
