"""Read-only access to a RootsMagic database through SQLAlchemy Core."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from pydantic import ValidationError
from sqlalchemy import Column, Integer, MetaData, Table, Text, create_engine, event, inspect, select
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from rmtagsync.domain.errors import QueryError, StoreConnectionError

from .schema import RootsMagicFamilyRow, RootsMagicNameRow
from .translator import to_family_row, to_person_row

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy import Select
    from sqlalchemy.engine import Engine

    from rmtagsync.domain.ports.source import FamilyRow, PersonRow

log = logging.getLogger(__name__)

COLLATION_NAME = "RMNOCASE"

# Only the columns read here; RootsMagic owns the full schema.
rootsmagic_metadata = MetaData()

name_table = Table(
    "NameTable",
    rootsmagic_metadata,
    Column("NameID", Integer, primary_key=True),
    Column("OwnerID", Integer),
    Column("Surname", Text),
    Column("Given", Text),
    Column("IsPrimary", Integer),
    Column("BirthYear", Integer),
    Column("DeathYear", Integer),
)

child_table = Table(
    "ChildTable",
    rootsmagic_metadata,
    Column("RecID", Integer, primary_key=True),
    Column("ChildID", Integer),
    Column("FamilyID", Integer),
)

family_table = Table(
    "FamilyTable",
    rootsmagic_metadata,
    Column("FamilyID", Integer, primary_key=True),
    Column("FatherID", Integer),
    Column("MotherID", Integer),
)


def rmnocase(left: str, right: str) -> int:
    """Case-insensitive stand-in for RootsMagic's proprietary collation."""

    left_key, right_key = left.lower(), right.lower()
    return (left_key > right_key) - (left_key < right_key)


def _register_collation(dbapi_connection: object, _connection_record: object) -> None:
    dbapi_connection.create_collation(COLLATION_NAME, rmnocase)  # type: ignore[attr-defined]


def rootsmagic_database_uri(path: str | Path) -> str:
    """Return a read-only SQLAlchemy URI for an existing RootsMagic file."""

    resolved = Path(path).expanduser()
    if not resolved.is_file():
        raise StoreConnectionError(f"RootsMagic database not found: {resolved}")
    return f"sqlite+pysqlite:///file:{resolved.as_posix()}?mode=ro&uri=true"


def create_rootsmagic_engine(database_uri: str) -> Engine:
    engine = create_engine(database_uri, future=True)
    event.listen(engine, "connect", _register_collation)
    return engine


class RootsMagicSource:
    """``GenealogySource`` over the RootsMagic ``NameTable``/``ChildTable``/``FamilyTable``."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    @classmethod
    def open(cls, path: str | Path) -> Self:
        engine = create_rootsmagic_engine(rootsmagic_database_uri(path))
        try:
            existing = set(inspect(engine).get_table_names())
        except OperationalError as exc:
            engine.dispose()
            raise StoreConnectionError(f"Failed to connect to RootsMagic database: {exc}") from exc

        missing = sorted({table.name for table in rootsmagic_metadata.sorted_tables} - existing)
        if missing:
            engine.dispose()
            raise StoreConnectionError(
                f"{path} does not look like a RootsMagic database (missing {', '.join(missing)})"
            )
        log.info("Connected to RootsMagic database: %s", path)
        return cls(engine)

    def close(self) -> None:
        self.engine.dispose()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def list_primary_people(self) -> list[PersonRow]:
        """One row per primary name and child membership, ordered by owner id."""

        stmt = (
            select(
                name_table.c.OwnerID,
                name_table.c.Given,
                name_table.c.Surname,
                name_table.c.BirthYear,
                name_table.c.DeathYear,
                child_table.c.FamilyID,
            )
            .select_from(name_table)
            .outerjoin(child_table, child_table.c.ChildID == name_table.c.OwnerID)
            .where(name_table.c.IsPrimary == 1)
            .order_by(name_table.c.OwnerID, child_table.c.FamilyID)
        )
        try:
            return [
                to_person_row(RootsMagicNameRow.model_validate(row)) for row in self._fetch(stmt)
            ]
        except ValidationError as exc:
            raise QueryError(f"Unexpected NameTable row: {exc}") from exc

    def list_families(self) -> list[FamilyRow]:
        father = name_table.alias("father")
        mother = name_table.alias("mother")
        stmt = (
            select(
                family_table.c.FamilyID,
                family_table.c.FatherID,
                family_table.c.MotherID,
                father.c.Given.label("FatherGiven"),
                father.c.Surname.label("FatherSurname"),
                mother.c.Given.label("MotherGiven"),
                mother.c.Surname.label("MotherSurname"),
            )
            .select_from(family_table)
            .outerjoin(
                father,
                (father.c.OwnerID == family_table.c.FatherID) & (father.c.IsPrimary == 1),
            )
            .outerjoin(
                mother,
                (mother.c.OwnerID == family_table.c.MotherID) & (mother.c.IsPrimary == 1),
            )
            .order_by(family_table.c.FamilyID)
        )
        try:
            return [
                to_family_row(RootsMagicFamilyRow.model_validate(row)) for row in self._fetch(stmt)
            ]
        except ValidationError as exc:
            raise QueryError(f"Unexpected FamilyTable row: {exc}") from exc

    def _fetch(self, stmt: Select[Any]) -> list[dict[str, object]]:
        try:
            with self.engine.connect() as connection:
                return [dict(row._mapping) for row in connection.execute(stmt)]  # noqa: SLF001
        except SQLAlchemyError as exc:
            raise QueryError(f"Failed to query RootsMagic database: {exc}") from exc


__all__ = ["RootsMagicSource", "create_rootsmagic_engine", "rmnocase", "rootsmagic_database_uri"]
