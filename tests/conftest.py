from __future__ import annotations

import sqlite3
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from rmtagsync.adapters.rootsmagic import rmnocase
from rmtagsync.adapters.sqlalchemy import create_tag_tables
from rmtagsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyTagUnitOfWork, shutdown, startup

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

ROOTSMAGIC_SCHEMA = """
CREATE TABLE NameTable (
    NameID INTEGER PRIMARY KEY,
    OwnerID INTEGER,
    Surname TEXT COLLATE RMNOCASE,
    Given TEXT COLLATE RMNOCASE,
    IsPrimary INTEGER,
    BirthYear INTEGER,
    DeathYear INTEGER
);
CREATE INDEX idxSurname ON NameTable (Surname);
CREATE TABLE ChildTable (RecID INTEGER PRIMARY KEY, ChildID INTEGER, FamilyID INTEGER);
CREATE TABLE FamilyTable (FamilyID INTEGER PRIMARY KEY, FatherID INTEGER, MotherID INTEGER);
"""


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_tag_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyTagUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyTagUnitOfWork:
        return SqlAlchemyTagUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()


@pytest.fixture
def rootsmagic_file(tmp_path: Path) -> Callable[..., Path]:
    """Build a RootsMagic-shaped SQLite file from name, child and family rows."""

    def build(
        names: list[tuple[int, str | None, str | None, int, int | None, int | None]],
        children: list[tuple[int, int]] | None = None,
        families: list[tuple[int, int | None, int | None]] | None = None,
    ) -> Path:
        path = tmp_path / "family.rmtree"
        connection = sqlite3.connect(path)
        connection.create_collation("RMNOCASE", rmnocase)
        try:
            connection.executescript(ROOTSMAGIC_SCHEMA)
            connection.executemany(
                "INSERT INTO NameTable (OwnerID, Given, Surname, IsPrimary, BirthYear, DeathYear)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                names,
            )
            connection.executemany(
                "INSERT INTO ChildTable (ChildID, FamilyID) VALUES (?, ?)", children or []
            )
            connection.executemany(
                "INSERT INTO FamilyTable (FamilyID, FatherID, MotherID) VALUES (?, ?, ?)",
                families or [],
            )
            connection.commit()
        finally:
            connection.close()
        return path

    return build
