from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlalchemy import text

from rmtagsync.adapters.rootsmagic import RootsMagicSource, rmnocase, rootsmagic_database_uri
from rmtagsync.domain.errors import StoreConnectionError
from rmtagsync.domain.ports.source import FamilyRow, GenealogySource, PersonRow

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def test_rmnocase_ignores_case() -> None:
    assert rmnocase("doe", "DOE") == 0
    assert rmnocase("Abel", "baker") < 0
    assert rmnocase("Zed", "adam") > 0


def test_open_rejects_missing_file(tmp_path: Path) -> None:
    with pytest.raises(StoreConnectionError, match="not found"):
        RootsMagicSource.open(tmp_path / "missing.rmtree")


def test_open_rejects_foreign_database(tmp_path: Path) -> None:
    path = tmp_path / "empty.rmtree"
    path.touch()

    with pytest.raises(StoreConnectionError, match="NameTable"):
        RootsMagicSource.open(path)


def test_uri_is_read_only(tmp_path: Path) -> None:
    path = tmp_path / "family.rmtree"
    path.touch()

    uri = rootsmagic_database_uri(path)

    assert uri.startswith("sqlite+pysqlite:///file:")
    assert uri.endswith("?mode=ro&uri=true")


def test_people_include_one_row_per_family_membership(
    rootsmagic_file: Callable[..., Path],
) -> None:
    path = rootsmagic_file(
        names=[
            (7, "Jane", "Doe", 1, 1950, None),
            (7, "Janie", "Doe", 0, None, None),
            (1, "John", "Doe", 1, 1920, 1990),
        ],
        children=[(7, 4), (7, 3)],
    )

    with RootsMagicSource.open(path) as source:
        assert isinstance(source, GenealogySource)
        people = source.list_primary_people()

    assert people == [
        PersonRow(owner_id=1, given="John", surname="Doe", birth_year=1920, death_year=1990),
        PersonRow(owner_id=7, given="Jane", surname="Doe", birth_year=1950, family_id=3),
        PersonRow(owner_id=7, given="Jane", surname="Doe", birth_year=1950, family_id=4),
    ]


def test_families_carry_primary_parent_names(rootsmagic_file: Callable[..., Path]) -> None:
    path = rootsmagic_file(
        names=[
            (1, "John", "Doe", 1, 1920, None),
            (1, "Johnny", "Doe", 0, None, None),
            (2, "Mary", "Smith", 1, 1922, None),
        ],
        families=[(3, 1, 2), (4, 1, None)],
    )

    with RootsMagicSource.open(path) as source:
        families = source.list_families()

    assert families == [
        FamilyRow(
            family_id=3,
            father_id=1,
            mother_id=2,
            father_given="John",
            father_surname="Doe",
            mother_given="Mary",
            mother_surname="Smith",
        ),
        FamilyRow(family_id=4, father_id=1, father_given="John", father_surname="Doe"),
    ]


def test_collation_is_available_on_connections(rootsmagic_file: Callable[..., Path]) -> None:
    path = rootsmagic_file(
        names=[(1, "Adam", "Zed", 1, None, None), (2, "Bob", "baker", 1, None, None)]
    )

    with RootsMagicSource.open(path) as source, source.engine.connect() as connection:
        surnames = connection.execute(
            text("SELECT Surname FROM NameTable ORDER BY Surname")
        ).scalars()

        assert list(surnames) == ["baker", "Zed"]
