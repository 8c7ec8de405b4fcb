"""Translate validated RootsMagic rows into source port rows."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rmtagsync.domain.ports.source import FamilyRow, PersonRow

if TYPE_CHECKING:
    from .schema import RootsMagicFamilyRow, RootsMagicNameRow


def to_person_row(row: RootsMagicNameRow) -> PersonRow:
    return PersonRow(
        owner_id=row.owner_id,
        given=row.given,
        surname=row.surname,
        birth_year=row.birth_year,
        death_year=row.death_year,
        family_id=row.family_id,
    )


def to_family_row(row: RootsMagicFamilyRow) -> FamilyRow:
    return FamilyRow(
        family_id=row.family_id,
        father_id=row.father_id,
        mother_id=row.mother_id,
        father_given=row.father_given,
        father_surname=row.father_surname,
        mother_given=row.mother_given,
        mother_surname=row.mother_surname,
    )
