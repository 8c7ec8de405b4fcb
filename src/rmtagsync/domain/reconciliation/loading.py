"""Source loader: turn raw genealogy rows into immutable records."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.model import FamilyRecord, OwnerId, PersonRecord

from .contracts import SourceSnapshot

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rmtagsync.domain.ports.source import FamilyRow, GenealogySource, PersonRow

log = logging.getLogger(__name__)

_TRAILING_WHITESPACE = " \t"


def _trim(value: str) -> str:
    return value.rstrip(_TRAILING_WHITESPACE)


def _optional_owner(value: int) -> OwnerId | None:
    return OwnerId(value) if value > 0 else None


def collapse_people(rows: Iterable[PersonRow]) -> tuple[PersonRecord, ...]:
    """Merge raw rows into one record per owner id.

    The family is the smallest family id among the rows of a person, so a child
    listed in several families always lands in the same group. Other attributes
    follow the last row seen; the first-seen order of people is kept.
    """

    merged: dict[OwnerId, PersonRecord] = {}
    for row in rows:
        owner_id = OwnerId(row.owner_id)
        family_id = row.family_id or None
        previous = merged.get(owner_id)
        if previous is not None and previous.family_id is not None:
            family_id = (
                previous.family_id if family_id is None else min(previous.family_id, family_id)
            )
        merged[owner_id] = PersonRecord(
            owner_id=owner_id,
            given=_trim(row.given),
            surname=_trim(row.surname),
            birth_year=row.birth_year or None,
            death_year=row.death_year or None,
            family_id=family_id,
        )
    return tuple(merged.values())


def family_from_row(row: FamilyRow) -> FamilyRecord:
    return FamilyRecord(
        family_id=row.family_id,
        father_id=_optional_owner(row.father_id),
        mother_id=_optional_owner(row.mother_id),
        father_given=_trim(row.father_given),
        father_surname=_trim(row.father_surname),
        mother_given=_trim(row.mother_given),
        mother_surname=_trim(row.mother_surname),
    )


def load_source(source: GenealogySource) -> SourceSnapshot:
    """Load people and families; any source error propagates unchanged."""

    people = collapse_people(source.list_primary_people())
    families = {row.family_id: family_from_row(row) for row in source.list_families()}
    log.info(
        "Loaded %s people and %s families from the genealogy source", len(people), len(families)
    )
    return SourceSnapshot(people=people, families=families)
