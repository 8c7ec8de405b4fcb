"""Genealogy records as seen by the reconciliation engine.

Records are rebuilt from the source on every run and never persisted by the
engine itself; their labels are what ends up as tag names.
"""

from __future__ import annotations

from dataclasses import dataclass

from rmtagsync.domain.labels import format_family, format_person
from rmtagsync.domain.model.identity import OwnerId


@dataclass(frozen=True, slots=True, kw_only=True)
class PersonRecord:
    owner_id: OwnerId
    given: str
    surname: str
    birth_year: int | None = None
    death_year: int | None = None
    family_id: int | None = None

    @property
    def label(self) -> str:
        return format_person(self)


@dataclass(frozen=True, slots=True, kw_only=True)
class FamilyRecord:
    family_id: int
    father_id: OwnerId | None = None
    mother_id: OwnerId | None = None
    father_given: str = ""
    father_surname: str = ""
    mother_given: str = ""
    mother_surname: str = ""

    @property
    def label(self) -> str:
        return format_family(self)
