"""Ports for reading the genealogy source."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True, kw_only=True)
class PersonRow:
    """One primary name row as delivered by the source, before trimming.

    A person who is a child in several families shows up once per family.
    ``0`` means unknown for the years and "no family" for ``family_id``.
    """

    owner_id: int
    given: str
    surname: str
    birth_year: int = 0
    death_year: int = 0
    family_id: int = 0


@dataclass(frozen=True, slots=True, kw_only=True)
class FamilyRow:
    """One family with the primary names of both parents (``0``/empty when absent)."""

    family_id: int
    father_id: int = 0
    mother_id: int = 0
    father_given: str = ""
    father_surname: str = ""
    mother_given: str = ""
    mother_surname: str = ""


@runtime_checkable
class GenealogySource(Protocol):
    """Read-only access to people and families of a genealogy database."""

    def list_primary_people(self) -> Iterable[PersonRow]: ...

    def list_families(self) -> Iterable[FamilyRow]: ...


__all__ = ["FamilyRow", "GenealogySource", "PersonRow"]
