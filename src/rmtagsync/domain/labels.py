"""Canonical tag labels for people and family groups.

Every component that compares a stored tag name against the source goes through
these functions. When the person label changes shape, bump
``LABEL_FORMAT_VERSION`` and keep the old shape reachable through ``version`` so
legacy tags written by earlier releases can still be recognised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from rmtagsync.domain.model import FamilyRecord, OwnerId, PersonRecord

LABEL_FORMAT_VERSION: Final[int] = 2
KNOWN_LABEL_VERSIONS: Final[tuple[int, ...]] = (1, 2)
UNKNOWN: Final[str] = "unknown"


def _year(year: int | None) -> str:
    return str(year) if year else UNKNOWN


def owner_suffix(owner_id: OwnerId) -> str:
    return f"(OwnerID: {owner_id})"


def format_person(person: PersonRecord, *, version: int = LABEL_FORMAT_VERSION) -> str:
    """Return the tag label for ``person``.

    Version 1 labels (``"Jane Doe 1900-unknown"``) carried no identity and collide
    for namesakes; version 2 appends the owner id.
    """

    base = f"{person.given} {person.surname} {_year(person.birth_year)}-{_year(person.death_year)}"
    if version == 1:
        return base
    if version == 2:  # noqa: PLR2004
        return f"{base} {owner_suffix(person.owner_id)}"
    raise ValueError(f"Unknown label format version: {version}")


def _parent_segment(owner_id: OwnerId | None, given: str, surname: str) -> str:
    if owner_id is None or (not given and not surname):
        return UNKNOWN
    return f"{given} {surname} {owner_suffix(owner_id)}"


def format_family(family: FamilyRecord) -> str:
    father = _parent_segment(family.father_id, family.father_given, family.father_surname)
    mother = _parent_segment(family.mother_id, family.mother_given, family.mother_surname)
    return f"{father} and {mother} Family (FamilyID: {family.family_id})"


def is_current_person_label(name: str, owner_id: OwnerId) -> bool:
    """Whether ``name`` follows the current label shape for ``owner_id``.

    Only the shape is checked; a current-shape label with outdated dates is a
    regular rename, not a format repair.
    """

    return name.endswith(f" {owner_suffix(owner_id)}")
