from __future__ import annotations

import pytest

from rmtagsync.domain.labels import (
    format_family,
    format_person,
    is_current_person_label,
)
from rmtagsync.domain.model import FamilyRecord, OwnerId, PersonRecord


def _jane(**overrides: object) -> PersonRecord:
    values: dict[str, object] = {
        "owner_id": OwnerId(7),
        "given": "Jane",
        "surname": "Doe",
        "birth_year": 1950,
    }
    values.update(overrides)
    return PersonRecord(**values)  # type: ignore[arg-type]


def test_person_label_uses_unknown_for_missing_years() -> None:
    assert format_person(_jane()) == "Jane Doe 1950-unknown (OwnerID: 7)"
    assert format_person(_jane(birth_year=None)) == "Jane Doe unknown-unknown (OwnerID: 7)"
    assert format_person(_jane(death_year=1980)) == "Jane Doe 1950-1980 (OwnerID: 7)"


def test_person_label_property_matches_formatter() -> None:
    person = _jane(death_year=1980)

    assert person.label == format_person(person)


def test_version_one_label_has_no_owner_suffix() -> None:
    assert format_person(_jane(), version=1) == "Jane Doe 1950-unknown"


def test_unknown_label_version_is_rejected() -> None:
    with pytest.raises(ValueError, match="version"):
        format_person(_jane(), version=99)


def test_family_label_with_both_parents() -> None:
    family = FamilyRecord(
        family_id=3,
        father_id=OwnerId(1),
        mother_id=OwnerId(2),
        father_given="John",
        father_surname="Doe",
        mother_given="Mary",
        mother_surname="Smith",
    )

    assert format_family(family) == (
        "John Doe (OwnerID: 1) and Mary Smith (OwnerID: 2) Family (FamilyID: 3)"
    )
    assert family.label == format_family(family)


def test_family_label_marks_absent_or_nameless_parents_unknown() -> None:
    no_mother = FamilyRecord(
        family_id=4, father_id=OwnerId(1), father_given="John", father_surname="Doe"
    )
    nameless_father = FamilyRecord(family_id=5, father_id=OwnerId(1))

    assert format_family(no_mother) == "John Doe (OwnerID: 1) and unknown Family (FamilyID: 4)"
    assert format_family(nameless_father) == "unknown and unknown Family (FamilyID: 5)"


def test_current_label_detection_is_per_identity() -> None:
    label = format_person(_jane())

    assert is_current_person_label(label, OwnerId(7))
    assert not is_current_person_label(label, OwnerId(17))
    assert not is_current_person_label("Jane Doe 1950-unknown", OwnerId(7))
