"""Pydantic models describing rows read from a RootsMagic database."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _null_to_empty(value: object) -> object:
    return "" if value is None else value


def _null_to_zero(value: object) -> object:
    if value is None or value == "":
        return 0
    return value


class RootsMagicBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class RootsMagicNameRow(RootsMagicBaseModel):
    """A primary ``NameTable`` row joined with one ``ChildTable`` membership."""

    owner_id: int = Field(alias="OwnerID")
    given: str = Field(default="", alias="Given")
    surname: str = Field(default="", alias="Surname")
    birth_year: int = Field(default=0, alias="BirthYear")
    death_year: int = Field(default=0, alias="DeathYear")
    family_id: int = Field(default=0, alias="FamilyID")

    _normalize_names = field_validator("given", "surname", mode="before")(_null_to_empty)
    _normalize_numbers = field_validator(
        "birth_year", "death_year", "family_id", mode="before"
    )(_null_to_zero)


class RootsMagicFamilyRow(RootsMagicBaseModel):
    """A ``FamilyTable`` row with the primary names of both parents."""

    family_id: int = Field(alias="FamilyID")
    father_id: int = Field(default=0, alias="FatherID")
    mother_id: int = Field(default=0, alias="MotherID")
    father_given: str = Field(default="", alias="FatherGiven")
    father_surname: str = Field(default="", alias="FatherSurname")
    mother_given: str = Field(default="", alias="MotherGiven")
    mother_surname: str = Field(default="", alias="MotherSurname")

    _normalize_names = field_validator(
        "father_given", "father_surname", "mother_given", "mother_surname", mode="before"
    )(_null_to_empty)
    _normalize_ids = field_validator("father_id", "mother_id", mode="before")(_null_to_zero)
