"""Public interface for the RootsMagic source adapter."""

from __future__ import annotations

from .client import RootsMagicSource, create_rootsmagic_engine, rmnocase, rootsmagic_database_uri
from .schema import RootsMagicFamilyRow, RootsMagicNameRow
from .translator import to_family_row, to_person_row

__all__ = [
    "RootsMagicFamilyRow",
    "RootsMagicNameRow",
    "RootsMagicSource",
    "create_rootsmagic_engine",
    "rmnocase",
    "rootsmagic_database_uri",
    "to_family_row",
    "to_person_row",
]
