"""Domain port definitions for adapters."""

from __future__ import annotations

from .source import FamilyRow, GenealogySource, PersonRow
from .store import NodeRow, TagStore
from .unit_of_work import (
    CheckpointingUnitOfWork,
    RepositoryCollection,
    TagRepositories,
    TagUnitOfWork,
    UnitOfWork,
)

__all__ = [
    "CheckpointingUnitOfWork",
    "FamilyRow",
    "GenealogySource",
    "NodeRow",
    "PersonRow",
    "RepositoryCollection",
    "TagRepositories",
    "TagStore",
    "TagUnitOfWork",
    "UnitOfWork",
]
