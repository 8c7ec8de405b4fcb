"""Shared reconciliation contract components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rmtagsync.domain.model import FamilyRecord, OwnerId, PersonRecord, TagNode


type BranchIndex = dict[OwnerId, TagNode]


class PersonState(StrEnum):
    """Per-person reconciliation state.

    Every person starts ``UNSEEN``; the matched pass moves indexed people to
    ``MATCHED`` and the create/rescue pass settles the rest.
    """

    UNSEEN = "unseen"
    MATCHED = "matched"
    CREATED = "created"
    RESCUED = "rescued"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SourceSnapshot:
    """People and families loaded from the genealogy source for one run."""

    people: tuple[PersonRecord, ...]
    families: Mapping[int, FamilyRecord]

    def people_by_id(self) -> dict[OwnerId, PersonRecord]:
        return {person.owner_id: person for person in self.people}


@dataclass(slots=True)
class ReconciliationResult:
    """Summary of one successful synchronization run."""

    created: int = 0
    updated: int = 0
    rescued: int = 0
    orphaned: int = 0
    regrouped: int = 0
    failed: int = 0
    duplicates_removed: int = 0
    legacy_bound: int = 0
    labels_repaired: int = 0
    family_groups_created: int = 0
    states: dict[OwnerId, PersonState] = field(default_factory=dict["OwnerId", "PersonState"])

    def record(self, owner_id: OwnerId, state: PersonState) -> None:
        self.states[owner_id] = state

    def state_of(self, owner_id: OwnerId) -> PersonState:
        return self.states.get(owner_id, PersonState.UNSEEN)

    @property
    def changed(self) -> bool:
        return any(
            (
                self.created,
                self.updated,
                self.rescued,
                self.orphaned,
                self.regrouped,
                self.duplicates_removed,
                self.legacy_bound,
                self.labels_repaired,
            )
        )
