"""Pure decision functions of the reconciler; no store access."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .contracts import PersonState

if TYPE_CHECKING:
    from collections.abc import Mapping

    from rmtagsync.domain.model import FamilyRecord, OwnerId, PersonRecord, TagNode


def resolve_family(
    person: PersonRecord,
    families: Mapping[int, FamilyRecord],
) -> FamilyRecord | None:
    if person.family_id is None:
        return None
    return families.get(person.family_id)


def plan_person(person: PersonRecord, primary_index: Mapping[OwnerId, TagNode]) -> PersonState:
    """``MATCHED`` when the primary branch already tracks the person, else ``UNSEEN``."""

    return PersonState.MATCHED if person.owner_id in primary_index else PersonState.UNSEEN


def needs_rename(node: TagNode, label: str) -> bool:
    return node.name != label


def needs_regroup(node: TagNode, family: FamilyRecord | None, primary_root_id: int) -> bool:
    """Whether a matched tag still sits at the root although its family resolves.

    Tags already inside some family group are left where they are.
    """

    return family is not None and node.parent_id == primary_root_id
