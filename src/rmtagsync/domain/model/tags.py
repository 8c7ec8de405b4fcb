"""Tag tree vocabulary: property keys, branch defaults and node snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from rmtagsync.domain.model.identity import OwnerId

IDENTITY_PROPERTY: Final[str] = "rootsmagic_owner_id"
PERSON_PROPERTY: Final[str] = "person"
FAMILY_PROPERTY: Final[str] = "family_id"

PERSON_ICON: Final[str] = "user"
TOP_LEVEL_PARENT_ID: Final[int] = 0

DEFAULT_PRIMARY_BRANCH: Final[str] = "RootsMagic"
DEFAULT_CATCH_ALL_BRANCH: Final[str] = "Lost & Found"


@dataclass(frozen=True, slots=True, kw_only=True)
class TagNode:
    """Snapshot of a person tag taken when a branch index was loaded.

    Renames and moves go through the tag store; a snapshot is never updated in
    place, so callers compare it against freshly computed labels and parents.
    """

    tag_id: int
    name: str
    parent_id: int
    owner_id: OwnerId | None = None


@dataclass(frozen=True, slots=True)
class BranchRoots:
    primary_id: int
    catch_all_id: int
