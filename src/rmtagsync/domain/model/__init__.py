"""Public domain model surface."""

from __future__ import annotations

from rmtagsync.domain.model.identity import OwnerId
from rmtagsync.domain.model.records import FamilyRecord, PersonRecord
from rmtagsync.domain.model.tags import (
    DEFAULT_CATCH_ALL_BRANCH,
    DEFAULT_PRIMARY_BRANCH,
    FAMILY_PROPERTY,
    IDENTITY_PROPERTY,
    PERSON_ICON,
    PERSON_PROPERTY,
    TOP_LEVEL_PARENT_ID,
    BranchRoots,
    TagNode,
)

__all__ = [  # noqa: RUF022
    # identity
    "OwnerId",
    # records
    "FamilyRecord",
    "PersonRecord",
    # tags
    "BranchRoots",
    "TagNode",
    "DEFAULT_CATCH_ALL_BRANCH",
    "DEFAULT_PRIMARY_BRANCH",
    "FAMILY_PROPERTY",
    "IDENTITY_PROPERTY",
    "PERSON_ICON",
    "PERSON_PROPERTY",
    "TOP_LEVEL_PARENT_ID",
]
