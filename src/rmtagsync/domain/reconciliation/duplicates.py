"""Duplicate resolver: keep one tag per identity across both branches.

The catch-all branch is a quarantine for tags the engine cannot place. When an
identity is also present in the primary branch, the quarantined copy is stale
and is deleted permanently. Within one branch, every holder of an identity but
the indexed one is deleted as well.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from rmtagsync.domain.model import OwnerId, TagNode
    from rmtagsync.domain.ports.store import TagStore

log = logging.getLogger(__name__)


def find_cross_branch_duplicates(
    primary: Mapping[OwnerId, TagNode],
    catch_all: Mapping[OwnerId, TagNode],
) -> list[TagNode]:
    """Return the catch-all copies of identities present in both branches."""

    return [node for owner_id, node in catch_all.items() if owner_id in primary]


def resolve_duplicates(
    store: TagStore,
    primary: Mapping[OwnerId, TagNode],
    catch_all: Mapping[OwnerId, TagNode],
) -> int:
    duplicates = find_cross_branch_duplicates(primary, catch_all)
    for node in duplicates:
        log.info(
            "Removing duplicate from catch-all: %r (OwnerID: %s, TagID: %s)",
            node.name,
            node.owner_id,
            node.tag_id,
        )
        store.delete_node(node.tag_id)
    if duplicates:
        log.info("Removed %s duplicate tags", len(duplicates))
    return len(duplicates)


def remove_shadowed(store: TagStore, shadowed: Iterable[TagNode]) -> int:
    """Delete tags that lost to another holder of their identity in the same branch."""

    removed = 0
    for node in shadowed:
        log.info(
            "Removing second tag for OwnerID %s: %r (TagID: %s)",
            node.owner_id,
            node.name,
            node.tag_id,
        )
        store.delete_node(node.tag_id)
        removed += 1
    return removed
