"""Orphan sweeper: park tags of people that left the source."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.errors import ConstraintError

if TYPE_CHECKING:
    from collections.abc import Mapping, Set

    from rmtagsync.domain.model import OwnerId, TagNode
    from rmtagsync.domain.ports.store import TagStore

log = logging.getLogger(__name__)


def find_orphans(index: Mapping[OwnerId, TagNode], claimed: Set[int]) -> list[TagNode]:
    return [node for node in index.values() if node.tag_id not in claimed]


def sweep_orphans(
    store: TagStore,
    index: Mapping[OwnerId, TagNode],
    claimed: Set[int],
    catch_all_root_id: int,
) -> int:
    """Move unclaimed tags of ``index`` under the catch-all root; never deletes."""

    moved = 0
    for node in find_orphans(index, claimed):
        try:
            store.reparent_node(node.tag_id, catch_all_root_id)
        except ConstraintError as exc:
            log.warning("Could not move %r to the catch-all branch: %s", node.name, exc)
            continue
        moved += 1
        log.info(
            "Moved to catch-all: %r (OwnerID: %s, TagID: %s)",
            node.name,
            node.owner_id,
            node.tag_id,
        )
    if moved:
        log.info("Moved %s orphaned tags to the catch-all branch", moved)
    return moved
