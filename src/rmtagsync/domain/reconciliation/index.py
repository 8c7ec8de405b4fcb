"""Destination index: identity-keyed views of the two tag branches."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.labels import is_current_person_label
from rmtagsync.domain.model import (
    FAMILY_PROPERTY,
    IDENTITY_PROPERTY,
    TOP_LEVEL_PARENT_ID,
    OwnerId,
    TagNode,
)

if TYPE_CHECKING:
    from rmtagsync.domain.ports.store import TagStore

    from .contracts import BranchIndex

log = logging.getLogger(__name__)


def find_branch_root(store: TagStore, name: str) -> int | None:
    return store.find_node_by_name(name, parent_id=TOP_LEVEL_PARENT_ID)


def ensure_branch_root(store: TagStore, name: str) -> int:
    root_id = find_branch_root(store, name)
    if root_id is None:
        root_id = store.create_node(name, TOP_LEVEL_PARENT_ID)
        log.info("Created branch root %r (TagID: %s)", name, root_id)
    return root_id


def read_node(store: TagStore, tag_id: int) -> TagNode | None:
    """Return a snapshot of ``tag_id`` with its identity, or ``None`` if gone."""

    row = store.get_node(tag_id)
    if row is None:
        return None
    raw_identity = store.get_property(tag_id, IDENTITY_PROPERTY)
    owner_id: OwnerId | None = None
    if raw_identity is not None:
        try:
            owner_id = OwnerId.parse(raw_identity)
        except ValueError:
            log.warning(
                "Ignoring malformed %s=%r on tag %r (TagID: %s)",
                IDENTITY_PROPERTY,
                raw_identity,
                row.name,
                tag_id,
            )
    return TagNode(tag_id=row.tag_id, name=row.name, parent_id=row.parent_id, owner_id=owner_id)


def _prefer(owner_id: OwnerId, kept: TagNode, other: TagNode) -> tuple[TagNode, TagNode]:
    """Pick which of two holders of one identity stays indexed.

    A tag already carrying the current label beats one that does not; otherwise
    the later tag wins. Returns ``(winner, shadowed)``.
    """

    if is_current_person_label(kept.name, owner_id) and not is_current_person_label(
        other.name, owner_id
    ):
        return kept, other
    return other, kept


def _collect(
    store: TagStore, parent_id: int, index: BranchIndex, shadowed: list[TagNode]
) -> None:
    for tag_id in store.list_children_with_property(parent_id, IDENTITY_PROPERTY):
        node = read_node(store, tag_id)
        if node is None or node.owner_id is None:
            continue
        owner_id = node.owner_id
        previous = index.get(owner_id)
        if previous is not None:
            node, loser = _prefer(owner_id, previous, node)
            shadowed.append(loser)
            log.warning(
                "OwnerID %s is carried by tags %s and %s in the same branch; using %s",
                owner_id,
                previous.tag_id,
                tag_id,
                node.tag_id,
            )
        index[owner_id] = node


def scan_branch(
    store: TagStore,
    root_id: int | None,
    *,
    descend_into_groups: bool = False,
) -> tuple[BranchIndex, list[TagNode]]:
    """Map owner ids to the identity-bearing children of ``root_id``.

    With ``descend_into_groups`` the identity-bearing children of family group
    nodes (children of the root carrying ``family_id``) are included as well.
    Tags without the identity property are not indexed. A missing root yields
    an empty index.

    The second element lists the tags that lost to another holder of the same
    identity in this branch; they are not in the index.
    """

    index: BranchIndex = {}
    shadowed: list[TagNode] = []
    if root_id is None:
        return index, shadowed
    _collect(store, root_id, index, shadowed)
    if descend_into_groups:
        for group_id in store.list_children_with_property(root_id, FAMILY_PROPERTY):
            _collect(store, group_id, index, shadowed)
    return index, shadowed


def load_branch_index(
    store: TagStore,
    root_id: int | None,
    *,
    descend_into_groups: bool = False,
) -> BranchIndex:
    index, _ = scan_branch(store, root_id, descend_into_groups=descend_into_groups)
    return index
