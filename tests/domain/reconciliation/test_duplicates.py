from __future__ import annotations

from rmtagsync.domain.model import IDENTITY_PROPERTY, OwnerId, TagNode
from rmtagsync.domain.reconciliation.duplicates import (
    find_cross_branch_duplicates,
    remove_shadowed,
    resolve_duplicates,
)
from rmtagsync.domain.reconciliation.index import load_branch_index, scan_branch
from tests.support.tag_store import InMemoryTagStore


def _node(tag_id: int, owner_id: int, parent_id: int) -> TagNode:
    return TagNode(
        tag_id=tag_id, name=f"tag {tag_id}", parent_id=parent_id, owner_id=OwnerId(owner_id)
    )


def test_find_cross_branch_duplicates_returns_catch_all_copies() -> None:
    primary = {OwnerId(7): _node(10, 7, 1), OwnerId(8): _node(11, 8, 1)}
    catch_all = {OwnerId(7): _node(20, 7, 2), OwnerId(9): _node(21, 9, 2)}

    assert find_cross_branch_duplicates(primary, catch_all) == [catch_all[OwnerId(7)]]
    assert find_cross_branch_duplicates(primary, {}) == []


def test_resolve_duplicates_deletes_catch_all_copy_with_properties() -> None:
    store = InMemoryTagStore()
    primary_root = store.create_node("RootsMagic", 0)
    catch_all_root = store.create_node("Lost & Found", 0)
    kept = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", primary_root, 7)
    stale = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", catch_all_root, 7)
    other = store.add_person("Bob Roe 1900-unknown (OwnerID: 9)", catch_all_root, 9)

    removed = resolve_duplicates(
        store,
        load_branch_index(store, primary_root),
        load_branch_index(store, catch_all_root),
    )

    assert removed == 1
    assert store.get_node(stale) is None
    assert store.get_property(stale, IDENTITY_PROPERTY) is None
    assert store.get_node(kept) is not None
    assert store.get_node(other) is not None


def test_resolve_duplicates_without_overlap_is_a_no_op() -> None:
    store = InMemoryTagStore()

    assert resolve_duplicates(store, {OwnerId(7): _node(1, 7, 0)}, {}) == 0


def test_remove_shadowed_leaves_only_the_indexed_holder() -> None:
    store = InMemoryTagStore()
    root = store.create_node("Lost & Found", 0)
    first = store.add_person("Bob Roe 1900-unknown", root, 9)
    second = store.add_person("Bob Roe copy", root, 9)

    index, shadowed = scan_branch(store, root)
    removed = remove_shadowed(store, shadowed)

    assert removed == 1
    assert store.get_node(first) is None
    assert index[OwnerId(9)].tag_id == second
    assert load_branch_index(store, root) == index
