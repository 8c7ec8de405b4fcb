from __future__ import annotations

import logging

import pytest

from rmtagsync.domain.model import FAMILY_PROPERTY, IDENTITY_PROPERTY, OwnerId
from rmtagsync.domain.reconciliation.index import (
    ensure_branch_root,
    find_branch_root,
    load_branch_index,
    read_node,
    scan_branch,
)
from tests.support.tag_store import InMemoryTagStore


def test_ensure_branch_root_creates_once() -> None:
    store = InMemoryTagStore()

    root_id = ensure_branch_root(store, "RootsMagic")

    assert ensure_branch_root(store, "RootsMagic") == root_id
    assert find_branch_root(store, "RootsMagic") == root_id
    assert store.get_node(root_id).parent_id == 0  # type: ignore[union-attr]


def test_find_branch_root_ignores_nested_tags_with_same_name() -> None:
    store = InMemoryTagStore()
    other = store.create_node("Other", 0)
    store.create_node("RootsMagic", other)

    assert find_branch_root(store, "RootsMagic") is None


def test_index_contains_only_identity_bearing_children() -> None:
    store = InMemoryTagStore()
    root = store.create_node("RootsMagic", 0)
    jane = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", root, 7)
    store.add_person("Legacy Person", root, None)

    index = load_branch_index(store, root)

    assert list(index) == [OwnerId(7)]
    assert index[OwnerId(7)].tag_id == jane
    assert index[OwnerId(7)].parent_id == root


def test_index_of_missing_root_is_empty() -> None:
    assert load_branch_index(InMemoryTagStore(), None) == {}


def test_index_descends_into_family_groups_only_when_asked() -> None:
    store = InMemoryTagStore()
    root = store.create_node("RootsMagic", 0)
    group = store.create_node("John Doe and unknown Family (FamilyID: 3)", root)
    store.set_property(group, FAMILY_PROPERTY, "3")
    child = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", group, 7)
    stray = store.create_node("Holiday", root)
    store.add_person("Nested 1900-unknown (OwnerID: 9)", stray, 9)

    flat = load_branch_index(store, root)
    grouped = load_branch_index(store, root, descend_into_groups=True)

    assert flat == {}
    assert list(grouped) == [OwnerId(7)]
    assert grouped[OwnerId(7)].tag_id == child


def test_in_branch_duplicates_keep_the_later_tag(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryTagStore()
    root = store.create_node("RootsMagic", 0)
    store.add_person("Jane Doe 1950-unknown", root, 7)
    later = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", root, 7)

    with caplog.at_level(logging.WARNING):
        index = load_branch_index(store, root)

    assert index[OwnerId(7)].tag_id == later
    assert "same branch" in caplog.text


def test_scan_reports_shadowed_holders() -> None:
    store = InMemoryTagStore()
    root = store.create_node("RootsMagic", 0)
    earlier = store.add_person("Jane Doe 1950-unknown", root, 7)
    later = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", root, 7)

    index, shadowed = scan_branch(store, root)

    assert index[OwnerId(7)].tag_id == later
    assert [node.tag_id for node in shadowed] == [earlier]


def test_scan_keeps_the_holder_with_the_current_label() -> None:
    store = InMemoryTagStore()
    root = store.create_node("RootsMagic", 0)
    group = store.create_node("Doe Family (FamilyID: 3)", root)
    store.set_property(group, FAMILY_PROPERTY, "3")
    current = store.add_person("Jane Doe 1950-unknown (OwnerID: 7)", root, 7)
    stale = store.add_person("Jane Doe old copy", group, 7)

    index, shadowed = scan_branch(store, root, descend_into_groups=True)

    assert index[OwnerId(7)].tag_id == current
    assert [node.tag_id for node in shadowed] == [stale]


def test_scan_of_missing_root_is_empty() -> None:
    assert scan_branch(InMemoryTagStore(), None) == ({}, [])


def test_malformed_identity_is_treated_as_untracked(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryTagStore()
    root = store.create_node("RootsMagic", 0)
    tag_id = store.create_node("Jane Doe", root)
    store.set_property(tag_id, IDENTITY_PROPERTY, "not-a-number")

    with caplog.at_level(logging.WARNING):
        node = read_node(store, tag_id)
        index = load_branch_index(store, root)

    assert node is not None
    assert node.owner_id is None
    assert index == {}
    assert "malformed" in caplog.text


def test_read_node_of_deleted_tag_is_none() -> None:
    assert read_node(InMemoryTagStore(), 42) is None
