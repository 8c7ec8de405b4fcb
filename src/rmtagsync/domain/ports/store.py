"""Ports for the hierarchical tag store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class NodeRow:
    """Raw tag row: storage id, name and parent id (``0`` for top-level tags)."""

    tag_id: int
    name: str
    parent_id: int


@runtime_checkable
class TagStore(Protocol):
    """Node and property operations on the destination tag tree.

    ``create_node``, ``rename_node`` and ``reparent_node`` raise
    ``ConstraintError`` when the resulting (name, parent) pair is already taken.
    Other failures surface as ``QueryError``.
    """

    def find_node_by_name(self, name: str, *, parent_id: int | None = None) -> int | None: ...

    def get_node(self, tag_id: int) -> NodeRow | None: ...

    def create_node(self, name: str, parent_id: int, *, icon: str | None = None) -> int: ...

    def rename_node(self, tag_id: int, name: str) -> None: ...

    def reparent_node(self, tag_id: int, parent_id: int) -> None: ...

    def delete_node(self, tag_id: int) -> None:
        """Delete the node together with all of its properties."""
        ...

    def get_property(self, tag_id: int, key: str) -> str | None: ...

    def set_property(self, tag_id: int, key: str, value: str) -> None:
        """Update the property if present, insert it otherwise."""
        ...

    def list_children(self, parent_id: int) -> Sequence[int]: ...

    def list_children_with_property(
        self,
        parent_id: int,
        key: str,
        *,
        value: str | None = None,
    ) -> Sequence[int]: ...


__all__ = ["NodeRow", "TagStore"]
