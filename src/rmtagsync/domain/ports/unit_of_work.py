"""Unit-of-work abstractions for coordinating tag store access."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from rmtagsync.domain.ports.store import TagStore


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@runtime_checkable
class CheckpointingUnitOfWork[TRepositories: RepositoryCollection](
    UnitOfWork[TRepositories], Protocol
):
    """Unit of work that can snapshot and restore the branches it mutates.

    Used when a rollback alone cannot undo everything, e.g. when the store has no
    transaction spanning all tables touched by a run.
    """

    def checkpoint(self, root_names: Sequence[str]) -> None: ...

    def restore(self, root_names: Sequence[str]) -> None: ...

    def discard_checkpoint(self) -> None: ...


@dataclass(slots=True)
class TagRepositories(RepositoryCollection):
    """Repositories required to reconcile the tag tree."""

    tags: TagStore


type TagUnitOfWork = CheckpointingUnitOfWork[TagRepositories]
