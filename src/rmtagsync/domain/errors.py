"""Error taxonomy of a synchronization run.

Load-phase errors (``StoreConnectionError``, ``QueryError``) are fatal. Inside
the mutation scope, ``ConstraintError`` is handled locally by the rescue path
and ``ReconciliationFailure`` is logged per person; anything else escaping the
scope is converted into ``TransactionFailure`` after rollback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rmtagsync.domain.model import OwnerId


class SyncError(RuntimeError):
    """Base class for synchronization errors."""


class StoreConnectionError(SyncError):
    """Raised when a source or destination database cannot be opened."""


class QueryError(SyncError):
    """Raised when a store query or statement fails."""


class ConstraintError(SyncError):
    """Raised when a write would collide with an existing node."""


class ReconciliationFailure(SyncError):
    """A person could neither be created nor rescued."""

    def __init__(self, owner_id: OwnerId, label: str, reason: str) -> None:
        self.owner_id = owner_id
        self.label = label
        self.reason = reason
        super().__init__(f"Failed to create or rescue tag for {label!r}: {reason}")


class TransactionFailure(SyncError):
    """Raised when the mutation phase failed and the store was rolled back."""
