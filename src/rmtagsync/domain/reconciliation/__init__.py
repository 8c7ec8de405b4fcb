"""Reconciliation of a genealogy source against the tag tree.

Flow of one run:
1) load people and families from the source (read-only)
2) index the primary and catch-all branches by owner id (read-only)
3) inside the transaction guard: ensure branch roots, repair legacy tags,
   drop cross-branch duplicates, reconcile people, sweep orphans, and drop
   duplicates introduced by rescues
"""

from __future__ import annotations

from .contracts import BranchIndex, PersonState, ReconciliationResult, SourceSnapshot
from .engine import TagSynchronizer, synchronize_tags
from .guard import TransactionGuard
from .reconciler import Reconciler

__all__ = [
    "BranchIndex",
    "PersonState",
    "ReconciliationResult",
    "Reconciler",
    "SourceSnapshot",
    "TagSynchronizer",
    "TransactionGuard",
    "synchronize_tags",
]
