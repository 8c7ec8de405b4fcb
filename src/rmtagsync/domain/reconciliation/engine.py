"""Top-level synchronization of a genealogy source into the tag tree."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.model import DEFAULT_CATCH_ALL_BRANCH, DEFAULT_PRIMARY_BRANCH, BranchRoots

from .contracts import ReconciliationResult
from .duplicates import remove_shadowed, resolve_duplicates
from .guard import TransactionGuard
from .index import ensure_branch_root, find_branch_root, load_branch_index, scan_branch
from .legacy import bind_legacy_nodes, repair_label_format
from .loading import load_source
from .orphans import sweep_orphans
from .reconciler import Reconciler

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from rmtagsync.domain.model import TagNode
    from rmtagsync.domain.ports.source import GenealogySource
    from rmtagsync.domain.ports.store import TagStore
    from rmtagsync.domain.ports.unit_of_work import TagUnitOfWork

    from .contracts import BranchIndex, SourceSnapshot

log = logging.getLogger(__name__)


def load_primary_index(store: TagStore, root_id: int | None) -> BranchIndex:
    return load_branch_index(store, root_id, descend_into_groups=True)


def load_catch_all_index(store: TagStore, root_id: int | None) -> BranchIndex:
    return load_branch_index(store, root_id)


class TagSynchronizer:
    """Mutation body of one run; called by the guard with the transactional store."""

    def __init__(
        self,
        snapshot: SourceSnapshot,
        *,
        primary_branch: str,
        catch_all_branch: str,
        primary_index: BranchIndex,
        catch_all_index: BranchIndex,
        shadowed: Sequence[TagNode] = (),
        repair_legacy: bool = True,
    ) -> None:
        self.snapshot = snapshot
        self.primary_branch = primary_branch
        self.catch_all_branch = catch_all_branch
        self.primary_index = primary_index
        self.catch_all_index = catch_all_index
        self.shadowed = tuple(shadowed)
        self.repair_legacy = repair_legacy

    def __call__(self, store: TagStore) -> ReconciliationResult:
        result = ReconciliationResult()
        roots = BranchRoots(
            primary_id=ensure_branch_root(store, self.primary_branch),
            catch_all_id=ensure_branch_root(store, self.catch_all_branch),
        )
        primary_index = self.primary_index
        catch_all_index = self.catch_all_index
        result.duplicates_removed = remove_shadowed(store, self.shadowed)

        if self.repair_legacy:
            result.legacy_bound = bind_legacy_nodes(
                store, roots.primary_id, self.snapshot.people, tracked=primary_index.keys()
            )
            if result.legacy_bound:
                primary_index = load_primary_index(store, roots.primary_id)
            result.labels_repaired = repair_label_format(
                store, primary_index, self.snapshot.people_by_id()
            )
            if result.labels_repaired:
                primary_index = load_primary_index(store, roots.primary_id)

        result.duplicates_removed += resolve_duplicates(store, primary_index, catch_all_index)
        if result.duplicates_removed:
            catch_all_index = load_catch_all_index(store, roots.catch_all_id)

        log.info("Synchronizing %s people", len(self.snapshot.people))
        reconciler = Reconciler(
            store, roots, self.snapshot.families, catch_all_index, result=result
        )
        reconciler.run(self.snapshot.people, primary_index)

        result.orphaned = sweep_orphans(
            store, primary_index, reconciler.claimed, roots.catch_all_id
        )

        # Rescues and sweeps can leave an identity in both branches.
        primary_index, primary_shadowed = scan_branch(
            store, roots.primary_id, descend_into_groups=True
        )
        catch_all_index, catch_all_shadowed = scan_branch(store, roots.catch_all_id)
        result.duplicates_removed += remove_shadowed(
            store, [*primary_shadowed, *catch_all_shadowed]
        )
        result.duplicates_removed += resolve_duplicates(store, primary_index, catch_all_index)
        return result


def synchronize_tags(
    *,
    source: GenealogySource,
    unit_of_work_factory: Callable[[], TagUnitOfWork],
    primary_branch: str = DEFAULT_PRIMARY_BRANCH,
    catch_all_branch: str = DEFAULT_CATCH_ALL_BRANCH,
    repair_legacy: bool = True,
    use_snapshot: bool = True,
) -> ReconciliationResult:
    """Reconcile the tag tree with ``source`` and return the run summary.

    Raises ``QueryError``/``StoreConnectionError`` from the read-only load phase
    and ``TransactionFailure`` when the mutation phase was rolled back.
    """

    if primary_branch == catch_all_branch:
        raise ValueError("Primary and catch-all branch must be different tags")

    snapshot = load_source(source)

    with unit_of_work_factory() as uow:
        tags = uow.repositories.tags
        primary_index, primary_shadowed = scan_branch(
            tags, find_branch_root(tags, primary_branch), descend_into_groups=True
        )
        catch_all_index, catch_all_shadowed = scan_branch(
            tags, find_branch_root(tags, catch_all_branch)
        )
    log.info(
        "Found %s tracked tags under %r and %s under %r",
        len(primary_index),
        primary_branch,
        len(catch_all_index),
        catch_all_branch,
    )

    guard = TransactionGuard(
        unit_of_work_factory,
        (primary_branch, catch_all_branch),
        use_snapshot=use_snapshot,
    )
    result = guard.run(
        TagSynchronizer(
            snapshot,
            primary_branch=primary_branch,
            catch_all_branch=catch_all_branch,
            primary_index=primary_index,
            catch_all_index=catch_all_index,
            shadowed=[*primary_shadowed, *catch_all_shadowed],
            repair_legacy=repair_legacy,
        )
    )

    log.info(
        "Synchronization completed: created=%s, rescued=%s, updated=%s, orphaned=%s, "
        "regrouped=%s, failed=%s, duplicates_removed=%s",
        result.created,
        result.rescued,
        result.updated,
        result.orphaned,
        result.regrouped,
        result.failed,
        result.duplicates_removed,
    )
    return result
