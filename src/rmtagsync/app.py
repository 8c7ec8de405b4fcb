"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from rmtagsync.adapters.rootsmagic import RootsMagicSource
from rmtagsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyTagUnitOfWork,
    digikam_database_uri,
    shutdown,
    startup,
)
from rmtagsync.config import (
    DIGIKAM_DB_ENV,
    ROOTSMAGIC_DB_ENV,
    SyncOptions,
    get_sync_config,
    resolve_database_path,
)
from rmtagsync.domain.ports.unit_of_work import TagUnitOfWork
from rmtagsync.domain.reconciliation import ReconciliationResult, synchronize_tags

if TYPE_CHECKING:
    from pathlib import Path

    from rmtagsync.domain.ports.source import GenealogySource

UnitOfWorkFactory = Callable[[], TagUnitOfWork]


log = getLogger(__name__)


def sync_rootsmagic_tags(
    *,
    rootsmagic_path: str | Path | None = None,
    digikam_path: str | Path | None = None,
    options: SyncOptions | None = None,
    source: GenealogySource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ReconciliationResult:
    """Mirror the RootsMagic people and families into the digiKam tag tree.

    ``source`` and ``unit_of_work_factory`` replace the database adapters; when
    omitted, the paths (or their environment variables) are opened instead.
    """

    effective_options = options or get_sync_config()
    log.info(
        "Starting tag sync: parent=%r, lost_found=%r, legacy_repair=%s, snapshot=%s",
        effective_options.primary_branch,
        effective_options.catch_all_branch,
        effective_options.repair_legacy,
        effective_options.use_snapshot,
    )

    owned_source: RootsMagicSource | None = None
    started_store = False
    try:
        if source is None:
            owned_source = RootsMagicSource.open(
                resolve_database_path(rootsmagic_path, ROOTSMAGIC_DB_ENV)
            )
            source = owned_source
        if unit_of_work_factory is None:
            database_uri = digikam_database_uri(resolve_database_path(digikam_path, DIGIKAM_DB_ENV))
            startup(database_uri=database_uri, force=True)
            started_store = True
            unit_of_work_factory = SqlAlchemyTagUnitOfWork

        return synchronize_tags(
            source=source,
            unit_of_work_factory=unit_of_work_factory,
            primary_branch=effective_options.primary_branch,
            catch_all_branch=effective_options.catch_all_branch,
            repair_legacy=effective_options.repair_legacy,
            use_snapshot=effective_options.use_snapshot,
        )
    finally:
        if owned_source is not None:
            owned_source.close()
        if started_store:
            shutdown()
