"""Transaction guard around the mutation phase of a run."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from rmtagsync.domain.errors import TransactionFailure

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from rmtagsync.domain.ports.store import TagStore
    from rmtagsync.domain.ports.unit_of_work import TagUnitOfWork

log = logging.getLogger(__name__)


class TransactionGuard:
    """Run a mutation body in one unit of work with a checkpoint to fall back on.

    The checkpoint is taken (and committed) before the mutation unit of work
    opens, so it reflects the pre-run state only. On failure the unit of work
    rolls back, the checkpoint is restored, and ``TransactionFailure`` is raised.
    Restoring only rewrites rows that still differ from the checkpoint, so after
    a clean rollback it writes nothing. An interrupt (``KeyboardInterrupt``,
    ``SystemExit``) is recovered the same way and then re-raised unchanged.
    With ``use_snapshot=False`` the guard relies on the store's rollback alone.
    """

    def __init__(
        self,
        unit_of_work_factory: Callable[[], TagUnitOfWork],
        root_names: Sequence[str],
        *,
        use_snapshot: bool = True,
    ) -> None:
        self.unit_of_work_factory = unit_of_work_factory
        self.root_names = tuple(root_names)
        self.use_snapshot = use_snapshot

    def run[T](self, body: Callable[[TagStore], T]) -> T:
        if self.use_snapshot:
            log.info("Creating checkpoint of %s", ", ".join(repr(name) for name in self.root_names))
            with self.unit_of_work_factory() as uow:
                uow.checkpoint(self.root_names)
                uow.commit()

        try:
            with self.unit_of_work_factory() as uow:
                outcome = body(uow.repositories.tags)
                uow.commit()
        except Exception as exc:
            log.error("Mutation phase failed, rolling back: %s", exc)  # noqa: TRY400
            self._recover(exc)
            raise TransactionFailure(f"Synchronization rolled back: {exc}") from exc
        except BaseException as exc:
            log.warning("Mutation phase interrupted (%s), rolling back", type(exc).__name__)
            self._recover(exc)
            raise

        if self.use_snapshot:
            with self.unit_of_work_factory() as uow:
                uow.discard_checkpoint()
                uow.commit()
        return outcome

    def _recover(self, cause: BaseException) -> None:
        if not self.use_snapshot:
            return
        log.info("Restoring checkpoint")
        try:
            with self.unit_of_work_factory() as uow:
                uow.restore(self.root_names)
                uow.discard_checkpoint()
                uow.commit()
        except Exception as restore_exc:
            log.exception("Restoring the checkpoint failed")
            raise TransactionFailure(
                f"Synchronization failed ({cause!r}) and the checkpoint could not be restored"
            ) from restore_exc
