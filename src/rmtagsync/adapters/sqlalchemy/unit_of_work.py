"""SQLAlchemy-backed unit of work for the digiKam tag tree."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from rmtagsync.domain.errors import StoreConnectionError
from rmtagsync.domain.ports.unit_of_work import RepositoryCollection, TagRepositories

from .snapshot import create_checkpoint, drop_checkpoint, restore_checkpoint
from .store import SqlAlchemyTagStore
from .tables import create_tag_tables, has_tag_tables

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when a SQLAlchemy unit of work is used before initialisation."""


@dataclass(slots=True)
class _AdapterState:
    _engine: Engine | None = None
    _session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    @engine.setter
    def engine(self, value: Engine | None) -> None:
        self._session_factory = None
        self._engine = value

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._engine is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised. Call rmtagsync.adapters.sqlalchemy."
                "unit_of_work.startup() before requesting a unit of work."
            )
        if self._session_factory is None:
            self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self._session_factory


_STATE = _AdapterState()


def digikam_database_uri(path: str | Path) -> str:
    """Return the SQLAlchemy URI of an existing digiKam database file."""

    resolved = Path(path).expanduser()
    if not resolved.is_file():
        raise StoreConnectionError(f"digiKam database not found: {resolved}")
    return f"sqlite+pysqlite:///{resolved}"


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
    create_schema: bool = False,
) -> None:
    """Initialise the SQLAlchemy engine and session factory.

    The tag tables are expected to exist already; pass ``create_schema=True`` to
    create them on an empty database.
    """

    if _STATE.engine is not None and not force:
        raise StartupError(
            "SQLAlchemy adapter already initialised. Pass force=True to reconfigure."
        )
    if engine is None and database_uri is None:
        raise StartupError("startup() needs an engine or a database URI")

    resolved_engine = engine or create_engine(database_uri or "", future=True)
    try:
        if create_schema:
            create_tag_tables(resolved_engine)
        present = has_tag_tables(resolved_engine)
    except SQLAlchemyError as exc:
        raise StoreConnectionError(f"Could not open tag database: {exc}") from exc
    if not present:
        raise StoreConnectionError(
            f"{resolved_engine.url.render_as_string()} has no Tags/TagProperties tables"
        )

    _STATE.engine = resolved_engine
    log.debug("Tag store ready at %s", resolved_engine.url.render_as_string())


def configured_engine() -> Engine | None:
    """Return the engine currently managed by the adapter (if any)."""

    return _STATE.engine


def is_started() -> bool:
    """Return whether the adapter has been initialised."""

    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the managed engine and reset state."""

    if _STATE.engine is not None:
        _STATE.engine.dispose()
    _STATE.engine = None


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self) -> None:
        self.session_factory: sessionmaker[Session] = _STATE.session_factory
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        # Anything not committed is discarded, read-only scopes included.
        self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyTagUnitOfWork(BaseSqlAlchemyUnitOfWork[TagRepositories]):
    """Unit of work over the digiKam tag tables, with branch checkpoints."""

    def _build_repositories(self, session: Session) -> TagRepositories:
        return TagRepositories(tags=SqlAlchemyTagStore(session))

    def __enter__(self) -> SqlAlchemyTagUnitOfWork:
        super().__enter__()
        return self

    def checkpoint(self, root_names: Sequence[str]) -> None:
        create_checkpoint(self.session, root_names)

    def restore(self, root_names: Sequence[str]) -> None:
        restore_checkpoint(self.session, root_names)

    def discard_checkpoint(self) -> None:
        drop_checkpoint(self.session)


if TYPE_CHECKING:
    from rmtagsync.domain.ports.unit_of_work import TagUnitOfWork

    _uow_tag_check: TagUnitOfWork = SqlAlchemyTagUnitOfWork()
