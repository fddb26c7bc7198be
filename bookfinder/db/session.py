"""SQLAlchemy engine and session management for the local store."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from bookfinder.config import StorageSettings
from bookfinder.db import models  # noqa: F401
from bookfinder.db.base import Base
from bookfinder.logging import logger


class Database:
    """Lazy SQLAlchemy engine/session factory wrapper.

    Access is synchronous: the store holds a single small row and is only
    touched on startup and on explicit submissions.
    """

    def __init__(self, settings: StorageSettings | None = None, *, engine: Engine | None = None) -> None:
        self.settings = settings or StorageSettings()
        self._engine = engine
        self._session_factory: sessionmaker[Session] | None = None

    def _ensure_engine(self) -> None:
        if self._engine is None:
            self._engine = create_engine(self.settings.dsn, echo=self.settings.echo, future=True)
            logger.info("db_engine_initialized", dsn=self.settings.dsn)
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self._engine,
                expire_on_commit=False,
                autoflush=False,
            )

    @property
    def engine(self) -> Engine:
        self._ensure_engine()
        assert self._engine is not None
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        self._ensure_engine()
        assert self._session_factory is not None
        return self._session_factory

    def create_all(self) -> None:
        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        factory = self.session_factory
        with factory() as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()


__all__ = ["Database"]
