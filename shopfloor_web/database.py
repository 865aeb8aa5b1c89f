"""Database utilities for the shop web API."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Storage handle owned by the process entry point.

    A single instance is created by :func:`server.create_app` and stored on
    ``app.state``; request handlers receive sessions through
    :func:`get_session` instead of importing a module level engine.
    """

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        self.engine: Engine = create_engine(url, echo=echo, connect_args=connect_args)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    def init_db(self) -> None:
        """Create every table that does not exist yet."""

        # Import models lazily so table metadata is registered before create_all.
        from . import models  # noqa: F401  # pylint: disable=unused-import

        logger.info("Ensuring database tables are created")
        SQLModel.metadata.create_all(self.engine)
        logger.info("Database tables confirmed")

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Provide a transactional scope around a series of operations."""

        with Session(self.engine) as session:
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise

    def dispose(self) -> None:
        self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_session(request: Request) -> Iterator[Session]:
    """FastAPI dependency returning a new SQLModel session."""

    with Session(get_database(request).engine) as session:
        yield session
