"""
Database engine, session management and schema creation.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from freshcart.domain.exceptions import PersistenceUnavailableError
from freshcart.infrastructure.persistence.tables import Base

logger = structlog.get_logger(__name__)


class Database:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, url: str, echo: bool = False, busy_timeout: float = 5.0) -> None:
        parsed = make_url(url)
        connect_args: dict = {}
        if parsed.get_backend_name() == "sqlite":
            connect_args = {"timeout": busy_timeout, "check_same_thread": False}
            if parsed.database and parsed.database != ":memory:":
                Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(url, echo=echo, connect_args=connect_args)
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

        if parsed.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

    def init_schema(self) -> None:
        """Create every table that does not exist yet."""
        with self.transaction() as session:
            Base.metadata.create_all(bind=session.connection())
        logger.info("Database schema ensured", url=self.engine.url.render_as_string())

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """One unit of work: committed on success, rolled back on any error.

        Connection-level failures surface as PersistenceUnavailableError.
        """
        session = self.session_factory()
        try:
            with session.begin():
                yield session
        except OperationalError as exc:
            logger.error("Database unavailable", error=str(exc.orig))
            raise PersistenceUnavailableError(str(exc.orig)) from exc
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
