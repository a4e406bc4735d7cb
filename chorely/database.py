"""Database client: engine lifecycle and per-request sessions."""

import logging

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

# Import all models so SQLModel registers them
import chorely.models  # noqa: F401

logger = logging.getLogger(__name__)


def _enable_sqlite_pragmas(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Database:
    """Explicitly constructed storage client.

    Nothing connects until ``init()``; ``close()`` releases the pool.
    """

    def __init__(self, url: str, echo: bool = False, timeout: float = 5.0):
        self.url = url
        self.echo = echo
        self.timeout = timeout
        self._engine: Engine | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database.init() has not been called")
        return self._engine

    def connect(self) -> Engine:
        """Create the engine without touching the schema."""
        if self._engine is None:
            connect_args = {}
            if self.is_sqlite:
                connect_args = {"check_same_thread": False, "timeout": self.timeout}
            self._engine = create_engine(self.url, echo=self.echo, connect_args=connect_args)
            if self.is_sqlite:
                event.listen(self._engine, "connect", _enable_sqlite_pragmas)
        return self._engine

    def init(self) -> None:
        """Connect and create all tables."""
        SQLModel.metadata.create_all(self.connect())
        logger.info("Database ready: %s", self.engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def session(self) -> Session:
        return Session(self.engine)


def get_session(request: Request):
    """FastAPI dependency: yields a database session."""
    with request.app.state.db.session() as session:
        yield session
