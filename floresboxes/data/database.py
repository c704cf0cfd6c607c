"""SQLAlchemy engine and session management."""
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..utils.logger import get_logger
from .models import Base

logger = get_logger("database")


class Database:
    """Owns the engine and hands out sessions.

    The engine is created in ``init()`` so that a broken ``DATABASE_URL`` fails
    when the application starts rather than on import.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine = None
        self._session_factory: Optional[sessionmaker] = None

    def init(self) -> None:
        """Create the engine and all tables."""
        connect_args = {}
        if self.url.startswith("sqlite"):
            connect_args["check_same_thread"] = False

        self._engine = create_engine(self.url, echo=self.echo, connect_args=connect_args)
        self._session_factory = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )
        self.create_tables()
        logger.info("Database initialized (%s)", self._engine.url.get_backend_name())

    def create_tables(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(bind=self._engine)

    def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        if self._session_factory is None:
            self.init()

        db = self._session_factory()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
