"""Relational store access with explicit transaction boundaries."""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional

from sqlalchemy import create_engine, event  # type: ignore[import-untyped]
from sqlalchemy.engine import Engine  # type: ignore[import-untyped]
from sqlalchemy.exc import SQLAlchemyError  # type: ignore[import-untyped]
from sqlalchemy.orm import Session, sessionmaker  # type: ignore[import-untyped]
from sqlalchemy.pool import StaticPool  # type: ignore[import-untyped]

from endpoint_registry.core.config import ConfigManager
from endpoint_registry.core.errors import PersistenceError
from endpoint_registry.core.schema import Base

logger = logging.getLogger(__name__)

_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    """Turn on FK enforcement so junction rows cascade with their parent."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def default_database_url(config: ConfigManager) -> str:
    """Resolve the database URL from configuration.

    Args:
        config: Configuration manager

    Returns:
        ``database.url`` if set, otherwise a SQLite file in the data directory
    """
    url: Optional[str] = config.get("database.url")
    if url:
        return url
    data_dir = config.get_path("general.data_dir", "~/.endpoint-registry/data")
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{data_dir / 'registry.db'}"


class Database:
    """Owns the engine and hands out transactional sessions."""

    def __init__(self, url: str, echo: bool = False):
        """Initialize database.

        Args:
            url: SQLAlchemy database URL
            echo: Log every SQL statement
        """
        self.url = url
        engine_kwargs: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            # Writers wait on the store lock instead of failing immediately
            engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
            if url in _MEMORY_URLS:
                engine_kwargs["poolclass"] = StaticPool

        self.engine: Engine = create_engine(url, **engine_kwargs)
        if url.startswith("sqlite"):
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    @classmethod
    def from_config(cls, config: ConfigManager) -> "Database":
        """Create a database from configuration."""
        return cls(default_database_url(config), echo=config.get("database.echo", False))

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Run a unit of work in a single transaction.

        Commits when the block exits normally and rolls back on any error.
        Store failures are re-raised as :class:`PersistenceError` with the
        driver message kept for diagnostics.

        Example:
            >>> with db.transaction() as session:
            ...     session.add(row)
        """
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Commit failed, rolling back: {e}")
            raise PersistenceError(detail=str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
