"""Database engine, session factory and record store wiring."""

import logging

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.config import Settings, get_settings
from backend.app.db.inmemory import create_inmemory_store
from backend.app.db.models import Base
from backend.app.db.repositories import RecordStore
from backend.app.db.sql_repositories import create_sql_store

logger = logging.getLogger(__name__)


def create_engine_from_url(database_url: str) -> Engine:
    """Create SQLAlchemy engine for a connection string.

    In-memory SQLite gets a single shared connection so every session sees
    the same database.
    """
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=False,
        )

    return create_engine(database_url, pool_pre_ping=True, echo=False)


def create_engine_from_settings(settings: Settings) -> Engine:
    """Create SQLAlchemy engine from settings.

    Raises:
        ValueError: If DATABASE_URL is unset or empty.
    """
    if not settings.database_url:
        raise ValueError(
            "DATABASE_URL must be set to a valid connection string. "
            "Please configure the database_url setting."
        )

    return create_engine_from_url(settings.database_url)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create sessionmaker for creating database sessions.

    Args:
        engine: SQLAlchemy engine

    Returns:
        Sessionmaker bound to the engine
    """
    return sessionmaker(bind=engine, expire_on_commit=False)


def build_record_store(settings: Settings) -> RecordStore:
    """Build the record store selected by settings.

    Uses SQL when DATABASE_URL is set (creating tables if missing), memory
    otherwise.
    """
    if not settings.database_url:
        logger.info("DATABASE_URL not set, using in-memory record store")
        return create_inmemory_store()

    engine = create_engine_from_settings(settings)
    Base.metadata.create_all(engine)
    logger.info("Using SQL record store (%s)", engine.url.get_backend_name())
    return create_sql_store(create_session_factory(engine))


# Global record store
_record_store: RecordStore | None = None


def get_record_store() -> RecordStore:
    """FastAPI dependency returning the process-wide record store."""
    global _record_store
    if _record_store is None:
        _record_store = build_record_store(get_settings())
    return _record_store
