"""
Database engine and session helpers.

The engine is created lazily from DATABASE_URL. On Postgres every connection
carries a statement_timeout so no store call can block indefinitely; a
timed-out statement surfaces as a SQLAlchemy OperationalError which the store
layer converts into UpstreamUnavailableError.
"""

import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from azhari_platform.config import settings

logger = logging.getLogger(__name__)

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def normalize_database_url(database_url: str) -> str:
    """Hosted providers hand out postgres:// URLs; SQLAlchemy wants postgresql://."""
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql://", 1)
    return database_url


def build_engine(database_url: str) -> Engine:
    """Create an engine with the platform's timeout contract applied."""
    database_url = normalize_database_url(database_url)
    connect_args = {}
    if database_url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": settings.DB_CONNECT_TIMEOUT_SECONDS,
            "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}",
        }
    elif database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        if not settings.DATABASE_URL:
            raise ValueError("DATABASE_URL environment variable is required")
        _engine = build_engine(settings.DATABASE_URL)
        logger.info("Database engine created")
    return _engine


def get_session_factory() -> sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=get_engine())
    return _session_factory


def create_database_session() -> Session:
    """Open a standalone session (jobs, scripts)."""
    return get_session_factory()()


def get_db_session() -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    db = create_database_session()
    try:
        yield db
    finally:
        db.close()
