"""Database connection and session management using SQLAlchemy.

This module handles:
1. Database engine creation (with connection pooling for server databases)
2. Session factory configuration for ORM operations
3. Session helpers that define the transaction boundary for every service call

Every mutating operation in the league core (slot assignment, benching, score
persistence, ingest, rule uploads) runs inside exactly one session
transaction. The helpers here commit when the block finishes and roll back
when anything raises, so a slot swap or a score upsert is all-or-nothing.

Session Patterns Provided:
1. get_session(): Generator with automatic commit/rollback
2. get_session_context(): Context manager for with statements
3. get_db(): FastAPI dependency injection pattern
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..config.settings import settings


def create_db_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """Create a SQLAlchemy engine for the configured database.

    SQLite gets `check_same_thread=False` so the FastAPI threadpool can share
    the connection pool; server databases get a sized pool with pre-ping to
    survive dropped connections.
    """
    url = database_url or settings.database_url
    echo = settings.database_echo if echo is None else echo

    if url.startswith("sqlite"):
        return create_engine(url, echo=echo, connect_args={"check_same_thread": False})

    return create_engine(
        url,
        echo=echo,
        pool_size=settings.database_pool_size,
        pool_pre_ping=True,
    )


# Created once at import time and reused throughout the application
engine = create_db_engine()

SessionLocal = sessionmaker(
    autocommit=False,  # Require explicit commit - one transaction per unit of work
    autoflush=False,  # Writes are flushed explicitly where ordering matters
    bind=engine,
)


def get_session() -> Generator[Session, None, None]:
    """Get database session with automatic commit/rollback and cleanup.

    Usage:
        for session in get_session():
            assign_slot(session, ...)
            # Committed and closed here

    If any exception occurs, the transaction is rolled back and the
    exception is re-raised.
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_session_context() -> Generator[Session, None, None]:
    """Context manager wrapper around get_session().

    Usage:
        with get_session_context() as session:
            persist_team_scores(session, week)
    """
    yield from get_session()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency for database sessions.

    Unlike get_session(), this does not commit: route handlers commit
    explicitly once the service call succeeded and roll back otherwise.
    It only guarantees cleanup.
    """
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
