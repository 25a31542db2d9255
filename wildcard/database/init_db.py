"""Database initialization for the league schema.

Database Lifecycle Operations:
- create_database(): Initialize schema from SQLAlchemy models
- drop_database(): Remove all tables (destructive operation)
- reset_database(): Complete refresh (drop + create)

create_all() skips tables that already exist, so create_database() is safe
to run on every deployment. It also makes sure the singleton league settings
row exists, since the lock policy and the rules loader read it.
"""

import logging
from pathlib import Path

from sqlalchemy.engine import Engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session

from .connection import engine as default_engine
from .models import DEFAULT_SETTINGS_ID
from .models import Base
from .models import LeagueSettings

logger = logging.getLogger(__name__)


def _ensure_sqlite_directory(engine: Engine) -> None:
    """Create the parent directory of a file-based SQLite database."""
    url = make_url(str(engine.url))
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


def ensure_league_settings(session: Session) -> LeagueSettings:
    """Return the league settings row, inserting the default one if missing."""
    row = session.get(LeagueSettings, DEFAULT_SETTINGS_ID)
    if row is None:
        row = LeagueSettings(id=DEFAULT_SETTINGS_ID, current_week=1)
        session.add(row)
        session.flush()
        logger.info("Created default league settings row")
    return row


def create_database(engine: Engine | None = None):
    """Create all tables and the default league settings row.

    Idempotent. Exceptions are logged with a stack trace and re-raised.
    """
    engine = engine or default_engine
    try:
        _ensure_sqlite_directory(engine)
        Base.metadata.create_all(bind=engine)

        with Session(engine) as session:
            ensure_league_settings(session)
            session.commit()

        logger.info("Database tables created successfully")

    except Exception:
        logger.exception("Failed to create database")
        raise


def drop_database(engine: Engine | None = None):
    """Drop all tables. DESTRUCTIVE: every row is lost."""
    engine = engine or default_engine
    try:
        Base.metadata.drop_all(bind=engine)
        logger.info("Database tables dropped successfully")

    except Exception:
        logger.exception("Failed to drop database")
        raise


def reset_database(engine: Engine | None = None):
    """Drop and recreate the schema, leaving an empty league."""
    logger.info("Resetting database...")
    drop_database(engine)
    create_database(engine)
    logger.info("Database reset complete")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_database()
