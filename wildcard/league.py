"""League-wide season state: current week, global lock time, active rule set.

The state lives in the singleton `league_settings` row and is always read
through a session, so every caller sees it as explicit context rather than
process-wide globals.
"""

import logging
from datetime import UTC
from datetime import datetime

from sqlalchemy.orm import Session

from .database.init_db import ensure_league_settings
from .database.models import LeagueSettings
from .exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

# Sentinel meaning "leave lock_time unchanged"; None clears it
UNSET = object()


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as SQLite returns them) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def get_league_settings(session: Session) -> LeagueSettings:
    """Return the league settings row, creating the default one on first access."""
    return ensure_league_settings(session)


def update_league_settings(
    session: Session,
    current_week: int | None = None,
    lock_time: datetime | None | object = UNSET,
) -> LeagueSettings:
    """Update the current week and/or the global lineup lock time.

    Args:
        session: Database session (caller commits)
        current_week: New current week, unchanged when None
        lock_time: New global lock time; None clears the lock, UNSET leaves it

    Raises:
        InvalidArgumentError: current_week is not a positive week number
    """
    row = get_league_settings(session)

    if current_week is not None:
        if current_week < 1:
            raise InvalidArgumentError(f"Invalid week: {current_week}")
        row.current_week = current_week

    if lock_time is not UNSET:
        row.lock_time = as_utc(lock_time)

    session.flush()
    logger.info(f"League settings updated: week={row.current_week}, lock_time={row.lock_time}")
    return row
