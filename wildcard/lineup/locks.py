"""Lineup lock policy.

A player's slot can be changed until either the league-wide lock time passes
or the player's NFL game for the week kicks off. Lock checks run on every
lineup read and write, so they are side-effect free and cost at most one
indexed query.

Rules, in priority order:
1. Placeholder teams ("Multi") never lock
2. Global lock time reached -> "League is locked for the week"
3. Game kicked off, in progress or final -> "Game has started"
4. No game scheduled -> not locked
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC
from datetime import datetime

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..config.settings import settings
from ..database.models import Game
from ..league import as_utc
from ..league import get_league_settings

logger = logging.getLogger(__name__)

LEAGUE_LOCKED_REASON = "League is locked for the week"
GAME_STARTED_REASON = "Game has started"
STARTED_STATUSES = ("in_progress", "final")


@dataclass
class LockStatus:
    locked: bool
    reason: str | None = None


def find_game(session: Session, nfl_team: str, week: int) -> Game | None:
    """The week's game in which `nfl_team` plays, home or away."""
    return (
        session.query(Game)
        .filter(
            Game.week == week,
            or_(Game.home_team_abbr == nfl_team, Game.away_team_abbr == nfl_team),
        )
        .order_by(Game.kickoff_time)
        .first()
    )


def evaluate_lock(
    nfl_team: str,
    game: Game | None,
    lock_time: datetime | None,
    now: datetime,
    unlocked_markers: Iterable[str] | None = None,
) -> LockStatus:
    """Decide a lock from already-loaded data. Pure."""
    markers = settings.unlocked_team_markers if unlocked_markers is None else unlocked_markers
    if nfl_team in markers:
        return LockStatus(locked=False)

    now = as_utc(now)
    lock_time = as_utc(lock_time)
    if lock_time is not None and now >= lock_time:
        return LockStatus(locked=True, reason=LEAGUE_LOCKED_REASON)

    if game is None:
        return LockStatus(locked=False)

    kickoff = as_utc(game.kickoff_time)
    if (kickoff is not None and now >= kickoff) or game.status in STARTED_STATUSES:
        return LockStatus(locked=True, reason=GAME_STARTED_REASON)

    return LockStatus(locked=False)


class LockPolicy:
    """Lock checks bound to a session, a global lock time and a clock.

    `now` is fixed when given (tests, replays) and read from the system clock
    on every check otherwise.
    """

    def __init__(
        self,
        session: Session,
        lock_time: datetime | None = None,
        now: datetime | None = None,
        unlocked_markers: Iterable[str] | None = None,
    ):
        self.session = session
        self.lock_time = as_utc(lock_time)
        self.now = as_utc(now)
        self.unlocked_markers = (
            tuple(settings.unlocked_team_markers) if unlocked_markers is None else tuple(unlocked_markers)
        )

    @classmethod
    def for_league(cls, session: Session, now: datetime | None = None) -> "LockPolicy":
        """Policy using the lock time stored in the league settings row."""
        return cls(session, lock_time=get_league_settings(session).lock_time, now=now)

    def current_time(self) -> datetime:
        return self.now or datetime.now(UTC)

    def is_locked(self, nfl_team: str, week: int) -> LockStatus:
        now = self.current_time()

        # Only hit the schedule when the cheaper checks have not decided already
        status = evaluate_lock(nfl_team, None, self.lock_time, now, self.unlocked_markers)
        if status.locked or nfl_team in self.unlocked_markers:
            return status

        game = find_game(self.session, nfl_team, week)
        return evaluate_lock(nfl_team, game, self.lock_time, now, self.unlocked_markers)
