"""Manual ingest of normalized game, stat and event records.

Admins upload (or paste) one JSON document per batch:

    {
      "games": [{"week": 1, "homeTeamAbbr": "KC", "awayTeamAbbr": "BAL",
                 "kickoffTime": "2025-09-05T00:20:00Z", "status": "final"}],
      "playerGameStats": [{"playerName": "Patrick Mahomes", "position": "QB",
                           "nflTeamAbbr": "KC", "gameWeek": 1, "passYards": 291}],
      "defenseGameStats": [{"teamAbbr": "KC", "gameWeek": 1,
                            "pointsAllowed": 20, "yardsAllowed": 350}],
      "gameEvents": [{"gameWeek": 1, "eventType": "passing_td",
                      "playerName": "Patrick Mahomes", "nflTeamAbbr": "KC", "yards": 62}]
    }

Every record type is an upsert on its natural key, so re-running a batch
(or a corrected one) replaces values instead of duplicating rows. Events are
the exception: they are appended.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator
from sqlalchemy.orm import Session

from ..database.models import GAME_STATUSES
from ..database.models import POSITIONS
from ..database.models import Game
from ..database.models import GameEvent
from ..database.models import Player
from ..database.models import PlayerGameStats
from ..database.models import TeamDefenseGameStats
from ..exceptions import NotFoundError
from ..league import as_utc
from ..lineup.locks import find_game
from ..scoring.engine import quantize_points

logger = logging.getLogger(__name__)


class IngestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class IngestGame(IngestModel):
    week: int = Field(ge=1)
    home_team_abbr: str = Field(alias="homeTeamAbbr")
    away_team_abbr: str = Field(alias="awayTeamAbbr")
    kickoff_time: datetime = Field(alias="kickoffTime")
    status: str = "scheduled"
    home_score: int | None = Field(default=None, alias="homeScore")
    away_score: int | None = Field(default=None, alias="awayScore")
    spread_home: float | None = Field(default=None, alias="spreadHome")
    total: float | None = None

    @field_validator("status")
    @classmethod
    def normalize_status(cls, value: str) -> str:
        status = value.strip().lower()
        if status not in GAME_STATUSES:
            raise ValueError(f"status must be one of {', '.join(GAME_STATUSES)}")
        return status


class IngestPlayerGameStats(IngestModel):
    player_name: str = Field(alias="playerName")
    position: str
    nfl_team_abbr: str = Field(alias="nflTeamAbbr")
    game_week: int = Field(alias="gameWeek")

    # Passing
    pass_yards: int | None = Field(default=0, alias="passYards")
    pass_tds: int | None = Field(default=0, alias="passTDs")
    pass_interceptions: int | None = Field(default=0, alias="passInterceptions")
    pass_2pt_conversions: int | None = Field(default=0, alias="pass2PtConversions")
    pass_attempts: int | None = Field(default=0, alias="passAttempts")
    pass_completions: int | None = Field(default=0, alias="passCompletions")

    # Rushing
    rush_yards: int | None = Field(default=0, alias="rushYards")
    rush_tds: int | None = Field(default=0, alias="rushTDs")
    rush_2pt_conversions: int | None = Field(default=0, alias="rush2PtConversions")
    rush_attempts: int | None = Field(default=0, alias="rushAttempts")

    # Receiving
    receptions: int | None = 0
    rec_yards: int | None = Field(default=0, alias="recYards")
    rec_tds: int | None = Field(default=0, alias="recTDs")
    rec_2pt_conversions: int | None = Field(default=0, alias="rec2PtConversions")

    fumbles_lost: int | None = Field(default=0, alias="fumblesLost")

    # Kicking
    fg_made_0_39: int | None = Field(default=0, alias="fgMade0_39")
    fg_made_40_49: int | None = Field(default=0, alias="fgMade40_49")
    fg_made_50_54: int | None = Field(default=0, alias="fgMade50_54")
    fg_made_55_plus: int | None = Field(default=0, alias="fgMade55Plus")
    fg_missed: int | None = Field(default=0, alias="fgMissed")
    fg_long: int | None = Field(default=0, alias="fgLong")
    xp_made: int | None = Field(default=0, alias="xpMade")
    xp_missed: int | None = Field(default=0, alias="xpMissed")

    @field_validator("position")
    @classmethod
    def normalize_position(cls, value: str) -> str:
        position = value.strip().upper()
        if position not in POSITIONS:
            raise ValueError(f"position must be one of {', '.join(POSITIONS)}")
        return position


PLAYER_STAT_COLUMNS = tuple(
    name
    for name in IngestPlayerGameStats.model_fields
    if name not in ("player_name", "position", "nfl_team_abbr", "game_week")
)


class IngestDefenseGameStats(IngestModel):
    team_abbr: str = Field(alias="teamAbbr")
    game_week: int = Field(alias="gameWeek")
    points_allowed: int = Field(alias="pointsAllowed")
    yards_allowed: int = Field(alias="yardsAllowed")
    sacks: int | None = 0
    interceptions: int | None = 0
    fumble_recoveries: int | None = Field(default=0, alias="fumbleRecoveries")
    defense_tds: int | None = Field(default=0, alias="defenseTDs")
    safeties: int | None = 0
    blocked_kicks: int | None = Field(default=0, alias="blockedKicks")
    return_tds: int | None = Field(default=0, alias="returnTDs")


DEFENSE_STAT_COLUMNS = tuple(name for name in IngestDefenseGameStats.model_fields if name not in ("team_abbr", "game_week"))


class IngestGameEvent(IngestModel):
    game_week: int = Field(alias="gameWeek")
    event_type: str = Field(alias="eventType")
    player_name: str | None = Field(default=None, alias="playerName")
    nfl_team_abbr: str | None = Field(default=None, alias="nflTeamAbbr")
    yards: int | None = None
    description: str | None = None
    bonus_points: float | None = Field(default=None, alias="bonusPoints")


class IngestData(IngestModel):
    games: list[IngestGame] = Field(default_factory=list)
    player_game_stats: list[IngestPlayerGameStats] = Field(default_factory=list, alias="playerGameStats")
    defense_game_stats: list[IngestDefenseGameStats] = Field(default_factory=list, alias="defenseGameStats")
    game_events: list[IngestGameEvent] = Field(default_factory=list, alias="gameEvents")


@dataclass
class IngestSummary:
    games_created: int = 0
    games_updated: int = 0
    players_created: int = 0
    player_stats_upserted: int = 0
    defense_stats_upserted: int = 0
    events_created: int = 0
    rows_skipped: int = 0


def _find_player(session: Session, display_name: str, nfl_team: str) -> Player | None:
    return session.query(Player).filter_by(display_name=display_name, nfl_team=nfl_team).first()


def _upsert_game(session: Session, game: IngestGame, summary: IngestSummary) -> Game:
    row = (
        session.query(Game)
        .filter_by(week=game.week, home_team_abbr=game.home_team_abbr, away_team_abbr=game.away_team_abbr)
        .first()
    )
    if row is None:
        row = Game(week=game.week, home_team_abbr=game.home_team_abbr, away_team_abbr=game.away_team_abbr)
        session.add(row)
        summary.games_created += 1
    else:
        summary.games_updated += 1

    row.kickoff_time = as_utc(game.kickoff_time)
    row.status = game.status
    # Scores and lines keep their stored values when the batch omits them
    for name in ("home_score", "away_score", "spread_home", "total"):
        value = getattr(game, name)
        if value is not None:
            setattr(row, name, value)
    return row


def _upsert_player_stats(session: Session, stat: IngestPlayerGameStats, summary: IngestSummary) -> None:
    game = find_game(session, stat.nfl_team_abbr, stat.game_week)
    if game is None:
        logger.warning(f"No game found for week {stat.game_week} and team {stat.nfl_team_abbr}, skipping {stat.player_name}")
        summary.rows_skipped += 1
        return

    player = _find_player(session, stat.player_name, stat.nfl_team_abbr)
    if player is None:
        player = Player(display_name=stat.player_name, position=stat.position, nfl_team=stat.nfl_team_abbr)
        session.add(player)
        session.flush()
        summary.players_created += 1

    row = session.query(PlayerGameStats).filter_by(player_id=player.id, game_id=game.id).first()
    if row is None:
        row = PlayerGameStats(player_id=player.id, game_id=game.id)
        session.add(row)

    for name in PLAYER_STAT_COLUMNS:
        setattr(row, name, getattr(stat, name) or 0)
    row.raw_json = stat.model_dump_json(by_alias=True, exclude_none=True)
    summary.player_stats_upserted += 1


def _upsert_defense_stats(session: Session, stat: IngestDefenseGameStats, summary: IngestSummary) -> None:
    game = find_game(session, stat.team_abbr, stat.game_week)
    if game is None:
        logger.warning(f"No game found for week {stat.game_week} and team {stat.team_abbr}, skipping defense")
        summary.rows_skipped += 1
        return

    row = session.query(TeamDefenseGameStats).filter_by(defense_team_abbr=stat.team_abbr, game_id=game.id).first()
    if row is None:
        row = TeamDefenseGameStats(defense_team_abbr=stat.team_abbr, game_id=game.id)
        session.add(row)

    for name in DEFENSE_STAT_COLUMNS:
        setattr(row, name, getattr(stat, name) or 0)
    row.raw_json = stat.model_dump_json(by_alias=True, exclude_none=True)
    summary.defense_stats_upserted += 1


def _insert_event(session: Session, event: IngestGameEvent, summary: IngestSummary) -> None:
    player = None
    if event.player_name and event.nfl_team_abbr:
        player = _find_player(session, event.player_name, event.nfl_team_abbr)
        if player is None:
            logger.warning(f"Event player not found: {event.player_name} ({event.nfl_team_abbr})")

    game = find_game(session, event.nfl_team_abbr, event.game_week) if event.nfl_team_abbr else None
    if game is None and not event.bonus_points:
        logger.warning(f"No game found for {event.event_type} event in week {event.game_week}, skipping")
        summary.rows_skipped += 1
        return

    session.add(
        GameEvent(
            game_id=game.id if game else None,
            player_id=player.id if player else None,
            week=event.game_week,
            event_type=event.event_type,
            yards=event.yards,
            description=event.description,
            bonus_points=quantize_points(event.bonus_points) if event.bonus_points else None,
        )
    )
    summary.events_created += 1


def process_manual_ingest(session: Session, data: IngestData) -> IngestSummary:
    """Write one normalized batch: games first, then stats, then events.

    Stat rows whose team has no game that week are skipped with a warning.
    The caller commits; a database error leaves nothing half-written once
    the caller rolls back.
    """
    summary = IngestSummary()

    for game in data.games:
        _upsert_game(session, game, summary)
    # Stats below look games up by query
    session.flush()

    for stat in data.player_game_stats:
        _upsert_player_stats(session, stat, summary)
    for stat in data.defense_game_stats:
        _upsert_defense_stats(session, stat, summary)
    session.flush()

    for event in data.game_events:
        _insert_event(session, event, summary)
    session.flush()

    logger.info(
        f"Manual ingest: {summary.games_created} games created, {summary.games_updated} updated, "
        f"{summary.player_stats_upserted} player stats, {summary.defense_stats_upserted} defense stats, "
        f"{summary.events_created} events, {summary.rows_skipped} skipped"
    )
    return summary


def add_manual_bonus(
    session: Session,
    week: int,
    player_name: str,
    nfl_team: str,
    bonus_points: float,
    description: str | None = None,
) -> GameEvent:
    """Record a manual point adjustment (e.g. a short missed FG penalty).

    The event is tied to the player's game when one is scheduled and to the
    week alone otherwise.

    Raises:
        NotFoundError: no player with that name on that NFL team
    """
    player = _find_player(session, player_name, nfl_team)
    if player is None:
        raise NotFoundError(f"Player not found: {player_name} ({nfl_team})")

    game = find_game(session, nfl_team, week)
    event = GameEvent(
        game_id=game.id if game else None,
        player_id=player.id,
        week=week,
        event_type="bonus",
        bonus_points=quantize_points(bonus_points),
        description=description,
    )
    session.add(event)
    session.flush()

    logger.info(f"Manual bonus {event.bonus_points} for {player_name} ({nfl_team}) in week {week}")
    return event
