"""SQLAlchemy database models for the Wildcard fantasy league.

This file defines the complete database schema using the SQLAlchemy ORM.
Each class is a table; each instance is a row.

Model Categories:
1. League structure: Conferences, fantasy Teams, league settings
2. Rosters and lineups: Players, RosterPlayers, weekly LineupEntries
3. NFL data: Games, player box scores, team defense box scores, game events
4. Scoring: ScoringRuleSets (opaque JSON), cached TeamScores and PlayerScores

Design Patterns:
- String UUID primary keys, generated client-side so ingest can reference
  rows before they are flushed
- Natural-key UniqueConstraints backing every upsert (stats per entity per
  game, lineup entry per roster player per week, score per entity per week)
- Numeric(10, 2) for fantasy points so cached totals are exact to the cent
- Score tables are a cache: recomputed from stats + rules + lineups and safe
  to overwrite at any time
"""

import uuid

from sqlalchemy import Boolean
from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import ForeignKey
from sqlalchemy import Index
from sqlalchemy import Integer
from sqlalchemy import Numeric
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import UniqueConstraint
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

Base = declarative_base()

POSITIONS = ("QB", "RB", "WR", "TE", "K", "DEF")
GAME_STATUSES = ("scheduled", "in_progress", "final")
DEFAULT_SETTINGS_ID = "default"


def generate_id() -> str:
    """Primary key factory shared by every table."""
    return str(uuid.uuid4())


# ========== LEAGUE STRUCTURE ==========


class Conference(Base):
    """Conference grouping for fantasy teams (e.g. AFC, NFC)."""

    __tablename__ = "conferences"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(50), unique=True, nullable=False)

    teams = relationship("Team", back_populates="conference")

    created_at = Column(DateTime, default=func.now())


class Team(Base):
    """Fantasy team owned by one league participant.

    A team's roster is the set of RosterPlayer rows pointing at it. Lineups are
    tracked per week through LineupEntry rows, and weekly results are cached
    in TeamScore.
    """

    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), unique=True, nullable=False)
    conference_id = Column(String(36), ForeignKey("conferences.id"), nullable=True, index=True)

    conference = relationship("Conference", back_populates="teams")
    roster = relationship("RosterPlayer", back_populates="team")

    created_at = Column(DateTime, default=func.now())


class Player(Base):
    """Real NFL player (or team defense, position "DEF").

    Players are global: the same real player can sit on several fantasy rosters.
    `nfl_team` is the abbreviation used to look up the player's game each week
    ("KC", "BUF"); placeholder rows use a marker such as "Multi" that the lock
    policy never locks.
    """

    __tablename__ = "players"

    id = Column(String(36), primary_key=True, default=generate_id)
    display_name = Column(String(100), nullable=False, index=True)  # "Patrick Mahomes", "Chiefs D/ST"
    position = Column(String(5), nullable=False, index=True)  # QB, RB, WR, TE, K, DEF
    nfl_team = Column(String(10), nullable=False, index=True)  # "KC", "BUF", "Multi"

    stats = relationship("PlayerGameStats", back_populates="player")

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint("display_name", "position", "nfl_team"),
        Index("idx_player_name_team", "display_name", "nfl_team"),
    )


class RosterPlayer(Base):
    """Join row linking a fantasy Team to a Player.

    Created at roster assembly time and never mutated.
    """

    __tablename__ = "roster_players"

    id = Column(String(36), primary_key=True, default=generate_id)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False, index=True)
    player_id = Column(String(36), ForeignKey("players.id"), nullable=False, index=True)

    team = relationship("Team", back_populates="roster")
    player = relationship("Player")
    lineup_entries = relationship("LineupEntry", back_populates="roster_player")

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (UniqueConstraint("team_id", "player_id"),)


class LineupEntry(Base):
    """Weekly slot assignment for one roster player.

    `slot` is one of QB, RB, WRTE, FLEX1, FLEX2, FLEX3, K, DEF, or NULL for the
    bench. `is_starter` mirrors `slot IS NOT NULL`.

    `team_id` is copied from the roster player so the database itself can
    enforce one occupant per (team, week, slot). NULL slots never collide in a
    unique constraint, so any number of players can sit on the bench.
    """

    __tablename__ = "lineup_entries"

    id = Column(String(36), primary_key=True, default=generate_id)
    roster_player_id = Column(String(36), ForeignKey("roster_players.id"), nullable=False, index=True)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False, index=True)
    week = Column(Integer, nullable=False, index=True)
    slot = Column(String(10), nullable=True)
    is_starter = Column(Boolean, nullable=False, default=False)

    roster_player = relationship("RosterPlayer", back_populates="lineup_entries")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("roster_player_id", "week"),
        UniqueConstraint("team_id", "week", "slot", name="uq_lineup_team_week_slot"),
        Index("idx_lineup_team_week", "team_id", "week"),
    )


class LeagueSettings(Base):
    """Singleton row ("default") with the league's mutable season state."""

    __tablename__ = "league_settings"

    id = Column(String(36), primary_key=True, default=DEFAULT_SETTINGS_ID)
    current_week = Column(Integer, nullable=False, default=1)
    lock_time = Column(DateTime(timezone=True), nullable=True)  # League-wide lineup lock (UTC)
    active_scoring_rule_set_id = Column(String(36), ForeignKey("scoring_rule_sets.id"), nullable=True)

    active_rule_set = relationship("ScoringRuleSet")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


# ========== NFL DATA ==========


class Game(Base):
    """Real-world NFL game.

    Lineup locks key off `kickoff_time` and `status`; the "fewest yards
    allowed" defense bonus waits until every game in the week is final.
    """

    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=generate_id)
    week = Column(Integer, nullable=False, index=True)
    home_team_abbr = Column(String(10), nullable=False, index=True)
    away_team_abbr = Column(String(10), nullable=False, index=True)
    kickoff_time = Column(DateTime(timezone=True), nullable=False)  # Stored as UTC
    status = Column(String(20), nullable=False, default="scheduled")  # scheduled, in_progress, final

    # Scoreboard and betting context, shown in lineup views
    home_score = Column(Integer)
    away_score = Column(Integer)
    spread_home = Column(Numeric(5, 1))
    total = Column(Numeric(5, 1))

    player_stats = relationship("PlayerGameStats", back_populates="game")
    defense_stats = relationship("TeamDefenseGameStats", back_populates="game")

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("week", "home_team_abbr", "away_team_abbr"),
        Index("idx_game_week_home", "week", "home_team_abbr"),
        Index("idx_game_week_away", "week", "away_team_abbr"),
    )


class PlayerGameStats(Base):
    """Player box score for one game.

    One row per player per game, upserted by ingest and read-only to the
    scoring engine.
    """

    __tablename__ = "player_game_stats"

    id = Column(String(36), primary_key=True, default=generate_id)
    player_id = Column(String(36), ForeignKey("players.id"), nullable=False, index=True)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)

    player = relationship("Player", back_populates="stats")
    game = relationship("Game", back_populates="player_stats")

    # Passing
    pass_yards = Column(Integer, default=0)
    pass_tds = Column(Integer, default=0)
    pass_interceptions = Column(Integer, default=0)
    pass_2pt_conversions = Column(Integer, default=0)
    pass_attempts = Column(Integer, default=0)
    pass_completions = Column(Integer, default=0)

    # Rushing
    rush_yards = Column(Integer, default=0)
    rush_tds = Column(Integer, default=0)
    rush_2pt_conversions = Column(Integer, default=0)
    rush_attempts = Column(Integer, default=0)

    # Receiving
    receptions = Column(Integer, default=0)
    rec_yards = Column(Integer, default=0)
    rec_tds = Column(Integer, default=0)
    rec_2pt_conversions = Column(Integer, default=0)

    # Turnovers
    fumbles_lost = Column(Integer, default=0)

    # Kicking - made field goals are bucketed by distance, misses are not
    fg_made_0_39 = Column(Integer, default=0)
    fg_made_40_49 = Column(Integer, default=0)
    fg_made_50_54 = Column(Integer, default=0)
    fg_made_55_plus = Column(Integer, default=0)
    fg_missed = Column(Integer, default=0)
    fg_long = Column(Integer, default=0)
    xp_made = Column(Integer, default=0)
    xp_missed = Column(Integer, default=0)

    raw_json = Column(Text)  # Original ingest record, for auditing

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("player_id", "game_id"),)


class TeamDefenseGameStats(Base):
    """Team defense/special teams box score for one game."""

    __tablename__ = "team_defense_game_stats"

    id = Column(String(36), primary_key=True, default=generate_id)
    defense_team_abbr = Column(String(10), nullable=False, index=True)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)

    game = relationship("Game", back_populates="defense_stats")

    points_allowed = Column(Integer, default=0)
    yards_allowed = Column(Integer, default=0)
    sacks = Column(Integer, default=0)
    interceptions = Column(Integer, default=0)
    fumble_recoveries = Column(Integer, default=0)
    defense_tds = Column(Integer, default=0)
    safeties = Column(Integer, default=0)
    blocked_kicks = Column(Integer, default=0)
    return_tds = Column(Integer, default=0)

    raw_json = Column(Text)

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("defense_team_abbr", "game_id"),)


class GameEvent(Base):
    """Bonus-trigger record attached to a game.

    Event types used by the scoring engine:
    - passing_td / rushing_td / receiving_td with `yards` (50+ yard bonuses)
    - bonus: manual adjustment, `bonus_points` added verbatim

    Manual bonuses can exist without a game (`game_id` NULL) when an operator
    enters an adjustment for a week whose schedule was never ingested, which
    is why the week is stored on the event itself.
    """

    __tablename__ = "game_events"

    id = Column(String(36), primary_key=True, default=generate_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=True, index=True)
    player_id = Column(String(36), ForeignKey("players.id"), nullable=True, index=True)
    week = Column(Integer, nullable=False, index=True)  # Copied from the game when there is one
    event_type = Column(String(30), nullable=False)
    yards = Column(Integer)
    description = Column(String(500))
    bonus_points = Column(Numeric(10, 2))

    game = relationship("Game")
    player = relationship("Player")

    created_at = Column(DateTime, default=func.now())


# ========== SCORING ==========


class ScoringRuleSet(Base):
    """Uploaded scoring configuration.

    `rules_json` is stored exactly as normalized at upload time, with no
    schema validation. Exactly one rule set is active league-wide.
    """

    __tablename__ = "scoring_rule_sets"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), unique=True, nullable=False)
    rules_json = Column(Text, nullable=False)
    is_active = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=func.now())


class TeamScore(Base):
    """Cached weekly team total. Starter points decide standings; bench breaks ties."""

    __tablename__ = "team_scores"

    id = Column(String(36), primary_key=True, default=generate_id)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False, index=True)
    week = Column(Integer, nullable=False, index=True)
    starter_points = Column(Numeric(10, 2), nullable=False, default=0)
    bench_points = Column(Numeric(10, 2), nullable=False, default=0)
    total_points = Column(Numeric(10, 2), nullable=False, default=0)
    breakdown_json = Column(Text)  # Per-player results as computed

    team = relationship("Team")

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("team_id", "week"),)


class PlayerScore(Base):
    """Cached weekly score for one roster player."""

    __tablename__ = "player_scores"

    id = Column(String(36), primary_key=True, default=generate_id)
    roster_player_id = Column(String(36), ForeignKey("roster_players.id"), nullable=False, index=True)
    week = Column(Integer, nullable=False, index=True)
    points = Column(Numeric(10, 2), nullable=False, default=0)
    is_starter = Column(Boolean, nullable=False, default=False)
    breakdown_json = Column(Text)

    roster_player = relationship("RosterPlayer")

    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    __table_args__ = (UniqueConstraint("roster_player_id", "week"),)
