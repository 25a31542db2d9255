"""Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database. StaticPool keeps a single
connection so the schema created here is the one every session (including
the API's per-request sessions) sees.
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wildcard.database.models import (
    Base,
    Conference,
    Game,
    LineupEntry,
    Player,
    PlayerGameStats,
    RosterPlayer,
    Team,
    TeamDefenseGameStats,
)
from wildcard.scoring.rules import parse_rules, scoring_rules_schema
from wildcard.scoring.service import upload_rule_set


class LeagueFactory:
    """Small builders for league rows. Each call flushes so ids are populated."""

    def __init__(self, session):
        self.session = session

    def _add(self, row):
        self.session.add(row)
        self.session.flush()
        return row

    def conference(self, name="AFC"):
        existing = self.session.query(Conference).filter_by(name=name).first()
        return existing or self._add(Conference(name=name))

    def team(self, name="Gridiron Gang", conference="AFC"):
        return self._add(Team(name=name, conference_id=self.conference(conference).id))

    def player(self, name, position, nfl_team):
        existing = self.session.query(Player).filter_by(display_name=name, nfl_team=nfl_team).first()
        return existing or self._add(Player(display_name=name, position=position, nfl_team=nfl_team))

    def roster(self, team, name, position, nfl_team):
        player = self.player(name, position, nfl_team)
        return self._add(RosterPlayer(team_id=team.id, player_id=player.id))

    def lineup(self, roster_player, week, slot=None):
        return self._add(
            LineupEntry(
                roster_player_id=roster_player.id,
                team_id=roster_player.team_id,
                week=week,
                slot=slot,
                is_starter=slot is not None,
            )
        )

    def game(self, week, home, away, kickoff=None, status="scheduled", **fields):
        kickoff = kickoff or datetime.now(UTC) + timedelta(days=3)
        return self._add(
            Game(week=week, home_team_abbr=home, away_team_abbr=away, kickoff_time=kickoff, status=status, **fields)
        )

    def player_stats(self, player, game, **stats):
        return self._add(PlayerGameStats(player_id=player.id, game_id=game.id, **stats))

    def defense_stats(self, team_abbr, game, **stats):
        return self._add(TeamDefenseGameStats(defense_team_abbr=team_abbr, game_id=game.id, **stats))

    def rule_set(self, rules=None, name="Test Rules", active=True):
        rules = rules if rules is not None else example_rules_payload()
        return upload_rule_set(self.session, {"name": name, "active": active, "rules": rules})


def example_rules_payload():
    """The documented example rule set, without its metadata keys."""
    example = dict(scoring_rules_schema()["example"])
    example.pop("name")
    return example


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def league(session):
    return LeagueFactory(session)


@pytest.fixture
def example_rules():
    return parse_rules(example_rules_payload())


@pytest.fixture
def rules_payload():
    return example_rules_payload()
