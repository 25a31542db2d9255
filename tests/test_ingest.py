"""Tests for manual ingest of games, box scores and events."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from wildcard.database.models import Game
from wildcard.database.models import GameEvent
from wildcard.database.models import Player
from wildcard.database.models import PlayerGameStats
from wildcard.database.models import TeamDefenseGameStats
from wildcard.exceptions import NotFoundError
from wildcard.ingest.manual import IngestData
from wildcard.ingest.manual import add_manual_bonus
from wildcard.ingest.manual import process_manual_ingest

BATCH = {
    "games": [
        {
            "week": 1,
            "homeTeamAbbr": "KC",
            "awayTeamAbbr": "BAL",
            "kickoffTime": "2025-09-05T00:20:00Z",
            "status": "FINAL",
            "homeScore": 27,
            "awayScore": 20,
        }
    ],
    "playerGameStats": [
        {
            "playerName": "Patrick Mahomes",
            "position": "qb",
            "nflTeamAbbr": "KC",
            "gameWeek": 1,
            "passYards": 291,
            "passTDs": 3,
            "passCompletions": 20,
            "passAttempts": 28,
        },
        {"playerName": "Harrison Butker", "position": "K", "nflTeamAbbr": "KC", "gameWeek": 1, "fgMade0_39": 2},
        {"playerName": "Josh Allen", "position": "QB", "nflTeamAbbr": "BUF", "gameWeek": 1, "passYards": 250},
    ],
    "defenseGameStats": [{"teamAbbr": "BAL", "gameWeek": 1, "pointsAllowed": 27, "yardsAllowed": 389, "sacks": 2}],
    "gameEvents": [
        {
            "gameWeek": 1,
            "eventType": "passing_td",
            "playerName": "Patrick Mahomes",
            "nflTeamAbbr": "KC",
            "yards": 62,
        },
        {"gameWeek": 1, "eventType": "passing_td", "nflTeamAbbr": "BUF", "yards": 70},
    ],
}


def test_ingest_batch(session):
    summary = process_manual_ingest(session, IngestData.model_validate(BATCH))

    assert summary.games_created == 1
    assert summary.players_created == 2
    assert summary.player_stats_upserted == 2
    assert summary.defense_stats_upserted == 1
    assert summary.events_created == 1
    assert summary.rows_skipped == 2  # Josh Allen's stats and event: BUF has no game

    game = session.query(Game).one()
    assert game.status == "final"
    assert game.home_score == 27

    mahomes = session.query(Player).filter_by(display_name="Patrick Mahomes").one()
    assert mahomes.position == "QB"
    stats = session.query(PlayerGameStats).filter_by(player_id=mahomes.id).one()
    assert stats.pass_tds == 3
    assert stats.rush_yards == 0
    assert '"passTDs":3' in stats.raw_json

    kicker = session.query(Player).filter_by(display_name="Harrison Butker").one()
    assert session.query(PlayerGameStats).filter_by(player_id=kicker.id).one().fg_made_0_39 == 2

    event = session.query(GameEvent).one()
    assert event.week == 1
    assert event.game_id == game.id
    assert event.player_id == mahomes.id


def test_ingest_rerun_updates_in_place(session):
    process_manual_ingest(session, IngestData.model_validate(BATCH))

    corrected = {
        "games": [dict(BATCH["games"][0], homeScore=30)],
        "playerGameStats": [dict(BATCH["playerGameStats"][0], passTDs=4)],
    }
    summary = process_manual_ingest(session, IngestData.model_validate(corrected))

    assert summary.games_created == 0
    assert summary.games_updated == 1
    assert summary.players_created == 0
    assert session.query(Game).one().home_score == 30
    assert session.query(PlayerGameStats).count() == 2
    mahomes = session.query(Player).filter_by(display_name="Patrick Mahomes").one()
    assert session.query(PlayerGameStats).filter_by(player_id=mahomes.id).one().pass_tds == 4


def test_ingest_defense_stats(session):
    process_manual_ingest(session, IngestData.model_validate(BATCH))

    defense = session.query(TeamDefenseGameStats).one()

    assert defense.defense_team_abbr == "BAL"
    assert defense.yards_allowed == 389
    assert defense.interceptions == 0


def test_ingest_rejects_unknown_status():
    bad = {"games": [dict(BATCH["games"][0], status="postponed")]}

    with pytest.raises(ValidationError):
        IngestData.model_validate(bad)


def test_ingest_rejects_unknown_position():
    bad = {"playerGameStats": [dict(BATCH["playerGameStats"][0], position="LB")]}

    with pytest.raises(ValidationError):
        IngestData.model_validate(bad)


def test_manual_bonus_with_game(session):
    process_manual_ingest(session, IngestData.model_validate(BATCH))

    event = add_manual_bonus(session, 1, "Harrison Butker", "KC", -2, description="Missed FG from 28")

    assert event.event_type == "bonus"
    assert event.bonus_points == Decimal("-2.00")
    assert event.game_id is not None


def test_manual_bonus_without_game(session, league):
    league.player("Utility Back", "RB", "Multi")

    event = add_manual_bonus(session, 4, "Utility Back", "Multi", 1.25)

    assert event.game_id is None
    assert event.week == 4


def test_manual_bonus_unknown_player(session):
    with pytest.raises(NotFoundError):
        add_manual_bonus(session, 1, "Nobody", "KC", 3)
