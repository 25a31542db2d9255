"""CLI tests with typer's CliRunner against the in-memory test database."""

import json
from contextlib import contextmanager

import pytest
from typer.testing import CliRunner

import wildcard.cli as cli
from wildcard.cli import rules as cli_rules
from wildcard.cli import scores as cli_scores
from wildcard.database.init_db import reset_database
from wildcard.database.models import DEFAULT_SETTINGS_ID
from wildcard.database.models import LeagueSettings
from wildcard.database.models import ScoringRuleSet
from wildcard.database.models import TeamScore
from wildcard.scoring.service import upload_rule_set

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_session(monkeypatch, session_factory):
    """Point every command at the test engine and keep logging configuration untouched."""

    @contextmanager
    def session_context():
        session = session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    for module in (cli, cli_rules, cli_scores):
        monkeypatch.setattr(module, "get_session_context", session_context)
    monkeypatch.setattr(cli, "configure_logging", lambda level=None: None)


def test_rules_upload_and_list(tmp_path, rules_payload):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"name": "CLI Rules", **rules_payload}))

    result = runner.invoke(cli.main, ["rules", "upload", str(path)])

    assert result.exit_code == 0, result.output
    assert "Uploaded rule set 'CLI Rules' (active)" in result.output

    listed = runner.invoke(cli.main, ["rules", "list"])
    assert listed.exit_code == 0
    assert "CLI Rules" in listed.output


def test_rules_upload_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{nope")

    result = runner.invoke(cli.main, ["rules", "upload", str(path)])

    assert result.exit_code == 1
    assert "JSON" in result.output


def test_scores_check_reports_missing():
    result = runner.invoke(cli.main, ["scores", "check", "2"])

    assert result.exit_code == 1
    assert "No teams exist" in result.output


def test_lock_command():
    result = runner.invoke(cli.main, ["lock", "KC", "2"])

    assert result.exit_code == 0
    assert "unlocked" in result.output


def test_ingest_and_compute(tmp_path, session, league, rules_payload):
    team = league.team("Gridiron Gang")
    henry = league.roster(team, "Derrick Henry", "RB", "BAL")
    league.lineup(henry, 1, "RB")
    league.rule_set(rules_payload)
    session.commit()

    batch = {
        "games": [{"week": 1, "homeTeamAbbr": "KC", "awayTeamAbbr": "BAL", "kickoffTime": "2025-09-05T00:20:00Z"}],
        "playerGameStats": [
            {"playerName": "Derrick Henry", "position": "RB", "nflTeamAbbr": "BAL", "gameWeek": 1, "rushYards": 160}
        ],
    }
    path = tmp_path / "week1.json"
    path.write_text(json.dumps(batch))

    ingested = runner.invoke(cli.main, ["ingest", str(path)])
    assert ingested.exit_code == 0, ingested.output
    assert "Games: 1 created" in ingested.output

    computed = runner.invoke(cli.main, ["scores", "compute", "1", "--persist"])
    assert computed.exit_code == 0, computed.output
    assert "Persisted scores for 1 teams" in computed.output

    session.expire_all()
    assert float(session.query(TeamScore).one().starter_points) == 10.0


def test_reset_db_aborts_without_confirmation(monkeypatch):
    calls = []
    monkeypatch.setattr(cli, "reset_database", lambda: calls.append("reset"))

    result = runner.invoke(cli.main, ["reset-db"], input="n\n")

    assert result.exit_code == 1
    assert calls == []


def test_reset_db(monkeypatch, engine, session_factory, rules_payload):
    setup = session_factory()
    upload_rule_set(setup, {"name": "Old Rules", **rules_payload})
    setup.commit()
    setup.close()
    monkeypatch.setattr(cli, "reset_database", lambda: reset_database(engine))

    result = runner.invoke(cli.main, ["reset-db", "--yes"])

    assert result.exit_code == 0, result.output
    assert "Database reset complete" in result.output
    check = session_factory()
    assert check.query(ScoringRuleSet).count() == 0
    assert check.get(LeagueSettings, DEFAULT_SETTINGS_ID) is not None
    check.close()
