"""Database-backed scoring: rule-set storage, precondition checks, team scores.

This module loads everything the pure engine needs for a week (active rules,
lineups, box scores, events), runs the engine, and writes the results to the
score cache tables. Score rows are keyed by (entity, week) and overwritten on
every persist, so recompute-and-persist can run any number of times.

All functions work inside the caller's session; committing is the caller's
job (see `wildcard.database.connection.get_session`).
"""

import json
import logging
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database.models import Conference
from ..database.models import Game
from ..database.models import GameEvent
from ..database.models import LineupEntry
from ..database.models import Player
from ..database.models import PlayerGameStats
from ..database.models import PlayerScore
from ..database.models import RosterPlayer
from ..database.models import ScoringRuleSet
from ..database.models import Team
from ..database.models import TeamDefenseGameStats
from ..database.models import TeamScore
from ..exceptions import ConflictError
from ..exceptions import InvalidArgumentError
from ..exceptions import NotFoundError
from ..exceptions import PreconditionFailedError
from ..league import get_league_settings
from .engine import PlayerScoreResult
from .engine import StartedDefense
from .engine import TeamScoreResult
from .engine import award_fewest_yards_bonus
from .engine import calculate_defense_score
from .engine import calculate_player_score
from .rules import RULES_PARSE_ERROR
from .rules import ScoringRules
from .rules import normalize_rules_payload
from .rules import parse_rules

logger = logging.getLogger(__name__)


@dataclass
class ComputeCheck:
    can_compute: bool
    errors: list[str] = field(default_factory=list)


@dataclass
class PersistResult:
    success: bool
    error: str | None = None
    details: list[str] = field(default_factory=list)
    teams_updated: int = 0


@dataclass
class PersistedPlayerScore:
    """A cached PlayerScore row joined to its player, breakdown decoded."""

    roster_player_id: str
    player_id: str
    player_name: str
    position: str
    nfl_team: str
    is_starter: bool
    points: Any
    breakdown: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class TeamScoreDetail:
    team: Team
    week: int
    score: TeamScore | None = None
    player_scores: list[PersistedPlayerScore] = field(default_factory=list)


# ========== RULE SETS ==========


def upload_rule_set(session: Session, raw: dict[str, Any]) -> ScoringRuleSet:
    """Store an uploaded rule set in any of the accepted shapes.

    The rules payload is stored as-is (normalized, not validated). When the
    upload is active it becomes the league's only active rule set.

    Raises:
        InvalidArgumentError: the payload is not an object or has no rules
        ConflictError: a rule set with the same name already exists
    """
    normalized = normalize_rules_payload(raw)
    if not normalized.rules:
        raise InvalidArgumentError("Rules payload is empty")

    if session.query(ScoringRuleSet).filter_by(name=normalized.name).first():
        raise ConflictError(f"A rule set named '{normalized.name}' already exists")

    rule_set = ScoringRuleSet(
        name=normalized.name,
        rules_json=json.dumps(normalized.rules),
        is_active=False,
    )
    session.add(rule_set)
    session.flush()

    if normalized.active:
        activate_rule_set(session, rule_set.id)

    logger.info(f"Uploaded scoring rule set '{rule_set.name}' (active={rule_set.is_active})")
    return rule_set


def activate_rule_set(session: Session, rule_set_id: str) -> ScoringRuleSet:
    """Make one rule set active league-wide and deactivate the rest."""
    rule_set = session.get(ScoringRuleSet, rule_set_id)
    if rule_set is None:
        raise NotFoundError(f"Rule set {rule_set_id} not found")

    session.query(ScoringRuleSet).filter(ScoringRuleSet.id != rule_set.id).update(
        {ScoringRuleSet.is_active: False}, synchronize_session="fetch"
    )
    rule_set.is_active = True
    get_league_settings(session).active_scoring_rule_set_id = rule_set.id
    session.flush()
    return rule_set


def list_rule_sets(session: Session) -> list[ScoringRuleSet]:
    return session.query(ScoringRuleSet).order_by(ScoringRuleSet.created_at.desc(), ScoringRuleSet.name).all()


def get_active_rule_set(session: Session) -> ScoringRuleSet | None:
    """The rule set the league settings point at, else any flagged active."""
    league = get_league_settings(session)
    if league.active_scoring_rule_set_id:
        rule_set = session.get(ScoringRuleSet, league.active_scoring_rule_set_id)
        if rule_set is not None:
            return rule_set
    return session.query(ScoringRuleSet).filter_by(is_active=True).first()


def load_active_rules(session: Session) -> ScoringRules | None:
    """Parse the active rule set; None when none is configured.

    Raises:
        InvalidArgumentError: the stored rules could not be parsed
    """
    rule_set = get_active_rule_set(session)
    if rule_set is None:
        return None
    return parse_rules(rule_set.rules_json)


# ========== PRECONDITIONS ==========


def can_compute_scores(session: Session, week: int) -> ComputeCheck:
    """Check every prerequisite for computing a week and report all that are missing."""
    errors = []

    try:
        if load_active_rules(session) is None:
            errors.append("No scoring rules configured. Upload a rule set via /api/admin/rules first.")
    except InvalidArgumentError:
        errors.append(f"Active scoring {RULES_PARSE_ERROR}. Upload a corrected rule set.")

    if session.query(Team).count() == 0:
        errors.append("No teams exist. Create teams before computing scores.")

    if session.query(LineupEntry).filter_by(week=week).count() == 0:
        errors.append(f"No lineup entries for week {week}.")

    if session.query(Game).filter_by(week=week).count() == 0:
        errors.append(f"No games exist for week {week}. Ingest game data first.")

    player_stats = session.query(PlayerGameStats).join(Game).filter(Game.week == week).count()
    defense_stats = session.query(TeamDefenseGameStats).join(Game).filter(Game.week == week).count()
    if player_stats + defense_stats == 0:
        errors.append(f"No player stats exist for week {week}. Ingest stats first.")

    return ComputeCheck(can_compute=not errors, errors=errors)


# ========== COMPUTATION ==========


def compute_team_scores(session: Session, week: int) -> list[TeamScoreResult]:
    """Compute every team's score for a week without writing anything.

    Starters are entries with a slot (or the starter flag); all other roster
    entries count toward bench points. A roster entry with no box score scores
    zero with an empty breakdown.

    Raises:
        PreconditionFailedError: with every missing prerequisite in `details`
    """
    check = can_compute_scores(session, week)
    if not check.can_compute:
        raise PreconditionFailedError("Cannot compute scores", details=check.errors)

    rules = load_active_rules(session)
    games = session.query(Game).filter_by(week=week).all()

    player_stats = {
        row.player_id: row
        for row in session.query(PlayerGameStats).join(Game).filter(Game.week == week).order_by(PlayerGameStats.id)
    }
    defense_stats = {
        row.defense_team_abbr: row
        for row in session.query(TeamDefenseGameStats)
        .join(Game)
        .filter(Game.week == week)
        .order_by(TeamDefenseGameStats.id)
    }
    events_by_player: dict[str, list[GameEvent]] = {}
    for event in session.query(GameEvent).filter_by(week=week).order_by(GameEvent.created_at, GameEvent.id):
        if event.player_id:
            events_by_player.setdefault(event.player_id, []).append(event)

    lineup_rows = (
        session.query(LineupEntry, RosterPlayer, Player)
        .join(RosterPlayer, LineupEntry.roster_player_id == RosterPlayer.id)
        .join(Player, RosterPlayer.player_id == Player.id)
        .filter(LineupEntry.week == week)
        .order_by(Player.display_name, RosterPlayer.id)
        .all()
    )
    lineups_by_team: dict[str, list[tuple[LineupEntry, RosterPlayer, Player]]] = {}
    for entry, roster_player, player in lineup_rows:
        lineups_by_team.setdefault(roster_player.team_id, []).append((entry, roster_player, player))

    results = []
    started_defenses = []

    for team in session.query(Team).order_by(Team.name, Team.id).all():
        team_result = TeamScoreResult(team_id=team.id, team_name=team.name, week=week)

        for entry, roster_player, player in lineups_by_team.get(team.id, []):
            is_starter = entry.slot is not None or bool(entry.is_starter)
            score = PlayerScoreResult(
                roster_player_id=roster_player.id,
                player_id=player.id,
                player_name=player.display_name,
                position=player.position,
                is_starter=is_starter,
            )

            events = events_by_player.get(player.id, [])
            if player.position == "DEF":
                stats = defense_stats.get(player.nfl_team)
                if stats is not None or events:
                    outcome = calculate_defense_score(stats, rules, events)
                    score.points, score.breakdown = outcome.points, outcome.breakdown
                if stats is not None and is_starter:
                    started_defenses.append(StartedDefense(team.id, roster_player.id, stats.yards_allowed or 0))
            else:
                stats = player_stats.get(player.id)
                # Manual bonuses still count for a player without a box score
                if stats is not None or events:
                    outcome = calculate_player_score(
                        stats if stats is not None else {}, player.position, rules, events
                    )
                    score.points, score.breakdown = outcome.points, outcome.breakdown

            team_result.add_player(score)

        results.append(team_result)

    # Fewest yards allowed is only known once the whole slate is final
    bonus = rules.bonuses.defense_special_teams.least_total_yardage_allowed
    all_final = bool(games) and all(g.status == "final" for g in games)
    if bonus and started_defenses and all_final:
        award_fewest_yards_bonus(results, started_defenses, bonus)

    logger.debug(f"Computed week {week} scores for {len(results)} teams")
    return results


def persist_team_scores(session: Session, week: int) -> PersistResult:
    """Compute a week and upsert TeamScore/PlayerScore rows, replacing prior values.

    Precondition failures are reported in the result rather than raised;
    database errors propagate so the caller's transaction rolls back.
    """
    try:
        results = compute_team_scores(session, week)
    except PreconditionFailedError as e:
        logger.warning(f"Cannot persist week {week} scores: {e.details}")
        return PersistResult(success=False, error=e.message, details=e.details)

    for result in results:
        team_score = session.query(TeamScore).filter_by(team_id=result.team_id, week=week).first()
        if team_score is None:
            team_score = TeamScore(team_id=result.team_id, week=week)
            session.add(team_score)

        team_score.starter_points = result.starter_points
        team_score.bench_points = result.bench_points
        team_score.total_points = result.total_points
        team_score.breakdown_json = json.dumps([ps.to_dict() for ps in result.player_scores])

        for ps in result.player_scores:
            player_score = (
                session.query(PlayerScore).filter_by(roster_player_id=ps.roster_player_id, week=week).first()
            )
            if player_score is None:
                player_score = PlayerScore(roster_player_id=ps.roster_player_id, week=week)
                session.add(player_score)

            player_score.points = ps.points
            player_score.is_starter = ps.is_starter
            player_score.breakdown_json = json.dumps([item.to_dict() for item in ps.breakdown])

    session.flush()
    logger.info(f"Persisted week {week} scores for {len(results)} teams")
    return PersistResult(success=True, teams_updated=len(results))


def get_standings(session: Session, week: int, conference: str | None = None) -> list[TeamScore]:
    """Persisted team scores for a week, best first.

    Starter points decide the order; bench points break ties. With a
    conference name only that conference's teams are returned.

    Raises:
        NotFoundError: the conference does not exist
    """
    query = session.query(TeamScore).join(Team).filter(TeamScore.week == week)

    if conference is not None:
        row = session.query(Conference).filter(func.upper(Conference.name) == conference.upper()).first()
        if row is None:
            raise NotFoundError(f"Conference '{conference}' not found")
        query = query.filter(Team.conference_id == row.id)

    return query.order_by(TeamScore.starter_points.desc(), TeamScore.bench_points.desc(), Team.name).all()


def get_team_score_detail(session: Session, week: int, team_id: str) -> TeamScoreDetail:
    """A team's persisted score for a week with every player's breakdown.

    Starters come first, then higher scores. A team whose week has not been
    persisted yet has `score` None and no player rows.

    Raises:
        NotFoundError: the team does not exist
    """
    team = session.get(Team, team_id)
    if team is None:
        raise NotFoundError(f"Team {team_id} not found")

    detail = TeamScoreDetail(team=team, week=week)
    detail.score = session.query(TeamScore).filter_by(team_id=team_id, week=week).first()
    if detail.score is None:
        return detail

    rows = (
        session.query(PlayerScore, Player)
        .join(RosterPlayer, PlayerScore.roster_player_id == RosterPlayer.id)
        .join(Player, RosterPlayer.player_id == Player.id)
        .filter(RosterPlayer.team_id == team_id, PlayerScore.week == week)
        .order_by(PlayerScore.is_starter.desc(), PlayerScore.points.desc(), Player.display_name)
        .all()
    )
    for player_score, player in rows:
        detail.player_scores.append(
            PersistedPlayerScore(
                roster_player_id=player_score.roster_player_id,
                player_id=player.id,
                player_name=player.display_name,
                position=player.position,
                nfl_team=player.nfl_team,
                is_starter=bool(player_score.is_starter),
                points=player_score.points,
                breakdown=json.loads(player_score.breakdown_json or "[]"),
            )
        )
    return detail
