"""Pure scoring engine: box score + rules + events -> points and breakdown.

Nothing in this module touches the database. Stats may be ORM rows, plain
objects or dicts; any counter that is missing or NULL counts as zero.

Scoring model:
- NFL face value for touchdowns (6), safeties (2), extra points (1)
- Yardage milestone tables award the cumulative bonus of the HIGHEST
  threshold reached, never a sum of tiers
- A combined rush+receive bonus for players who reached neither individual
  milestone
- Flat per-occurrence rates for everything else, taken from the rule set

Points are `Decimal` values quantized to cents (ROUND_HALF_UP), so a team's
starter and bench totals add up to its total exactly and recomputation gives
identical output.
"""

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from decimal import ROUND_HALF_UP
from decimal import Decimal
from typing import Any

from .rules import CombinedMilestone
from .rules import ScoringRules
from .rules import YardageMilestone

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0")

TD_POINTS = 6
SAFETY_POINTS = 2
BLOCKED_KICK_POINTS = 2
XP_POINTS = 1
DEFAULT_PASS_TD_POINTS = 4
DEFAULT_FG_POINTS = 3
BIG_PLAY_YARDS = 50


def quantize_points(value: Any) -> Decimal:
    """Round a point value to two decimal places."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def to_decimal(value: Any) -> Decimal:
    """Convert a rule or stat value to Decimal; None becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() keeps 0.1 as 0.1 instead of its binary float expansion
    return Decimal(str(value))


def stat_value(stats: Any, name: str) -> Any:
    """Read a counter from an ORM row, object or mapping, defaulting to 0."""
    if isinstance(stats, Mapping):
        value = stats.get(name)
    else:
        value = getattr(stats, name, None)
    return value or 0


# ========== RESULT TYPES ==========


@dataclass
class BreakdownItem:
    """One labeled contribution to a score."""

    category: str  # "Passing", "Rushing", "Kicking", "Defense", "Bonus", ...
    stat: str  # "TDs", "Yardage Bonus", "FG 55+", ...
    value: Any  # The stat value the points were computed from
    points: Decimal

    def to_dict(self) -> dict[str, Any]:
        value = float(self.value) if isinstance(self.value, Decimal) else self.value
        return {"category": self.category, "stat": self.stat, "value": value, "points": float(self.points)}


@dataclass
class ScoreResult:
    points: Decimal = ZERO
    breakdown: list[BreakdownItem] = field(default_factory=list)

    def add(self, category: str, stat: str, value: Any, points: Any) -> None:
        """Append a line item; zero-point items are dropped."""
        points = to_decimal(points)
        if points == 0:
            return
        self.points += points
        self.breakdown.append(BreakdownItem(category, stat, value, points))


@dataclass
class PlayerScoreResult:
    """Score of one roster entry for a week."""

    roster_player_id: str
    player_id: str
    player_name: str
    position: str
    is_starter: bool
    points: Decimal = ZERO
    breakdown: list[BreakdownItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roster_player_id": self.roster_player_id,
            "player_id": self.player_id,
            "player_name": self.player_name,
            "position": self.position,
            "is_starter": self.is_starter,
            "points": float(self.points),
            "breakdown": [item.to_dict() for item in self.breakdown],
        }


@dataclass
class TeamScoreResult:
    """Weekly team total split into starters and bench."""

    team_id: str
    team_name: str
    week: int
    starter_points: Decimal = ZERO
    bench_points: Decimal = ZERO
    total_points: Decimal = ZERO
    player_scores: list[PlayerScoreResult] = field(default_factory=list)

    def add_player(self, score: PlayerScoreResult) -> None:
        self.player_scores.append(score)
        if score.is_starter:
            self.starter_points += score.points
        else:
            self.bench_points += score.points
        self.total_points = self.starter_points + self.bench_points

    def to_dict(self) -> dict[str, Any]:
        return {
            "team_id": self.team_id,
            "team_name": self.team_name,
            "week": self.week,
            "starter_points": float(self.starter_points),
            "bench_points": float(self.bench_points),
            "total_points": float(self.total_points),
            "player_scores": [ps.to_dict() for ps in self.player_scores],
        }


@dataclass
class StartedDefense:
    """A starting defense and its yards allowed, for the fewest-yards bonus."""

    team_id: str
    roster_player_id: str
    yards_allowed: int


# ========== MILESTONES ==========


def milestone_bonus(value: Any, milestones: Iterable[YardageMilestone] | None) -> Decimal:
    """Cumulative bonus of the highest threshold reached, or zero.

    Exactly at a threshold counts as reaching it. Tiers are never summed:
    150 yards against {75: 3, 100: 7, 150: 10} is worth 10.
    """
    reachable = [m for m in (milestones or []) if m.yards is not None]
    for milestone in sorted(reachable, key=lambda m: m.yards, reverse=True):
        if value >= milestone.yards:
            return to_decimal(milestone.total_bonus)
    return ZERO


def _combined_eligible(milestone: CombinedMilestone, rush_yards: int, rec_yards: int) -> bool:
    if milestone.requires_neither_rush75_nor_receive75:
        return rush_yards < 75 and rec_yards < 75
    if milestone.requires_neither_rush100_nor_receive100:
        return rush_yards < 100 and rec_yards < 100
    return False


def _combined_bonus(result: ScoreResult, rules: ScoringRules, rush_yards: int, rec_yards: int) -> None:
    """Award at most one combined rush+receive milestone.

    Milestones are checked in configured order and the first eligible one that
    is reached wins, so an out-of-order table can award a lower tier.
    """
    combined = rules.bonuses.combined_rush_receive
    if not combined.only_if_neither_category_reached or not combined.milestones:
        return

    thresholds = [m.yards for m in combined.milestones if m.yards is not None]
    if thresholds != sorted(thresholds):
        logger.warning(f"Combined rush+receive milestones are not ascending: {thresholds}")

    total = rush_yards + rec_yards
    for milestone in combined.milestones:
        if milestone.yards is None:
            continue
        if _combined_eligible(milestone, rush_yards, rec_yards) and total >= milestone.yards:
            result.add("Combined", "Rush+Rec Bonus", total, milestone.bonus)
            break


# ========== PLAYER SCORING ==========


def calculate_player_score(
    stats: Any,
    position: str,
    rules: ScoringRules,
    events: Iterable[Any] = (),
) -> ScoreResult:
    """Score one offensive player or kicker for one game.

    Args:
        stats: Box score (PlayerGameStats row or equivalent)
        position: QB, RB, WR, TE or K
        rules: Parsed scoring rules
        events: Game events; when both the stats and an event carry a
            player_id, only matching events count

    Returns:
        ScoreResult with quantized points and the ordered breakdown
    """
    result = ScoreResult()
    bonuses = rules.bonuses
    passing = bonuses.passing
    rushing = bonuses.rushing
    receiving = bonuses.receiving
    two_point = bonuses.two_point_conversions

    # ===== PASSING =====
    pass_tds = stat_value(stats, "pass_tds")
    pass_yards = stat_value(stats, "pass_yards")
    if pass_tds > 0:
        is_non_qb = position != "QB"
        if is_non_qb and passing.non_qb_pass_td_points:
            td_rate = passing.non_qb_pass_td_points
        else:
            td_rate = DEFAULT_PASS_TD_POINTS if passing.td_points is None else passing.td_points
        result.add("Passing", "Non-QB Pass TD" if is_non_qb else "TDs", pass_tds, pass_tds * to_decimal(td_rate))

    if pass_yards > 0:
        bonus = milestone_bonus(pass_yards, passing.yardage_milestones)
        if bonus > 0:
            result.add("Passing", "Yardage Bonus", pass_yards, bonus)

    interceptions = stat_value(stats, "pass_interceptions")
    if interceptions > 0:
        result.add("Passing", "Interceptions", interceptions, interceptions * to_decimal(passing.interception))

    pass_2pt = stat_value(stats, "pass_2pt_conversions")
    if pass_2pt > 0:
        result.add("Passing", "2PT Pass", pass_2pt, pass_2pt * to_decimal(two_point.player_passing))

    # ===== RUSHING =====
    rush_tds = stat_value(stats, "rush_tds")
    rush_yards = stat_value(stats, "rush_yards")
    if rush_tds > 0:
        result.add("Rushing", "TDs", rush_tds, rush_tds * TD_POINTS)
        if position == "QB":
            result.add("Rushing", "QB Rush TD Bonus", rush_tds, rush_tds * to_decimal(passing.qb_rushing_td_bonus))

    bonus = milestone_bonus(rush_yards, rushing.yardage_milestones)
    if bonus > 0:
        result.add("Rushing", "Yardage Bonus", rush_yards, bonus)

    rush_2pt = stat_value(stats, "rush_2pt_conversions")
    if rush_2pt > 0:
        result.add("Rushing", "2PT Rush", rush_2pt, rush_2pt * to_decimal(two_point.player_scoring))

    # ===== RECEIVING =====
    rec_tds = stat_value(stats, "rec_tds")
    rec_yards = stat_value(stats, "rec_yards")
    if rec_tds > 0:
        result.add("Receiving", "TDs", rec_tds, rec_tds * TD_POINTS)

    bonus = milestone_bonus(rec_yards, receiving.yardage_milestones)
    if bonus > 0:
        result.add("Receiving", "Yardage Bonus", rec_yards, bonus)

    rec_2pt = stat_value(stats, "rec_2pt_conversions")
    if rec_2pt > 0:
        result.add("Receiving", "2PT Rec", rec_2pt, rec_2pt * to_decimal(two_point.player_scoring))

    # ===== COMBINED RUSH/RECEIVE =====
    _combined_bonus(result, rules, rush_yards, rec_yards)

    # ===== TURNOVERS =====
    fumbles = stat_value(stats, "fumbles_lost")
    if fumbles > 0:
        result.add("Turnover", "Fumbles Lost", fumbles, fumbles * to_decimal(bonuses.turnovers.fumble))

    # ===== KICKING =====
    if position == "K":
        _kicking(result, stats, rules)

    # ===== EVENTS =====
    _event_bonuses(result, stats, rules, events)

    result.points = quantize_points(result.points)
    return result


def _kicking(result: ScoreResult, stats: Any, rules: ScoringRules) -> None:
    kicking = rules.bonuses.kicking

    under_53 = stat_value(stats, "fg_made_0_39") + stat_value(stats, "fg_made_40_49")
    if under_53 > 0:
        result.add("Kicking", "FG <53", under_53, under_53 * to_decimal(kicking.fg_under53))

    fg_50_54 = stat_value(stats, "fg_made_50_54")
    if fg_50_54 > 0:
        result.add("Kicking", "FG 53-54", fg_50_54, fg_50_54 * to_decimal(kicking.fg53or54))

    fg_55 = stat_value(stats, "fg_made_55_plus")
    if fg_55 > 0:
        # Base FG value plus the 55+ bonus
        per_kick = to_decimal(kicking.fg_under53 or DEFAULT_FG_POINTS) + to_decimal(kicking.fg55_plus or 0)
        result.add("Kicking", "FG 55+", fg_55, fg_55 * per_kick)

    xp_made = stat_value(stats, "xp_made")
    if xp_made > 0:
        result.add("Kicking", "XP Made", xp_made, xp_made * XP_POINTS)

    xp_missed = stat_value(stats, "xp_missed")
    if xp_missed > 0:
        result.add("Kicking", "XP Missed", xp_missed, xp_missed * to_decimal(kicking.missed_xp))

    # Missed FGs carry no automatic penalty: box scores have no miss distance.
    # Short-miss penalties are entered as manual bonus events.


def _event_bonuses(result: ScoreResult, stats: Any, rules: ScoringRules, events: Iterable[Any]) -> None:
    bonuses = rules.bonuses
    player_id = stat_value(stats, "player_id") or None
    big_play = {
        "passing_td": ("50+ Yard Pass TD", bonuses.passing.td_pass50_plus_bonus),
        "rushing_td": ("50+ Yard Rush TD", bonuses.rushing.td50_plus_bonus),
        "receiving_td": ("50+ Yard Rec TD", bonuses.receiving.td50_plus_bonus),
    }

    for event in events:
        event_player = stat_value(event, "player_id") or None
        if player_id is not None and event_player != player_id:
            continue

        event_type = stat_value(event, "event_type")
        yards = stat_value(event, "yards")
        if event_type in big_play and yards >= BIG_PLAY_YARDS:
            label, bonus = big_play[event_type]
            result.add("Bonus", label, yards, bonus)
        elif event_type == "bonus":
            result.add("Bonus", "Manual Bonus", 1, stat_value(event, "bonus_points"))


# ========== DEFENSE SCORING ==========


def calculate_defense_score(stats: Any, rules: ScoringRules, events: Iterable[Any] = ()) -> ScoreResult:
    """Score a team defense/special teams unit for one game.

    `stats` may be None for a defense with only manual bonus events that
    week; no shutout is awarded without a box score. The fewest-yards-allowed
    bonus depends on the whole slate and is applied separately by
    award_fewest_yards_bonus().
    """
    result = ScoreResult()
    if stats is not None:
        _defense_stats(result, stats, rules)
    _event_bonuses(result, stats, rules, events)

    result.points = quantize_points(result.points)
    return result


def _defense_stats(result: ScoreResult, stats: Any, rules: ScoringRules) -> None:
    dst = rules.bonuses.defense_special_teams

    if stat_value(stats, "points_allowed") == 0:
        result.add("Defense", "Shutout", 0, dst.shutout)

    interceptions = stat_value(stats, "interceptions")
    if interceptions > 0:
        result.add("Defense", "Interceptions", interceptions, interceptions * to_decimal(dst.interception))

    recoveries = stat_value(stats, "fumble_recoveries")
    if recoveries > 0:
        result.add("Defense", "Fumble Recoveries", recoveries, recoveries * to_decimal(dst.fumble_recovery))

    defense_tds = stat_value(stats, "defense_tds")
    if defense_tds > 0:
        result.add("Defense", "Defensive TDs", defense_tds, defense_tds * TD_POINTS)

    return_tds = stat_value(stats, "return_tds")
    if return_tds > 0:
        result.add("Defense", "Return TDs", return_tds, return_tds * TD_POINTS)

    safeties = stat_value(stats, "safeties")
    if safeties > 0:
        result.add("Defense", "Safeties", safeties, safeties * SAFETY_POINTS)

    blocked = stat_value(stats, "blocked_kicks")
    if blocked > 0:
        result.add("Defense", "Blocked Kicks", blocked, blocked * BLOCKED_KICK_POINTS)


def award_fewest_yards_bonus(
    team_results: list[TeamScoreResult],
    started_defenses: list[StartedDefense],
    bonus: Any,
) -> list[StartedDefense]:
    """Give the bonus to every starting defense tied at the minimum yards allowed.

    Ties each receive the full bonus. The caller decides whether the week is
    complete; the bonus must only be awarded once every game is final.

    Returns:
        The defenses that received the bonus
    """
    bonus = quantize_points(bonus)
    if bonus == 0 or not started_defenses:
        return []

    min_yards = min(d.yards_allowed for d in started_defenses)
    winners = [d for d in started_defenses if d.yards_allowed == min_yards]
    teams = {r.team_id: r for r in team_results}

    for winner in winners:
        team = teams.get(winner.team_id)
        if team is None:
            continue
        for score in team.player_scores:
            if score.roster_player_id == winner.roster_player_id:
                score.points += bonus
                score.breakdown.append(BreakdownItem("Defense", "Fewest Yards Allowed", winner.yards_allowed, bonus))
                team.starter_points += bonus
                team.total_points = team.starter_points + team.bench_points
                break

    logger.info(f"Fewest yards allowed bonus ({min_yards} yds) awarded to {len(winners)} defense(s)")
    return winners
