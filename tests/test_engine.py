"""Tests for the pure scoring engine.

Stats are passed as plain dicts; the engine reads ORM rows the same way.
"""

import logging
from decimal import Decimal
from types import SimpleNamespace

import pytest

from wildcard.scoring.engine import PlayerScoreResult
from wildcard.scoring.engine import StartedDefense
from wildcard.scoring.engine import TeamScoreResult
from wildcard.scoring.engine import award_fewest_yards_bonus
from wildcard.scoring.engine import calculate_defense_score
from wildcard.scoring.engine import calculate_player_score
from wildcard.scoring.engine import milestone_bonus
from wildcard.scoring.engine import quantize_points
from wildcard.scoring.rules import YardageMilestone
from wildcard.scoring.rules import parse_rules

RUSHING_TABLE = [
    {"yards": 75, "totalBonus": 3},
    {"yards": 100, "totalBonus": 7},
    {"yards": 150, "totalBonus": 10},
]


def _items(result):
    return {(item.category, item.stat): item.points for item in result.breakdown}


# ========== MILESTONES ==========


@pytest.mark.parametrize(
    "yards,expected",
    [(0, 0), (74, 0), (75, 3), (99, 3), (100, 7), (149, 7), (150, 10), (500, 10)],
)
def test_milestone_highest_threshold_only(yards, expected):
    milestones = [YardageMilestone.model_validate(m) for m in RUSHING_TABLE]

    assert milestone_bonus(yards, milestones) == expected


def test_milestone_table_order_does_not_matter():
    milestones = [YardageMilestone.model_validate(m) for m in reversed(RUSHING_TABLE)]

    assert milestone_bonus(120, milestones) == 7


def test_milestone_empty_table():
    assert milestone_bonus(300, None) == 0
    assert milestone_bonus(300, []) == 0


# ========== PLAYERS ==========


def test_running_back_milestone_and_td():
    """160 rushing yards and a TD: 6 for the TD plus the 150-yard tier (10), not 3+7+10."""
    rules = parse_rules({"bonuses": {"rushing": {"yardageMilestones": RUSHING_TABLE}}})

    result = calculate_player_score({"rush_yards": 160, "rush_tds": 1}, "RB", rules)

    assert result.points == Decimal("16.00")
    assert _items(result) == {("Rushing", "TDs"): 6, ("Rushing", "Yardage Bonus"): 10}


def test_quarterback_passing_line():
    rules = parse_rules(
        {
            "bonuses": {
                "passing": {
                    "tdPoints": 4,
                    "yardageMilestones": [{"yards": 250, "totalBonus": 3}, {"yards": 300, "totalBonus": 7}],
                    "interception": -1,
                }
            }
        }
    )

    result = calculate_player_score({"pass_yards": 320, "pass_tds": 2, "pass_interceptions": 1}, "QB", rules)

    assert result.points == 14
    assert [(i.category, i.stat, i.value, i.points) for i in result.breakdown] == [
        ("Passing", "TDs", 2, 8),
        ("Passing", "Yardage Bonus", 320, 7),
        ("Passing", "Interceptions", 1, -1),
    ]


def test_pass_td_defaults_to_four_points():
    result = calculate_player_score({"pass_tds": 1}, "QB", parse_rules({}))

    assert result.points == 4


def test_non_qb_pass_td_rate():
    rules = parse_rules({"bonuses": {"passing": {"tdPoints": 4, "nonQbPassTdPoints": 7}}})

    result = calculate_player_score({"pass_tds": 1}, "WR", rules)

    assert result.points == 7
    assert result.breakdown[0].stat == "Non-QB Pass TD"


def test_non_qb_pass_td_without_special_rate():
    rules = parse_rules({"bonuses": {"passing": {"tdPoints": 4}}})

    assert calculate_player_score({"pass_tds": 1}, "RB", rules).points == 4


def test_qb_rushing_td_bonus(example_rules):
    qb = calculate_player_score({"rush_tds": 1}, "QB", example_rules)
    rb = calculate_player_score({"rush_tds": 1}, "RB", example_rules)

    assert qb.points == 9
    assert rb.points == 6


def test_receiving_td_and_milestone(example_rules):
    result = calculate_player_score({"receptions": 8, "rec_yards": 104, "rec_tds": 1}, "WR", example_rules)

    assert result.points == 13


def test_two_point_conversions(example_rules):
    result = calculate_player_score(
        {"rush_2pt_conversions": 1, "rec_2pt_conversions": 1, "pass_2pt_conversions": 1}, "QB", example_rules
    )

    assert _items(result) == {
        ("Passing", "2PT Pass"): 1,
        ("Rushing", "2PT Rush"): 2,
        ("Receiving", "2PT Rec"): 2,
    }


def test_fumbles_lost(example_rules):
    result = calculate_player_score({"fumbles_lost": 2}, "RB", example_rules)

    assert result.points == -2
    assert result.breakdown[0].category == "Turnover"


def test_missing_rules_score_touchdowns_at_face_value():
    result = calculate_player_score({"rush_yards": 210, "rush_tds": 1, "fumbles_lost": 1}, "RB", parse_rules({}))

    assert result.points == 6


def test_null_counters_count_as_zero(example_rules):
    stats = SimpleNamespace(rush_yards=None, rush_tds=None, rec_yards=80, rec_tds=None, player_id="p1")

    result = calculate_player_score(stats, "WR", example_rules)

    assert result.points == 3


def test_zero_point_items_are_dropped():
    rules = parse_rules({"bonuses": {"turnovers": {"fumble": 0}}})

    result = calculate_player_score({"fumbles_lost": 1}, "RB", rules)

    assert result.points == 0
    assert result.breakdown == []


def test_scoring_is_deterministic(example_rules):
    stats = {"pass_yards": 301, "pass_tds": 3, "rush_yards": 40, "rush_tds": 1, "fumbles_lost": 1}

    first = calculate_player_score(stats, "QB", example_rules)
    second = calculate_player_score(stats, "QB", example_rules)

    assert first == second


# ========== COMBINED RUSH+RECEIVE ==========


def test_combined_bonus_when_neither_category_reached(example_rules):
    """70 rush + 60 rec: no individual tier, but 130 combined earns the 125 tier."""
    result = calculate_player_score({"rush_yards": 70, "rec_yards": 60}, "RB", example_rules)

    assert result.points == 3
    assert _items(result) == {("Combined", "Rush+Rec Bonus"): 3}


def test_combined_bonus_second_tier(example_rules):
    """90 rush reaches the 75 tier, which rules out the first combined tier but not the second."""
    result = calculate_player_score({"rush_yards": 90, "rec_yards": 65}, "RB", example_rules)

    assert _items(result) == {("Rushing", "Yardage Bonus"): 3, ("Combined", "Rush+Rec Bonus"): 4}
    assert result.points == 7


def test_combined_bonus_not_reached(example_rules):
    result = calculate_player_score({"rush_yards": 80, "rec_yards": 60}, "RB", example_rules)

    assert _items(result) == {("Rushing", "Yardage Bonus"): 3}


def test_combined_bonus_requires_flag():
    rules = parse_rules(
        {
            "bonuses": {
                "combinedRushReceive": {
                    "onlyIfNeitherCategoryReached": False,
                    "milestones": [{"yards": 125, "bonus": 3, "requiresNeitherRush75NorReceive75": True}],
                }
            }
        }
    )

    assert calculate_player_score({"rush_yards": 70, "rec_yards": 60}, "RB", rules).points == 0


def test_combined_bonus_first_configured_match_wins():
    rules = parse_rules(
        {
            "bonuses": {
                "combinedRushReceive": {
                    "onlyIfNeitherCategoryReached": True,
                    "milestones": [
                        {"yards": 150, "bonus": 4, "requiresNeitherRush100NorReceive100": True},
                        {"yards": 125, "bonus": 3, "requiresNeitherRush75NorReceive75": True},
                    ],
                }
            }
        }
    )

    assert calculate_player_score({"rush_yards": 70, "rec_yards": 90}, "RB", rules).points == 4
    assert calculate_player_score({"rush_yards": 60, "rec_yards": 70}, "RB", rules).points == 3


# ========== KICKING ==========


def test_kicker_line(example_rules):
    """Two short FGs (6), one 53-54 (4), one 55+ (3 base + 3 bonus), 2 XP, 1 missed XP."""
    stats = {
        "fg_made_0_39": 1,
        "fg_made_40_49": 1,
        "fg_made_50_54": 1,
        "fg_made_55_plus": 1,
        "xp_made": 2,
        "xp_missed": 1,
        "fg_missed": 2,
    }

    result = calculate_player_score(stats, "K", example_rules)

    assert result.points == 17
    assert _items(result)[("Kicking", "FG 55+")] == 6
    assert all("Missed FG" not in item.stat for item in result.breakdown)


def test_fg_55_plus_base_defaults_to_three():
    rules = parse_rules({"bonuses": {"kicking": {"fg55Plus": 2}}})

    result = calculate_player_score({"fg_made_55_plus": 1}, "K", rules)

    assert result.points == 5


def test_kicking_ignored_for_non_kickers(example_rules):
    assert calculate_player_score({"xp_made": 3, "fg_made_0_39": 1}, "WR", example_rules).points == 0


# ========== EVENTS ==========


def test_long_touchdown_bonus(example_rules):
    stats = {"player_id": "p1", "rec_tds": 1, "rec_yards": 62}
    events = [{"player_id": "p1", "event_type": "receiving_td", "yards": 62}]

    result = calculate_player_score(stats, "WR", example_rules, events)

    assert _items(result)[("Bonus", "50+ Yard Rec TD")] == 3
    assert result.points == 9


@pytest.mark.parametrize("yards,bonus", [(49, 0), (50, 3), (80, 3)])
def test_long_touchdown_threshold(example_rules, yards, bonus):
    events = [{"event_type": "rushing_td", "yards": yards}]

    result = calculate_player_score({}, "RB", example_rules, events)

    assert result.points == bonus


def test_events_for_other_players_ignored(example_rules):
    stats = {"player_id": "p1"}
    events = [{"player_id": "p2", "event_type": "bonus", "bonus_points": 5}]

    assert calculate_player_score(stats, "RB", example_rules, events).points == 0


def test_manual_bonus_event(example_rules):
    events = [{"player_id": "p1", "event_type": "bonus", "bonus_points": Decimal("-2")}]

    result = calculate_player_score({"player_id": "p1"}, "K", example_rules, events)

    assert result.points == -2
    assert result.breakdown[0].stat == "Manual Bonus"


def test_points_rounded_half_up():
    events = [{"event_type": "bonus", "bonus_points": 1.005}]

    result = calculate_player_score({}, "RB", parse_rules({}), events)

    assert result.points == Decimal("1.01")
    assert quantize_points(2.675) == Decimal("2.68")


# ========== DEFENSE ==========


def test_defense_line(example_rules):
    stats = {
        "points_allowed": 0,
        "yards_allowed": 250,
        "sacks": 5,
        "interceptions": 2,
        "fumble_recoveries": 1,
        "defense_tds": 1,
        "return_tds": 1,
        "safeties": 1,
        "blocked_kicks": 1,
    }

    result = calculate_defense_score(stats, example_rules)

    # 7 shutout + 2 INT + 1 FR + 6 + 6 + 2 safety + 2 block; sacks are not scored
    assert result.points == 26
    assert ("Defense", "Shutout") in _items(result)


def test_defense_no_shutout(example_rules):
    result = calculate_defense_score({"points_allowed": 3, "interceptions": 1}, example_rules)

    assert result.points == 1


def test_defense_manual_bonus(example_rules):
    events = [{"event_type": "bonus", "bonus_points": 4}]

    result = calculate_defense_score({"points_allowed": 3, "interceptions": 1}, example_rules, events)

    assert result.points == 5
    assert ("Bonus", "Manual Bonus") in _items(result)


def test_defense_bonus_without_box_score(example_rules):
    """No box score means no shutout, only the event."""
    events = [{"event_type": "bonus", "bonus_points": 2}]

    result = calculate_defense_score(None, example_rules, events)

    assert result.points == 2
    assert [item.stat for item in result.breakdown] == ["Manual Bonus"]


# ========== FEWEST YARDS ==========


def _team_with_defense(team_id, roster_player_id, points=Decimal("5")):
    team = TeamScoreResult(team_id=team_id, team_name=team_id, week=1)
    team.add_player(
        PlayerScoreResult(roster_player_id, "d-" + roster_player_id, "D/ST", "DEF", is_starter=True, points=points)
    )
    team.add_player(
        PlayerScoreResult("bench-" + team_id, "b-" + team_id, "Bench", "RB", is_starter=False, points=Decimal("4"))
    )
    return team


def test_fewest_yards_bonus_ties_all_win():
    teams = [_team_with_defense("a", "ra"), _team_with_defense("b", "rb"), _team_with_defense("c", "rc")]
    defenses = [StartedDefense("a", "ra", 250), StartedDefense("b", "rb", 250), StartedDefense("c", "rc", 300)]

    winners = award_fewest_yards_bonus(teams, defenses, 3)

    assert [w.team_id for w in winners] == ["a", "b"]
    assert [t.starter_points for t in teams] == [8, 8, 5]
    for team in teams:
        assert team.starter_points + team.bench_points == team.total_points


def test_fewest_yards_bonus_zero_is_noop():
    teams = [_team_with_defense("a", "ra")]

    assert award_fewest_yards_bonus(teams, [StartedDefense("a", "ra", 200)], 0) == []
    assert teams[0].starter_points == 5


def test_combined_out_of_order_table_warns(caplog):
    rules = parse_rules(
        {
            "bonuses": {
                "combinedRushReceive": {
                    "onlyIfNeitherCategoryReached": True,
                    "milestones": [
                        {"yards": 150, "bonus": 4, "requiresNeitherRush100NorReceive100": True},
                        {"yards": 125, "bonus": 3, "requiresNeitherRush75NorReceive75": True},
                    ],
                }
            }
        }
    )

    with caplog.at_level(logging.WARNING, logger="wildcard.scoring.engine"):
        calculate_player_score({"rush_yards": 60, "rec_yards": 70}, "RB", rules)

    assert any("not ascending" in r.getMessage() and r.levelno == logging.WARNING for r in caplog.records)
