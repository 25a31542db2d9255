"""Tests for the scoring rules model and rule-set upload normalization."""

import json

import pytest

from wildcard.exceptions import InvalidArgumentError
from wildcard.scoring.rules import DEFAULT_RULE_SET_NAME
from wildcard.scoring.rules import RULES_PARSE_ERROR
from wildcard.scoring.rules import ScoringRules
from wildcard.scoring.rules import normalize_rules_payload
from wildcard.scoring.rules import parse_rules
from wildcard.scoring.rules import scoring_rules_schema

BONUSES = {"rushing": {"yardageMilestones": [{"yards": 100, "totalBonus": 7}]}}


# ========== NORMALIZATION ==========


def test_flat_payload():
    """Metadata and bonuses side by side at the top level."""
    normalized = normalize_rules_payload({"name": "Flat", "active": False, "bonuses": BONUSES})

    assert normalized.name == "Flat"
    assert normalized.active is False
    assert normalized.rules == {"bonuses": BONUSES}


def test_rules_wrapper_payload():
    """ruleSetName at the top, rules nested one level down."""
    normalized = normalize_rules_payload({"ruleSetName": "Wrapped", "rules": {"name": "inner", "bonuses": BONUSES}})

    assert normalized.name == "Wrapped"
    assert normalized.active is True
    assert normalized.rules == {"bonuses": BONUSES}


def test_client_wrapper_payload():
    """A client wrapper around a wrapped payload unwraps both levels."""
    payload = {
        "name": "Client",
        "rules": {"ruleSetName": "Inner", "active": False, "rules": {"bonuses": BONUSES}},
    }

    normalized = normalize_rules_payload(payload)

    assert normalized.name == "Client"
    assert normalized.active is False
    assert normalized.rules == {"bonuses": BONUSES}


def test_nested_name_used_when_top_level_missing():
    normalized = normalize_rules_payload({"rules": {"ruleSetName": "Nested", "bonuses": BONUSES}})

    assert normalized.name == "Nested"
    assert normalized.rules == {"bonuses": BONUSES}


def test_default_name_and_active():
    normalized = normalize_rules_payload({"bonuses": BONUSES})

    assert normalized.name == DEFAULT_RULE_SET_NAME
    assert normalized.active is True


def test_top_level_active_wins_over_nested():
    normalized = normalize_rules_payload({"active": False, "rules": {"active": True, "bonuses": BONUSES}})

    assert normalized.active is False


def test_metadata_keys_removed_from_rules():
    normalized = normalize_rules_payload({"name": "X", "ruleSetName": "Y", "active": True, "notes": ["n"]})

    assert normalized.rules == {"notes": ["n"]}


def test_empty_inner_rules_keeps_wrapper():
    """An empty rules.rules object is not treated as the client wrapper."""
    normalized = normalize_rules_payload({"rules": {"rules": {}, "bonuses": BONUSES}})

    assert normalized.rules == {"rules": {}, "bonuses": BONUSES}


def test_normalize_does_not_mutate_input():
    payload = {"name": "Keep", "active": True, "bonuses": BONUSES}
    before = json.dumps(payload, sort_keys=True)

    normalize_rules_payload(payload)

    assert json.dumps(payload, sort_keys=True) == before


def test_normalize_rejects_non_object():
    with pytest.raises(InvalidArgumentError):
        normalize_rules_payload(["not", "an", "object"])


# ========== PARSING ==========


def test_parse_camel_case_aliases():
    rules = parse_rules(
        {
            "bonuses": {
                "passing": {"tdPoints": 4, "nonQbPassTdPoints": 7},
                "kicking": {"fgUnder53": 3, "fg55Plus": 3, "missedXP": -1},
                "defenseSpecialTeams": {"leastTotalYardageAllowed": 3},
            }
        }
    )

    assert rules.bonuses.passing.td_points == 4
    assert rules.bonuses.passing.non_qb_pass_td_points == 7
    assert rules.bonuses.kicking.fg55_plus == 3
    assert rules.bonuses.kicking.missed_xp == -1
    assert rules.bonuses.defense_special_teams.least_total_yardage_allowed == 3


def test_parse_missing_categories_default_empty():
    rules = parse_rules({})

    assert isinstance(rules, ScoringRules)
    assert rules.bonuses.rushing.yardage_milestones == []
    assert rules.bonuses.passing.td_points is None
    assert rules.bonuses.combined_rush_receive.only_if_neither_category_reached is False


def test_parse_none_is_empty_rules():
    assert parse_rules(None).bonuses.kicking.fg_under53 is None


def test_parse_json_text():
    rules = parse_rules(json.dumps({"bonuses": BONUSES}))

    milestone = rules.bonuses.rushing.yardage_milestones[0]
    assert milestone.yards == 100
    assert milestone.total_bonus == 7


def test_parse_null_category_treated_as_missing():
    rules = parse_rules({"bonuses": {"rushing": None, "turnovers": {"fumble": None}}})

    assert rules.bonuses.rushing.yardage_milestones == []
    assert rules.bonuses.turnovers.fumble is None


def test_parse_keeps_unknown_keys():
    rules = parse_rules({"bonuses": {"rushing": {"someFutureBonus": 5}}, "season": 2025})

    assert rules.model_extra["season"] == 2025
    assert rules.bonuses.rushing.model_extra["someFutureBonus"] == 5


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[1, 2, 3]",
        {"bonuses": {"rushing": {"yardageMilestones": "lots"}}},
        {"bonuses": {"passing": {"tdPoints": "four"}}},
    ],
)
def test_parse_rejects_unusable_rules(raw):
    with pytest.raises(InvalidArgumentError) as exc_info:
        parse_rules(raw)

    assert RULES_PARSE_ERROR in str(exc_info.value)


def test_schema_example_parses():
    """The template served to admins must itself be a valid rule set."""
    example = scoring_rules_schema()["example"]

    rules = parse_rules(example)

    assert rules.bonuses.passing.td_points == 4
    assert len(rules.bonuses.combined_rush_receive.milestones) == 2
    assert rules.bonuses.combined_rush_receive.milestones[0].requires_neither_rush75_nor_receive75 is True


@pytest.mark.parametrize(("flag", "expected"), [("false", False), ("TRUE", True), (" False ", False)])
def test_active_flag_strings(flag, expected):
    normalized = normalize_rules_payload({"name": "Strings", "active": flag, "bonuses": BONUSES})

    assert normalized.active is expected


@pytest.mark.parametrize("flag", ["no", 0, 1, []])
def test_active_flag_rejects_other_values(flag):
    with pytest.raises(InvalidArgumentError):
        normalize_rules_payload({"name": "Bad Flag", "active": flag, "bonuses": BONUSES})
