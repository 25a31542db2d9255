"""Scoring: rules model, pure engine, and database-backed score service."""

from .engine import (
    BreakdownItem,
    PlayerScoreResult,
    ScoreResult,
    TeamScoreResult,
    award_fewest_yards_bonus,
    calculate_defense_score,
    calculate_player_score,
    milestone_bonus,
)
from .rules import NormalizedRuleSet, ScoringRules, normalize_rules_payload, parse_rules, scoring_rules_schema
from .service import (
    ComputeCheck,
    PersistedPlayerScore,
    PersistResult,
    TeamScoreDetail,
    can_compute_scores,
    compute_team_scores,
    get_standings,
    get_team_score_detail,
    list_rule_sets,
    load_active_rules,
    persist_team_scores,
    upload_rule_set,
)

__all__ = [
    "BreakdownItem",
    "ComputeCheck",
    "NormalizedRuleSet",
    "PersistResult",
    "PersistedPlayerScore",
    "PlayerScoreResult",
    "ScoreResult",
    "ScoringRules",
    "TeamScoreDetail",
    "TeamScoreResult",
    "award_fewest_yards_bonus",
    "calculate_defense_score",
    "calculate_player_score",
    "can_compute_scores",
    "compute_team_scores",
    "get_standings",
    "get_team_score_detail",
    "list_rule_sets",
    "load_active_rules",
    "milestone_bonus",
    "normalize_rules_payload",
    "parse_rules",
    "persist_team_scores",
    "scoring_rules_schema",
    "upload_rule_set",
]
