"""Scoring rules model and upload normalization.

Rule sets are uploaded as JSON and stored as-is. The scoring engine only ever
sees them through `ScoringRules`, a pydantic model in which every category and
every value is optional:

- Missing categories or values contribute zero points
- Unknown keys are kept (extra="allow") and ignored by the engine
- Field names are snake_case in Python and camelCase in JSON (aliases)

Uploads arrive in three shapes, all reduced to one canonical
`NormalizedRuleSet` by `normalize_rules_payload()`:

A) {"name": ..., "active": ..., "bonuses": {...}}
B) {"ruleSetName": ..., "active": ..., "rules": {"bonuses": {...}}}
C) {"name": ..., "rules": {"ruleSetName": ..., "active": ..., "rules": {"bonuses": {...}}}}
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from typing import Any

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from ..exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

DEFAULT_RULE_SET_NAME = "Ruleset"
METADATA_KEYS = ("name", "ruleSetName", "active")
RULES_PARSE_ERROR = "rules could not be parsed"


class RulesModel(BaseModel):
    """Base for every rules section: permissive, alias-aware."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")


# ========== MILESTONE TABLES ==========


class YardageMilestone(RulesModel):
    """Yardage threshold with the cumulative bonus for reaching it."""

    yards: float | None = None
    total_bonus: float | None = Field(default=None, alias="totalBonus")


class CombinedMilestone(RulesModel):
    """Combined rush+receive threshold with its eligibility flag."""

    yards: float | None = None
    bonus: float | None = None
    requires_neither_rush75_nor_receive75: bool = Field(default=False, alias="requiresNeitherRush75NorReceive75")
    requires_neither_rush100_nor_receive100: bool = Field(
        default=False, alias="requiresNeitherRush100NorReceive100"
    )


# ========== CATEGORIES ==========


class RushingRules(RulesModel):
    yardage_milestones: list[YardageMilestone] = Field(default_factory=list, alias="yardageMilestones")
    td50_plus_bonus: float | None = Field(default=None, alias="td50PlusBonus")


class ReceivingRules(RulesModel):
    yardage_milestones: list[YardageMilestone] = Field(default_factory=list, alias="yardageMilestones")
    td50_plus_bonus: float | None = Field(default=None, alias="td50PlusBonus")


class CombinedRushReceiveRules(RulesModel):
    only_if_neither_category_reached: bool = Field(default=False, alias="onlyIfNeitherCategoryReached")
    milestones: list[CombinedMilestone] = Field(default_factory=list)


class PassingRules(RulesModel):
    td_points: float | None = Field(default=None, alias="tdPoints")
    yardage_milestones: list[YardageMilestone] = Field(default_factory=list, alias="yardageMilestones")
    td_pass50_plus_bonus: float | None = Field(default=None, alias="tdPass50PlusBonus")
    qb_rushing_td_bonus: float | None = Field(default=None, alias="qbRushingTdBonus")
    interception: float | None = None
    non_qb_pass_td_points: float | None = Field(default=None, alias="nonQbPassTdPoints")


class TurnoverRules(RulesModel):
    fumble: float | None = None


class KickingRules(RulesModel):
    """Field goal tiers and kicking penalties.

    `fg55_plus` is a bonus on top of the `fg_under53` base value, not a flat
    rate. The missed-FG tiers are stored for reference only: ingested box
    scores carry no miss distance, so those penalties are entered as manual
    bonus events.
    """

    fg_under53: float | None = Field(default=None, alias="fgUnder53")
    fg53or54: float | None = None
    fg55_plus: float | None = Field(default=None, alias="fg55Plus")
    missed_xp: float | None = Field(default=None, alias="missedXP")
    missed_fg30to39: float | None = Field(default=None, alias="missedFG30to39")
    missed_fg29_or_less: float | None = Field(default=None, alias="missedFG29orLess")


class DefenseSpecialTeamsRules(RulesModel):
    direct_score: str | None = Field(default=None, alias="directScore")  # "NFL_FACE_VALUE"
    shutout: float | None = None
    interception: float | None = None
    fumble_recovery: float | None = Field(default=None, alias="fumbleRecovery")
    least_total_yardage_allowed: float | None = Field(default=None, alias="leastTotalYardageAllowed")


class TwoPointConversionRules(RulesModel):
    player_scoring: float | None = Field(default=None, alias="playerScoring")
    player_passing: float | None = Field(default=None, alias="playerPassing")


class Bonuses(RulesModel):
    rushing: RushingRules = Field(default_factory=RushingRules)
    receiving: ReceivingRules = Field(default_factory=ReceivingRules)
    combined_rush_receive: CombinedRushReceiveRules = Field(
        default_factory=CombinedRushReceiveRules, alias="combinedRushReceive"
    )
    passing: PassingRules = Field(default_factory=PassingRules)
    turnovers: TurnoverRules = Field(default_factory=TurnoverRules)
    kicking: KickingRules = Field(default_factory=KickingRules)
    defense_special_teams: DefenseSpecialTeamsRules = Field(
        default_factory=DefenseSpecialTeamsRules, alias="defenseSpecialTeams"
    )
    two_point_conversions: TwoPointConversionRules = Field(
        default_factory=TwoPointConversionRules, alias="twoPointConversions"
    )


class ScoringRules(RulesModel):
    """Complete rule set as read by the scoring engine."""

    notes: list[str] | None = None
    bonuses: Bonuses = Field(default_factory=Bonuses)


def parse_rules(raw: Mapping[str, Any] | str | None) -> ScoringRules:
    """Parse a stored rules blob (dict or JSON text) into ScoringRules.

    Raises:
        InvalidArgumentError: the blob is not JSON, not an object, or a
            recognized key holds a value of an unusable type.
    """
    if raw is None:
        return ScoringRules()

    try:
        data = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(data, Mapping):
            raise InvalidArgumentError(RULES_PARSE_ERROR)
        # Explicit null categories behave like missing ones
        return ScoringRules.model_validate(_drop_nulls(data))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.warning(f"Scoring rules rejected: {e}")
        raise InvalidArgumentError(RULES_PARSE_ERROR) from e


def _drop_nulls(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _drop_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_nulls(v) for v in value]
    return value


# ========== UPLOAD NORMALIZATION ==========


@dataclass
class NormalizedRuleSet:
    """Canonical form of an uploaded rule set, ready for storage."""

    name: str
    active: bool
    rules: dict[str, Any] = field(default_factory=dict)


def normalize_rules_payload(raw: Mapping[str, Any]) -> NormalizedRuleSet:
    """Reduce any of the three accepted upload shapes to a NormalizedRuleSet.

    Name: explicit top-level name wins over nested ones, "Ruleset" otherwise.
    Active: the first non-null flag found, defaulting to True. A boolean or
    a "true"/"false" string; any other value raises InvalidArgumentError.
    Rules: a shallow copy of the innermost rules object with the metadata
    keys removed. No structural validation happens here.
    """
    if not isinstance(raw, Mapping):
        raise InvalidArgumentError("Rules payload must be a JSON object")

    nested = raw.get("rules")
    nested = nested if isinstance(nested, Mapping) else None

    name = (
        raw.get("name")
        or raw.get("ruleSetName")
        or (nested or {}).get("ruleSetName")
        or (nested or {}).get("name")
        or DEFAULT_RULE_SET_NAME
    )

    active = raw.get("active")
    if active is None and nested is not None:
        active = nested.get("active")
    if active is None:
        active = True

    if nested is not None and isinstance(nested.get("rules"), Mapping) and nested["rules"]:
        # Shape C: client wrapper around shape B
        rules = dict(nested["rules"])
    elif nested is not None:
        rules = dict(nested)
    else:
        rules = dict(raw)

    for key in METADATA_KEYS:
        rules.pop(key, None)

    return NormalizedRuleSet(name=str(name), active=_active_flag(active), rules=rules)


def _active_flag(value: Any) -> bool:
    """Booleans as-is; "true"/"false" strings in any case. Anything else is rejected."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise InvalidArgumentError(f"'active' must be true or false, got {value!r}")


def scoring_rules_schema() -> dict[str, Any]:
    """Documented example rule set, served to admins as a template."""
    return {
        "_note": "Milestone/bonus-based scoring. Rules are stored as-is without validation.",
        "example": {
            "name": "2025 Wildcard Scoring Rules",
            "notes": ["All scoring uses NFL face value with league bonus points."],
            "bonuses": {
                "rushing": {
                    "yardageMilestones": [
                        {"yards": 75, "totalBonus": 3},
                        {"yards": 100, "totalBonus": 7},
                        {"yards": 150, "totalBonus": 10},
                        {"yards": 200, "totalBonus": 13},
                    ],
                    "td50PlusBonus": 3,
                },
                "receiving": {
                    "yardageMilestones": [
                        {"yards": 75, "totalBonus": 3},
                        {"yards": 100, "totalBonus": 7},
                        {"yards": 150, "totalBonus": 10},
                        {"yards": 200, "totalBonus": 13},
                    ],
                    "td50PlusBonus": 3,
                },
                "combinedRushReceive": {
                    "onlyIfNeitherCategoryReached": True,
                    "milestones": [
                        {"yards": 125, "bonus": 3, "requiresNeitherRush75NorReceive75": True},
                        {"yards": 150, "bonus": 4, "requiresNeitherRush100NorReceive100": True},
                    ],
                },
                "passing": {
                    "tdPoints": 4,
                    "yardageMilestones": [
                        {"yards": 250, "totalBonus": 3},
                        {"yards": 300, "totalBonus": 7},
                        {"yards": 350, "totalBonus": 10},
                        {"yards": 400, "totalBonus": 13},
                    ],
                    "tdPass50PlusBonus": 3,
                    "qbRushingTdBonus": 3,
                    "interception": -1,
                    "nonQbPassTdPoints": 7,
                },
                "turnovers": {"fumble": -1},
                "kicking": {
                    "fgUnder53": 3,
                    "fg53or54": 4,
                    "fg55Plus": 3,
                    "missedXP": -1,
                    "missedFG30to39": -1,
                    "missedFG29orLess": -2,
                },
                "defenseSpecialTeams": {
                    "directScore": "NFL_FACE_VALUE",
                    "shutout": 7,
                    "interception": 1,
                    "fumbleRecovery": 1,
                    "leastTotalYardageAllowed": 3,
                },
                "twoPointConversions": {"playerScoring": 2, "playerPassing": 1},
            },
        },
    }
