"""
Pydantic schemas for API request/response models.

Response schemas use from_attributes=True so they can be built directly from
SQLAlchemy rows and from the service layer's result dataclasses. Point
values are Decimals internally and serialized as JSON numbers.

Schema Organization:
- Lineup: slot assignment requests/results, lineup view, lock status
- Scores: team/player scores, precondition check, recompute result, standings
- Admin: rule sets, league settings, manual bonus
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ========== LINEUP SCHEMAS ==========


class AssignRequest(BaseModel):
    """Move a roster player into a starting slot."""

    roster_player_id: str
    slot: str  # QB, RB, WRTE, FLEX1, FLEX2, FLEX3, K, DEF
    override: bool = False  # Bypass lineup locks (administrators only)


class BenchRequest(BaseModel):
    roster_player_id: str
    override: bool = False


class AssignResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool = True
    player_name: str
    slot: str
    swapped_out_name: str | None = None
    override_used: bool = False


class BenchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool = True
    player_name: str
    override_used: bool = False


class LockStatusResponse(BaseModel):
    nfl_team: str
    week: int
    locked: bool
    reason: str | None = None


class GameInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    game_id: str
    opponent: str  # "vs DAL" or "@ DAL"
    kickoff_time: datetime
    status: str
    home_team: str
    away_team: str
    home_score: int | None = None
    away_score: int | None = None
    spread_home: float | None = None
    total: float | None = None


class LineupPlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    roster_player_id: str
    player_id: str
    display_name: str
    position: str
    nfl_team: str
    slot: str | None = None
    is_locked: bool
    lock_reason: str | None = None
    game: GameInfoResponse | None = None
    stat_line: str = ""


class LineupResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    team_id: str
    team_name: str
    conference_name: str | None = None
    week: int
    slots: dict[str, LineupPlayerResponse | None]
    bench: list[LineupPlayerResponse]
    is_complete: bool


# ========== SCORE SCHEMAS ==========


class BreakdownItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    stat: str
    value: float
    points: float


class PlayerScoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    roster_player_id: str
    player_id: str
    player_name: str
    position: str
    is_starter: bool
    points: float
    breakdown: list[BreakdownItemResponse]


class TeamScoreResponse(BaseModel):
    """Live (computed, not persisted) team score."""

    model_config = ConfigDict(from_attributes=True)

    team_id: str
    team_name: str
    week: int
    starter_points: float
    bench_points: float
    total_points: float
    player_scores: list[PlayerScoreResponse]


class ComputeCheckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    week: int
    can_compute: bool
    errors: list[str]


class RecomputeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    teams_updated: int = 0


class StandingResponse(BaseModel):
    """One row of the persisted weekly standings."""

    rank: int
    team_id: str
    team_name: str
    conference_name: str | None = None
    starter_points: float
    bench_points: float
    total_points: float
    updated_at: datetime | None = None


class PersistedPlayerScoreResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    roster_player_id: str
    player_id: str
    player_name: str
    position: str
    nfl_team: str
    is_starter: bool
    points: float
    breakdown: list[BreakdownItemResponse]


class TeamScoreDetailResponse(BaseModel):
    """Persisted score of one team for a week; points are None until the week is persisted."""

    team_id: str
    team_name: str
    conference_name: str | None = None
    week: int
    starter_points: float | None = None
    bench_points: float | None = None
    total_points: float | None = None
    updated_at: datetime | None = None
    player_scores: list[PersistedPlayerScoreResponse] = []


# ========== ADMIN SCHEMAS ==========


class RuleSetResponse(BaseModel):
    id: str
    name: str
    is_active: bool
    created_at: datetime | None = None
    rules: dict[str, Any]


class LeagueSettingsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    current_week: int
    lock_time: datetime | None = None
    active_scoring_rule_set_id: str | None = None


class LeagueSettingsUpdate(BaseModel):
    """Fields left out are unchanged; an explicit null lock_time clears the lock."""

    current_week: int | None = Field(default=None, ge=1)
    lock_time: datetime | None = None


class ManualBonusRequest(BaseModel):
    week: int = Field(ge=1)
    player_name: str
    nfl_team: str
    bonus_points: float
    description: str | None = None


class ManualBonusResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    player_id: str
    game_id: str | None = None
    week: int
    bonus_points: float
    description: str | None = None


class IngestSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    games_created: int
    games_updated: int
    players_created: int
    player_stats_upserted: int
    defense_stats_upserted: int
    events_created: int
    rows_skipped: int
