"""
Score API endpoints.

- GET /scores/{week}: persisted standings (starter points, bench tiebreak)
- GET /scores/{week}/standings/{conference}: persisted standings for one conference
- GET /scores/{week}/team/{team_id}: a team's persisted score with player breakdowns
- GET /scores/{week}/live: compute scores now without persisting
- GET /scores/{week}/check: which prerequisites are missing, if any
- POST /scores/{week}/recompute: compute and overwrite the score cache
"""

import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from wildcard.api.schemas import (
    ComputeCheckResponse,
    PersistedPlayerScoreResponse,
    RecomputeResponse,
    StandingResponse,
    TeamScoreDetailResponse,
    TeamScoreResponse,
)
from wildcard.database.connection import get_db
from wildcard.database.models import TeamScore
from wildcard.exceptions import PreconditionFailedError
from wildcard.scoring.service import (
    can_compute_scores,
    compute_team_scores,
    get_standings,
    get_team_score_detail,
    persist_team_scores,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scores", tags=["scores"])


def _standing_rows(scores: list[TeamScore]) -> list[StandingResponse]:
    return [
        StandingResponse(
            rank=rank,
            team_id=score.team_id,
            team_name=score.team.name,
            conference_name=score.team.conference.name if score.team.conference else None,
            starter_points=score.starter_points,
            bench_points=score.bench_points,
            total_points=score.total_points,
            updated_at=score.updated_at,
        )
        for rank, score in enumerate(scores, start=1)
    ]


@router.get("/{week}", response_model=list[StandingResponse])
async def standings(week: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Persisted team scores for the week, best first."""
    return _standing_rows(get_standings(db, week))


@router.get("/{week}/standings/{conference}", response_model=list[StandingResponse])
async def conference_standings(conference: str, week: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Persisted standings for one conference; ranks restart at 1."""
    return _standing_rows(get_standings(db, week, conference=conference))


@router.get("/{week}/team/{team_id}", response_model=TeamScoreDetailResponse)
async def team_score(team_id: str, week: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """A team's persisted score with player breakdowns, empty until the week is persisted."""
    detail = get_team_score_detail(db, week, team_id)
    team, score = detail.team, detail.score

    return TeamScoreDetailResponse(
        team_id=team.id,
        team_name=team.name,
        conference_name=team.conference.name if team.conference else None,
        week=week,
        starter_points=score.starter_points if score else None,
        bench_points=score.bench_points if score else None,
        total_points=score.total_points if score else None,
        updated_at=score.updated_at if score else None,
        player_scores=[PersistedPlayerScoreResponse.model_validate(ps) for ps in detail.player_scores],
    )


@router.get("/{week}/live", response_model=list[TeamScoreResponse])
async def live_scores(week: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Scores computed from current stats; nothing is written."""
    return compute_team_scores(db, week)


@router.get("/{week}/check", response_model=ComputeCheckResponse)
async def check(week: int = Path(..., ge=1), db: Session = Depends(get_db)):
    result = can_compute_scores(db, week)
    return ComputeCheckResponse(week=week, can_compute=result.can_compute, errors=result.errors)


@router.post("/{week}/recompute", response_model=RecomputeResponse)
async def recompute(week: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """Recompute and persist the week. Safe to repeat."""
    result = persist_team_scores(db, week)
    if not result.success:
        raise PreconditionFailedError(result.error, details=result.details)
    db.commit()
    return result
