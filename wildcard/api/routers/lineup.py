"""
Lineup API endpoints.

- GET /lineup/{team_id}/{week}: slots, bench, locks and games for a team
- PUT /lineup/{team_id}/{week}/assign: start a roster player in a slot
- PUT /lineup/{team_id}/{week}/bench: move a roster player to the bench
- GET /lineup/lock/{nfl_team}/{week}: lock status for an NFL team

Service errors (not found, locked, invalid slot) are translated to HTTP
status codes by the application-level handler in wildcard.api.main.
"""

import logging

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from wildcard.api.schemas import AssignRequest, AssignResponse, BenchRequest, BenchResponse, LineupResponse
from wildcard.api.schemas import LockStatusResponse
from wildcard.database.connection import get_db
from wildcard.lineup.assignment import assign_slot, bench_player
from wildcard.lineup.locks import LockPolicy
from wildcard.lineup.views import get_team_lineup

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lineup", tags=["lineup"])


@router.get("/lock/{nfl_team}/{week}", response_model=LockStatusResponse)
async def get_lock_status(
    nfl_team: str,
    week: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    """Whether players from `nfl_team` can still be moved this week."""
    status = LockPolicy.for_league(db).is_locked(nfl_team, week)
    return LockStatusResponse(nfl_team=nfl_team, week=week, locked=status.locked, reason=status.reason)


@router.get("/{team_id}/{week}", response_model=LineupResponse)
async def get_lineup(
    team_id: str,
    week: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    """Team lineup with one entry per slot (null when empty) plus the bench."""
    view = get_team_lineup(db, team_id, week)
    # is_complete is a property, so validate from attributes rather than asdict()
    return LineupResponse.model_validate(view, from_attributes=True)


@router.put("/{team_id}/{week}/assign", response_model=AssignResponse)
async def assign(
    request: AssignRequest,
    team_id: str,
    week: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    """Assign a player to a slot; a current occupant is moved to the bench."""
    result = assign_slot(db, team_id, request.roster_player_id, week, request.slot, override=request.override)
    db.commit()
    return result


@router.put("/{team_id}/{week}/bench", response_model=BenchResponse)
async def bench(
    request: BenchRequest,
    team_id: str,
    week: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    """Clear a player's slot for the week."""
    result = bench_player(db, team_id, request.roster_player_id, week, override=request.override)
    db.commit()
    return result
