"""
League administration endpoints.

- Rule sets: upload (any accepted shape), list, example schema
- League settings: current week and global lineup lock time
- Ingest: normalized manual batches and one-off bonus adjustments
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from wildcard.api.schemas import IngestSummaryResponse, LeagueSettingsResponse, LeagueSettingsUpdate
from wildcard.api.schemas import ManualBonusRequest, ManualBonusResponse, RuleSetResponse
from wildcard.database.connection import get_db
from wildcard.database.models import ScoringRuleSet
from wildcard.ingest.manual import IngestData, add_manual_bonus, process_manual_ingest
from wildcard.league import UNSET, get_league_settings, update_league_settings
from wildcard.scoring.rules import scoring_rules_schema
from wildcard.scoring.service import list_rule_sets, upload_rule_set

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


def _rule_set_response(rule_set: ScoringRuleSet) -> RuleSetResponse:
    return RuleSetResponse(
        id=rule_set.id,
        name=rule_set.name,
        is_active=rule_set.is_active,
        created_at=rule_set.created_at,
        rules=json.loads(rule_set.rules_json),
    )


# ========== RULE SETS ==========


@router.post("/rules", response_model=RuleSetResponse, status_code=201)
async def create_rule_set(payload: dict[str, Any] = Body(...), db: Session = Depends(get_db)):
    """Upload a rule set; it becomes the active one unless `active` is false."""
    rule_set = upload_rule_set(db, payload)
    db.commit()
    return _rule_set_response(rule_set)


@router.get("/rules", response_model=list[RuleSetResponse])
async def get_rule_sets(db: Session = Depends(get_db)):
    return [_rule_set_response(rule_set) for rule_set in list_rule_sets(db)]


@router.get("/rules/schema")
async def get_rules_schema():
    """Documented example of the rules format."""
    return scoring_rules_schema()


# ========== LEAGUE SETTINGS ==========


@router.get("/settings", response_model=LeagueSettingsResponse)
async def get_settings(db: Session = Depends(get_db)):
    league = get_league_settings(db)
    db.commit()
    return league


@router.put("/settings", response_model=LeagueSettingsResponse)
async def put_settings(update: LeagueSettingsUpdate, db: Session = Depends(get_db)):
    lock_time = update.lock_time if "lock_time" in update.model_fields_set else UNSET
    league = update_league_settings(db, current_week=update.current_week, lock_time=lock_time)
    db.commit()
    return league


# ========== INGEST ==========


@router.post("/ingest/manual", response_model=IngestSummaryResponse)
async def ingest_manual(data: IngestData, db: Session = Depends(get_db)):
    summary = process_manual_ingest(db, data)
    db.commit()
    return summary


@router.post("/ingest/bonus", response_model=ManualBonusResponse, status_code=201)
async def ingest_bonus(request: ManualBonusRequest, db: Session = Depends(get_db)):
    event = add_manual_bonus(
        db,
        week=request.week,
        player_name=request.player_name,
        nfl_team=request.nfl_team,
        bonus_points=request.bonus_points,
        description=request.description,
    )
    db.commit()
    return event
