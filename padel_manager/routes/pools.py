"""
Pool API Routes
Round-robin groups inside a category, with their running standings.
"""

from datetime import datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlmodel import Session, select

from padel_manager.config import STANDINGS_MAX_RETRIES
from padel_manager.database import get_session
from padel_manager.models.category import TournamentCategory
from padel_manager.models.match import Match
from padel_manager.models.pool import Pool
from padel_manager.services.pool_standings import StandingsConflictError, rebuild_pool_standings
from padel_manager.services.standings import StandingsError, normalize_rules, rank_standings

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class PoolCreateRequest(BaseModel):
    name: str = Field(min_length=1)


class PoolResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    category_id: int
    name: str
    standings: Dict[str, Dict[str, Any]]
    version: int
    created_at: datetime


class StandingRow(BaseModel):
    position: int
    team_id: int
    matches_played: int
    matches_won: int
    sets_won: int
    sets_lost: int
    points_won: int
    points_lost: int


class PoolStandingsResponse(BaseModel):
    pool_id: int
    version: int
    tiebreaker_rules: List[str]
    rows: List[StandingRow]


def _standings_response(session: Session, pool: Pool) -> PoolStandingsResponse:
    category = session.get(TournamentCategory, pool.category_id)
    matches = session.exec(select(Match).where(Match.pool_id == pool.id)).all()
    try:
        rules = normalize_rules(category.tiebreaker_rules if category else None)
        ranked = rank_standings(pool.standings or {}, rules, matches)
    except StandingsError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PoolStandingsResponse(
        pool_id=pool.id,
        version=pool.version,
        tiebreaker_rules=rules,
        rows=[StandingRow(position=r.position, team_id=r.team_id, **r.record.to_dict()) for r in ranked],
    )


# ============================================================================
# Pool Endpoints
# ============================================================================


@router.get("/categories/{category_id}/pools", response_model=List[PoolResponse])
def list_pools(category_id: int, session: Session = Depends(get_session)):
    category = session.get(TournamentCategory, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return session.exec(select(Pool).where(Pool.category_id == category_id).order_by(Pool.name, Pool.id)).all()


@router.post("/categories/{category_id}/pools", response_model=PoolResponse, status_code=201)
def create_pool(category_id: int, request: PoolCreateRequest, session: Session = Depends(get_session)):
    """Create an empty pool. Standings entries appear when a team's first pool match completes."""
    category = session.get(TournamentCategory, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    pool = Pool(category_id=category_id, name=request.name, standings={})
    session.add(pool)
    session.commit()
    session.refresh(pool)
    return pool


@router.get("/pools/{pool_id}/standings", response_model=PoolStandingsResponse)
def get_pool_standings(pool_id: int, session: Session = Depends(get_session)):
    """Standings ranked by the category's tiebreaker rules"""
    pool = session.get(Pool, pool_id)
    if not pool:
        raise HTTPException(status_code=404, detail="Pool not found")
    return _standings_response(session, pool)


@router.post("/pools/{pool_id}/standings/rebuild", response_model=PoolStandingsResponse)
def rebuild_standings(pool_id: int, session: Session = Depends(get_session)):
    """
    Recompute a pool's standings from its completed matches.

    Repair path for standings that drifted (e.g. results entered before the
    match was attached to the pool). Safe to call repeatedly.
    """
    pool = session.get(Pool, pool_id)
    if not pool:
        raise HTTPException(status_code=404, detail="Pool not found")

    try:
        pool = rebuild_pool_standings(session, pool_id, max_retries=STANDINGS_MAX_RETRIES)
    except StandingsConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        # malformed stored scores or an inconsistent winner
        raise HTTPException(status_code=400, detail=str(e))

    return _standings_response(session, pool)
