"""
Team Registration API Routes
Teams register into one category of one tournament. Only confirmed teams can be scheduled.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, model_validator
from sqlalchemy import or_
from sqlmodel import Session, select

from padel_manager.database import get_session
from padel_manager.models.category import TournamentCategory
from padel_manager.models.player import Player
from padel_manager.models.team import Team, TeamStatus
from padel_manager.models.tournament import Tournament, TournamentStatus

logger = logging.getLogger(__name__)

router = APIRouter()

REGISTRATION_OPEN_STATUSES = (TournamentStatus.draft.value, TournamentStatus.active.value)


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamCreateRequest(BaseModel):
    category_id: int
    player1_id: int
    player2_id: Optional[int] = None
    status: TeamStatus = TeamStatus.registered

    @model_validator(mode="after")
    def validate_distinct_players(self):
        if self.player2_id is not None and self.player1_id == self.player2_id:
            raise ValueError("player1_id and player2_id must be different players")
        return self


class TeamUpdateRequest(BaseModel):
    status: TeamStatus


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    category_id: int
    player1_id: int
    player2_id: Optional[int] = None
    status: TeamStatus
    created_at: datetime


# ============================================================================
# Team Endpoints
# ============================================================================


@router.get("/tournaments/{tournament_id}/teams", response_model=List[TeamResponse])
def list_teams(
    tournament_id: int,
    category_id: Optional[int] = None,
    status: Optional[TeamStatus] = None,
    session: Session = Depends(get_session),
):
    """List a tournament's teams, optionally filtered by category and status"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    query = select(Team).where(Team.tournament_id == tournament_id)
    if category_id is not None:
        query = query.where(Team.category_id == category_id)
    if status is not None:
        query = query.where(Team.status == status.value)

    return session.exec(query.order_by(Team.id)).all()


@router.post("/tournaments/{tournament_id}/teams", response_model=TeamResponse, status_code=201)
def register_team(tournament_id: int, request: TeamCreateRequest, session: Session = Depends(get_session)):
    """
    Register a team.

    Rules:
    - Registration deadline must not have passed
    - Tournament must be draft or active
    - Category must belong to the tournament
    - Neither player may already be on a team in the same category
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    if date.today() > tournament.registration_deadline:
        raise HTTPException(status_code=400, detail="Registration deadline has passed")

    if tournament.status not in REGISTRATION_OPEN_STATUSES:
        raise HTTPException(status_code=400, detail="Tournament is not open for registration")

    category = session.get(TournamentCategory, request.category_id)
    if not category or category.tournament_id != tournament_id:
        raise HTTPException(status_code=400, detail="Category not found or does not belong to this tournament")

    player_ids = [pid for pid in (request.player1_id, request.player2_id) if pid is not None]
    found = session.exec(select(Player.id).where(Player.id.in_(player_ids))).all()
    missing = sorted(set(player_ids) - set(found))
    if missing:
        raise HTTPException(status_code=400, detail=f"Player(s) not found: {missing}")

    existing = session.exec(
        select(Team).where(
            Team.tournament_id == tournament_id,
            Team.category_id == request.category_id,
            or_(Team.player1_id.in_(player_ids), Team.player2_id.in_(player_ids)),
        )
    ).first()
    if existing:
        raise HTTPException(status_code=400, detail="One or both players are already registered in this category")

    team = Team(
        tournament_id=tournament_id,
        category_id=request.category_id,
        player1_id=request.player1_id,
        player2_id=request.player2_id,
        status=request.status.value,
    )
    session.add(team)
    session.commit()
    session.refresh(team)
    logger.info("Registered team %s in tournament %s category %s", team.id, tournament_id, request.category_id)
    return team


@router.get("/teams/{team_id}", response_model=TeamResponse)
def get_team(team_id: int, session: Session = Depends(get_session)):
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


@router.patch("/teams/{team_id}", response_model=TeamResponse)
def update_team_status(team_id: int, request: TeamUpdateRequest, session: Session = Depends(get_session)):
    """Move a team through registration (registered / payment_pending / confirmed / withdrawn)."""
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    team.status = request.status.value
    session.add(team)
    session.commit()
    session.refresh(team)
    return team
