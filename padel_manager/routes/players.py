"""
Player API Routes
Players are referenced by teams (player1/player2); no account or auth data lives here.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from padel_manager.database import get_session
from padel_manager.models.player import Player

router = APIRouter()


class PlayerCreateRequest(BaseModel):
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    nationality: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class PlayerResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    nationality: Optional[str] = None
    created_at: datetime


@router.get("/players", response_model=List[PlayerResponse])
def list_players(session: Session = Depends(get_session)):
    """List players ordered by name"""
    return session.exec(select(Player).order_by(Player.name, Player.id)).all()


@router.post("/players", response_model=PlayerResponse, status_code=201)
def create_player(request: PlayerCreateRequest, session: Session = Depends(get_session)):
    player = Player(**request.model_dump())
    session.add(player)
    session.commit()
    session.refresh(player)
    return player


@router.get("/players/{player_id}", response_model=PlayerResponse)
def get_player(player_id: int, session: Session = Depends(get_session)):
    player = session.get(Player, player_id)
    if not player:
        raise HTTPException(status_code=404, detail="Player not found")
    return player
