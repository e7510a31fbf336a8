"""
Club and Court API Routes
Courts belong to a club and are shared by every tournament the club hosts.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from padel_manager.database import get_session
from padel_manager.models.club import Club
from padel_manager.models.court import Court, CourtStatus

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class ClubCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    logo_url: Optional[str] = None
    number_of_courts: int = Field(default=0, ge=0)


class ClubResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
    logo_url: Optional[str] = None
    number_of_courts: int
    created_at: datetime


class CourtCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    status: CourtStatus = CourtStatus.available


class CourtUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    status: Optional[CourtStatus] = None


class CourtResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    club_id: int
    name: str
    status: CourtStatus
    created_at: datetime


# ============================================================================
# Club Endpoints
# ============================================================================


@router.get("/clubs", response_model=List[ClubResponse])
def list_clubs(session: Session = Depends(get_session)):
    return session.exec(select(Club).order_by(Club.name, Club.id)).all()


@router.post("/clubs", response_model=ClubResponse, status_code=201)
def create_club(request: ClubCreateRequest, session: Session = Depends(get_session)):
    club = Club(**request.model_dump())
    session.add(club)
    session.commit()
    session.refresh(club)
    return club


@router.get("/clubs/{club_id}", response_model=ClubResponse)
def get_club(club_id: int, session: Session = Depends(get_session)):
    club = session.get(Club, club_id)
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")
    return club


# ============================================================================
# Court Endpoints
# ============================================================================


@router.get("/clubs/{club_id}/courts", response_model=List[CourtResponse])
def list_courts(club_id: int, session: Session = Depends(get_session)):
    club = session.get(Club, club_id)
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")
    return session.exec(select(Court).where(Court.club_id == club_id).order_by(Court.name, Court.id)).all()


@router.post("/clubs/{club_id}/courts", response_model=CourtResponse, status_code=201)
def create_court(club_id: int, request: CourtCreateRequest, session: Session = Depends(get_session)):
    """
    Add a court to a club.

    Constraints:
    - (club_id, name) must be unique
    """
    club = session.get(Club, club_id)
    if not club:
        raise HTTPException(status_code=404, detail="Club not found")

    court = Court(club_id=club_id, name=request.name, status=request.status.value)
    try:
        session.add(court)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Court '{request.name}' already exists at this club")
    session.refresh(court)
    return court


@router.patch("/courts/{court_id}", response_model=CourtResponse)
def update_court(court_id: int, request: CourtUpdateRequest, session: Session = Depends(get_session)):
    """Rename a court or change its status (available / maintenance / reserved)."""
    court = session.get(Court, court_id)
    if not court:
        raise HTTPException(status_code=404, detail="Court not found")

    if request.name is not None:
        court.name = request.name
    if request.status is not None:
        court.status = request.status.value

    try:
        session.add(court)
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Court '{request.name}' already exists at this club")
    session.refresh(court)
    return court
