from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, ConfigDict, Field, model_validator
from sqlmodel import Session, func, select, text

from padel_manager.database import get_session
from padel_manager.models.category import TournamentCategory
from padel_manager.models.club import Club
from padel_manager.models.tournament import Tournament, TournamentStatus
from padel_manager.routes.categories import CategoryResponse

router = APIRouter()


class TournamentCreate(BaseModel):
    club_id: int
    name: str = Field(min_length=1)
    start_date: date
    end_date: date
    registration_deadline: date
    status: TournamentStatus = TournamentStatus.draft
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None

    @model_validator(mode="after")
    def validate_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must be >= start_date")
        if self.registration_deadline > self.start_date:
            raise ValueError("registration_deadline must be on or before start_date")
        return self


class TournamentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    registration_deadline: Optional[date] = None
    status: Optional[TournamentStatus] = None
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    club_id: int
    name: str
    start_date: date
    end_date: date
    registration_deadline: date
    status: TournamentStatus
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TournamentDetailResponse(TournamentResponse):
    categories: List[CategoryResponse] = []


class TournamentListMeta(BaseModel):
    total: int
    limit: int
    offset: int


class TournamentListResponse(BaseModel):
    data: List[TournamentResponse]
    meta: TournamentListMeta


def get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


def is_completed(tournament: Tournament) -> bool:
    return tournament.status == TournamentStatus.completed.value


@router.get("/tournaments", response_model=TournamentListResponse)
def list_tournaments(
    club_id: Optional[int] = None,
    status: Optional[TournamentStatus] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: Session = Depends(get_session),
):
    """List tournaments, newest start date first"""
    query = select(Tournament)
    count_query = select(func.count(Tournament.id))
    if club_id is not None:
        query = query.where(Tournament.club_id == club_id)
        count_query = count_query.where(Tournament.club_id == club_id)
    if status is not None:
        query = query.where(Tournament.status == status.value)
        count_query = count_query.where(Tournament.status == status.value)

    total = session.exec(count_query).one()
    tournaments = session.exec(
        query.order_by(Tournament.start_date.desc(), Tournament.id.desc()).offset(offset).limit(limit)
    ).all()

    return TournamentListResponse(
        data=[TournamentResponse.model_validate(t) for t in tournaments],
        meta=TournamentListMeta(total=total, limit=limit, offset=offset),
    )


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(tournament_data: TournamentCreate, session: Session = Depends(get_session)):
    club = session.get(Club, tournament_data.club_id)
    if not club:
        raise HTTPException(status_code=400, detail="Club not found")

    values = tournament_data.model_dump()
    values["status"] = tournament_data.status.value
    tournament = Tournament(**values)
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.get("/tournaments/{tournament_id}", response_model=TournamentDetailResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Get a tournament with its categories"""
    tournament = get_tournament_or_404(session, tournament_id)
    categories = session.exec(
        select(TournamentCategory)
        .where(TournamentCategory.tournament_id == tournament_id)
        .order_by(TournamentCategory.name, TournamentCategory.id)
    ).all()

    response = TournamentDetailResponse.model_validate(tournament)
    response.categories = [CategoryResponse.model_validate(c) for c in categories]
    return response


@router.patch("/tournaments/{tournament_id}", response_model=TournamentResponse)
def update_tournament(tournament_id: int, tournament_data: TournamentUpdate, session: Session = Depends(get_session)):
    """Update a tournament. Completed tournaments are read-only."""
    tournament = get_tournament_or_404(session, tournament_id)
    if is_completed(tournament):
        raise HTTPException(status_code=400, detail="Cannot update a completed tournament")

    update_data = tournament_data.model_dump(exclude_unset=True)
    if update_data.get("status") is not None:
        update_data["status"] = update_data["status"].value

    start = update_data.get("start_date", tournament.start_date)
    end = update_data.get("end_date", tournament.end_date)
    deadline = update_data.get("registration_deadline", tournament.registration_deadline)
    if end < start:
        raise HTTPException(status_code=400, detail="end_date must be >= start_date")
    if deadline > start:
        raise HTTPException(status_code=400, detail="registration_deadline must be on or before start_date")

    for field, value in update_data.items():
        setattr(tournament, field, value)

    tournament.updated_at = datetime.utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.delete("/tournaments/{tournament_id}", status_code=204)
def delete_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Delete a tournament and its categories, teams, pools and matches. Completed tournaments are kept."""
    tournament = get_tournament_or_404(session, tournament_id)
    if is_completed(tournament):
        raise HTTPException(status_code=400, detail="Cannot delete a completed tournament")

    params = {"tournament_id": tournament_id}
    try:
        # Children before parents
        session.execute(text("DELETE FROM match WHERE tournament_id = :tournament_id"), params)
        session.execute(
            text(
                "DELETE FROM pool WHERE category_id IN "
                "(SELECT id FROM tournamentcategory WHERE tournament_id = :tournament_id)"
            ),
            params,
        )
        session.execute(text("DELETE FROM team WHERE tournament_id = :tournament_id"), params)
        session.execute(text("DELETE FROM tournamentcategory WHERE tournament_id = :tournament_id"), params)
        session.execute(text("DELETE FROM tournament WHERE id = :tournament_id"), params)
        session.commit()
    except Exception as e:
        session.rollback()
        raise HTTPException(status_code=500, detail=f"Failed to delete tournament: {str(e)}")

    session.expunge_all()
    return Response(status_code=204)
