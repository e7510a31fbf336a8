"""
Match Scheduling API Routes

Booking a match checks the candidate slot against every not-completed match on
the same court or involving either team. The check and the insert run while
holding the court/team booking locks, so overlapping requests are serialized.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import update
from sqlmodel import Session, select

from padel_manager.database import get_session
from padel_manager.models.court import Court
from padel_manager.models.match import Match, MatchStatus
from padel_manager.models.pool import Pool
from padel_manager.models.team import Team, TeamStatus
from padel_manager.models.tournament import Tournament, TournamentStatus
from padel_manager.services.booking import find_conflicts
from padel_manager.services.conflict_checker import CandidateMatch, ConflictCheckError, ConflictResult
from padel_manager.services.match_status import is_terminal, status_value
from padel_manager.services.scoring import SubmittedScores
from padel_manager.utils.booking_locks import booking_keys, hold_booking_locks

logger = logging.getLogger(__name__)

router = APIRouter()

COURT_CONFLICT_DETAIL = "Court is already booked during this time"
TEAM_CONFLICT_DETAIL = "One or both teams already have a match scheduled during this time"

# Matches start life scheduled or in progress; completion goes through score entry
CREATABLE_STATUSES = (MatchStatus.scheduled, MatchStatus.in_progress)


# ============================================================================
# Request/Response Models
# ============================================================================


class MatchSlotRequest(BaseModel):
    team1_id: int
    team2_id: int
    scheduled_time: datetime
    duration_minutes: int = Field(gt=0)
    court_id: Optional[int] = None


class MatchCreateRequest(MatchSlotRequest):
    pool_id: Optional[int] = None
    bracket_round: Optional[str] = None
    status: MatchStatus = MatchStatus.scheduled
    scores: Optional[SubmittedScores] = None


class MatchRescheduleRequest(BaseModel):
    scheduled_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    court_id: Optional[int] = None
    expected_version: Optional[int] = None


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    category_id: int
    pool_id: Optional[int] = None
    bracket_round: Optional[str] = None
    team1_id: int
    team2_id: int
    court_id: Optional[int] = None
    scheduled_time: datetime
    duration_minutes: int
    status: MatchStatus
    scores: Optional[Dict[str, Any]] = None
    winner_id: Optional[int] = None
    version: int
    created_at: datetime
    updated_at: datetime


class ConflictResultResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    court_conflict: bool = Field(alias="courtConflict")
    team_conflict: bool = Field(alias="teamConflict")
    court_conflict_match_ids: List[int] = []
    team_conflict_match_ids: List[int] = []

    @classmethod
    def from_result(cls, result: ConflictResult) -> "ConflictResultResponse":
        return cls(
            court_conflict=result.court_conflict,
            team_conflict=result.team_conflict,
            court_conflict_match_ids=result.court_conflict_match_ids,
            team_conflict_match_ids=result.team_conflict_match_ids,
        )


# ============================================================================
# Helpers
# ============================================================================


def _build_candidate(request: MatchSlotRequest, match_id: Optional[int] = None) -> CandidateMatch:
    try:
        return CandidateMatch(
            team1_id=request.team1_id,
            team2_id=request.team2_id,
            scheduled_time=request.scheduled_time,
            duration_minutes=request.duration_minutes,
            court_id=request.court_id,
            match_id=match_id,
        )
    except ConflictCheckError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _validate_teams(session: Session, tournament_id: int, team1_id: int, team2_id: int) -> List[Team]:
    teams = session.exec(
        select(Team).where(Team.id.in_([team1_id, team2_id]), Team.tournament_id == tournament_id)
    ).all()
    if len(teams) != 2:
        raise HTTPException(status_code=400, detail="One or both teams not found in this tournament")
    if any(t.status != TeamStatus.confirmed.value for t in teams):
        raise HTTPException(status_code=400, detail="Both teams must be confirmed to schedule a match")
    if teams[0].category_id != teams[1].category_id:
        raise HTTPException(status_code=400, detail="Teams must be in the same category")
    return teams


def _validate_court(session: Session, tournament: Tournament, court_id: Optional[int]) -> None:
    if court_id is None:
        return
    court = session.get(Court, court_id)
    if not court or court.club_id != tournament.club_id:
        raise HTTPException(status_code=400, detail="Court not found at the tournament's club")


def _raise_for_conflict(result: ConflictResult) -> None:
    if result.court_conflict:
        raise HTTPException(status_code=409, detail=COURT_CONFLICT_DETAIL)
    if result.team_conflict:
        raise HTTPException(status_code=409, detail=TEAM_CONFLICT_DETAIL)


def _get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


# ============================================================================
# Endpoints
# ============================================================================


@router.get("/tournaments/{tournament_id}/matches", response_model=List[MatchResponse])
def list_matches(
    tournament_id: int,
    category_id: Optional[int] = None,
    pool_id: Optional[int] = None,
    status: Optional[MatchStatus] = None,
    court_id: Optional[int] = None,
    day: Optional[date] = Query(None, alias="date"),
    session: Session = Depends(get_session),
):
    """List a tournament's matches ordered by scheduled time, with optional filters"""
    _get_tournament_or_404(session, tournament_id)

    query = select(Match).where(Match.tournament_id == tournament_id)
    if category_id is not None:
        query = query.where(Match.category_id == category_id)
    if pool_id is not None:
        query = query.where(Match.pool_id == pool_id)
    if status is not None:
        query = query.where(Match.status == status.value)
    if court_id is not None:
        query = query.where(Match.court_id == court_id)
    if day is not None:
        day_start = datetime.combine(day, time.min)
        query = query.where(Match.scheduled_time >= day_start, Match.scheduled_time < day_start + timedelta(days=1))

    return session.exec(query.order_by(Match.scheduled_time, Match.id)).all()


@router.post("/tournaments/{tournament_id}/matches/check-conflicts", response_model=ConflictResultResponse)
def check_match_conflicts(tournament_id: int, request: MatchSlotRequest, session: Session = Depends(get_session)):
    """Dry run: report court/team conflicts for a slot without booking it."""
    _get_tournament_or_404(session, tournament_id)
    candidate = _build_candidate(request)
    return ConflictResultResponse.from_result(find_conflicts(session, candidate))


@router.post("/tournaments/{tournament_id}/matches", response_model=MatchResponse, status_code=201)
def create_match(tournament_id: int, request: MatchCreateRequest, session: Session = Depends(get_session)):
    """
    Schedule a match.

    Rules:
    - team1 and team2 must differ, belong to this tournament, be confirmed and share a category
    - court (optional) must belong to the tournament's club
    - pool (optional) must belong to the teams' category
    - no overlap with a not-completed match on the same court (409)
    - no overlap with a not-completed match of either team (409)
    """
    tournament = _get_tournament_or_404(session, tournament_id)
    if tournament.status == TournamentStatus.completed.value:
        raise HTTPException(status_code=400, detail="Cannot schedule matches in a completed tournament")
    if request.status not in CREATABLE_STATUSES:
        raise HTTPException(status_code=400, detail="New matches must be scheduled or in_progress")

    candidate = _build_candidate(request)
    teams = _validate_teams(session, tournament_id, request.team1_id, request.team2_id)
    category_id = teams[0].category_id
    _validate_court(session, tournament, request.court_id)

    if request.pool_id is not None:
        pool = session.get(Pool, request.pool_id)
        if not pool or pool.category_id != category_id:
            raise HTTPException(status_code=400, detail="Pool not found in the teams' category")

    with hold_booking_locks(booking_keys(candidate.team_ids, candidate.court_id)):
        _raise_for_conflict(find_conflicts(session, candidate))

        match = Match(
            tournament_id=tournament_id,
            category_id=category_id,
            pool_id=request.pool_id,
            bracket_round=request.bracket_round,
            team1_id=request.team1_id,
            team2_id=request.team2_id,
            court_id=request.court_id,
            scheduled_time=candidate.interval.start,
            duration_minutes=request.duration_minutes,
            status=request.status.value,
            scores=request.scores.model_dump() if request.scores else None,
        )
        session.add(match)
        session.commit()

    session.refresh(match)
    logger.info(
        "Booked match %s: teams %s/%s court %s at %s",
        match.id,
        match.team1_id,
        match.team2_id,
        match.court_id,
        match.scheduled_time.isoformat(),
    )
    return match


@router.get("/matches/{match_id}", response_model=MatchResponse)
def get_match(match_id: int, session: Session = Depends(get_session)):
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    return match


@router.patch("/matches/{match_id}/schedule", response_model=MatchResponse)
def reschedule_match(match_id: int, request: MatchRescheduleRequest, session: Session = Depends(get_session)):
    """
    Move a match to another time, duration or court.

    The match's own current slot is ignored by the conflict check. Completed and
    cancelled matches cannot be moved.
    """
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    if is_terminal(match.status):
        raise HTTPException(status_code=400, detail=f"Cannot reschedule a {status_value(match.status)} match")
    if request.expected_version is not None and request.expected_version != match.version:
        raise HTTPException(status_code=409, detail="Match was modified by another request; reload and retry")

    tournament = session.get(Tournament, match.tournament_id)
    if tournament and tournament.status == TournamentStatus.completed.value:
        raise HTTPException(status_code=400, detail="Cannot reschedule matches in a completed tournament")

    slot = MatchSlotRequest(
        team1_id=match.team1_id,
        team2_id=match.team2_id,
        scheduled_time=request.scheduled_time or match.scheduled_time,
        duration_minutes=request.duration_minutes or match.duration_minutes,
        court_id=request.court_id if "court_id" in request.model_fields_set else match.court_id,
    )
    _validate_court(session, tournament, slot.court_id)
    candidate = _build_candidate(slot, match_id=match.id)

    read_version = match.version
    keys = booking_keys(candidate.team_ids, candidate.court_id)
    with hold_booking_locks(keys):
        _raise_for_conflict(find_conflicts(session, candidate))

        result = session.execute(
            update(Match)
            .where(Match.id == match_id, Match.version == read_version)
            .values(
                scheduled_time=candidate.interval.start,
                duration_minutes=slot.duration_minutes,
                court_id=slot.court_id,
                version=read_version + 1,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            session.rollback()
            raise HTTPException(status_code=409, detail="Match was modified by another request; reload and retry")
        session.commit()

    session.refresh(match)
    logger.info("Rescheduled match %s to %s on court %s", match.id, match.scheduled_time.isoformat(), match.court_id)
    return match
