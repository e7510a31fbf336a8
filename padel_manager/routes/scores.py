"""
Score entry and match status changes.

Every change is a conditional UPDATE on Match.version, so two concurrent
requests cannot both move a match into completed. Only the request that wins
that update folds the result into the pool standings, which makes the
standings update happen at most once per match.
"""
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import update
from sqlmodel import Session

from padel_manager.config import STANDINGS_MAX_RETRIES
from padel_manager.database import get_session
from padel_manager.models.match import Match, MatchStatus
from padel_manager.models.tournament import Tournament, TournamentStatus
from padel_manager.routes.matches import MatchResponse
from padel_manager.services.match_status import (
    CANCELLED,
    COMPLETED,
    StatusTransitionError,
    is_completion,
    status_value,
    validate_status_transition,
)
from padel_manager.services.pool_standings import StandingsConflictError, fold_match_into_pool
from padel_manager.services.scoring import ScoreValidationError, SubmittedScores, parse_scores, winner_team_id
from padel_manager.services.standings import StandingsError

logger = logging.getLogger(__name__)

router = APIRouter()

STALE_VERSION_DETAIL = "Match was modified by another request; reload and retry"


class ScoreUpdateRequest(BaseModel):
    scores: SubmittedScores
    status: Optional[MatchStatus] = None
    expected_version: Optional[int] = None


class StatusUpdateRequest(BaseModel):
    status: MatchStatus
    expected_version: Optional[int] = None


class MatchUpdateResponse(BaseModel):
    match: MatchResponse
    standings_updated: bool = False


def _load_match(session: Session, match_id: int) -> Match:
    match = session.get(Match, match_id)
    if not match:
        raise HTTPException(status_code=404, detail="Match not found")
    session.refresh(match)
    return match


def _check_editable(session: Session, match: Match, expected_version: Optional[int]) -> None:
    current = status_value(match.status)
    if current == CANCELLED:
        raise HTTPException(status_code=400, detail="Cannot update scores for cancelled matches")
    if current == COMPLETED:
        raise HTTPException(status_code=400, detail="Cannot update a completed match")

    tournament = session.get(Tournament, match.tournament_id)
    if tournament and tournament.status == TournamentStatus.completed.value:
        raise HTTPException(status_code=400, detail="Cannot update scores for matches in completed tournaments")

    if expected_version is not None and expected_version != match.version:
        raise HTTPException(status_code=409, detail=STALE_VERSION_DETAIL)


def _apply_update(
    session: Session,
    match_id: int,
    expected_version: Optional[int],
    compute_values,
) -> MatchUpdateResponse:
    """
    Shared read → validate → conditional write → standings cycle.

    compute_values(match) returns the column values to write (status included).
    A pool version clash rolls the whole change back and retries from a fresh
    read; a match version clash is reported to the client as 409.
    """
    for attempt in range(1, STANDINGS_MAX_RETRIES + 1):
        match = _load_match(session, match_id)
        _check_editable(session, match, expected_version)

        current = status_value(match.status)
        values: Dict[str, Any] = compute_values(match)
        new_status = values["status"]
        try:
            validate_status_transition(current, new_status)
        except StatusTransitionError as e:
            raise HTTPException(status_code=400, detail=str(e))

        read_version = match.version
        values.update(version=read_version + 1, updated_at=datetime.utcnow())
        result = session.execute(
            update(Match)
            .where(Match.id == match_id, Match.version == read_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            session.rollback()
            logger.warning("Match %s version %s was superseded by a concurrent update", match_id, read_version)
            raise HTTPException(status_code=409, detail=STALE_VERSION_DETAIL)

        standings_updated = False
        if is_completion(current, new_status) and match.pool_id is not None:
            session.refresh(match)
            try:
                standings_updated = fold_match_into_pool(session, match.pool_id, match) is not None
            except StandingsConflictError:
                session.rollback()
                logger.warning("Retrying completion of match %s (attempt %d)", match_id, attempt)
                continue
            except (StandingsError, ScoreValidationError) as e:
                session.rollback()
                raise HTTPException(status_code=400, detail=str(e))

        session.commit()
        session.refresh(match)
        return MatchUpdateResponse(match=MatchResponse.model_validate(match), standings_updated=standings_updated)

    raise HTTPException(status_code=409, detail="Pool standings kept changing; retry the score update")


@router.patch("/matches/{match_id}/score", response_model=MatchUpdateResponse)
def update_match_score(match_id: int, payload: ScoreUpdateRequest, session: Session = Depends(get_session)):
    """
    Record a match score.

    The winner is the team with strictly more sets won (none when level).
    Without an explicit status, a decided match becomes completed and an
    undecided one keeps its status. Moving into completed updates the pool
    standings exactly once.
    """

    def compute_values(match: Match) -> Dict[str, Any]:
        winner = winner_team_id(payload.scores, match.team1_id, match.team2_id)
        if payload.status is not None:
            new_status = payload.status.value
        elif winner is not None:
            new_status = COMPLETED
        else:
            new_status = status_value(match.status)
        return {"scores": payload.scores.model_dump(), "winner_id": winner, "status": new_status}

    return _apply_update(session, match_id, payload.expected_version, compute_values)


@router.patch("/matches/{match_id}/status", response_model=MatchUpdateResponse)
def update_match_status(match_id: int, payload: StatusUpdateRequest, session: Session = Depends(get_session)):
    """
    Change a match's status without new scores (start, cancel, or complete
    using the scores already recorded).
    """

    def compute_values(match: Match) -> Dict[str, Any]:
        values: Dict[str, Any] = {"status": payload.status.value}
        if payload.status.value == COMPLETED:
            winner = None
            if match.scores:
                try:
                    winner = winner_team_id(parse_scores(match.scores), match.team1_id, match.team2_id)
                except ScoreValidationError as e:
                    raise HTTPException(status_code=400, detail=f"Stored scores are invalid: {e}")
            values["winner_id"] = winner
        return values

    return _apply_update(session, match_id, payload.expected_version, compute_values)
