"""
Fetch the existing matches a candidate could collide with, then run the
in-memory conflict check.

The query is only a pre-filter: it narrows rows to not-completed matches on
the same court or involving either team that start before the candidate
ends. check_conflict decides what actually overlaps.
"""
import logging
from typing import List

from sqlalchemy import or_
from sqlmodel import Session, select

from padel_manager.models.match import Match, MatchStatus
from padel_manager.services.conflict_checker import CandidateMatch, ConflictResult, check_conflict

logger = logging.getLogger(__name__)


def fetch_potential_conflicts(session: Session, candidate: CandidateMatch) -> List[Match]:
    interval = candidate.interval
    team_ids = list(candidate.team_ids)

    overlaps_resource = [
        Match.team1_id.in_(team_ids),
        Match.team2_id.in_(team_ids),
    ]
    if candidate.court_id is not None:
        overlaps_resource.append(Match.court_id == candidate.court_id)

    query = select(Match).where(
        Match.status != MatchStatus.completed.value,
        Match.scheduled_time < interval.end,
        or_(*overlaps_resource),
    )
    if candidate.match_id is not None:
        query = query.where(Match.id != candidate.match_id)

    return list(session.exec(query.order_by(Match.scheduled_time, Match.id)).all())


def find_conflicts(session: Session, candidate: CandidateMatch) -> ConflictResult:
    existing = fetch_potential_conflicts(session, candidate)
    result = check_conflict(candidate, existing)
    if result.has_conflict:
        logger.info(
            "Booking conflict for teams %s court %s at %s: court=%s team=%s",
            sorted(candidate.team_ids),
            candidate.court_id,
            candidate.interval.start.isoformat(),
            result.court_conflict_match_ids,
            result.team_conflict_match_ids,
        )
    return result
