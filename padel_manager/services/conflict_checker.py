"""
Booking conflict detection for courts and teams.

A match occupies the half-open interval [scheduled_time, scheduled_time + duration).
A candidate conflicts with an existing, not-completed match when the intervals
overlap and the two share a court (court conflict) or a team (team conflict).
Touching boundaries (one ends exactly when the other starts) do not overlap.

Pure computation: callers fetch the existing matches and decide what to do
with the result.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional, Set

from padel_manager.models.match import MatchStatus
from padel_manager.services.match_status import status_value

# Statuses whose time slot no longer blocks a court or team
NON_BLOCKING_STATUSES: Set[str] = {MatchStatus.completed.value}


class ConflictCheckError(ValueError):
    """Raised when the candidate match itself is malformed."""


def _as_naive_utc(value: datetime) -> datetime:
    """Stored times are naive UTC; convert aware inputs so comparisons never mix the two."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime

    @classmethod
    def from_duration(cls, start: datetime, duration_minutes: int) -> "TimeInterval":
        start = _as_naive_utc(start)
        return cls(start=start, end=start + timedelta(minutes=duration_minutes))

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and self.end > other.start


@dataclass
class CandidateMatch:
    team1_id: int
    team2_id: int
    scheduled_time: datetime
    duration_minutes: int
    court_id: Optional[int] = None
    match_id: Optional[int] = None  # set when rescheduling an existing match

    def __post_init__(self):
        if self.team1_id == self.team2_id:
            raise ConflictCheckError("Team 1 and Team 2 cannot be the same")
        if self.duration_minutes is None or self.duration_minutes <= 0:
            raise ConflictCheckError("duration_minutes must be greater than 0")

    @classmethod
    def from_match(cls, match: Any) -> "CandidateMatch":
        return cls(
            team1_id=match.team1_id,
            team2_id=match.team2_id,
            scheduled_time=match.scheduled_time,
            duration_minutes=match.duration_minutes,
            court_id=match.court_id,
            match_id=getattr(match, "id", None),
        )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval.from_duration(self.scheduled_time, self.duration_minutes)

    @property
    def team_ids(self) -> Set[int]:
        return {self.team1_id, self.team2_id}


@dataclass
class BookedMatch:
    """Minimal view of an existing match; Match rows satisfy the same shape."""

    id: Optional[int]
    team1_id: int
    team2_id: int
    scheduled_time: datetime
    duration_minutes: int
    status: str = MatchStatus.scheduled.value
    court_id: Optional[int] = None


@dataclass
class ConflictResult:
    court_conflict: bool = False
    team_conflict: bool = False
    court_conflict_match_ids: List[int] = field(default_factory=list)
    team_conflict_match_ids: List[int] = field(default_factory=list)

    @property
    def has_conflict(self) -> bool:
        return self.court_conflict or self.team_conflict


def blocks_slot(match: Any) -> bool:
    """Only completed matches free their slot; cancelled ones still block it."""
    return status_value(match.status) not in NON_BLOCKING_STATUSES


def check_conflict(candidate: CandidateMatch, existing_matches: Iterable[Any]) -> ConflictResult:
    """
    Report court and team conflicts of a candidate against existing matches.

    Both flags are computed independently over the full collection; the order
    of existing_matches does not matter.
    """
    interval = candidate.interval
    result = ConflictResult()

    for other in existing_matches:
        if candidate.match_id is not None and getattr(other, "id", None) == candidate.match_id:
            continue
        if not blocks_slot(other):
            continue
        if not interval.overlaps(TimeInterval.from_duration(other.scheduled_time, other.duration_minutes)):
            continue

        if candidate.court_id is not None and other.court_id == candidate.court_id:
            result.court_conflict = True
            result.court_conflict_match_ids.append(other.id)

        if other.team1_id in candidate.team_ids or other.team2_id in candidate.team_ids:
            result.team_conflict = True
            result.team_conflict_match_ids.append(other.id)

    result.court_conflict_match_ids.sort(key=lambda x: (x is None, x))
    result.team_conflict_match_ids.sort(key=lambda x: (x is None, x))
    return result
