"""Half-open interval overlap for court and team booking conflicts."""
from datetime import datetime, timedelta, timezone

import pytest

from padel_manager.models.match import MatchStatus
from padel_manager.services.conflict_checker import (
    BookedMatch,
    CandidateMatch,
    ConflictCheckError,
    TimeInterval,
    blocks_slot,
    check_conflict,
)

TEN = datetime(2099, 5, 1, 10, 0)


def _booked(match_id, start, court_id=1, team1_id=1, team2_id=2, status="scheduled", duration=60):
    return BookedMatch(
        id=match_id,
        team1_id=team1_id,
        team2_id=team2_id,
        scheduled_time=start,
        duration_minutes=duration,
        status=status,
        court_id=court_id,
    )


def _candidate(start, court_id=1, team1_id=3, team2_id=4, duration=60, match_id=None):
    return CandidateMatch(
        team1_id=team1_id,
        team2_id=team2_id,
        scheduled_time=start,
        duration_minutes=duration,
        court_id=court_id,
        match_id=match_id,
    )


# ============================================================================
# TimeInterval
# ============================================================================


def test_touching_intervals_do_not_overlap():
    a = TimeInterval.from_duration(TEN, 60)
    b = TimeInterval.from_duration(TEN + timedelta(hours=1), 60)
    assert not a.overlaps(b)
    assert not b.overlaps(a)


def test_partial_overlap_and_containment():
    a = TimeInterval.from_duration(TEN, 60)
    assert a.overlaps(TimeInterval.from_duration(TEN + timedelta(minutes=30), 60))
    assert a.overlaps(TimeInterval.from_duration(TEN + timedelta(minutes=15), 15))
    assert TimeInterval.from_duration(TEN + timedelta(minutes=15), 15).overlaps(a)


def test_aware_times_are_normalized_to_naive_utc():
    aware = datetime(2099, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    interval = TimeInterval.from_duration(aware, 60)
    assert interval.start == TEN
    assert interval.start.tzinfo is None


# ============================================================================
# check_conflict
# ============================================================================


def test_back_to_back_on_same_court_is_not_a_conflict():
    result = check_conflict(_candidate(TEN + timedelta(hours=1)), [_booked(1, TEN)])
    assert result.court_conflict is False
    assert result.team_conflict is False


def test_overlap_on_same_court_is_a_court_conflict():
    result = check_conflict(_candidate(TEN + timedelta(minutes=30)), [_booked(1, TEN)])
    assert result.court_conflict is True
    assert result.team_conflict is False
    assert result.court_conflict_match_ids == [1]


def test_overlap_on_other_court_without_shared_team_is_fine():
    result = check_conflict(_candidate(TEN, court_id=2), [_booked(1, TEN, court_id=1)])
    assert not result.has_conflict


def test_shared_team_on_any_court_is_a_team_conflict():
    existing = [_booked(7, TEN, court_id=9, team1_id=5, team2_id=3)]
    result = check_conflict(_candidate(TEN + timedelta(minutes=45), court_id=1), existing)
    assert result.team_conflict is True
    assert result.court_conflict is False
    assert result.team_conflict_match_ids == [7]


def test_team_conflict_matches_either_side():
    existing = [_booked(8, TEN, court_id=None, team1_id=4, team2_id=6)]
    result = check_conflict(_candidate(TEN, court_id=None), existing)
    assert result.team_conflict is True


def test_both_flags_reported_independently():
    existing = [
        _booked(1, TEN, court_id=1, team1_id=10, team2_id=11),
        _booked(2, TEN, court_id=2, team1_id=3, team2_id=12),
    ]
    result = check_conflict(_candidate(TEN, court_id=1), existing)
    assert result.court_conflict is True
    assert result.team_conflict is True
    assert result.court_conflict_match_ids == [1]
    assert result.team_conflict_match_ids == [2]


def test_completed_matches_do_not_block():
    existing = [_booked(1, TEN, court_id=1, team1_id=3, team2_id=4, status="completed")]
    result = check_conflict(_candidate(TEN), existing)
    assert not result.has_conflict


def test_cancelled_matches_still_block():
    existing = [_booked(1, TEN, court_id=1, status="cancelled")]
    result = check_conflict(_candidate(TEN), existing)
    assert result.court_conflict is True


def test_candidate_without_court_never_court_conflicts():
    result = check_conflict(_candidate(TEN, court_id=None), [_booked(1, TEN, court_id=None)])
    assert result.court_conflict is False


def test_rescheduled_match_ignores_its_own_slot():
    existing = [_booked(5, TEN, court_id=1, team1_id=3, team2_id=4)]
    result = check_conflict(_candidate(TEN + timedelta(minutes=30), match_id=5), existing)
    assert not result.has_conflict


def test_conflict_is_symmetric_for_same_interval():
    a = _booked(1, TEN, court_id=1, team1_id=1, team2_id=2)
    b = _booked(2, TEN, court_id=1, team1_id=3, team2_id=4)

    ab = check_conflict(CandidateMatch.from_match(a), [b])
    ba = check_conflict(CandidateMatch.from_match(b), [a])
    assert (ab.court_conflict, ab.team_conflict) == (ba.court_conflict, ba.team_conflict) == (True, False)


def test_order_of_existing_matches_does_not_matter():
    existing = [
        _booked(3, TEN, court_id=1),
        _booked(1, TEN + timedelta(minutes=20), court_id=1),
        _booked(2, TEN + timedelta(hours=3), court_id=1),
    ]
    forward = check_conflict(_candidate(TEN), existing)
    backward = check_conflict(_candidate(TEN), list(reversed(existing)))
    assert forward.court_conflict_match_ids == backward.court_conflict_match_ids == [1, 3]


def test_candidate_validation():
    with pytest.raises(ConflictCheckError, match="cannot be the same"):
        _candidate(TEN, team1_id=3, team2_id=3)
    with pytest.raises(ConflictCheckError, match="greater than 0"):
        _candidate(TEN, duration=0)


def test_enum_statuses_are_read_like_stored_strings():
    completed = _booked(1, TEN, court_id=1, status=MatchStatus.completed)
    scheduled = _booked(2, TEN, court_id=1, status=MatchStatus.scheduled)

    assert not blocks_slot(completed)
    assert blocks_slot(scheduled)
    assert check_conflict(_candidate(TEN), [completed, scheduled]).court_conflict_match_ids == [2]
