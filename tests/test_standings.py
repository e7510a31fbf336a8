"""Folding completed matches into pool standings and ranking them."""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import pytest

from padel_manager.services.standings import (
    StandingsError,
    apply_match_result,
    normalize_rules,
    rank_standings,
    rebuild_standings,
)

START = datetime(2099, 5, 1, 9, 0)


@dataclass
class FakeMatch:
    id: int
    team1_id: int
    team2_id: int
    scores: Optional[Dict[str, Any]]
    winner_id: Optional[int] = None
    status: str = "completed"
    scheduled_time: datetime = START


def _won(match_id, winner, loser, offset=0):
    """winner beats loser 6-4 6-3"""
    return FakeMatch(
        id=match_id,
        team1_id=winner,
        team2_id=loser,
        scores={"team1": [6, 6], "team2": [4, 3]},
        winner_id=winner,
        scheduled_time=START + timedelta(hours=offset),
    )


def test_apply_to_empty_standings_creates_both_entries():
    match = FakeMatch(id=1, team1_id=1, team2_id=2, scores={"team1": [6, 3, 10], "team2": [4, 6, 8]}, winner_id=1)

    standings = apply_match_result({}, match)

    assert standings["1"] == {
        "matches_played": 1,
        "matches_won": 1,
        "sets_won": 2,
        "sets_lost": 1,
        "points_won": 19,
        "points_lost": 18,
    }
    assert standings["2"] == {
        "matches_played": 1,
        "matches_won": 0,
        "sets_won": 1,
        "sets_lost": 2,
        "points_won": 18,
        "points_lost": 19,
    }


def test_apply_does_not_mutate_input():
    before = {"1": {"matches_played": 1, "matches_won": 1, "sets_won": 2, "sets_lost": 0, "points_won": 12, "points_lost": 5}}
    snapshot = {k: dict(v) for k, v in before.items()}

    after = apply_match_result(before, _won(2, 1, 3))

    assert before == snapshot
    assert after["1"]["matches_played"] == 2
    assert after["3"]["matches_played"] == 1


def test_apply_leaves_other_teams_untouched():
    other = {"matches_played": 3, "matches_won": 2, "sets_won": 5, "sets_lost": 2, "points_won": 40, "points_lost": 30}
    after = apply_match_result({"9": other}, _won(1, 1, 2))
    assert after["9"] == other


def test_applying_twice_counts_twice():
    match = _won(1, 1, 2)
    once = apply_match_result({}, match)
    twice = apply_match_result(once, match)
    assert twice["1"]["matches_played"] == 2
    assert twice["1"]["matches_won"] == 2
    assert twice["2"]["sets_lost"] == 4


def test_winner_derived_from_scores_when_not_set():
    match = FakeMatch(id=1, team1_id=1, team2_id=2, scores={"team1": [2, 3], "team2": [6, 6]})
    standings = apply_match_result({}, match)
    assert standings["2"]["matches_won"] == 1
    assert standings["1"]["matches_won"] == 0


def test_level_match_played_but_nobody_wins():
    match = FakeMatch(id=1, team1_id=1, team2_id=2, scores={"team1": [6, 6], "team2": [6, 6]})
    standings = apply_match_result({}, match)
    assert standings["1"]["matches_played"] == standings["2"]["matches_played"] == 1
    assert standings["1"]["matches_won"] == standings["2"]["matches_won"] == 0
    assert standings["1"]["points_won"] == 12


def test_match_without_scores_counts_as_played_only():
    standings = apply_match_result({}, FakeMatch(id=1, team1_id=1, team2_id=2, scores=None))
    assert standings["1"]["matches_played"] == 1
    assert standings["1"]["sets_won"] == 0
    assert standings["2"]["points_won"] == 0


def test_winner_outside_match_is_rejected():
    match = FakeMatch(id=1, team1_id=1, team2_id=2, scores={"team1": [6], "team2": [1]}, winner_id=7)
    with pytest.raises(StandingsError):
        apply_match_result({}, match)


def test_identical_teams_rejected():
    match = FakeMatch(id=1, team1_id=1, team2_id=1, scores=None)
    with pytest.raises(StandingsError):
        apply_match_result({}, match)


def test_rebuild_only_counts_completed_matches():
    matches = [
        _won(1, 1, 2, offset=0),
        _won(2, 3, 4, offset=1),
        FakeMatch(id=3, team1_id=1, team2_id=3, scores={"team1": [6], "team2": [0]}, status="scheduled"),
    ]
    standings = rebuild_standings(matches)

    assert set(standings) == {"1", "2", "3", "4"}
    assert standings["1"]["matches_played"] == 1
    assert standings["3"]["matches_played"] == 1


def test_rebuild_only_lists_teams_with_a_completed_match():
    matches = [
        _won(1, 1, 2, offset=0),
        FakeMatch(id=2, team1_id=3, team2_id=4, scores=None, status="scheduled"),
    ]
    incremental = apply_match_result({}, matches[0])

    rebuilt = rebuild_standings(matches)

    assert sorted(rebuilt) == ["1", "2"]
    assert rebuilt == incremental
    assert rebuild_standings([]) == {}


def test_rebuild_matches_incremental_application():
    matches = [_won(1, 1, 2, 0), _won(2, 2, 3, 1), _won(3, 3, 1, 2)]
    incremental: Dict[str, Any] = {}
    for m in matches:
        incremental = apply_match_result(incremental, m)
    assert rebuild_standings(reversed(matches)) == incremental


# ============================================================================
# Ranking
# ============================================================================


def _record(played, won, sets_won, sets_lost, points_won, points_lost):
    return {
        "matches_played": played,
        "matches_won": won,
        "sets_won": sets_won,
        "sets_lost": sets_lost,
        "points_won": points_won,
        "points_lost": points_lost,
    }


def test_rank_by_matches_won_then_set_difference():
    standings = {
        "1": _record(3, 2, 4, 3, 40, 38),
        "2": _record(3, 3, 6, 1, 45, 30),
        "3": _record(3, 2, 5, 2, 42, 35),
    }
    ranked = rank_standings(standings, ["matches_won", "sets_won", "games_won"])
    assert [r.team_id for r in ranked] == [2, 3, 1]
    assert [r.position for r in ranked] == [1, 2, 3]


def test_games_won_breaks_level_sets():
    standings = {
        "1": _record(2, 1, 2, 2, 20, 22),
        "2": _record(2, 1, 2, 2, 24, 21),
    }
    ranked = rank_standings(standings, ["matches_won", "sets_won", "games_won"])
    assert [r.team_id for r in ranked] == [2, 1]


def test_direct_confrontation_between_level_teams():
    standings = {
        "1": _record(2, 1, 2, 2, 20, 20),
        "2": _record(2, 1, 2, 2, 20, 20),
    }
    matches = [_won(10, 2, 1)]
    ranked = rank_standings(standings, ["matches_won", "direct_confrontation"], matches)
    assert [r.team_id for r in ranked] == [2, 1]


def test_direct_confrontation_ignores_matches_outside_tied_group():
    standings = {
        "1": _record(2, 1, 2, 2, 20, 20),
        "2": _record(2, 1, 2, 2, 20, 20),
        "3": _record(2, 2, 4, 0, 24, 10),
    }
    # team 1 beat team 3, which only matters if 1 and 3 were level
    matches = [_won(10, 1, 3), _won(11, 2, 1)]
    ranked = rank_standings(standings, ["matches_won", "direct_confrontation"], matches)
    assert [r.team_id for r in ranked] == [3, 2, 1]


def test_team_id_breaks_remaining_ties():
    standings = {"7": _record(0, 0, 0, 0, 0, 0), "3": _record(0, 0, 0, 0, 0, 0)}
    assert [r.team_id for r in rank_standings(standings)] == [3, 7]


def test_normalize_rules():
    assert normalize_rules(None) == ["matches_won", "sets_won", "games_won", "direct_confrontation"]
    assert normalize_rules(["sets_won", "sets_won", "matches_won"]) == ["sets_won", "matches_won"]
    with pytest.raises(StandingsError):
        normalize_rules(["coin_toss"])
