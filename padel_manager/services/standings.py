"""
Pool standings: fold completed match results into per-team running totals,
and rank a pool by its category's tiebreaker rules.

Standings are a plain mapping so they can be stored verbatim in Pool.standings:

    {"12": {"matches_played": 2, "matches_won": 1, "sets_won": 3, ...}, ...}

Keys are team ids as strings (JSON object keys).

apply_match_result is NOT idempotent. Applying the same match twice counts it
twice; callers apply it once, on the transition into "completed".
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from padel_manager.models.category import DEFAULT_TIEBREAKER_RULES, TiebreakerRule
from padel_manager.models.match import MatchStatus
from padel_manager.services.match_status import status_value
from padel_manager.services.scoring import SIDE_TEAM1, SIDE_TEAM2, parse_scores, summarize

Standings = Dict[str, Dict[str, int]]


class StandingsError(ValueError):
    """Raised when a match cannot be folded into standings."""


@dataclass
class StandingsRecord:
    matches_played: int = 0
    matches_won: int = 0
    sets_won: int = 0
    sets_lost: int = 0
    points_won: int = 0
    points_lost: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "StandingsRecord":
        data = data or {}
        return cls(**{name: int(data.get(name) or 0) for name in cls.__dataclass_fields__})

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @property
    def set_difference(self) -> int:
        return self.sets_won - self.sets_lost

    @property
    def point_difference(self) -> int:
        return self.points_won - self.points_lost


@dataclass
class RankedStanding:
    position: int
    team_id: int
    record: StandingsRecord


def team_key(team_id: Any) -> str:
    return str(team_id)


def apply_match_result(standings: Optional[Mapping[str, Any]], match: Any) -> Standings:
    """
    Return a new standings mapping with one match's result folded in.

    The input mapping is not modified. Missing entries for either team start at
    zero. The winner is the match's winner_id when set, otherwise derived from
    the scores (level set counts mean no winner).
    """
    if match.team1_id == match.team2_id:
        raise StandingsError("Team 1 and Team 2 cannot be the same")

    updated: Standings = {key: StandingsRecord.from_dict(value).to_dict() for key, value in (standings or {}).items()}

    key1 = team_key(match.team1_id)
    key2 = team_key(match.team2_id)
    team1 = StandingsRecord.from_dict(updated.get(key1))
    team2 = StandingsRecord.from_dict(updated.get(key2))

    if match.scores:
        summary = summarize(parse_scores(match.scores))
        team1_sets, team2_sets = summary.team1_sets_won, summary.team2_sets_won
        team1_points, team2_points = summary.team1_points, summary.team2_points
        derived_side = summary.winner_side
    else:
        team1_sets = team2_sets = team1_points = team2_points = 0
        derived_side = None

    team1.matches_played += 1
    team1.sets_won += team1_sets
    team1.sets_lost += team2_sets
    team1.points_won += team1_points
    team1.points_lost += team2_points

    team2.matches_played += 1
    team2.sets_won += team2_sets
    team2.sets_lost += team1_sets
    team2.points_won += team2_points
    team2.points_lost += team1_points

    winner_id = getattr(match, "winner_id", None)
    if winner_id is not None:
        if winner_id == match.team1_id:
            team1.matches_won += 1
        elif winner_id == match.team2_id:
            team2.matches_won += 1
        else:
            raise StandingsError(f"winner_id {winner_id} is not one of the match teams")
    elif derived_side == SIDE_TEAM1:
        team1.matches_won += 1
    elif derived_side == SIDE_TEAM2:
        team2.matches_won += 1

    updated[key1] = team1.to_dict()
    updated[key2] = team2.to_dict()
    return updated


def _completion_order(match: Any) -> Tuple:
    return (match.scheduled_time, match.id if match.id is not None else 0)


def rebuild_standings(matches: Iterable[Any]) -> Standings:
    """
    Recompute standings from scratch by applying each completed match once, in
    schedule order. Entries appear only for teams that played a completed match,
    exactly as incremental application would leave them.
    """
    standings: Standings = {}
    completed = [m for m in matches if status_value(m.status) == MatchStatus.completed.value]
    for match in sorted(completed, key=_completion_order):
        standings = apply_match_result(standings, match)
    return standings


# ============================================================================
# Ranking
# ============================================================================


def normalize_rules(rules: Optional[Sequence[Any]]) -> List[str]:
    """Validate tiebreaker rules; None or empty falls back to the default order."""
    if not rules:
        return list(DEFAULT_TIEBREAKER_RULES)
    normalized: List[str] = []
    for rule in rules:
        value = status_value(rule)
        try:
            TiebreakerRule(value)
        except ValueError:
            raise StandingsError(f"Unknown tiebreaker rule: {value}")
        if value not in normalized:
            normalized.append(value)
    return normalized


def _rule_values(rule: str, record: StandingsRecord) -> Tuple[int, ...]:
    if rule == TiebreakerRule.matches_won.value:
        return (record.matches_won,)
    if rule == TiebreakerRule.sets_won.value:
        return (record.set_difference, record.sets_won)
    if rule == TiebreakerRule.games_won.value:
        return (record.point_difference, record.points_won)
    return ()


def _head_to_head_wins(group: Sequence[int], matches: Sequence[Any]) -> Dict[int, int]:
    members = set(group)
    wins = {tid: 0 for tid in group}
    for m in matches:
        if status_value(m.status) != MatchStatus.completed.value:
            continue
        if m.team1_id in members and m.team2_id in members and m.winner_id in members:
            wins[m.winner_id] += 1
    return wins


def rank_standings(
    standings: Mapping[str, Any],
    rules: Optional[Sequence[Any]] = None,
    matches: Sequence[Any] = (),
) -> List[RankedStanding]:
    """
    Order a pool's teams by the tiebreaker rules, best first.

    Each rule appends to a per-team sort key. direct_confrontation only
    compares teams still level on every earlier rule, counting wins in the
    completed matches among exactly those teams. Team id breaks any remaining
    tie.
    """
    rules = normalize_rules(rules)
    records = {int(key): StandingsRecord.from_dict(value) for key, value in standings.items()}
    keys: Dict[int, Tuple[int, ...]] = {tid: () for tid in records}

    for rule in rules:
        if rule == TiebreakerRule.direct_confrontation.value:
            groups: Dict[Tuple[int, ...], List[int]] = {}
            for tid, key in keys.items():
                groups.setdefault(key, []).append(tid)
            for group in groups.values():
                h2h = _head_to_head_wins(group, matches) if len(group) > 1 else {group[0]: 0}
                for tid in group:
                    keys[tid] = keys[tid] + (h2h[tid],)
        else:
            for tid, record in records.items():
                keys[tid] = keys[tid] + _rule_values(rule, record)

    ordered = sorted(records, key=lambda tid: (tuple(-v for v in keys[tid]), tid))
    return [RankedStanding(position=i, team_id=tid, record=records[tid]) for i, tid in enumerate(ordered, start=1)]
