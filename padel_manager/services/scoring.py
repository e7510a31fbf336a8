"""
Set and point arithmetic for padel match scores.

Scores are stored per side as parallel lists, one entry per set:
  {"team1": [6, 3, 10], "team2": [4, 6, 8]}

A set goes to the side with the strictly greater value at that index; equal
values (or a missing value on either side) award nobody. Points are the plain
sum of each side's list, missing values counting as zero.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

SIDE_TEAM1 = "team1"
SIDE_TEAM2 = "team2"

PlayedSet = Annotated[int, Field(ge=0, strict=True)]

# Stored blobs may carry a missing value for an unplayed set
SetValue = Optional[PlayedSet]


class ScoreValidationError(ValueError):
    """Raised when a score payload cannot be turned into MatchScores."""


class MatchScores(BaseModel):
    team1: List[SetValue]
    team2: List[SetValue]

    @model_validator(mode="after")
    def check_equal_length(self):
        if len(self.team1) != len(self.team2):
            raise ValueError("Both teams must have the same number of sets")
        return self

    @property
    def set_count(self) -> int:
        return len(self.team1)


class SubmittedScores(MatchScores):
    """Scores as entered by a client: every set needs a value for both teams."""

    team1: List[PlayedSet]
    team2: List[PlayedSet]


@dataclass
class ScoreSummary:
    team1_sets_won: int
    team2_sets_won: int
    team1_points: int
    team2_points: int
    winner_side: Optional[str]  # "team1" | "team2" | None


def parse_scores(raw: Any) -> MatchScores:
    """Coerce a stored or submitted score blob into MatchScores.

    Raises ScoreValidationError when the shape is wrong.
    """
    if isinstance(raw, MatchScores):
        return raw
    if not isinstance(raw, dict) or raw.get(SIDE_TEAM1) is None or raw.get(SIDE_TEAM2) is None:
        raise ScoreValidationError("Valid scores for both teams are required")
    try:
        return MatchScores.model_validate(raw)
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise ScoreValidationError(messages) from e


def set_winners(scores: MatchScores) -> List[Optional[str]]:
    winners: List[Optional[str]] = []
    for a, b in zip(scores.team1, scores.team2):
        if a is None or b is None or a == b:
            winners.append(None)
        elif a > b:
            winners.append(SIDE_TEAM1)
        else:
            winners.append(SIDE_TEAM2)
    return winners


def set_tally(scores: MatchScores) -> Tuple[int, int]:
    winners = set_winners(scores)
    return winners.count(SIDE_TEAM1), winners.count(SIDE_TEAM2)


def point_tally(scores: MatchScores) -> Tuple[int, int]:
    return sum(v or 0 for v in scores.team1), sum(v or 0 for v in scores.team2)


def match_winner(scores: MatchScores) -> Optional[str]:
    """Side with strictly more sets won, or None when the set counts are level."""
    team1_sets, team2_sets = set_tally(scores)
    if team1_sets > team2_sets:
        return SIDE_TEAM1
    if team2_sets > team1_sets:
        return SIDE_TEAM2
    return None


def winner_team_id(scores: MatchScores, team1_id: int, team2_id: int) -> Optional[int]:
    side = match_winner(scores)
    if side == SIDE_TEAM1:
        return team1_id
    if side == SIDE_TEAM2:
        return team2_id
    return None


def summarize(scores: MatchScores) -> ScoreSummary:
    team1_sets, team2_sets = set_tally(scores)
    team1_points, team2_points = point_tally(scores)
    return ScoreSummary(
        team1_sets_won=team1_sets,
        team2_sets_won=team2_sets,
        team1_points=team1_points,
        team2_points=team2_points,
        winner_side=match_winner(scores),
    )
