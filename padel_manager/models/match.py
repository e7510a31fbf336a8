from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.tournament import Tournament


class MatchStatus(str, Enum):
    scheduled = "scheduled"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    category_id: int = Field(foreign_key="tournamentcategory.id")
    pool_id: Optional[int] = Field(default=None, foreign_key="pool.id", index=True)
    bracket_round: Optional[str] = Field(default=None)

    team1_id: int = Field(foreign_key="team.id", index=True)
    team2_id: int = Field(foreign_key="team.id", index=True)
    court_id: Optional[int] = Field(default=None, foreign_key="court.id", index=True)

    scheduled_time: datetime = Field(index=True)
    duration_minutes: int

    status: MatchStatus = Field(default=MatchStatus.scheduled, sa_column=Column(String, nullable=False))
    scores: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))  # {"team1": [...], "team2": [...]}
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")

    # Optimistic concurrency: conditional updates compare and bump this
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    tournament: "Tournament" = Relationship(back_populates="matches")
