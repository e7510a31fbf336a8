from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.category import TournamentCategory
    from padel_manager.models.tournament import Tournament


class TeamStatus(str, Enum):
    registered = "registered"
    payment_pending = "payment_pending"
    confirmed = "confirmed"
    withdrawn = "withdrawn"


class Team(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    category_id: int = Field(foreign_key="tournamentcategory.id", index=True)
    player1_id: int = Field(foreign_key="player.id")
    player2_id: Optional[int] = Field(default=None, foreign_key="player.id")
    status: TeamStatus = Field(default=TeamStatus.registered, sa_column=Column(String, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="teams")
    category: "TournamentCategory" = Relationship(back_populates="teams")
