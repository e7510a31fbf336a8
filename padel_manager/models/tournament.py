from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.category import TournamentCategory
    from padel_manager.models.club import Club
    from padel_manager.models.match import Match
    from padel_manager.models.team import Team


class TournamentStatus(str, Enum):
    draft = "draft"
    active = "active"
    completed = "completed"


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    club_id: int = Field(foreign_key="club.id", index=True)
    name: str
    start_date: date
    end_date: date
    registration_deadline: date
    status: TournamentStatus = Field(default=TournamentStatus.draft, sa_column=Column(String, nullable=False))
    logo_url: Optional[str] = None
    banner_url: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    club: "Club" = Relationship(back_populates="tournaments")
    categories: List["TournamentCategory"] = Relationship(back_populates="tournament")
    teams: List["Team"] = Relationship(back_populates="tournament")
    matches: List["Match"] = Relationship(back_populates="tournament")
