from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, String
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.pool import Pool
    from padel_manager.models.team import Team
    from padel_manager.models.tournament import Tournament


class CategoryGender(str, Enum):
    male = "male"
    female = "female"
    mixed = "mixed"
    open = "open"


class SkillLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    upper_intermediate = "upper_intermediate"
    advanced = "advanced"


class AgeGroup(str, Enum):
    u12 = "u12"
    u14 = "u14"
    u16 = "u16"
    u18 = "u18"
    u21 = "u21"
    open = "open"


class CategoryFormat(str, Enum):
    pool = "pool"
    knockout = "knockout"
    league = "league"


class TiebreakerRule(str, Enum):
    matches_won = "matches_won"
    sets_won = "sets_won"
    games_won = "games_won"
    direct_confrontation = "direct_confrontation"


DEFAULT_TIEBREAKER_RULES: List[str] = [rule.value for rule in TiebreakerRule]


class TournamentCategory(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    name: str
    gender: CategoryGender = Field(sa_column=Column(String, nullable=False))
    skill_level: SkillLevel = Field(sa_column=Column(String, nullable=False))
    age_group: Optional[AgeGroup] = Field(default=None, sa_column=Column(String, nullable=True))
    format: CategoryFormat = Field(sa_column=Column(String, nullable=False))
    tiebreaker_rules: List[str] = Field(default_factory=lambda: list(DEFAULT_TIEBREAKER_RULES), sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="categories")
    teams: List["Team"] = Relationship(back_populates="category")
    pools: List["Pool"] = Relationship(back_populates="category")
