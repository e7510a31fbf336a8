from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String
from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.club import Club


class CourtStatus(str, Enum):
    available = "available"
    maintenance = "maintenance"
    reserved = "reserved"


class Court(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("club_id", "name", name="uq_club_court_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    club_id: int = Field(foreign_key="club.id", index=True)
    name: str
    status: CourtStatus = Field(default=CourtStatus.available, sa_column=Column(String, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)

    club: "Club" = Relationship(back_populates="courts")
