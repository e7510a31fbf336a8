from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.court import Court
    from padel_manager.models.tournament import Tournament


class Club(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    location: str
    logo_url: Optional[str] = None
    number_of_courts: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    courts: List["Court"] = Relationship(back_populates="club")
    tournaments: List["Tournament"] = Relationship(back_populates="club")
