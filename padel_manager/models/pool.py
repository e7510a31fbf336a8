from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from padel_manager.models.category import TournamentCategory


class Pool(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    category_id: int = Field(foreign_key="tournamentcategory.id", index=True)
    name: str

    # team id (string key, JSON objects only have string keys) -> standings record
    standings: Dict[str, Dict[str, Any]] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))

    # Optimistic concurrency: every standings write bumps this
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    category: "TournamentCategory" = Relationship(back_populates="pools")
