"""
Tournament Category API Routes
A category (e.g. "Men's Advanced") groups the teams that play each other.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlmodel import Session, select

from padel_manager.database import get_session
from padel_manager.models.category import (
    DEFAULT_TIEBREAKER_RULES,
    AgeGroup,
    CategoryFormat,
    CategoryGender,
    SkillLevel,
    TiebreakerRule,
    TournamentCategory,
)
from padel_manager.models.tournament import Tournament, TournamentStatus

router = APIRouter()


class CategoryCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    gender: CategoryGender
    skill_level: SkillLevel
    format: CategoryFormat
    age_group: Optional[AgeGroup] = None
    tiebreaker_rules: Optional[List[TiebreakerRule]] = None

    @field_validator("tiebreaker_rules")
    @classmethod
    def validate_unique_rules(cls, v):
        if v is not None and len(set(v)) != len(v):
            raise ValueError("tiebreaker_rules must not repeat a rule")
        return v


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    name: str
    gender: CategoryGender
    skill_level: SkillLevel
    format: CategoryFormat
    age_group: Optional[AgeGroup] = None
    tiebreaker_rules: List[TiebreakerRule]
    created_at: datetime


@router.get("/tournaments/{tournament_id}/categories", response_model=List[CategoryResponse])
def list_categories(tournament_id: int, session: Session = Depends(get_session)):
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    return session.exec(
        select(TournamentCategory)
        .where(TournamentCategory.tournament_id == tournament_id)
        .order_by(TournamentCategory.name, TournamentCategory.id)
    ).all()


@router.post("/tournaments/{tournament_id}/categories", response_model=CategoryResponse, status_code=201)
def create_category(tournament_id: int, request: CategoryCreateRequest, session: Session = Depends(get_session)):
    """
    Create a category.

    tiebreaker_rules defaults to matches_won, sets_won, games_won, direct_confrontation.
    """
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    if tournament.status == TournamentStatus.completed.value:
        raise HTTPException(status_code=400, detail="Cannot add categories to a completed tournament")

    rules = [rule.value for rule in request.tiebreaker_rules] if request.tiebreaker_rules else list(DEFAULT_TIEBREAKER_RULES)
    category = TournamentCategory(
        tournament_id=tournament_id,
        name=request.name,
        gender=request.gender.value,
        skill_level=request.skill_level.value,
        format=request.format.value,
        age_group=request.age_group.value if request.age_group else None,
        tiebreaker_rules=rules,
    )
    session.add(category)
    session.commit()
    session.refresh(category)
    return category
