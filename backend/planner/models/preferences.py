"""Per-user display preferences and effort-unit multipliers."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import Field

from planner.core.time import utcnow
from planner.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class UserPreferences(QueryModel, table=True):
    """Theme settings plus the domain multipliers fed into EU scoring."""

    __tablename__ = "user_preferences"  # pyright: ignore[reportAssignmentType]

    user_id: UUID = Field(foreign_key="users.id", primary_key=True)
    theme: str = Field(default="dark-knight")
    font: str = Field(default="orbitron")
    gamification_type: str = Field(default="sapling")

    academic_multiplier: float = Field(default=1.0)
    fitness_multiplier: float = Field(default=2.5)
    creative_multiplier: float = Field(default=0.8)
    social_multiplier: float = Field(default=1.2)
    maintenance_multiplier: float = Field(default=0.6)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
