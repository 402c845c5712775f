"""Task model with estimated effort, completion state, and earned rewards."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.time import utcnow
from planner.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class Task(QueryModel, table=True):
    """Owner-scoped task; reward columns are written only by the reward calculator."""

    __tablename__ = "tasks"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)

    title: str
    description: str | None = None
    domain: str = Field(index=True)
    priority: str = Field(default="medium", index=True)
    estimated_hours: float = Field(default=1.0)
    actual_hours: float | None = None

    xp_reward: int = Field(default=0)
    eu_reward: int = Field(default=0)
    is_completed: bool = Field(default=False, index=True)
    completed_at: datetime | None = None
    due_at: datetime | None = Field(default=None, index=True)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
