"""Calendar event model with an optional recurrence rule."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.time import utcnow
from planner.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)

RECURRENCE_RULES = frozenset({"none", "daily", "weekly", "monthly", "yearly"})


class Event(QueryModel, table=True):
    """Owner-scoped calendar event, optionally linked to a task."""

    __tablename__ = "events"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)

    title: str
    description: str | None = None
    category: str = Field(default="personal", index=True)
    start_time: datetime = Field(index=True)
    end_time: datetime
    all_day: bool = Field(default=False)
    recurrence: str = Field(default="none")
    recurrence_end: datetime | None = None
    task_id: UUID | None = Field(default=None, foreign_key="tasks.id", index=True)
    location: str | None = None
    priority: str = Field(default="medium")

    is_completed: bool = Field(default=False)
    completed_at: datetime | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
