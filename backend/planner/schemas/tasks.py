"""Schemas for task create/update/read API operations."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import computed_field, field_validator
from sqlmodel import Field, SQLModel
from sqlmodel._compat import SQLModelConfig

from planner.schemas.validators import naive_utc, require_step, strip_required_text
from planner.services.rewards import Domain, Priority, eu_display

RUNTIME_ANNOTATION_TYPES = (datetime, UUID, Domain, Priority)

ESTIMATED_HOURS_STEP = "0.5"
ACTUAL_HOURS_STEP = "0.1"


class TaskCreate(SQLModel):
    """Payload for creating a task; rewards and completion are server-controlled."""

    model_config = SQLModelConfig(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    domain: Domain
    priority: Priority = Priority.MEDIUM
    estimated_hours: float = Field(default=1.0, ge=0.5, le=24)
    due_at: datetime | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        return strip_required_text(value, field_name="title")

    @field_validator("estimated_hours")
    @classmethod
    def _estimated_step(cls, value: float) -> float:
        require_step(value, step=ESTIMATED_HOURS_STEP, field_name="estimated_hours")
        return value

    @field_validator("due_at")
    @classmethod
    def _normalize_due_at(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


class TaskUpdate(SQLModel):
    """Payload for partial task updates.

    Reward fields and ``completed_at`` are deliberately absent; extra keys are
    rejected so clients cannot write them.
    """

    model_config = SQLModelConfig(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    domain: Domain | None = None
    priority: Priority | None = None
    estimated_hours: float | None = Field(default=None, ge=0.5, le=24)
    actual_hours: float | None = Field(default=None, ge=0.1, le=100)
    is_completed: bool | None = None
    due_at: datetime | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return strip_required_text(value, field_name="title")

    @field_validator("estimated_hours")
    @classmethod
    def _estimated_step(cls, value: float | None) -> float | None:
        return require_step(value, step=ESTIMATED_HOURS_STEP, field_name="estimated_hours")

    @field_validator("actual_hours")
    @classmethod
    def _actual_step(cls, value: float | None) -> float | None:
        return require_step(value, step=ACTUAL_HOURS_STEP, field_name="actual_hours")

    @field_validator("due_at")
    @classmethod
    def _normalize_due_at(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


class TaskRead(SQLModel):
    """Task payload returned by read endpoints."""

    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    domain: str
    priority: str
    estimated_hours: float
    actual_hours: float | None = None
    xp_reward: int
    eu_reward: int
    is_completed: bool
    completed_at: datetime | None = None
    due_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def eu_display(self) -> float:
        """EU reward in display units (stored value is tenths)."""
        return eu_display(self.eu_reward)
