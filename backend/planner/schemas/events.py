"""Schemas for calendar event create/update/read API operations."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Self
from uuid import UUID

from pydantic import field_validator, model_validator
from sqlmodel import Field, SQLModel
from sqlmodel._compat import SQLModelConfig

from planner.schemas.validators import naive_utc, strip_required_text
from planner.services.rewards import Priority

RUNTIME_ANNOTATION_TYPES = (datetime, UUID, Priority)

_ERR_END_BEFORE_START = "end_time must not be earlier than start_time"
_ERR_RECURRENCE_END = "recurrence_end must not be earlier than start_time"


class EventCategory(str, Enum):
    """Calendar event categories (activity domains plus personal/meeting)."""

    ACADEMIC = "academic"
    FITNESS = "fitness"
    CREATIVE = "creative"
    SOCIAL = "social"
    MAINTENANCE = "maintenance"
    PERSONAL = "personal"
    MEETING = "meeting"


class Recurrence(str, Enum):
    """Supported recurrence rules."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class EventCreate(SQLModel):
    """Payload for creating a calendar event."""

    model_config = SQLModelConfig(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    category: EventCategory = EventCategory.PERSONAL
    start_time: datetime
    end_time: datetime
    all_day: bool = False
    recurrence: Recurrence = Recurrence.NONE
    recurrence_end: datetime | None = None
    task_id: UUID | None = None
    location: str | None = None
    priority: Priority = Priority.MEDIUM

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        return strip_required_text(value, field_name="title")

    @field_validator("start_time", "end_time", "recurrence_end")
    @classmethod
    def _normalize_timestamps(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)

    @model_validator(mode="after")
    def _validate_interval(self) -> Self:
        if self.end_time < self.start_time:
            raise ValueError(_ERR_END_BEFORE_START)
        if self.recurrence_end is not None and self.recurrence_end < self.start_time:
            raise ValueError(_ERR_RECURRENCE_END)
        return self


class EventUpdate(SQLModel):
    """Payload for partial event updates; interval rules are checked after merging."""

    model_config = SQLModelConfig(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    category: EventCategory | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    all_day: bool | None = None
    recurrence: Recurrence | None = None
    recurrence_end: datetime | None = None
    task_id: UUID | None = None
    location: str | None = None
    priority: Priority | None = None
    is_completed: bool | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return strip_required_text(value, field_name="title")

    @field_validator("start_time", "end_time", "recurrence_end")
    @classmethod
    def _normalize_timestamps(cls, value: datetime | None) -> datetime | None:
        return naive_utc(value)


class EventRead(SQLModel):
    """Event payload returned by read endpoints."""

    id: UUID
    user_id: UUID
    title: str
    description: str | None = None
    category: str
    start_time: datetime
    end_time: datetime
    all_day: bool
    recurrence: str
    recurrence_end: datetime | None = None
    task_id: UUID | None = None
    location: str | None = None
    priority: str
    is_completed: bool
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
