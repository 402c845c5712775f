"""Schemas for positioned calendar layouts returned by calendar endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal
from uuid import UUID

from sqlmodel import Field, SQLModel

from planner.schemas.events import EventRead
from planner.schemas.tasks import TaskRead

RUNTIME_ANNOTATION_TYPES = (date, datetime, UUID)


class PositionedItemRead(SQLModel):
    """A timed task or event occurrence with its lane placement."""

    id: UUID
    kind: Literal["task", "event"]
    title: str
    start: datetime
    end: datetime | None = None
    occurrence: int = Field(
        default=0,
        description="Occurrence index for recurring events; 0 for the first instance.",
    )
    lane: int = Field(ge=0)
    lane_count: int = Field(ge=1)
    left_pct: float
    width_pct: float


class CalendarDayRead(SQLModel):
    """Layout for one calendar day: lane-positioned items plus the all-day strip."""

    date: date
    items: list[PositionedItemRead] = Field(default_factory=list)
    all_day_tasks: list[TaskRead] = Field(default_factory=list)
    all_day_events: list[EventRead] = Field(default_factory=list)


class CalendarWeekRead(SQLModel):
    """Seven consecutive day layouts starting on Monday."""

    start: date
    end: date
    days: list[CalendarDayRead] = Field(default_factory=list)
    undated_tasks: list[TaskRead] = Field(default_factory=list)


class MonthDaySummary(SQLModel):
    """Per-day counters for the month grid."""

    date: date
    task_count: int = 0
    completed_task_count: int = 0
    event_count: int = 0


class CalendarMonthRead(SQLModel):
    """Month grid summary."""

    year: int
    month: int
    days: list[MonthDaySummary] = Field(default_factory=list)
