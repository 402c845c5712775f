"""Schemas for the analytics summary endpoint."""

from __future__ import annotations

from datetime import date

from sqlmodel import Field, SQLModel

RUNTIME_ANNOTATION_TYPES = (date,)


class DomainEffortRead(SQLModel):
    domain: str
    hours: float
    eu: float
    efficiency_pct: int


class WeekdayActivityRead(SQLModel):
    date: date
    name: str
    tasks: int
    high_priority: int
    focus: int


class StatusBreakdownRead(SQLModel):
    completed: int
    in_progress: int
    pending: int


class AnalyticsSummaryRead(SQLModel):
    """Gamification totals and activity breakdowns for the owner."""

    total_xp: int
    total_eu: float
    xp_target: int
    xp_progress_pct: float
    eu_target: int
    eu_progress_pct: float
    level: int
    gamification_type: str
    streak_days: int
    completed_tasks: int
    total_tasks: int
    completion_rate_pct: int
    status: StatusBreakdownRead
    domains: list[DomainEffortRead] = Field(default_factory=list)
    week: list[WeekdayActivityRead] = Field(default_factory=list)
