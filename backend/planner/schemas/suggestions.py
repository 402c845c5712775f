"""Schemas for AI task suggestions and strategy explanations."""

from __future__ import annotations

from pydantic import field_validator
from sqlmodel import Field, SQLModel

from planner.schemas.tasks import ESTIMATED_HOURS_STEP
from planner.schemas.validators import is_step_multiple, strip_required_text
from planner.services.rewards import Domain, Priority

RUNTIME_ANNOTATION_TYPES = (Domain, Priority)


class TaskSuggestion(SQLModel):
    """One assistant-proposed task, validated before being offered to the owner."""

    title: str = Field(min_length=1, max_length=200)
    description: str
    domain: Domain
    priority: Priority
    estimated_hours: float = Field(ge=0.5, le=24)
    reasoning: str

    @field_validator("title", "reasoning")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        return strip_required_text(value, field_name="text")

    @field_validator("estimated_hours")
    @classmethod
    def _snap_hours(cls, value: float) -> float:
        # Model output is free-form; snap to the half-hour grid tasks require.
        if is_step_multiple(value, ESTIMATED_HOURS_STEP):
            return value
        return max(0.5, min(24.0, round(value * 2) / 2))


class TaskExplanationRead(SQLModel):
    explanation: str
