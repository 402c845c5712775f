"""User model for the single local planner owner."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field

from planner.core.time import utcnow
from planner.models.base import QueryModel

RUNTIME_ANNOTATION_TYPES = (datetime,)


class User(QueryModel, table=True):
    """Planner owner resolved from the local bearer token."""

    __tablename__ = "users"  # pyright: ignore[reportAssignmentType]

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    external_id: str = Field(index=True, unique=True)
    email: str | None = Field(default=None, index=True)
    name: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
