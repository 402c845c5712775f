"""User read schema."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlmodel import SQLModel

RUNTIME_ANNOTATION_TYPES = (datetime, UUID)


class UserRead(SQLModel):
    id: UUID
    email: str | None = None
    name: str | None = None
    created_at: datetime
