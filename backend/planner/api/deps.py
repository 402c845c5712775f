"""Reusable FastAPI dependencies for auth and owner-scoped lookups.

Every planner row belongs to the authenticated owner. Routes resolve that
owner through ``AUTH_DEP`` and load rows with the ``*_or_404`` helpers here,
which treat rows owned by someone else exactly like missing rows.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from fastapi import Depends, HTTPException, status

from planner.core.auth import AuthContext, get_auth_context
from planner.db.session import get_session
from planner.models.events import Event
from planner.services.suggestions import get_suggestion_service
from planner.services.tasks import get_owned_task_or_404

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

    from planner.models.tasks import Task

AUTH_DEP = Depends(get_auth_context)
SESSION_DEP = Depends(get_session)
SUGGESTIONS_DEP = Depends(get_suggestion_service)


async def get_task_or_404(
    task_id: UUID,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> Task:
    """Load a task owned by the caller or raise 404."""
    return await get_owned_task_or_404(session, task_id=task_id, owner_id=auth.user.id)


async def get_event_or_404(
    event_id: UUID,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> Event:
    """Load an event owned by the caller or raise 404."""
    event = await Event.objects.by_id(event_id).first(session)
    if event is None or event.user_id != auth.user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
    return event


TASK_DEP = Depends(get_task_or_404)
EVENT_DEP = Depends(get_event_or_404)

__all__ = [
    "AUTH_DEP",
    "EVENT_DEP",
    "SESSION_DEP",
    "SUGGESTIONS_DEP",
    "TASK_DEP",
]
