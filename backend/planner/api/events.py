"""Calendar event CRUD endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import col, select

from planner.api.deps import AUTH_DEP, EVENT_DEP, SESSION_DEP
from planner.core.auth import AuthContext
from planner.core.logging import get_logger
from planner.core.time import to_naive_utc, utcnow
from planner.db.pagination import paginate
from planner.models.events import Event
from planner.schemas.events import EventCreate, EventRead, EventUpdate
from planner.schemas.pagination import DefaultLimitOffsetPage
from planner.services.tasks import get_owned_task_or_404

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/events", tags=["events"])
logger = get_logger(__name__)
START_QUERY = Query(default=None)
END_QUERY = Query(default=None)
_NON_NULLABLE_UPDATE_FIELDS = frozenset(
    {"title", "category", "start_time", "end_time", "all_day", "recurrence", "priority"},
)


def _event_read(event: Event) -> EventRead:
    return EventRead.model_validate(event, from_attributes=True)


async def _require_linked_task(
    session: AsyncSession,
    *,
    task_id: UUID | None,
    owner_id: UUID,
) -> None:
    if task_id is not None:
        await get_owned_task_or_404(session, task_id=task_id, owner_id=owner_id)


@router.get("", response_model=DefaultLimitOffsetPage[EventRead])
async def list_events_page(
    start: datetime | None = START_QUERY,
    end: datetime | None = END_QUERY,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> LimitOffsetPage[EventRead]:
    """List the caller's events by start time, optionally overlapping ``[start, end)``.

    The window applies to stored rows; recurring events are matched by their
    first occurrence. Use the calendar endpoints for expanded occurrences.
    """
    statement = select(Event).where(col(Event.user_id) == auth.user.id)
    if end is not None:
        statement = statement.where(col(Event.start_time) < to_naive_utc(end))
    if start is not None:
        statement = statement.where(col(Event.end_time) >= to_naive_utc(start))
    statement = statement.order_by(col(Event.start_time).asc())

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        return [_event_read(event) for event in items]

    return await paginate(session, statement, transformer=_transform)


@router.post("", response_model=EventRead, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: EventCreate,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> EventRead:
    await _require_linked_task(session, task_id=payload.task_id, owner_id=auth.user.id)
    data = payload.model_dump()
    for key, value in data.items():
        data[key] = getattr(value, "value", value)
    now = utcnow()
    event = Event(**data, user_id=auth.user.id, created_at=now, updated_at=now)
    session.add(event)
    await session.commit()
    await session.refresh(event)
    logger.info("event.created", extra={"event_id": str(event.id), "recurrence": event.recurrence})
    return _event_read(event)


@router.get("/{event_id}", response_model=EventRead)
async def get_event(event: Event = EVENT_DEP) -> EventRead:
    return _event_read(event)


@router.patch("/{event_id}", response_model=EventRead)
async def update_event(
    payload: EventUpdate,
    event: Event = EVENT_DEP,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> EventRead:
    """Partially update an event; interval rules are checked on the merged values."""
    updates = payload.model_dump(exclude_unset=True)
    if "task_id" in updates:
        await _require_linked_task(session, task_id=updates["task_id"], owner_id=auth.user.id)

    start = updates.get("start_time") or event.start_time
    end = updates.get("end_time") or event.end_time
    recurrence_end = updates.get("recurrence_end", event.recurrence_end)
    if end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="end_time must not be earlier than start_time",
        )
    if recurrence_end is not None and recurrence_end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="recurrence_end must not be earlier than start_time",
        )

    now = utcnow()
    for key, value in updates.items():
        if key == "is_completed":
            if value is None:
                continue
            if value and not event.is_completed:
                event.completed_at = now
            elif value is False:
                event.completed_at = None
            event.is_completed = bool(value)
            continue
        if value is None and key in _NON_NULLABLE_UPDATE_FIELDS:
            continue
        setattr(event, key, getattr(value, "value", value))

    event.updated_at = now
    session.add(event)
    await session.commit()
    await session.refresh(event)
    return _event_read(event)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event: Event = EVENT_DEP,
    session: AsyncSession = SESSION_DEP,
) -> None:
    await session.delete(event)
    await session.commit()
    logger.info("event.deleted", extra={"event_id": str(event.id)})
