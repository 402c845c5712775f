"""Calendar layout endpoints (day, week and month views)."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Query

from planner.api.deps import AUTH_DEP, SESSION_DEP
from planner.core.auth import AuthContext
from planner.core.config import settings
from planner.schemas.calendar import CalendarDayRead, CalendarMonthRead, CalendarWeekRead
from planner.services.calendar import build_day_layout, build_month_summary, build_week_layout
from planner.services.tasks import list_events, list_tasks

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/calendar", tags=["calendar"])
DATE_QUERY = Query(
    default=None,
    alias="date",
    description="Anchor date (YYYY-MM-DD); defaults to today.",
)


def _timezone() -> ZoneInfo:
    return ZoneInfo(settings.calendar_timezone)


def _anchor(value: date | None) -> date:
    if value is not None:
        return value
    return datetime.now(_timezone()).date()


def _layout_options() -> dict[str, object]:
    return {
        "tz": _timezone(),
        "default_duration": timedelta(minutes=settings.calendar_default_duration_minutes),
        "start_hour": settings.calendar_start_hour,
        "end_hour": settings.calendar_end_hour,
    }


@router.get("/day", response_model=CalendarDayRead)
async def get_day(
    day: date | None = DATE_QUERY,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> CalendarDayRead:
    """Lane-positioned tasks and events for one day plus its all-day strip."""
    tasks = await list_tasks(session, auth.user.id)
    events = await list_events(session, auth.user.id)
    return build_day_layout(_anchor(day), tasks, events, **_layout_options())


@router.get("/week", response_model=CalendarWeekRead)
async def get_week(
    day: date | None = DATE_QUERY,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> CalendarWeekRead:
    """Seven day layouts for the Monday-start week containing ``date``."""
    tasks = await list_tasks(session, auth.user.id)
    events = await list_events(session, auth.user.id)
    return build_week_layout(_anchor(day), tasks, events, **_layout_options())


@router.get("/month", response_model=CalendarMonthRead)
async def get_month(
    day: date | None = DATE_QUERY,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> CalendarMonthRead:
    """Per-day task and event counts for the month containing ``date``."""
    tasks = await list_tasks(session, auth.user.id)
    events = await list_events(session, auth.user.id)
    return build_month_summary(_anchor(day), tasks, events, tz=_timezone())
