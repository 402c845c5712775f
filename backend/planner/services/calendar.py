"""Day, week and month calendar layouts built from stored tasks and events.

Recurring events are expanded at read time; generated occurrences are never
persisted. All stored timestamps are naive UTC, while day boundaries and the
visible-hours window are evaluated in the configured calendar timezone.
"""

from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import TYPE_CHECKING

from dateutil.relativedelta import relativedelta

from planner.core.logging import get_logger
from planner.schemas.calendar import (
    CalendarDayRead,
    CalendarMonthRead,
    CalendarWeekRead,
    MonthDaySummary,
    PositionedItemRead,
)
from planner.schemas.events import EventRead
from planner.schemas.tasks import TaskRead
from planner.services.lanes import DEFAULT_ITEM_DURATION, TimedItem, allocate_lanes, layout_geometry
from planner.services.rewards import Priority

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from planner.models.events import Event
    from planner.models.tasks import Task

logger = get_logger(__name__)

MAX_OCCURRENCES = 500
DEFAULT_START_HOUR = 6
DEFAULT_END_HOUR = 23

_RECURRENCE_STEPS: dict[str, relativedelta] = {
    "daily": relativedelta(days=1),
    "weekly": relativedelta(weeks=1),
    "monthly": relativedelta(months=1),
    "yearly": relativedelta(years=1),
}
_FIXED_STEPS: dict[str, timedelta] = {
    "daily": timedelta(days=1),
    "weekly": timedelta(weeks=1),
}
_PRIORITY_RANK = {
    Priority.URGENT.value: 4,
    Priority.HIGH.value: 3,
    Priority.MEDIUM.value: 2,
    Priority.LOW.value: 1,
}


@dataclass(frozen=True)
class Occurrence:
    """One concrete instance of a (possibly recurring) event."""

    event: Event
    index: int
    start: datetime
    end: datetime


def day_bounds(day: date, tz: tzinfo = UTC) -> tuple[datetime, datetime]:
    """Return the naive-UTC ``[midnight, next midnight)`` of ``day`` in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return (
        start.astimezone(UTC).replace(tzinfo=None),
        end.astimezone(UTC).replace(tzinfo=None),
    )


def _local(value: datetime, tz: tzinfo) -> datetime:
    return value.replace(tzinfo=UTC).astimezone(tz)


def _touches(start: datetime, end: datetime, window: tuple[datetime, datetime]) -> bool:
    """Whether an instance falls in the window; zero-length instances count at their start."""
    window_start, window_end = window
    if end <= start:
        return window_start <= start < window_end
    return start < window_end and window_start < end


def _first_candidate_index(event: Event, window_start: datetime, duration: timedelta) -> int:
    step = _FIXED_STEPS.get(event.recurrence)
    if step is None:
        return 0
    return max(0, (window_start - duration - event.start_time) // step)


def expand_recurrences(
    event: Event,
    window_start: datetime,
    window_end: datetime,
) -> list[Occurrence]:
    """Materialize the occurrences of ``event`` that touch ``[window_start, window_end)``.

    Each occurrence is offset from the event's own start (not from the previous
    occurrence), so monthly events on the 31st come back to the 31st after a
    short month. ``recurrence_end`` is inclusive.
    """
    duration = max(event.end_time - event.start_time, timedelta(0))
    window = (window_start, window_end)
    step = _RECURRENCE_STEPS.get(event.recurrence)
    if step is None:
        if _touches(event.start_time, event.start_time + duration, window):
            return [Occurrence(event=event, index=0, start=event.start_time, end=event.end_time)]
        return []

    occurrences: list[Occurrence] = []
    index = _first_candidate_index(event, window_start, duration)
    while len(occurrences) < MAX_OCCURRENCES:
        start = event.start_time + step * index
        if start >= window_end:
            break
        if event.recurrence_end is not None and start > event.recurrence_end:
            break
        end = start + duration
        if _touches(start, end, window):
            occurrences.append(Occurrence(event=event, index=index, start=start, end=end))
        index += 1
    else:
        logger.warning(
            "calendar.recurrence.capped",
            extra={"event_id": str(event.id), "limit": MAX_OCCURRENCES},
        )
    return occurrences


def _strip_sort_key(task: Task) -> int:
    return -_PRIORITY_RANK.get(task.priority, 0)


def build_day_layout(
    day: date,
    tasks: Iterable[Task],
    events: Iterable[Event],
    *,
    tz: tzinfo = UTC,
    default_duration: timedelta = DEFAULT_ITEM_DURATION,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
    include_undated: bool = True,
) -> CalendarDayRead:
    """Position one day's timed tasks and events in shared lanes.

    Tasks without a due date, tasks due outside the visible hours, and all-day
    events go to the all-day strip instead of the lane grid.
    """
    window = day_bounds(day, tz)
    timed: list[TimedItem] = []
    titles: dict[object, tuple[object, str]] = {}
    all_day_tasks: list[Task] = []
    all_day_events: list[Event] = []

    for event in events:
        occurrences = expand_recurrences(event, *window)
        if not occurrences:
            continue
        if event.all_day:
            all_day_events.append(event)
            continue
        for occurrence in occurrences:
            key = ("event", event.id, occurrence.index)
            timed.append(TimedItem(id=key, kind="event", start=occurrence.start, end=occurrence.end))
            titles[key] = (event.id, event.title)

    for task in tasks:
        if task.due_at is None:
            if include_undated:
                all_day_tasks.append(task)
            continue
        if not window[0] <= task.due_at < window[1]:
            continue
        if start_hour <= _local(task.due_at, tz).hour <= end_hour:
            key = ("task", task.id, 0)
            timed.append(TimedItem(id=key, kind="task", start=task.due_at))
            titles[key] = (task.id, task.title)
        else:
            all_day_tasks.append(task)

    positions = allocate_lanes(timed, default_duration=default_duration)
    items: list[PositionedItemRead] = []
    for item in sorted(timed, key=lambda entry: entry.start):
        position = positions[item.id]
        left_pct, width_pct = layout_geometry(position)
        source_id, title = titles[item.id]
        items.append(
            PositionedItemRead(
                id=source_id,
                kind=item.kind,
                title=title,
                start=item.start,
                end=item.end,
                occurrence=item.id[2],
                lane=position.lane,
                lane_count=position.lane_count,
                left_pct=left_pct,
                width_pct=width_pct,
            ),
        )

    all_day_tasks.sort(key=_strip_sort_key)
    return CalendarDayRead(
        date=day,
        items=items,
        all_day_tasks=[TaskRead.model_validate(task, from_attributes=True) for task in all_day_tasks],
        all_day_events=[
            EventRead.model_validate(event, from_attributes=True) for event in all_day_events
        ],
    )


def week_start(anchor: date) -> date:
    """Return the Monday of the week containing ``anchor``."""
    return anchor - timedelta(days=anchor.weekday())


def build_week_layout(
    anchor: date,
    tasks: Sequence[Task],
    events: Sequence[Event],
    *,
    tz: tzinfo = UTC,
    default_duration: timedelta = DEFAULT_ITEM_DURATION,
    start_hour: int = DEFAULT_START_HOUR,
    end_hour: int = DEFAULT_END_HOUR,
) -> CalendarWeekRead:
    """Seven day layouts, Monday first; undated tasks are listed once for the week."""
    monday = week_start(anchor)
    days = [
        build_day_layout(
            monday + timedelta(days=offset),
            tasks,
            events,
            tz=tz,
            default_duration=default_duration,
            start_hour=start_hour,
            end_hour=end_hour,
            include_undated=False,
        )
        for offset in range(7)
    ]
    undated = sorted((task for task in tasks if task.due_at is None), key=_strip_sort_key)
    return CalendarWeekRead(
        start=monday,
        end=monday + timedelta(days=6),
        days=days,
        undated_tasks=[TaskRead.model_validate(task, from_attributes=True) for task in undated],
    )


def build_month_summary(
    anchor: date,
    tasks: Sequence[Task],
    events: Sequence[Event],
    *,
    tz: tzinfo = UTC,
) -> CalendarMonthRead:
    """Per-day task and event counters for the month containing ``anchor``."""
    year, month = anchor.year, anchor.month
    days_in_month = _calendar.monthrange(year, month)[1]
    first = date(year, month, 1)
    month_window = (day_bounds(first, tz)[0], day_bounds(date(year, month, days_in_month), tz)[1])

    occurrences = [
        occurrence
        for event in events
        for occurrence in expand_recurrences(event, *month_window)
    ]
    summaries: list[MonthDaySummary] = []
    for offset in range(days_in_month):
        day = first + timedelta(days=offset)
        window = day_bounds(day, tz)
        day_tasks = [
            task for task in tasks if task.due_at is not None and window[0] <= task.due_at < window[1]
        ]
        summaries.append(
            MonthDaySummary(
                date=day,
                task_count=len(day_tasks),
                completed_task_count=sum(1 for task in day_tasks if task.is_completed),
                event_count=sum(
                    1 for occurrence in occurrences if _touches(occurrence.start, occurrence.end, window)
                ),
            ),
        )
    return CalendarMonthRead(year=year, month=month, days=summaries)
