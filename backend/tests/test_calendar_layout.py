# ruff: noqa: INP001
"""Recurrence expansion and day/week/month calendar layouts."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from uuid import uuid4
from zoneinfo import ZoneInfo

from planner.models.events import Event
from planner.models.tasks import Task
from planner.services.calendar import (
    MAX_OCCURRENCES,
    build_day_layout,
    build_month_summary,
    build_week_layout,
    day_bounds,
    expand_recurrences,
    week_start,
)

OWNER_ID = uuid4()
DAY = date(2025, 1, 6)  # Monday


def _task(title: str, *, due_at: datetime | None, priority: str = "medium", **kwargs: object) -> Task:
    return Task(
        user_id=OWNER_ID,
        title=title,
        domain="academic",
        priority=priority,
        due_at=due_at,
        **kwargs,
    )


def _event(
    title: str,
    start: datetime,
    end: datetime,
    *,
    recurrence: str = "none",
    recurrence_end: datetime | None = None,
    all_day: bool = False,
) -> Event:
    return Event(
        user_id=OWNER_ID,
        title=title,
        start_time=start,
        end_time=end,
        recurrence=recurrence,
        recurrence_end=recurrence_end,
        all_day=all_day,
    )


def test_day_bounds_in_utc() -> None:
    assert day_bounds(DAY) == (datetime(2025, 1, 6), datetime(2025, 1, 7))


def test_day_bounds_convert_local_midnight_to_utc() -> None:
    start, end = day_bounds(DAY, ZoneInfo("America/New_York"))

    assert start == datetime(2025, 1, 6, 5, 0)
    assert end == datetime(2025, 1, 7, 5, 0)


def test_one_off_event_outside_window_has_no_occurrences() -> None:
    event = _event("standup", datetime(2025, 1, 5, 9), datetime(2025, 1, 5, 10))

    assert expand_recurrences(event, *day_bounds(DAY)) == []


def test_daily_event_expands_into_later_day_with_occurrence_index() -> None:
    event = _event(
        "run",
        datetime(2025, 1, 1, 7),
        datetime(2025, 1, 1, 8),
        recurrence="daily",
    )

    occurrences = expand_recurrences(event, *day_bounds(DAY))

    assert len(occurrences) == 1
    assert occurrences[0].index == 5
    assert occurrences[0].start == datetime(2025, 1, 6, 7)
    assert occurrences[0].end == datetime(2025, 1, 6, 8)


def test_weekly_event_stops_at_inclusive_recurrence_end() -> None:
    event = _event(
        "review",
        datetime(2025, 1, 6, 9),
        datetime(2025, 1, 6, 10),
        recurrence="weekly",
        recurrence_end=datetime(2025, 1, 20, 9),
    )

    occurrences = expand_recurrences(event, datetime(2025, 1, 1), datetime(2025, 2, 1))

    assert [occurrence.start.day for occurrence in occurrences] == [6, 13, 20]


def test_monthly_event_keeps_day_of_month_after_short_months() -> None:
    event = _event(
        "rent",
        datetime(2025, 1, 31, 8),
        datetime(2025, 1, 31, 9),
        recurrence="monthly",
    )

    occurrences = expand_recurrences(event, datetime(2025, 1, 1), datetime(2025, 5, 1))

    assert [occurrence.start.date() for occurrence in occurrences] == [
        date(2025, 1, 31),
        date(2025, 2, 28),
        date(2025, 3, 31),
        date(2025, 4, 30),
    ]


def test_yearly_event_expands_once_per_year() -> None:
    event = _event(
        "anniversary",
        datetime(2020, 3, 1, 18),
        datetime(2020, 3, 1, 20),
        recurrence="yearly",
    )

    occurrences = expand_recurrences(event, datetime(2025, 1, 1), datetime(2026, 1, 1))

    assert len(occurrences) == 1
    assert occurrences[0].index == 5
    assert occurrences[0].start == datetime(2025, 3, 1, 18)


def test_expansion_is_capped() -> None:
    event = _event(
        "habit",
        datetime(2020, 1, 1, 6),
        datetime(2020, 1, 1, 7),
        recurrence="daily",
    )

    occurrences = expand_recurrences(event, datetime(2020, 1, 1), datetime(2025, 1, 1))

    assert len(occurrences) == MAX_OCCURRENCES


def test_day_layout_places_tasks_and_events_in_shared_lanes() -> None:
    event = _event("lecture", datetime(2025, 1, 6, 9), datetime(2025, 1, 6, 10))
    task = _task("problem set", due_at=datetime(2025, 1, 6, 9, 30))

    layout = build_day_layout(DAY, [task], [event])

    assert [item.kind for item in layout.items] == ["event", "task"]
    event_item, task_item = layout.items
    assert (event_item.lane, event_item.lane_count) == (0, 2)
    assert (task_item.lane, task_item.lane_count) == (1, 2)
    assert task_item.end is None
    assert task_item.left_pct == 50
    assert task_item.width_pct == 50
    assert event_item.id == event.id
    assert task_item.id == task.id


def test_day_layout_routes_untimed_items_to_all_day_strip() -> None:
    undated_low = _task("inbox zero", due_at=None, priority="low")
    early = _task("gym", due_at=datetime(2025, 1, 6, 4, 30), priority="urgent")
    timed = _task("essay", due_at=datetime(2025, 1, 6, 14))
    holiday = _event(
        "holiday",
        datetime(2025, 1, 6),
        datetime(2025, 1, 6, 23, 59),
        all_day=True,
    )

    layout = build_day_layout(DAY, [undated_low, early, timed], [holiday])

    assert [item.title for item in layout.items] == ["essay"]
    assert [task.title for task in layout.all_day_tasks] == ["gym", "inbox zero"]
    assert [event.title for event in layout.all_day_events] == ["holiday"]


def test_day_layout_includes_last_visible_hour() -> None:
    late = _task("journal", due_at=datetime(2025, 1, 6, 23, 15))

    layout = build_day_layout(DAY, [late], [])

    assert [item.title for item in layout.items] == ["journal"]


def test_day_layout_ignores_tasks_due_on_other_days() -> None:
    tomorrow = _task("tomorrow", due_at=datetime(2025, 1, 7, 10))

    layout = build_day_layout(DAY, [tomorrow], [])

    assert layout.items == []
    assert layout.all_day_tasks == []


def test_day_layout_reports_recurring_occurrence_index() -> None:
    event = _event(
        "run",
        datetime(2025, 1, 1, 7),
        datetime(2025, 1, 1, 8),
        recurrence="daily",
    )

    layout = build_day_layout(DAY, [], [event])

    assert len(layout.items) == 1
    assert layout.items[0].occurrence == 5
    assert layout.items[0].start == datetime(2025, 1, 6, 7)


def test_week_layout_starts_on_monday_and_lists_undated_tasks_once() -> None:
    undated = _task("someday", due_at=None)
    thursday = _task("report", due_at=datetime(2025, 1, 9, 11))

    week = build_week_layout(date(2025, 1, 8), [undated, thursday], [])

    assert week_start(date(2025, 1, 12)) == DAY
    assert week.start == DAY
    assert week.end == date(2025, 1, 12)
    assert [day.date for day in week.days] == [DAY + timedelta(days=n) for n in range(7)]
    assert [task.title for task in week.undated_tasks] == ["someday"]
    assert all(day.all_day_tasks == [] for day in week.days)
    assert [item.title for item in week.days[3].items] == ["report"]


def test_month_summary_counts_tasks_and_event_occurrences() -> None:
    done = _task(
        "done",
        due_at=datetime(2025, 2, 3, 10),
        is_completed=True,
        completed_at=datetime(2025, 2, 3, 11),
    )
    open_task = _task("open", due_at=datetime(2025, 2, 3, 15))
    weekly = _event(
        "club",
        datetime(2025, 1, 27, 18),
        datetime(2025, 1, 27, 19),
        recurrence="weekly",
    )

    month = build_month_summary(date(2025, 2, 14), [done, open_task], [weekly])

    assert (month.year, month.month) == (2025, 2)
    assert len(month.days) == 28
    feb_3 = month.days[2]
    assert (feb_3.task_count, feb_3.completed_task_count, feb_3.event_count) == (2, 1, 1)
    assert sum(day.event_count for day in month.days) == 4
    assert month.days[3].event_count == 0
