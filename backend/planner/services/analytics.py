"""Gamification analytics derived from an owner's tasks."""

from __future__ import annotations

import math
from datetime import UTC, date, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from planner.schemas.analytics import (
    AnalyticsSummaryRead,
    DomainEffortRead,
    StatusBreakdownRead,
    WeekdayActivityRead,
)
from planner.services.rewards import DEFAULT_REWARD_CONFIG, Domain, Priority, RewardConfig, round_half_up

if TYPE_CHECKING:
    from collections.abc import Sequence

    from planner.models.tasks import Task

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
FOCUS_MAX = 10
FOCUS_FACTOR = 1.2
XP_PER_LEVEL = 100
EU_PER_LEVEL = 10
XP_TARGET_FLOOR = 1000
EU_TARGET_FLOOR = 50
_HIGH_PRIORITIES = frozenset({Priority.HIGH.value, Priority.URGENT.value})


def _round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _completed_on(task: Task, tz: tzinfo) -> date | None:
    if not task.is_completed or task.completed_at is None:
        return None
    return task.completed_at.replace(tzinfo=UTC).astimezone(tz).date()


def completion_streak(tasks: Sequence[Task], today: date, *, tz: tzinfo = UTC) -> int:
    """Count consecutive days with at least one completion.

    The run is anchored at ``today``, or at yesterday when nothing has been
    completed yet today. A latest completion older than yesterday means no streak.
    """
    days = {day for task in tasks if (day := _completed_on(task, tz)) is not None}
    if not days:
        return 0
    cursor = today if today in days else today - timedelta(days=1)
    streak = 0
    while cursor in days:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def domain_hours(tasks: Sequence[Task]) -> dict[Domain, float]:
    """Sum the actual hours of completed tasks per domain."""
    totals = {domain: 0.0 for domain in Domain}
    for task in tasks:
        if not task.is_completed or not task.actual_hours:
            continue
        try:
            domain = Domain(task.domain)
        except ValueError:
            continue
        totals[domain] += task.actual_hours
    return totals


def weekly_breakdown(
    tasks: Sequence[Task],
    today: date,
    *,
    tz: tzinfo = UTC,
) -> list[WeekdayActivityRead]:
    """Per-day completion activity for the Monday-to-Sunday week containing ``today``."""
    monday = today - timedelta(days=today.weekday())
    rows: list[WeekdayActivityRead] = []
    for offset, name in enumerate(WEEKDAY_NAMES):
        day = monday + timedelta(days=offset)
        done = [task for task in tasks if _completed_on(task, tz) == day]
        hours = sum(task.actual_hours or 0.0 for task in done)
        high = sum(1 for task in done if task.priority in _HIGH_PRIORITIES)
        rows.append(
            WeekdayActivityRead(
                date=day,
                name=name,
                tasks=len(done),
                high_priority=high,
                focus=min(FOCUS_MAX, round_half_up((hours + high) * FOCUS_FACTOR)),
            ),
        )
    return rows


def status_breakdown(tasks: Sequence[Task]) -> StatusBreakdownRead:
    completed = sum(1 for task in tasks if task.is_completed)
    in_progress = sum(
        1 for task in tasks if not task.is_completed and (task.actual_hours or 0) > 0
    )
    return StatusBreakdownRead(
        completed=completed,
        in_progress=in_progress,
        pending=len(tasks) - completed - in_progress,
    )


def level_for(gamification_type: str, total_xp: int, total_eu: float) -> int:
    """Sapling levels advance every 100 XP, mountain levels every 10 EU."""
    if gamification_type == "mountain":
        return math.floor(total_eu / EU_PER_LEVEL) + 1
    return total_xp // XP_PER_LEVEL + 1


def _progress(value: float, target: int) -> float:
    return _round2(min(100.0, value / target * 100))


def summary(
    tasks: Sequence[Task],
    *,
    today: date,
    config: RewardConfig = DEFAULT_REWARD_CONFIG,
    gamification_type: str = "sapling",
    tz: tzinfo = UTC,
) -> AnalyticsSummaryRead:
    """Totals, targets and breakdowns shown on the analytics dashboard.

    EU here is recomputed from logged hours with the owner's current
    multipliers, so it tracks multiplier changes; stored per-task rewards are
    left untouched.
    """
    hours = domain_hours(tasks)
    domains = [
        DomainEffortRead(
            domain=domain.value,
            hours=_round2(domain_total),
            eu=_round2(domain_total * config.multiplier_for(domain)),
            efficiency_pct=round_half_up(config.multiplier_for(domain) * 100),
        )
        for domain, domain_total in hours.items()
    ]
    total_xp = sum(task.xp_reward for task in tasks if task.is_completed)
    total_eu = _round2(sum(entry.eu for entry in domains))
    xp_target = max(XP_TARGET_FLOOR, math.ceil(total_xp / 100) * 100)
    eu_target = max(EU_TARGET_FLOOR, math.ceil(total_eu / 10) * 10)
    status = status_breakdown(tasks)
    total_tasks = len(tasks)

    return AnalyticsSummaryRead(
        total_xp=total_xp,
        total_eu=total_eu,
        xp_target=xp_target,
        xp_progress_pct=_progress(total_xp, xp_target),
        eu_target=eu_target,
        eu_progress_pct=_progress(total_eu, eu_target),
        level=level_for(gamification_type, total_xp, total_eu),
        gamification_type=gamification_type,
        streak_days=completion_streak(tasks, today, tz=tz),
        completed_tasks=status.completed,
        total_tasks=total_tasks,
        completion_rate_pct=(
            round_half_up(status.completed / total_tasks * 100) if total_tasks else 0
        ),
        status=status,
        domains=domains,
        week=weekly_breakdown(tasks, today, tz=tz),
    )
