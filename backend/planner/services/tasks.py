"""Task persistence and the completion/reward update flow."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import HTTPException, status
from sqlmodel import col

from planner.core.logging import get_logger
from planner.core.time import utcnow
from planner.models.events import Event
from planner.models.tasks import Task
from planner.services.rewards import (
    DEFAULT_REWARD_CONFIG,
    RewardConfig,
    RewardIntegrityError,
    plan_completion,
)

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from planner.schemas.tasks import TaskCreate, TaskUpdate

logger = get_logger(__name__)

# Columns that may not be cleared to NULL by an explicit ``null`` in a PATCH.
_NON_NULLABLE_UPDATE_FIELDS = frozenset(
    {"title", "domain", "priority", "estimated_hours", "is_completed"},
)


async def list_tasks(session: AsyncSession, owner_id: UUID) -> list[Task]:
    """Return all tasks for an owner, newest first."""
    return await (
        Task.objects.filter_by(user_id=owner_id)
        .order_by(col(Task.created_at).desc())
        .all(session)
    )


async def list_events(session: AsyncSession, owner_id: UUID) -> list[Event]:
    """Return all events for an owner ordered by start time."""
    return await (
        Event.objects.filter_by(user_id=owner_id)
        .order_by(col(Event.start_time).asc())
        .all(session)
    )


async def get_task(session: AsyncSession, task_id: UUID) -> Task | None:
    return await Task.objects.by_id(task_id).first(session)


async def get_owned_task_or_404(
    session: AsyncSession,
    *,
    task_id: UUID,
    owner_id: UUID,
    for_update: bool = False,
) -> Task:
    """Load a task owned by ``owner_id`` or raise 404."""
    query = Task.objects.by_id(task_id)
    if for_update:
        query = query.for_update()
    task = await query.first(session)
    if task is None or task.user_id != owner_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")
    return task


async def create_task(
    session: AsyncSession,
    *,
    owner_id: UUID,
    payload: TaskCreate,
) -> Task:
    """Persist a new incomplete task with zeroed rewards."""
    now = utcnow()
    task = Task(
        user_id=owner_id,
        title=payload.title,
        description=payload.description,
        domain=payload.domain.value,
        priority=payload.priority.value,
        estimated_hours=payload.estimated_hours,
        due_at=payload.due_at,
        xp_reward=0,
        eu_reward=0,
        is_completed=False,
        created_at=now,
        updated_at=now,
    )
    session.add(task)
    await session.commit()
    await session.refresh(task)
    logger.info(
        "task.created",
        extra={"task_id": str(task.id), "domain": task.domain, "priority": task.priority},
    )
    return task


def _plain_updates(payload: TaskUpdate) -> dict[str, object]:
    updates = payload.model_dump(exclude_unset=True)
    updates.pop("is_completed", None)
    updates.pop("actual_hours", None)
    for key in list(updates):
        value = updates[key]
        if value is None and key in _NON_NULLABLE_UPDATE_FIELDS:
            updates.pop(key)
        elif hasattr(value, "value"):
            updates[key] = value.value
    return updates


async def apply_task_update(
    session: AsyncSession,
    *,
    task: Task,
    payload: TaskUpdate,
    config: RewardConfig = DEFAULT_REWARD_CONFIG,
) -> Task:
    """Apply a partial update, granting rewards on the first completion.

    The caller must have loaded ``task`` in the current transaction (with a
    row lock where supported); the reward patch and the field updates are
    committed together.
    """
    # Rewards are scored against the row as stored, before this patch.
    stored_priority = task.priority
    stored_domain = task.domain
    stored_estimate = task.estimated_hours
    updates = _plain_updates(payload)
    for key, value in updates.items():
        setattr(task, key, value)

    now = utcnow()
    try:
        patch = plan_completion(
            is_completed=task.is_completed,
            estimated_hours=stored_estimate,
            priority=stored_priority,
            domain=stored_domain,
            requested_completed=payload.is_completed,
            requested_actual_hours=payload.actual_hours,
            now=now,
            config=config,
        )
    except RewardIntegrityError as exc:
        task_id = str(task.id)
        await session.rollback()
        logger.warning("task.uncomplete.rejected", extra={"task_id": task_id})
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc

    if patch is not None:
        task.xp_reward = patch.xp_reward
        task.eu_reward = patch.eu_reward
        task.actual_hours = patch.actual_hours
        task.is_completed = patch.is_completed
        task.completed_at = patch.completed_at
    elif payload.actual_hours is not None and not task.is_completed:
        # Progress logged on an open task; no reward yet.
        task.actual_hours = payload.actual_hours

    task.updated_at = now
    session.add(task)
    await session.commit()
    await session.refresh(task)
    if patch is not None:
        logger.info(
            "task.completed",
            extra={
                "task_id": str(task.id),
                "xp_reward": task.xp_reward,
                "eu_reward": task.eu_reward,
                "actual_hours": task.actual_hours,
            },
        )
    return task


async def delete_task(session: AsyncSession, *, task: Task) -> None:
    """Delete a task and detach any events linked to it."""
    linked = await Event.objects.filter_by(task_id=task.id).all(session)
    for event in linked:
        event.task_id = None
        event.updated_at = utcnow()
        session.add(event)
    await session.flush()
    await session.delete(task)
    await session.commit()
    logger.info("task.deleted", extra={"task_id": str(task.id)})
