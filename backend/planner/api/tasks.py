"""Task CRUD, completion and assistant endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlmodel import col, select

from planner.api.deps import AUTH_DEP, SESSION_DEP, SUGGESTIONS_DEP, TASK_DEP
from planner.core.auth import AuthContext
from planner.db.pagination import paginate
from planner.models.tasks import Task
from planner.schemas.pagination import DefaultLimitOffsetPage
from planner.schemas.suggestions import TaskExplanationRead, TaskSuggestion
from planner.schemas.tasks import TaskCreate, TaskRead, TaskUpdate
from planner.services.preferences import get_preferences, reward_config_for
from planner.services.rewards import Domain, Priority
from planner.services.suggestions import AssistantOfflineError, SuggestionService
from planner.services.tasks import (
    apply_task_update,
    create_task,
    delete_task,
    get_owned_task_or_404,
    list_tasks,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fastapi_pagination.limit_offset import LimitOffsetPage
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/tasks", tags=["tasks"])
DOMAIN_QUERY = Query(default=None)
PRIORITY_QUERY = Query(default=None)
COMPLETED_QUERY = Query(default=None)
SUGGESTION_DOMAINS_QUERY = Query(default=None, alias="domain")


def _task_read(task: Task) -> TaskRead:
    return TaskRead.model_validate(task, from_attributes=True)


@router.get("", response_model=DefaultLimitOffsetPage[TaskRead])
async def list_task_page(
    is_completed: bool | None = COMPLETED_QUERY,
    domain: Domain | None = DOMAIN_QUERY,
    priority: Priority | None = PRIORITY_QUERY,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> LimitOffsetPage[TaskRead]:
    """List the caller's tasks, newest first."""
    statement = select(Task).where(col(Task.user_id) == auth.user.id)
    if is_completed is not None:
        statement = statement.where(col(Task.is_completed) == is_completed)
    if domain is not None:
        statement = statement.where(col(Task.domain) == domain.value)
    if priority is not None:
        statement = statement.where(col(Task.priority) == priority.value)
    statement = statement.order_by(col(Task.created_at).desc())

    def _transform(items: Sequence[Any]) -> Sequence[Any]:
        return [_task_read(task) for task in items]

    return await paginate(session, statement, transformer=_transform)


@router.post("", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task_endpoint(
    payload: TaskCreate,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> TaskRead:
    """Create a task; rewards start at zero and are granted on completion."""
    task = await create_task(session, owner_id=auth.user.id, payload=payload)
    return _task_read(task)


@router.get("/suggestions", response_model=list[TaskSuggestion])
async def suggest_tasks(
    domains: list[Domain] | None = SUGGESTION_DOMAINS_QUERY,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
    assistant: SuggestionService = SUGGESTIONS_DEP,
) -> list[TaskSuggestion]:
    """Ask the assistant for new tasks balancing the caller's workload."""
    tasks = await list_tasks(session, auth.user.id)
    try:
        return await assistant.suggest(
            tasks,
            [domain.value for domain in domains] if domains else None,
        )
    except AssistantOfflineError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": exc.code, "message": str(exc)},
        ) from exc


@router.get("/{task_id}", response_model=TaskRead)
async def get_task_endpoint(task: Task = TASK_DEP) -> TaskRead:
    return _task_read(task)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task_endpoint(
    task_id: UUID,
    payload: TaskUpdate,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> TaskRead:
    """Update a task; completing it grants XP/EU exactly once.

    Completed tasks cannot be reopened (409 ``reward_integrity``).
    """
    preferences = await get_preferences(session, auth.user.id)
    task = await get_owned_task_or_404(
        session,
        task_id=task_id,
        owner_id=auth.user.id,
        for_update=True,
    )
    task = await apply_task_update(
        session,
        task=task,
        payload=payload,
        config=reward_config_for(preferences),
    )
    return _task_read(task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task_endpoint(
    task: Task = TASK_DEP,
    session: AsyncSession = SESSION_DEP,
) -> None:
    await delete_task(session, task=task)


@router.post("/{task_id}/explain", response_model=TaskExplanationRead)
async def explain_task(
    task: Task = TASK_DEP,
    assistant: SuggestionService = SUGGESTIONS_DEP,
) -> TaskExplanationRead:
    """Short assistant note on why this task matters."""
    return TaskExplanationRead(explanation=await assistant.explain(task))
