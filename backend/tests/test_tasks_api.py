# ruff: noqa: INP001
"""Integration tests for task CRUD and reward-granting completion."""

from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi import APIRouter, FastAPI
from fastapi_pagination import add_pagination
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from planner.api.preferences import router as preferences_router
from planner.api.tasks import router as tasks_router
from planner.core.config import settings
from planner.core.error_handling import install_error_handling
from planner.db.session import get_session
from planner.models.tasks import Task
from planner.models.users import User
from planner.services.suggestions import AssistantOfflineError, get_suggestion_service

AUTH_HEADERS = {"Authorization": f"Bearer {settings.local_auth_token}"}


async def _make_engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    return engine


class _OfflineAssistant:
    async def suggest(self, tasks, domains=None):
        raise AssistantOfflineError("missing_api_key")

    async def explain(self, task):
        return f"Do {task.title} first."


def _build_test_app(session_maker: async_sessionmaker[AsyncSession]) -> FastAPI:
    app = FastAPI()
    install_error_handling(app)
    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(tasks_router)
    api_v1.include_router(preferences_router)
    app.include_router(api_v1)
    add_pagination(app)

    async def _override_get_session() -> AsyncSession:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_suggestion_service] = _OfflineAssistant
    return app


async def _client_for(engine: AsyncEngine) -> AsyncClient:
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    return AsyncClient(
        transport=ASGITransport(app=_build_test_app(session_maker)),
        base_url="http://testserver",
        headers=AUTH_HEADERS,
    )


async def _create(client: AsyncClient, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "title": "Interval run",
        "domain": "fitness",
        "priority": "high",
        "estimated_hours": 2.0,
    }
    payload.update(overrides)
    response = await client.post("/api/v1/tasks", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_tasks_require_bearer_token() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            missing = await client.get("/api/v1/tasks", headers={"Authorization": ""})
            assert missing.status_code == 401
            wrong = await client.get(
                "/api/v1/tasks",
                headers={"Authorization": "Bearer not-the-token"},
            )
            assert wrong.status_code == 401
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_create_starts_incomplete_with_zero_rewards() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client, title="  Interval run  ")

            assert task["title"] == "Interval run"
            assert task["is_completed"] is False
            assert task["xp_reward"] == 0
            assert task["eu_reward"] == 0
            assert task["completed_at"] is None

            fetched = await client.get(f"/api/v1/tasks/{task['id']}")
            assert fetched.status_code == 200
            assert fetched.json()["id"] == task["id"]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"title": "x", "domain": "fitness", "xp_reward": 999},
        {"title": "x", "domain": "fitness", "is_completed": True},
        {"title": "x", "domain": "fitness", "estimated_hours": 0.7},
        {"title": "x", "domain": "fitness", "estimated_hours": 30},
        {"title": "   ", "domain": "fitness"},
        {"title": "x", "domain": "gardening"},
        {"title": "x", "domain": "fitness", "priority": "critical"},
    ],
)
async def test_create_rejects_invalid_payloads(payload: dict[str, object]) -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            response = await client.post("/api/v1/tasks", json=payload)
            assert response.status_code == 422
            assert "request_id" in response.json()
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_completion_grants_rewards_exactly_once() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client)
            url = f"/api/v1/tasks/{task['id']}"

            completed = await client.patch(url, json={"is_completed": True})
            assert completed.status_code == 200
            body = completed.json()
            assert body["is_completed"] is True
            assert body["xp_reward"] == 50
            assert body["eu_reward"] == 50
            assert body["eu_display"] == 5.0
            assert body["actual_hours"] == 2.0
            assert body["completed_at"] is not None

            again = await client.patch(url, json={"is_completed": True, "actual_hours": 9.0})
            assert again.status_code == 200
            assert again.json()["xp_reward"] == 50
            assert again.json()["actual_hours"] == 2.0
            assert again.json()["completed_at"] == body["completed_at"]

            reopened = await client.patch(url, json={"is_completed": False})
            assert reopened.status_code == 409
            assert reopened.json()["detail"]["code"] == "reward_integrity"

            current = await client.get(url)
            assert current.json()["is_completed"] is True
            assert current.json()["xp_reward"] == 50
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_completion_uses_reported_actual_hours() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client, domain="creative", priority="medium", estimated_hours=1.0)

            response = await client.patch(
                f"/api/v1/tasks/{task['id']}",
                json={"is_completed": True, "actual_hours": 1.5},
            )

            assert response.status_code == 200
            assert response.json()["xp_reward"] == 23
            assert response.json()["eu_reward"] == 12
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_completion_scores_stored_priority_not_patched_one() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client, priority="low", estimated_hours=2.0)

            response = await client.patch(
                f"/api/v1/tasks/{task['id']}",
                json={"is_completed": True, "priority": "urgent", "domain": "social"},
            )

            assert response.status_code == 200
            body = response.json()
            assert body["xp_reward"] == 20
            assert body["eu_reward"] == 50
            assert body["priority"] == "urgent"
            assert body["domain"] == "social"
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_patch_rejects_reward_fields_and_bad_hours() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client)
            url = f"/api/v1/tasks/{task['id']}"

            tampered = await client.patch(url, json={"xp_reward": 1000})
            assert tampered.status_code == 422
            bad_step = await client.patch(url, json={"actual_hours": 1.25})
            assert bad_step.status_code == 422
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_progress_hours_on_open_task_do_not_grant_rewards() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client)

            response = await client.patch(
                f"/api/v1/tasks/{task['id']}",
                json={"actual_hours": 0.5, "priority": "urgent"},
            )

            body = response.json()
            assert body["actual_hours"] == 0.5
            assert body["priority"] == "urgent"
            assert body["is_completed"] is False
            assert body["xp_reward"] == 0
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_completion_uses_owner_multipliers() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            prefs = await client.patch(
                "/api/v1/preferences",
                json={"eu_multipliers": {"fitness": 9.0}},
            )
            assert prefs.status_code == 200
            assert prefs.json()["eu_multipliers"]["fitness"] == 5.0

            task = await _create(client, estimated_hours=1.0)
            response = await client.patch(
                f"/api/v1/tasks/{task['id']}",
                json={"is_completed": True},
            )

            assert response.json()["eu_reward"] == 50
            assert response.json()["xp_reward"] == 25
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_other_owners_tasks_are_not_found() -> None:
    engine = await _make_engine()
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_maker() as session:
            stranger = User(external_id=f"stranger-{uuid4().hex}")
            session.add(stranger)
            await session.commit()
            foreign = Task(user_id=stranger.id, title="Not yours", domain="social")
            session.add(foreign)
            await session.commit()
            foreign_id = foreign.id

        async with await _client_for(engine) as client:
            assert (await client.get(f"/api/v1/tasks/{foreign_id}")).status_code == 404
            patched = await client.patch(
                f"/api/v1/tasks/{foreign_id}",
                json={"is_completed": True},
            )
            assert patched.status_code == 404
            assert (await client.delete(f"/api/v1/tasks/{foreign_id}")).status_code == 404
            listing = await client.get("/api/v1/tasks")
            assert listing.json()["total"] == 0
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_list_filters_and_paginates() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            first = await _create(client, title="first", domain="academic")
            await _create(client, title="second", domain="fitness")
            await _create(client, title="third", domain="fitness", priority="low")
            await client.patch(f"/api/v1/tasks/{first['id']}", json={"is_completed": True})

            page = await client.get("/api/v1/tasks", params={"limit": 2})
            assert page.status_code == 200
            assert page.json()["total"] == 3
            assert len(page.json()["items"]) == 2

            done = await client.get("/api/v1/tasks", params={"is_completed": "true"})
            assert [item["title"] for item in done.json()["items"]] == ["first"]

            fitness = await client.get(
                "/api/v1/tasks",
                params={"domain": "fitness", "priority": "low"},
            )
            assert [item["title"] for item in fitness.json()["items"]] == ["third"]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_delete_removes_task() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            task = await _create(client)
            url = f"/api/v1/tasks/{task['id']}"

            deleted = await client.delete(url)
            assert deleted.status_code == 204
            assert (await client.get(url)).status_code == 404
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_assistant_routes() -> None:
    engine = await _make_engine()
    try:
        async with await _client_for(engine) as client:
            offline = await client.get("/api/v1/tasks/suggestions")
            assert offline.status_code == 503
            assert offline.json()["detail"] == {
                "code": "assistant_offline",
                "message": "ALFRED is currently offline",
            }

            task = await _create(client, title="Read chapter 4")
            explained = await client.post(f"/api/v1/tasks/{task['id']}/explain")
            assert explained.status_code == 200
            assert explained.json() == {"explanation": "Do Read chapter 4 first."}
    finally:
        await engine.dispose()
