"""FastAPI application entrypoint and router wiring for the planner backend."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi_pagination import add_pagination

from planner.api.analytics import router as analytics_router
from planner.api.calendar import router as calendar_router
from planner.api.events import router as events_router
from planner.api.preferences import router as preferences_router
from planner.api.tasks import router as tasks_router
from planner.api.users import router as users_router
from planner.core.config import settings
from planner.core.error_handling import install_error_handling
from planner.core.logging import configure_logging, get_logger
from planner.db.session import dispose_engine, init_db
from planner.schemas.health import HealthStatusResponse

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

configure_logging()
logger = get_logger(__name__)
OPENAPI_TAGS = [
    {
        "name": "health",
        "description": "Service liveness/readiness probes.",
    },
    {
        "name": "tasks",
        "description": (
            "Task CRUD and completion. Completing a task grants XP and EU exactly once; "
            "completed tasks cannot be reopened."
        ),
    },
    {
        "name": "events",
        "description": "Calendar event CRUD, including recurring events.",
    },
    {
        "name": "calendar",
        "description": "Day, week and month layouts with lane-positioned items.",
    },
    {
        "name": "preferences",
        "description": "Theme, font, gamification style and per-domain EU multipliers.",
    },
    {
        "name": "analytics",
        "description": "XP/EU totals, levels, streaks and weekly activity.",
    },
    {
        "name": "users",
        "description": "The authenticated planner owner.",
    },
]

_GENERIC_RESPONSE_DESCRIPTIONS = {"Successful Response", "Validation Error"}
_RESPONSE_DESCRIPTIONS = {
    "200": "Request completed successfully.",
    "201": "Created for the authenticated owner.",
    "204": "Removed; no response body.",
    "401": "Missing or invalid bearer token.",
    "404": "No such row for the authenticated owner.",
    "409": "A completed task cannot be reopened (`reward_integrity`).",
    "422": "Payload or query failed validation.",
    "503": "The assistant is offline (`assistant_offline`).",
}
# Error statuses raised from services rather than declared on the route.
_EXTRA_ERROR_STATUSES: dict[tuple[str, str], tuple[str, ...]] = {
    ("patch", "/api/v1/tasks/{task_id}"): ("404", "409"),
    ("get", "/api/v1/tasks/suggestions"): ("503",),
}


def _iter_operations(openapi_schema: dict[str, Any]) -> Iterator[tuple[str, str, dict[str, Any]]]:
    paths = openapi_schema.get("paths")
    if not isinstance(paths, dict):
        return
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        for method, operation in path_item.items():
            if isinstance(operation, dict):
                yield method, path, operation


def _normalize_operation_docs(openapi_schema: dict[str, Any]) -> None:
    """Document service-raised errors and replace generic response descriptions."""
    for method, path, operation in _iter_operations(openapi_schema):
        responses = operation.setdefault("responses", {})
        if path.startswith("/api/v1/"):
            responses.setdefault("401", {})
        for status_code in _EXTRA_ERROR_STATUSES.get((method, path), ()):
            responses.setdefault(status_code, {})
        for status_code, response in responses.items():
            if not isinstance(response, dict):
                continue
            existing = str(response.get("description", "")).strip()
            if not existing or existing in _GENERIC_RESPONSE_DESCRIPTIONS:
                response["description"] = _RESPONSE_DESCRIPTIONS.get(
                    str(status_code),
                    "Request processed.",
                )


class PlannerFastAPI(FastAPI):
    """FastAPI application with normalized OpenAPI docs."""

    def openapi(self) -> dict[str, Any]:
        if self.openapi_schema:
            return self.openapi_schema
        openapi_schema = get_openapi(
            title=self.title,
            version=self.version,
            description=self.description,
            routes=self.routes,
            tags=self.openapi_tags,
        )
        _normalize_operation_docs(openapi_schema)
        self.openapi_schema = openapi_schema
        return self.openapi_schema


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Initialize application resources before serving requests."""
    logger.info(
        "app.lifecycle.starting",
        extra={"environment": settings.environment, "db_auto_migrate": settings.db_auto_migrate},
    )
    await init_db()
    logger.info("app.lifecycle.started")
    try:
        yield
    finally:
        await dispose_engine()
        logger.info("app.lifecycle.stopped")


app = PlannerFastAPI(
    title="Batcave Planner API",
    version="0.1.0",
    lifespan=lifespan,
    openapi_tags=OPENAPI_TAGS,
)

origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )
    logger.info("app.cors.enabled", extra={"origins_count": len(origins)})
else:
    logger.info("app.cors.disabled")

install_error_handling(app)

_HEALTH_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_200_OK: {
        "description": "Service is alive.",
        "content": {"application/json": {"example": {"ok": True, "service": "batcave-planner"}}},
    },
}


@app.get("/health", tags=["health"], response_model=HealthStatusResponse, responses=_HEALTH_RESPONSES)
def health() -> HealthStatusResponse:
    """Lightweight liveness probe endpoint."""
    return HealthStatusResponse(ok=True)


@app.get("/healthz", tags=["health"], response_model=HealthStatusResponse, responses=_HEALTH_RESPONSES)
def healthz() -> HealthStatusResponse:
    """Alias liveness probe endpoint."""
    return HealthStatusResponse(ok=True)


@app.get("/readyz", tags=["health"], response_model=HealthStatusResponse, responses=_HEALTH_RESPONSES)
def readyz() -> HealthStatusResponse:
    """Readiness probe endpoint."""
    return HealthStatusResponse(ok=True)


api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(tasks_router)
api_v1.include_router(events_router)
api_v1.include_router(calendar_router)
api_v1.include_router(preferences_router)
api_v1.include_router(analytics_router)
api_v1.include_router(users_router)
app.include_router(api_v1)

add_pagination(app)
logger.debug("app.routes.registered", extra={"count": len(app.routes)})
