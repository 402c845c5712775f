"""Async engine, request-scoped sessions and schema bootstrap for the planner store."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING, Any

from alembic.config import Config
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from planner import models as _models
from planner.core.config import settings
from planner.core.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

# Import model modules so SQLModel metadata is fully registered at startup.
_MODEL_REGISTRY = _models

BACKEND_ROOT = Path(__file__).resolve().parents[2]
ALEMBIC_INI = BACKEND_ROOT / "alembic.ini"
MIGRATION_VERSIONS_DIR = BACKEND_ROOT / "migrations" / "versions"

logger = get_logger(__name__)


def _normalize_database_url(database_url: str) -> str:
    """Map plain ``postgresql``/``sqlite`` URLs onto their async drivers."""
    if "://" not in database_url:
        return database_url
    scheme, rest = database_url.split("://", 1)
    if scheme in {"postgresql", "postgres"}:
        return f"postgresql+psycopg://{rest}"
    if scheme == "sqlite":
        return f"sqlite+aiosqlite://{rest}"
    return database_url


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: object) -> None:
    # sqlite only checks foreign keys when asked to, per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for ``database_url`` with per-backend tweaks."""
    url = _normalize_database_url(database_url)
    if _is_sqlite(url):
        engine = create_async_engine(url)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_async_engine(url, pool_pre_ping=True)


async_engine: AsyncEngine = build_engine(settings.database_url)
async_session_maker = async_sessionmaker(
    async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


def _alembic_config() -> Config:
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def run_migrations() -> None:
    """Upgrade the planner schema to the latest Alembic revision."""
    from alembic import command

    logger.info("db.migrations.starting")
    command.upgrade(_alembic_config(), "head")
    logger.info("db.migrations.complete")


async def init_db() -> None:
    """Create or migrate the schema before the API serves requests."""
    if settings.db_auto_migrate:
        if any(MIGRATION_VERSIONS_DIR.glob("*.py")):
            await asyncio.to_thread(run_migrations)
            return
        logger.warning("db.migrations.missing", extra={"fallback": "create_all"})

    async with async_engine.connect() as conn, conn.begin():
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("db.schema.created")


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await async_engine.dispose()


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; uncommitted work is rolled back on exit."""
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            in_txn = False
            try:
                in_txn = bool(session.in_transaction())
            except SQLAlchemyError:
                logger.exception("db.session.inspect_failed")
            if in_txn:
                try:
                    await session.rollback()
                except SQLAlchemyError:
                    logger.exception("db.session.rollback_failed")
