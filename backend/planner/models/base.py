"""Shared SQLModel base classes."""

from __future__ import annotations

from typing import ClassVar

from sqlmodel import SQLModel

from planner.db.query_manager import QueryManager


class QueryModel(SQLModel):
    """SQLModel base that exposes the ``objects`` query manager."""

    objects: ClassVar[QueryManager] = QueryManager()
