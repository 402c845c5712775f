"""Pagination page types shared by list endpoints."""

from __future__ import annotations

from typing import TypeVar

from fastapi import Query
from fastapi_pagination.customization import CustomizedPage, UseParamsFields
from fastapi_pagination.limit_offset import LimitOffsetPage

T = TypeVar("T")

DefaultLimitOffsetPage = CustomizedPage[
    LimitOffsetPage[T],
    UseParamsFields(limit=Query(default=50, ge=1, le=200)),
]
