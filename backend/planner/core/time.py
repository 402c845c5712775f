"""Time helpers shared by models and services."""

from __future__ import annotations

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime.

    Timestamps are stored naive-in-UTC so SQLite and PostgreSQL round-trip
    identical values.
    """
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)
