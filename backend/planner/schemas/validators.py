"""Shared field validators for API payload schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal, InvalidOperation

from planner.core.time import to_naive_utc


def is_step_multiple(value: float, step: str) -> bool:
    """Return whether ``value`` is an exact multiple of the decimal ``step``."""
    try:
        return Decimal(str(value)) % Decimal(step) == 0
    except InvalidOperation:
        return False


def require_step(value: float | None, *, step: str, field_name: str) -> float | None:
    """Validate decimal step granularity, leaving ``None`` untouched."""
    if value is None:
        return None
    if not is_step_multiple(value, step):
        msg = f"{field_name} must be a multiple of {step}"
        raise ValueError(msg)
    return value


def strip_required_text(value: str, *, field_name: str) -> str:
    """Trim surrounding whitespace and reject blank strings."""
    cleaned = value.strip()
    if not cleaned:
        msg = f"{field_name} must not be blank"
        raise ValueError(msg)
    return cleaned


def naive_utc(value: datetime | None) -> datetime | None:
    """Store timestamps as naive UTC; aware inputs are converted first."""
    if value is None:
        return None
    return to_naive_utc(value)
