"""Owner display preferences and EU multiplier endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter

from planner.api.deps import AUTH_DEP, SESSION_DEP
from planner.core.auth import AuthContext
from planner.schemas.preferences import PreferencesRead, PreferencesUpdate
from planner.services.preferences import get_or_create_preferences, to_read, update_preferences

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/preferences", tags=["preferences"])


@router.get("", response_model=PreferencesRead)
async def get_preferences_endpoint(
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> PreferencesRead:
    """Return the caller's preferences, creating defaults on first read."""
    preferences = await get_or_create_preferences(session, auth.user.id)
    return to_read(preferences)


@router.patch("", response_model=PreferencesRead)
async def update_preferences_endpoint(
    payload: PreferencesUpdate,
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> PreferencesRead:
    """Update theme settings and multipliers; later completions use the new values."""
    preferences = await get_or_create_preferences(session, auth.user.id)
    preferences = await update_preferences(session, preferences=preferences, payload=payload)
    return to_read(preferences)
