"""Gamification analytics endpoint."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from fastapi import APIRouter

from planner.api.deps import AUTH_DEP, SESSION_DEP
from planner.core.auth import AuthContext
from planner.core.config import settings
from planner.schemas.analytics import AnalyticsSummaryRead
from planner.services import analytics
from planner.services.preferences import get_preferences, reward_config_for
from planner.services.tasks import list_tasks

if TYPE_CHECKING:
    from sqlmodel.ext.asyncio.session import AsyncSession

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary", response_model=AnalyticsSummaryRead)
async def get_summary(
    session: AsyncSession = SESSION_DEP,
    auth: AuthContext = AUTH_DEP,
) -> AnalyticsSummaryRead:
    """XP/EU totals, level, streak and weekly activity for the caller."""
    tz = ZoneInfo(settings.calendar_timezone)
    tasks = await list_tasks(session, auth.user.id)
    preferences = await get_preferences(session, auth.user.id)
    return analytics.summary(
        tasks,
        today=datetime.now(tz).date(),
        config=reward_config_for(preferences),
        gamification_type=preferences.gamification_type if preferences else "sapling",
        tz=tz,
    )
