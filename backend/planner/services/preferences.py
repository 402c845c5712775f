"""Owner preferences storage and conversion into a reward configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from planner.core.logging import get_logger
from planner.core.time import utcnow
from planner.models.preferences import UserPreferences
from planner.schemas.preferences import PreferencesRead
from planner.services.rewards import Domain, RewardConfig, clamp_multiplier

if TYPE_CHECKING:
    from uuid import UUID

    from sqlmodel.ext.asyncio.session import AsyncSession

    from planner.schemas.preferences import PreferencesUpdate

logger = get_logger(__name__)


def _multiplier_column(domain: Domain) -> str:
    return f"{domain.value}_multiplier"


def multipliers_of(preferences: UserPreferences) -> dict[Domain, float]:
    return {domain: getattr(preferences, _multiplier_column(domain)) for domain in Domain}


def reward_config_for(preferences: UserPreferences | None) -> RewardConfig:
    """Build the scoring configuration for one owner's preferences row."""
    if preferences is None:
        return RewardConfig()
    return RewardConfig(multipliers=multipliers_of(preferences))


def to_read(preferences: UserPreferences) -> PreferencesRead:
    return PreferencesRead(
        theme=preferences.theme,
        font=preferences.font,
        gamification_type=preferences.gamification_type,
        eu_multipliers={
            domain.value: value for domain, value in multipliers_of(preferences).items()
        },
        updated_at=preferences.updated_at,
    )


async def get_preferences(session: AsyncSession, owner_id: UUID) -> UserPreferences | None:
    return await UserPreferences.objects.filter_by(user_id=owner_id).first(session)


async def get_or_create_preferences(
    session: AsyncSession,
    owner_id: UUID,
) -> UserPreferences:
    """Return the owner's preferences, inserting defaults on first access."""
    preferences = await get_preferences(session, owner_id)
    if preferences is not None:
        return preferences
    preferences = UserPreferences(user_id=owner_id)
    session.add(preferences)
    await session.commit()
    await session.refresh(preferences)
    logger.info("preferences.created", extra={"user_id": str(owner_id)})
    return preferences


async def update_preferences(
    session: AsyncSession,
    *,
    preferences: UserPreferences,
    payload: PreferencesUpdate,
) -> UserPreferences:
    """Apply a partial update; multipliers are clamped into range."""
    updates = payload.model_dump(exclude_unset=True, exclude={"eu_multipliers"})
    for key, value in updates.items():
        if value is None:
            continue
        setattr(preferences, key, getattr(value, "value", value))

    for domain, value in (payload.eu_multipliers or {}).items():
        clamped = clamp_multiplier(value)
        if clamped != value:
            logger.info(
                "preferences.multiplier.clamped",
                extra={"domain": domain.value, "requested": value, "stored": clamped},
            )
        setattr(preferences, _multiplier_column(domain), clamped)

    preferences.updated_at = utcnow()
    session.add(preferences)
    await session.commit()
    await session.refresh(preferences)
    return preferences
