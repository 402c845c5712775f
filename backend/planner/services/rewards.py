"""XP and effort-unit (EU) scoring for task completion.

Rewards are granted exactly once, when a task moves from incomplete to
complete. EU values are stored as integer tenths (``eu_reward / 10`` is the
displayed value); existing rows depend on that scale.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

EU_STORAGE_SCALE = 10
MULTIPLIER_MIN = 0.1
MULTIPLIER_MAX = 5.0
DEFAULT_BASE_XP = 15
DEFAULT_DOMAIN_MULTIPLIER = 1.0


class Priority(str, Enum):
    """Task priority levels, lowest to highest."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class Domain(str, Enum):
    """Activity domains that carry their own EU multiplier."""

    ACADEMIC = "academic"
    FITNESS = "fitness"
    CREATIVE = "creative"
    SOCIAL = "social"
    MAINTENANCE = "maintenance"


DEFAULT_DOMAIN_MULTIPLIERS: dict[Domain, float] = {
    Domain.ACADEMIC: 1.0,
    Domain.FITNESS: 2.5,
    Domain.CREATIVE: 0.8,
    Domain.SOCIAL: 1.2,
    Domain.MAINTENANCE: 0.6,
}


class RewardIntegrityError(Exception):
    """Raised when an update would revoke a completion that already granted rewards."""

    code = "reward_integrity"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message
            or (
                "Tasks cannot be marked as incomplete once completed "
                "to maintain reward integrity."
            ),
        )


def clamp_multiplier(value: float) -> float:
    """Clamp a domain multiplier into the supported range."""
    return max(MULTIPLIER_MIN, min(MULTIPLIER_MAX, float(value)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with ties away from zero (2.5 -> 3)."""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _coerce_priority(priority: Priority | str) -> Priority | None:
    try:
        return Priority(priority)
    except ValueError:
        return None


def _coerce_domain(domain: Domain | str) -> Domain | None:
    try:
        return Domain(domain)
    except ValueError:
        return None


def base_xp(priority: Priority | str) -> int:
    """XP granted per hour of work at the given priority."""
    match _coerce_priority(priority):
        case Priority.LOW:
            return 10
        case Priority.MEDIUM:
            return 15
        case Priority.HIGH:
            return 25
        case Priority.URGENT:
            return 40
        case _:
            return DEFAULT_BASE_XP


@dataclass(frozen=True)
class RewardConfig:
    """Per-request scoring configuration (the owner's domain multipliers)."""

    multipliers: Mapping[Domain, float] = field(
        default_factory=lambda: dict(DEFAULT_DOMAIN_MULTIPLIERS),
    )

    def __post_init__(self) -> None:
        clamped = {
            domain: clamp_multiplier(self.multipliers.get(domain, default))
            for domain, default in DEFAULT_DOMAIN_MULTIPLIERS.items()
        }
        object.__setattr__(self, "multipliers", clamped)

    def multiplier_for(self, domain: Domain | str) -> float:
        resolved = _coerce_domain(domain)
        if resolved is None:
            return DEFAULT_DOMAIN_MULTIPLIER
        return self.multipliers[resolved]

    def with_multiplier(self, domain: Domain | str, value: float) -> RewardConfig:
        """Return a copy with one domain multiplier replaced (and clamped)."""
        resolved = Domain(domain)
        updated = dict(self.multipliers)
        updated[resolved] = value
        return replace(self, multipliers=updated)


DEFAULT_REWARD_CONFIG = RewardConfig()


@dataclass(frozen=True)
class Reward:
    """XP and EU earned by one completion; ``eu`` is in storage tenths."""

    xp: int
    eu: int


@dataclass(frozen=True)
class CompletionPatch:
    """Fields persisted atomically with the completion flip."""

    xp_reward: int
    eu_reward: int
    actual_hours: float
    is_completed: bool
    completed_at: datetime


def compute_reward(
    priority: Priority | str,
    domain: Domain | str,
    hours: float,
    config: RewardConfig = DEFAULT_REWARD_CONFIG,
) -> Reward:
    """Score ``hours`` of work; inputs are assumed validated upstream."""
    xp = round_half_up(base_xp(priority) * hours)
    eu = round_half_up(hours * config.multiplier_for(domain) * EU_STORAGE_SCALE)
    return Reward(xp=xp, eu=eu)


def plan_completion(
    *,
    is_completed: bool,
    estimated_hours: float,
    priority: Priority | str,
    domain: Domain | str,
    requested_completed: bool | None,
    requested_actual_hours: float | None,
    now: datetime,
    config: RewardConfig = DEFAULT_REWARD_CONFIG,
) -> CompletionPatch | None:
    """Decide the reward side effects of an update request.

    Returns the patch to persist when the request completes an open task,
    ``None`` when rewards are unaffected, and raises ``RewardIntegrityError``
    when the request tries to reopen a completed task.
    """
    if is_completed:
        if requested_completed is False:
            raise RewardIntegrityError
        return None
    if not requested_completed:
        return None

    hours = requested_actual_hours if requested_actual_hours is not None else estimated_hours
    reward = compute_reward(priority, domain, hours, config)
    return CompletionPatch(
        xp_reward=reward.xp,
        eu_reward=reward.eu,
        actual_hours=hours,
        is_completed=True,
        completed_at=now,
    )


def eu_display(eu_reward: int) -> float:
    """Convert stored EU tenths into the displayed EU value."""
    return eu_reward / EU_STORAGE_SCALE
