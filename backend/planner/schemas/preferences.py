"""Schemas for owner display preferences and EU multipliers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel
from sqlmodel._compat import SQLModelConfig

from planner.services.rewards import Domain

RUNTIME_ANNOTATION_TYPES = (datetime, Domain)


class Theme(str, Enum):
    DARK_KNIGHT = "dark-knight"
    NEON_GRID = "neon-grid"
    STEALTH_OPS = "stealth-ops"
    AURORA = "aurora"
    MINIMAL_WHITE = "minimal-white"


class Font(str, Enum):
    ORBITRON = "orbitron"
    SPACE_GROTESK = "space-grotesk"
    JETBRAINS_MONO = "jetbrains-mono"
    INTER = "inter"


class GamificationType(str, Enum):
    SAPLING = "sapling"
    MOUNTAIN = "mountain"


class PreferencesRead(SQLModel):
    """Current preferences with multipliers keyed by domain."""

    theme: str
    font: str
    gamification_type: str
    eu_multipliers: dict[str, float]
    updated_at: datetime


class PreferencesUpdate(SQLModel):
    """Partial preferences update.

    Multiplier values outside ``[0.1, 5.0]`` are accepted and clamped, matching
    the slider behaviour of the customization console.
    """

    model_config = SQLModelConfig(extra="forbid")

    theme: Theme | None = None
    font: Font | None = None
    gamification_type: GamificationType | None = None
    eu_multipliers: dict[Domain, float] | None = Field(default=None)
