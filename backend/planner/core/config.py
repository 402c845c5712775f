"""Application settings and environment configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Self

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BACKEND_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = BACKEND_ROOT / ".env"
LOCAL_AUTH_TOKEN_MIN_LENGTH = 50
LOCAL_AUTH_TOKEN_PLACEHOLDERS = frozenset(
    {
        "change-me",
        "changeme",
        "replace-me",
        "replace-with-strong-random-token",
    },
)


class Settings(BaseSettings):
    """Typed runtime configuration sourced from environment variables."""

    model_config = SettingsConfigDict(
        # Load `backend/.env` regardless of current working directory.
        env_file=[DEFAULT_ENV_FILE, ".env"],
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "dev"
    database_url: str = "sqlite+aiosqlite:///./planner.db"

    # Single-owner bearer token auth.
    local_auth_token: str = ""

    cors_origins: str = ""

    # Database lifecycle
    db_auto_migrate: bool = False

    # AI assistant (Anthropic Messages API)
    anthropic_api_key: str = ""
    suggestion_model: str = "claude-sonnet-4-5"
    explanation_model: str = "claude-haiku-4-5"
    suggestion_max_attempts: int = Field(default=2, ge=1, le=5)
    suggestion_backoff_seconds: float = Field(default=1.0, ge=0)
    suggestion_max_tokens: int = Field(default=2048, ge=64)

    # Calendar layout
    calendar_default_duration_minutes: int = Field(default=60, ge=1)
    calendar_start_hour: int = Field(default=6, ge=0, le=23)
    calendar_end_hour: int = Field(default=23, ge=0, le=23)
    calendar_timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    log_use_utc: bool = False
    request_log_slow_ms: int = Field(default=1000, ge=0)
    request_log_include_health: bool = False

    @model_validator(mode="after")
    def _defaults(self) -> Self:
        token = self.local_auth_token.strip()
        if (
            not token
            or len(token) < LOCAL_AUTH_TOKEN_MIN_LENGTH
            or token.lower() in LOCAL_AUTH_TOKEN_PLACEHOLDERS
        ):
            raise ValueError(
                "LOCAL_AUTH_TOKEN must be at least 50 characters and non-placeholder.",
            )
        if self.calendar_start_hour >= self.calendar_end_hour:
            raise ValueError(
                "CALENDAR_START_HOUR must be earlier than CALENDAR_END_HOUR.",
            )
        # In dev, default to applying Alembic migrations at startup to avoid
        # schema drift.
        if "db_auto_migrate" not in self.model_fields_set and self.environment == "dev":
            self.db_auto_migrate = True
        return self


settings = Settings()
