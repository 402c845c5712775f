# ruff: noqa: INP001
"""Settings validation for the bearer token and calendar hours."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from planner.core.config import Settings

TOKEN = "t" * 50
TOKEN_ERROR = "LOCAL_AUTH_TOKEN must be at least 50 characters and non-placeholder"


@pytest.mark.parametrize("token", ["", "x" * 49, "change-me", "  " + "x" * 10 + "  "])
def test_weak_tokens_are_rejected(token: str) -> None:
    with pytest.raises(ValidationError, match=TOKEN_ERROR):
        Settings(_env_file=None, local_auth_token=token)


def test_real_token_is_accepted() -> None:
    configured = Settings(_env_file=None, local_auth_token=TOKEN, environment="test")

    assert configured.local_auth_token == TOKEN
    assert configured.calendar_start_hour == 6
    assert configured.calendar_end_hour == 23


def test_visible_hours_must_be_ordered() -> None:
    with pytest.raises(ValidationError, match="CALENDAR_START_HOUR must be earlier"):
        Settings(
            _env_file=None,
            local_auth_token=TOKEN,
            calendar_start_hour=20,
            calendar_end_hour=8,
        )


def test_dev_environment_migrates_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DB_AUTO_MIGRATE", raising=False)
    configured = Settings(_env_file=None, local_auth_token=TOKEN, environment="dev")

    assert configured.db_auto_migrate is True


def test_explicit_auto_migrate_setting_wins() -> None:
    dev = Settings(
        _env_file=None,
        local_auth_token=TOKEN,
        environment="dev",
        db_auto_migrate=False,
    )
    prod = Settings(_env_file=None, local_auth_token=TOKEN, environment="prod")

    assert dev.db_auto_migrate is False
    assert prod.db_auto_migrate is False


def test_suggestion_attempts_are_bounded() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, local_auth_token=TOKEN, suggestion_max_attempts=0)
