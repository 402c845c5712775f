# ruff: noqa: INP001
"""Assistant suggestions: parsing, retries and offline behaviour."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

import pytest

from planner.models.tasks import Task
from planner.services.suggestions import (
    EXPLAIN_EMPTY_MESSAGE,
    EXPLAIN_OFFLINE_MESSAGE,
    OFFLINE_MESSAGE,
    AssistantOfflineError,
    SuggestionService,
    parse_suggestions,
)


@dataclass
class _TextBlock:
    text: str


@dataclass
class _Message:
    content: list[_TextBlock]


@dataclass
class _FakeMessages:
    replies: list[str | Exception]
    calls: list[dict[str, Any]] = field(default_factory=list)

    def create(self, **kwargs: Any) -> _Message:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return _Message(content=[_TextBlock(text=reply)])


@dataclass
class _FakeClient:
    messages: _FakeMessages


@dataclass
class _SleepRecorder:
    delays: list[float] = field(default_factory=list)

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _reply(*entries: dict[str, Any]) -> str:
    return "Here you go:\n" + json.dumps({"suggestions": list(entries)})


def _entry(**overrides: Any) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "title": "Morning mobility",
        "description": "20 minutes of stretching",
        "domain": "fitness",
        "priority": "medium",
        "estimated_hours": 0.5,
        "reasoning": "No fitness tasks scheduled this week",
    }
    entry.update(overrides)
    return entry


def _service(replies: list[str | Exception], sleep: _SleepRecorder | None = None):
    messages = _FakeMessages(replies=replies)
    service = SuggestionService(
        api_key="",
        client=_FakeClient(messages=messages),
        max_attempts=2,
        backoff_seconds=0.5,
        sleep=sleep or _SleepRecorder(),
    )
    return service, messages


def _task() -> Task:
    return Task(user_id=uuid4(), title="Thesis draft", domain="academic", priority="high")


def test_parse_keeps_valid_entries_and_drops_invalid_ones() -> None:
    text = _reply(
        _entry(),
        _entry(title="Bad domain", domain="gardening"),
        _entry(title="Missing reasoning", reasoning=""),
        "not an object",  # type: ignore[arg-type]
    )

    suggestions = parse_suggestions(text)

    assert [item.title for item in suggestions] == ["Morning mobility"]


def test_parse_accepts_camel_case_hours_and_snaps_to_half_hours() -> None:
    entry = _entry()
    del entry["estimated_hours"]
    entry["estimatedHours"] = 1.3

    suggestions = parse_suggestions(_reply(entry))

    assert suggestions[0].estimated_hours == 1.5


def test_parse_rejects_reply_without_suggestions_array() -> None:
    with pytest.raises(ValueError):
        parse_suggestions('{"ideas": []}')
    with pytest.raises(ValueError):
        parse_suggestions("no json here")


@pytest.mark.asyncio
async def test_suggest_returns_validated_suggestions() -> None:
    service, messages = _service([_reply(_entry(), _entry(title="Call grandma", domain="social"))])

    suggestions = await service.suggest([_task()])

    assert [item.title for item in suggestions] == ["Morning mobility", "Call grandma"]
    prompt = messages.calls[0]["messages"][0]["content"]
    assert "Thesis draft" in prompt
    assert "maintenance" in prompt


@pytest.mark.asyncio
async def test_suggest_retries_once_with_backoff() -> None:
    sleep = _SleepRecorder()
    service, messages = _service([RuntimeError("network down"), _reply(_entry())], sleep)

    suggestions = await service.suggest([])

    assert len(suggestions) == 1
    assert len(messages.calls) == 2
    assert sleep.delays == [0.5]


@pytest.mark.asyncio
async def test_suggest_goes_offline_after_exhausting_attempts() -> None:
    sleep = _SleepRecorder()
    service, messages = _service([RuntimeError("quota"), "garbage"], sleep)

    with pytest.raises(AssistantOfflineError) as excinfo:
        await service.suggest([_task()])

    assert str(excinfo.value) == OFFLINE_MESSAGE
    assert excinfo.value.code == "assistant_offline"
    assert len(messages.calls) == 2
    assert sleep.delays == [0.5]


@pytest.mark.asyncio
async def test_suggest_without_api_key_is_offline_immediately() -> None:
    service = SuggestionService(api_key="")

    with pytest.raises(AssistantOfflineError) as excinfo:
        await service.suggest([])

    assert excinfo.value.reason == "missing_api_key"


@pytest.mark.asyncio
async def test_explain_returns_model_text() -> None:
    service, messages = _service(["  Finishing the draft unblocks review.  "])

    explanation = await service.explain(_task())

    assert explanation == "Finishing the draft unblocks review."
    assert "Priority: high" in messages.calls[0]["messages"][0]["content"]


@pytest.mark.asyncio
async def test_explain_falls_back_instead_of_raising() -> None:
    failing, _ = _service([RuntimeError("boom")])
    empty, _ = _service([""])

    assert await failing.explain(_task()) == EXPLAIN_OFFLINE_MESSAGE
    assert await empty.explain(_task()) == EXPLAIN_EMPTY_MESSAGE
    assert await SuggestionService(api_key="").explain(_task()) == EXPLAIN_OFFLINE_MESSAGE
