"""ALFRED assistant: LLM-backed task suggestions and strategy explanations.

Uses the Anthropic Messages API. The assistant is optional: callers get an
``AssistantOfflineError`` (suggestions) or a fixed offline message
(explanations) when it is unconfigured or failing, and nothing else in the
planner depends on it.
"""

from __future__ import annotations

import asyncio
import json
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from planner.core.config import settings
from planner.core.logging import get_logger
from planner.schemas.suggestions import TaskSuggestion
from planner.services.rewards import Domain

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from planner.models.tasks import Task

logger = get_logger(__name__)

OFFLINE_MESSAGE = "ALFRED is currently offline"
EXPLAIN_OFFLINE_MESSAGE = "ALFRED is currently offline. Strategic analysis unavailable."
EXPLAIN_EMPTY_MESSAGE = "Mission parameters unclear. Unable to provide strategic analysis."
MAX_BACKOFF_SECONDS = 8.0

SUGGESTION_SYSTEM_PROMPT = """You are ALFRED, the AI assistant of the BATCAVE productivity system.
Analyze the user's existing tasks and suggest 3-5 new tasks that would improve their productivity and life balance.

Consider:
- Domain balance across the available domains
- Task difficulty progression
- Realistic estimated hours, in half-hour steps between 0.5 and 24
- Priority based on gaps in the current workflow

Respond with a JSON object in exactly this format:
{
  "suggestions": [
    {
      "title": "Task title",
      "description": "Detailed task description",
      "domain": "academic|fitness|creative|social|maintenance",
      "priority": "low|medium|high|urgent",
      "estimated_hours": 1.5,
      "reasoning": "Why this task is strategically important"
    }
  ]
}"""

EXPLANATION_SYSTEM_PROMPT = """You are ALFRED, a strategic AI assistant.
Give a brief, insightful explanation of why this task matters for the user's productivity and goals.
Be concise and motivational. Focus on the bigger picture and long-term benefits."""

_FIELD_ALIASES = {"estimatedHours": "estimated_hours"}


class AssistantOfflineError(Exception):
    """Raised when the assistant cannot produce a usable answer."""

    code = "assistant_offline"

    def __init__(self, reason: str = "unavailable") -> None:
        super().__init__(OFFLINE_MESSAGE)
        self.reason = reason


def _extract_json(text: str) -> dict[str, Any]:
    start = text.index("{")
    end = text.rindex("}") + 1
    payload = json.loads(text[start:end])
    if not isinstance(payload, dict):
        msg = "assistant response is not a JSON object"
        raise ValueError(msg)
    return payload


def parse_suggestions(text: str) -> list[TaskSuggestion]:
    """Parse a model reply, keeping only entries that validate field by field."""
    payload = _extract_json(text)
    raw = payload.get("suggestions")
    if not isinstance(raw, list):
        msg = "assistant response is missing a suggestions array"
        raise ValueError(msg)

    suggestions: list[TaskSuggestion] = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        normalized = {_FIELD_ALIASES.get(key, key): value for key, value in entry.items()}
        try:
            suggestions.append(TaskSuggestion.model_validate(normalized))
        except ValidationError:
            logger.info("suggestions.entry.dropped", extra={"title": entry.get("title")})
    return suggestions


def _task_summary(tasks: Sequence[Task]) -> list[dict[str, Any]]:
    return [
        {
            "title": task.title,
            "domain": task.domain,
            "priority": task.priority,
            "estimated_hours": task.estimated_hours,
            "is_completed": task.is_completed,
        }
        for task in tasks
    ]


class SuggestionService:
    """Anthropic-backed assistant with bounded retries."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        client: Any | None = None,
        suggestion_model: str | None = None,
        explanation_model: str | None = None,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.anthropic_api_key
        self._client = client
        self._suggestion_model = suggestion_model or settings.suggestion_model
        self._explanation_model = explanation_model or settings.explanation_model
        self._max_attempts = max_attempts or settings.suggestion_max_attempts
        self._backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.suggestion_backoff_seconds
        )
        self._sleep = sleep

    @property
    def configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self):
        """Lazily initialize the Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.Anthropic(api_key=self._api_key)
        return self._client

    def _backoff(self, attempt: int) -> float:
        return min(MAX_BACKOFF_SECONDS, self._backoff_seconds * (2 ** (attempt - 1)))

    async def _complete(self, *, model: str, system: str, prompt: str) -> str:
        client = self._get_client()
        message = await asyncio.to_thread(
            client.messages.create,
            model=model,
            max_tokens=settings.suggestion_max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(
            getattr(block, "text", "") for block in message.content
        ).strip()

    async def suggest(
        self,
        tasks: Sequence[Task],
        domains: Sequence[str] | None = None,
    ) -> list[TaskSuggestion]:
        """Ask the assistant for new tasks that balance the owner's workload."""
        if not self.configured:
            logger.warning("suggestions.offline", extra={"reason": "missing_api_key"})
            raise AssistantOfflineError("missing_api_key")

        available = list(domains) if domains else [domain.value for domain in Domain]
        context = {
            "total_tasks": len(tasks),
            "completed_tasks": sum(1 for task in tasks if task.is_completed),
            "domains_in_use": sorted({task.domain for task in tasks}),
            "available_domains": available,
            "tasks": _task_summary(tasks),
        }
        prompt = f"Suggest new tasks for this planner:\n\n{json.dumps(context, indent=2)}"

        for attempt in range(1, self._max_attempts + 1):
            try:
                text = await self._complete(
                    model=self._suggestion_model,
                    system=SUGGESTION_SYSTEM_PROMPT,
                    prompt=prompt,
                )
                suggestions = parse_suggestions(text)
            except Exception:
                logger.warning(
                    "suggestions.attempt.failed",
                    extra={"attempt": attempt, "max_attempts": self._max_attempts},
                    exc_info=True,
                )
                if attempt < self._max_attempts:
                    await self._sleep(self._backoff(attempt))
                continue
            logger.info(
                "suggestions.generated",
                extra={"count": len(suggestions), "attempt": attempt},
            )
            return suggestions

        raise AssistantOfflineError("attempts_exhausted")

    async def explain(self, task: Task) -> str:
        """Short strategy note for one task; never raises."""
        if not self.configured:
            return EXPLAIN_OFFLINE_MESSAGE
        prompt = "\n".join(
            [
                f"Task: {task.title}",
                f"Description: {task.description or 'No description provided'}",
                f"Domain: {task.domain}",
                f"Priority: {task.priority}",
                f"Estimated Time: {task.estimated_hours} hours",
                f"Status: {'Completed' if task.is_completed else 'Pending'}",
            ],
        )
        try:
            text = await self._complete(
                model=self._explanation_model,
                system=EXPLANATION_SYSTEM_PROMPT,
                prompt=prompt,
            )
        except Exception:
            logger.warning(
                "suggestions.explain.failed",
                extra={"task_id": str(task.id)},
                exc_info=True,
            )
            return EXPLAIN_OFFLINE_MESSAGE
        return text or EXPLAIN_EMPTY_MESSAGE


@lru_cache(maxsize=1)
def get_suggestion_service() -> SuggestionService:
    """FastAPI dependency returning the process-wide assistant."""
    return SuggestionService()
