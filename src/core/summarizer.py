"""Optional LLM brief for the accepted messages.

The summarizer never raises for service problems: it returns ``AiSkipped``
when no call was warranted or a rate limit was absorbed into the shared
cooldown, ``AiFailed`` when the service errored, and ``AiSucceeded`` with
the brief otherwise.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from core.config import AiConfig
from core.errors import ExternalServiceError, RateLimitedError
from core.models import AcceptedMessage, AiFailed, AiResult, AiSkipped, AiSucceeded
from core.ports import TextGenerationPort
from core.rate_limit import RateLimitState, format_duration
from core.report import truncate
from core.time_window import format_local_datetime

LOGGER = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You summarize Telegram group messages. Return concise plain text with key topics, "
    "decisions, asks, and blockers."
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def build_request_body(messages: Sequence[AcceptedMessage], config: AiConfig) -> dict:
    """Build the generateContent body for the most recent messages."""

    recent = list(messages)[-config.max_messages:]
    payload = [
        {
            "sender": message.sender_display,
            "timeIst": format_local_datetime(message.timestamp),
            "text": truncate(message.text, config.max_chars_per_message),
        }
        for message in recent
    ]
    prompt = f"Create a daily summary from these messages: {json.dumps(payload, ensure_ascii=False)}"
    return {
        "systemInstruction": {"parts": [{"text": SYSTEM_INSTRUCTION}]},
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
    }


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def extract_text(response: dict) -> str:
    """Concatenate ``candidates[0].content.parts[].text``.

    Any level with an unexpected shape yields an empty string.
    """

    candidates = _as_dict(response).get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return ""
    parts = _as_dict(_as_dict(candidates[0]).get("content")).get("parts")
    if not isinstance(parts, list):
        return ""
    texts = (part.get("text") for part in parts if isinstance(part, dict))
    return "".join(text for text in texts if isinstance(text, str)).strip()


class AiSummarizer:
    """Applies the skip and cooldown policy around one LLM call."""

    def __init__(
        self,
        generator: Optional[TextGenerationPort],
        config: AiConfig,
        state: RateLimitState,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._generator = generator
        self._config = config
        self._state = state
        self._clock = clock

    async def summarize(self, messages: Sequence[AcceptedMessage]) -> AiResult:
        if self._generator is None or not self._config.api_key:
            return AiSkipped("no API key configured")
        if not messages:
            return AiSkipped("no messages")

        now = self._clock()
        if self._state.in_cooldown(now):
            wait = format_duration(self._state.remaining(now))
            LOGGER.warning("AI summary on cooldown after rate limit. Retry after %s.", wait)
            return AiSkipped(f"cooldown, retry after {wait}")

        body = build_request_body(messages, self._config)
        sent = min(len(messages), self._config.max_messages)
        request_id = self._state.next_request()
        LOGGER.info(
            "LLM request #%s: sending %s messages (maxCharsPerMessage=%s).",
            request_id,
            sent,
            self._config.max_chars_per_message,
        )

        try:
            response = await self._generator.generate(body)
        except RateLimitedError as exc:
            self._state.start_cooldown(self._clock(), exc.retry_after_seconds)
            wait = format_duration(timedelta(seconds=exc.retry_after_seconds))
            LOGGER.warning("LLM rate limit hit (429). AI summary paused for %s.", wait)
            return AiSkipped("rate limited")
        except ExternalServiceError as exc:
            return AiFailed(exc)

        self._log_usage(request_id, response)
        text = extract_text(response)
        if not text:
            return AiSkipped("empty response")
        return AiSucceeded(text)

    @staticmethod
    def _log_usage(request_id: int, response: dict) -> None:
        usage = _as_dict(_as_dict(response).get("usageMetadata"))
        LOGGER.info(
            "LLM response #%s: promptTokens=%s, outputTokens=%s, totalTokens=%s.",
            request_id,
            usage.get("promptTokenCount", "n/a"),
            usage.get("candidatesTokenCount", "n/a"),
            usage.get("totalTokenCount", "n/a"),
        )
