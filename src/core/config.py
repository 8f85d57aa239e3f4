"""Settings shapes for the daily summary run.

settings.py fills these from env vars and config.json; the core only reads
the already-validated values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_MAX_MESSAGES_PER_RUN = 3000
DEFAULT_AI_MIN_MESSAGES = 3
DEFAULT_AI_MAX_MESSAGES = 100
DEFAULT_AI_MAX_CHARS_PER_MESSAGE = 400
DEFAULT_TRANSPORT_MAX_CHARS = 3900
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


@dataclass(frozen=True)
class SummaryConfig:
    """Per-run report settings consumed by the summary job."""

    sender_filter: tuple[str, ...] = ()
    include_highlights: bool = False
    max_messages_per_run: int = DEFAULT_MAX_MESSAGES_PER_RUN
    ai_min_messages: int = DEFAULT_AI_MIN_MESSAGES
    transport_max_chars: int = DEFAULT_TRANSPORT_MAX_CHARS
    targets: tuple[str, ...] = ("me",)


@dataclass(frozen=True)
class AiConfig:
    """Settings for the optional LLM brief."""

    api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    max_messages: int = DEFAULT_AI_MAX_MESSAGES
    max_chars_per_message: int = DEFAULT_AI_MAX_CHARS_PER_MESSAGE


@dataclass(frozen=True)
class ScheduleConfig:
    """Cron triggers for the recurring run mode."""

    timezone: str = "Asia/Kolkata"
    cron_no_ai: str = "0 30 15 * * *"
    cron_with_ai: str = "0 0 20 * * *"
