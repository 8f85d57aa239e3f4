"""Runtime configuration for daybrief.

Credentials and scalar knobs come from the environment (a local .env file is
loaded with python-dotenv). Report preferences and logging live in a flat
config.json so they can be edited without touching Python. Absent or invalid
values fall back to defaults instead of failing the run.
"""

from __future__ import annotations

import json
import logging
import math
import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from core.config import (
    DEFAULT_AI_MAX_CHARS_PER_MESSAGE,
    DEFAULT_AI_MAX_MESSAGES,
    DEFAULT_AI_MIN_MESSAGES,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_MAX_MESSAGES_PER_RUN,
    DEFAULT_TRANSPORT_MAX_CHARS,
    AiConfig,
    ScheduleConfig,
    SummaryConfig,
)
from core.errors import ConfigurationError
from core.senders import build_sender_filter

LOGGER = logging.getLogger(__name__)

load_dotenv()

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Report preferences and logging; see config.example.json.
CONFIG_PATH = os.getenv("SUMMARY_CONFIG_PATH") or os.path.join(PROJECT_ROOT, "config.json")

# One text file per run lands here.
OUTPUT_DIR = os.path.join(PROJECT_ROOT, "output")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def positive_int(value: Any, fallback: int) -> int:
    """Floor ``value`` to a positive int, or return ``fallback``."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(number) or number <= 0:
        return fallback
    return max(1, math.floor(number))


def parse_bool(value: Any, fallback: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return fallback
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return fallback


def parse_targets(raw: Optional[str]) -> tuple[str, ...]:
    """Split a comma-separated target list; empty means Saved Messages."""

    targets = tuple(part.strip() for part in (raw or "").split(",") if part.strip())
    return targets or ("me",)


def load_json_config(path: str) -> dict:
    """Load config.json; a missing or broken file yields an empty config."""

    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError) as exc:
        LOGGER.warning("Could not parse config at %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        LOGGER.warning("Config at %s is not a JSON object; using defaults", path)
        return {}
    return data


def build_summary_config(config: Mapping[str, Any], env: Mapping[str, str]) -> SummaryConfig:
    raw_senders = config.get("include_senders")
    sender_filter = build_sender_filter(raw_senders) if isinstance(raw_senders, list) else ()

    highlights_env = env.get("INCLUDE_MESSAGE_HIGHLIGHTS")
    if highlights_env is None:
        include_highlights = config.get("include_message_highlights") is True
    else:
        include_highlights = parse_bool(highlights_env, False)

    return SummaryConfig(
        sender_filter=sender_filter,
        include_highlights=include_highlights,
        max_messages_per_run=positive_int(
            env.get("MAX_MESSAGES_PER_RUN"), DEFAULT_MAX_MESSAGES_PER_RUN
        ),
        ai_min_messages=positive_int(env.get("AI_MIN_MESSAGES_FOR_SUMMARY"), DEFAULT_AI_MIN_MESSAGES),
        transport_max_chars=positive_int(
            env.get("TELEGRAM_MESSAGE_MAX_CHARS"), DEFAULT_TRANSPORT_MAX_CHARS
        ),
        targets=parse_targets(env.get("SUMMARY_TARGET")),
    )


def build_ai_config(env: Mapping[str, str]) -> AiConfig:
    return AiConfig(
        api_key=env.get("GEMINI_API_KEY") or None,
        model=env.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        max_messages=positive_int(env.get("AI_MAX_MESSAGES_FOR_SUMMARY"), DEFAULT_AI_MAX_MESSAGES),
        max_chars_per_message=positive_int(
            env.get("AI_MAX_CHARS_PER_MESSAGE"), DEFAULT_AI_MAX_CHARS_PER_MESSAGE
        ),
    )


def build_schedule_config(env: Mapping[str, str]) -> ScheduleConfig:
    defaults = ScheduleConfig()
    return ScheduleConfig(
        timezone=env.get("CRON_TIMEZONE") or defaults.timezone,
        cron_no_ai=env.get("SUMMARY_CRON_NO_AI") or defaults.cron_no_ai,
        cron_with_ai=env.get("SUMMARY_CRON_WITH_AI") or defaults.cron_with_ai,
    )


def require_group_identifier(env: Mapping[str, str] = os.environ) -> str:
    group = (env.get("GROUP_ID_OR_USERNAME") or "").strip()
    if not group:
        raise ConfigurationError("Missing env vars: GROUP_ID_OR_USERNAME")
    return group


_CONFIG = load_json_config(CONFIG_PATH)

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

SUMMARY = build_summary_config(_CONFIG, os.environ)
AI = build_ai_config(os.environ)
SCHEDULE = build_schedule_config(os.environ)

# "user" delivers as the logged-in account, "bot" through the Bot API.
DELIVERY_METHOD = (os.getenv("DELIVERY_METHOD") or "user").strip().lower()

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
