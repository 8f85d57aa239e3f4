"""Shared cooldown state for the LLM and retry-delay parsing."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

DEFAULT_RETRY_AFTER_SECONDS = 15 * 60

_RETRY_IN_PATTERN = re.compile(r"retry in\s+([0-9]+(?:\.[0-9]+)?)s", re.IGNORECASE)


@dataclass
class RateLimitState:
    """Cooldown deadline and request counter shared by every summarizer run.

    One instance lives for the whole process and is handed to the
    summarizer; only the summarizer mutates it.
    """

    cooldown_until: Optional[datetime] = None
    request_count: int = 0

    def remaining(self, now: datetime) -> timedelta:
        if self.cooldown_until is None or now >= self.cooldown_until:
            return timedelta(0)
        return self.cooldown_until - now

    def in_cooldown(self, now: datetime) -> bool:
        return self.remaining(now) > timedelta(0)

    def start_cooldown(self, now: datetime, seconds: float) -> None:
        self.cooldown_until = now + timedelta(seconds=seconds)

    def next_request(self) -> int:
        self.request_count += 1
        return self.request_count


def _positive_seconds(value: Optional[str]) -> Optional[float]:
    try:
        seconds = float(value) if value is not None else None
    except ValueError:
        return None
    if seconds is None or not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


def parse_retry_after(header_value: Optional[str], body: str) -> float:
    """Return the back-off delay in seconds.

    Prefers the ``Retry-After`` header (seconds), then a ``retry in Ns``
    phrase in the error body, then a 15 minute default.
    """

    seconds = _positive_seconds(header_value.strip() if header_value else None)
    if seconds is not None:
        return seconds

    match = _RETRY_IN_PATTERN.search(body or "")
    if match:
        seconds = _positive_seconds(match.group(1))
        if seconds is not None:
            return seconds

    return float(DEFAULT_RETRY_AFTER_SECONDS)


def format_duration(delta: timedelta) -> str:
    """Render a delay as ``42s`` or ``3m 5s`` (never below one second)."""

    total = max(1, math.ceil(delta.total_seconds()))
    minutes, seconds = divmod(total, 60)
    if minutes == 0:
        return f"{seconds}s"
    return f"{minutes}m {seconds}s"
