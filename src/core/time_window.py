"""Civil-day window resolution and timestamp coercion.

All arithmetic goes through a fixed UTC offset so results never depend on
the host machine's local timezone.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from core.models import TimeWindow

IST_OFFSET = timedelta(hours=5, minutes=30)
IST = timezone(IST_OFFSET, "IST")

# Epoch values below this are seconds, at or above it milliseconds.
_EPOCH_MILLIS_THRESHOLD = 1e12


def resolve_time_window(now: datetime, offset: timedelta = IST_OFFSET) -> TimeWindow:
    """Return the UTC bounds of the civil day containing ``now``.

    Naive datetimes are treated as UTC.
    """

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    civil_tz = timezone(offset)
    local = now.astimezone(civil_tz)
    start_local = datetime(local.year, local.month, local.day, tzinfo=civil_tz)
    end_local = start_local + timedelta(days=1) - timedelta(milliseconds=1)
    return TimeWindow(
        start=start_local.astimezone(timezone.utc),
        end=end_local.astimezone(timezone.utc),
        label=start_local.date().isoformat(),
    )


def coerce_message_date(raw: Any) -> Optional[datetime]:
    """Turn a feed timestamp into an aware UTC datetime, or None."""

    if isinstance(raw, datetime):
        if raw.tzinfo is None:
            return raw.replace(tzinfo=timezone.utc)
        return raw.astimezone(timezone.utc)

    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if not math.isfinite(raw):
            return None
        seconds = raw if raw < _EPOCH_MILLIS_THRESHOLD else raw / 1000
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(raw, str) and raw.strip():
        text = raw.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return coerce_message_date(parsed)

    return None


def format_local_datetime(moment: datetime, tz: timezone = IST) -> str:
    """Medium date plus short time, e.g. ``19 Oct 2026, 9:05 pm``."""

    local = moment.astimezone(tz)
    hour = local.hour % 12 or 12
    suffix = "am" if local.hour < 12 else "pm"
    return f"{local.day} {local:%b %Y}, {hour}:{local:%M} {suffix}"


def format_local_time(moment: datetime, tz: timezone = IST) -> str:
    """Two-digit 12-hour clock, e.g. ``09:05 pm``."""

    local = moment.astimezone(tz)
    hour = local.hour % 12 or 12
    suffix = "am" if local.hour < 12 else "pm"
    return f"{hour:02d}:{local:%M} {suffix}"
