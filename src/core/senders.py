"""Sender normalization and filtering (core domain)."""

from __future__ import annotations

from typing import Any, Iterable

from core.models import NormalizedSender

UNKNOWN_SENDER = "Unknown"


def normalize_sender(sender: Any) -> NormalizedSender:
    """Map a raw sender record to a canonical identity.

    Missing attributes are tolerated; ``display`` falls back through
    handle, full name, id and finally ``Unknown``.
    """

    username = getattr(sender, "username", None)
    handle = f"@{username}" if username else ""

    first = getattr(sender, "first_name", None) or ""
    last = getattr(sender, "last_name", None) or ""
    full_name = f"{first} {last}".strip()
    if not full_name:
        # Channels posting as themselves only carry a title.
        full_name = str(getattr(sender, "title", None) or "").strip()

    raw_id = getattr(sender, "id", None)
    sender_id = str(raw_id) if raw_id else ""

    return NormalizedSender(
        handle=handle,
        full_name=full_name,
        id=sender_id,
        display=handle or full_name or sender_id or UNKNOWN_SENDER,
    )


def build_sender_filter(raw_values: Iterable[Any]) -> tuple[str, ...]:
    """Lower-case, trim and de-duplicate configured sender entries."""

    entries: list[str] = []
    for value in raw_values:
        entry = str(value).strip().lower()
        if entry and entry not in entries:
            entries.append(entry)
    return tuple(entries)


def matches_sender_filter(sender: NormalizedSender, sender_filter: Iterable[str]) -> bool:
    """Return True if the sender passes the filter; an empty filter accepts all."""

    entries = set(sender_filter)
    if not entries:
        return True
    return any(identity in entries for identity in sender.identities())
