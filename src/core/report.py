"""Plain-text daily report rendering."""

from __future__ import annotations

from collections import Counter
from typing import Optional, Sequence

from core.models import AcceptedMessage
from core.time_window import format_local_time

HIGHLIGHT_LIMIT = 50
HIGHLIGHT_TEXT_CHARS = 220


def truncate(text: Optional[str], limit: int = 180) -> str:
    """Clip ``text`` to ``limit - 1`` characters plus an ellipsis."""

    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[: limit - 1]}..."


def count_by_sender(messages: Sequence[AcceptedMessage]) -> list[tuple[str, int]]:
    """Per-sender counts, highest first; ties keep first-seen order."""

    return Counter(message.sender_display for message in messages).most_common()


def _highlight_line(message: AcceptedMessage) -> str:
    line = (
        f"- [{format_local_time(message.timestamp)}] {message.sender_display}: "
        f"{truncate(message.text, HIGHLIGHT_TEXT_CHARS)}"
    )
    if message.link:
        line += f"\n  Link: {message.link}"
    return line


def build_report(
    group_title: str,
    date_label: str,
    messages: Sequence[AcceptedMessage],
    sender_filter: Sequence[str] = (),
    ai_summary: Optional[str] = None,
    include_highlights: bool = False,
) -> str:
    """Render the report with a fixed section order.

    Title, group, filter and total first, then the per-sender tally, the AI
    brief when present, and finally up to fifty highlights when enabled.
    """

    sender_lines = [f"- {sender}: {count}" for sender, count in count_by_sender(messages)]
    filter_text = ", ".join(sender_filter) if sender_filter else "All senders"

    parts = [
        f"Daily Telegram Summary ({date_label} IST)",
        f"Group: {group_title}",
        f"Sender Filter: {filter_text}",
        f"Total Messages: {len(messages)}",
        "",
        "Message Count by Sender:",
        "\n".join(sender_lines) if sender_lines else "- No messages",
        "",
    ]

    if ai_summary:
        parts.extend(["AI Summary:", ai_summary.strip(), ""])

    if include_highlights:
        highlights = [_highlight_line(message) for message in messages[:HIGHLIGHT_LIMIT]]
        parts.append(f"Message Highlights (up to {HIGHLIGHT_LIMIT}):")
        parts.append(
            "\n".join(highlights) if highlights else "- No matching messages for this period."
        )

    return "\n".join(parts)
