"""Daily message scan over a newest-first feed.

The scan enforces a strict order per message:
1) Count it as scanned
2) Skip unparsable dates (they say nothing about feed position)
3) Skip messages newer than the window end
4) Stop at the first message older than the window start
5) Skip empty text
6) Apply the sender filter
7) Accept, resolving an optional deep link

Step 4 relies on the feed being reverse-chronological: everything after
the first too-old message is older still.
"""

from __future__ import annotations

import logging
from typing import AsyncIterable, Callable, Iterable, Optional

from core.models import AcceptedMessage, ScanDiagnostics, ScanResult, TimeWindow
from core.ports import FeedMessage
from core.senders import matches_sender_filter, normalize_sender
from core.time_window import coerce_message_date

LOGGER = logging.getLogger(__name__)

LinkResolver = Callable[[int], Optional[str]]


async def scan_messages(
    feed: AsyncIterable[FeedMessage],
    window: TimeWindow,
    sender_filter: Iterable[str] = (),
    max_messages: Optional[int] = None,
    link_resolver: Optional[LinkResolver] = None,
) -> ScanResult:
    """Collect today's accepted messages from ``feed`` in chronological order."""

    filter_entries = tuple(sender_filter)
    diagnostics = ScanDiagnostics()
    accepted: list[AcceptedMessage] = []

    async for message in feed:
        diagnostics.scanned += 1
        timestamp = coerce_message_date(getattr(message, "date", None))

        if timestamp is None:
            diagnostics.skipped_missing_date += 1
        elif timestamp > window.end:
            # Feed order can interleave slightly around the boundary.
            diagnostics.skipped_after_window += 1
        elif timestamp < window.start:
            diagnostics.stopped_before_window = True
            break
        else:
            text = (getattr(message, "message", None) or "").strip()
            if not text:
                diagnostics.skipped_empty_text += 1
            else:
                sender = normalize_sender(await message.get_sender())
                if filter_entries and not matches_sender_filter(sender, filter_entries):
                    diagnostics.skipped_sender_filter += 1
                else:
                    accepted.append(
                        AcceptedMessage(
                            id=message.id,
                            timestamp=timestamp,
                            text=text,
                            sender_display=sender.display,
                            link=link_resolver(message.id) if link_resolver else None,
                        )
                    )

        if max_messages is not None and diagnostics.scanned >= max_messages:
            break

    if (
        max_messages is not None
        and not diagnostics.stopped_before_window
        and diagnostics.scanned >= max_messages
    ):
        diagnostics.reached_scan_cap = True
        LOGGER.warning(
            "Scan cap of %s messages reached before the window start; older messages were not scanned",
            max_messages,
        )

    accepted.sort(key=lambda item: item.timestamp)
    return ScanResult(window=window, messages=accepted, diagnostics=diagnostics)
