"""Split long reports into transport-sized segments."""

from __future__ import annotations

from typing import Optional

# Room kept for part headers like "[12/12]\n".
PART_HEADER_RESERVE = 24
MIN_SEGMENT_CHARS = 1000


def _latest_break(text: str, separator: str, max_chars: int) -> int:
    # Break must start at or before max_chars so the segment fits.
    return text.rfind(separator, 0, max_chars + len(separator))


def split_for_transport(message: Optional[str], max_chars: int) -> list[str]:
    """Split ``message`` into segments of at most ``max_chars`` characters.

    Cuts prefer the latest paragraph break, then line break, then space.
    Paragraph and line breaks only count when they leave at least half a
    segment; with no usable break the text is hard-cut at the limit.
    """

    text = (message or "").strip()
    if not text:
        return []
    if len(text) <= max_chars:
        return [text]

    half = max_chars // 2
    chunks: list[str] = []
    remaining = text
    while len(remaining) > max_chars:
        split_at = _latest_break(remaining, "\n\n", max_chars)
        if split_at < half:
            split_at = _latest_break(remaining, "\n", max_chars)
        if split_at < half:
            split_at = _latest_break(remaining, " ", max_chars)
        if split_at <= 0:
            split_at = max_chars

        chunks.append(remaining[:split_at].rstrip())
        remaining = remaining[split_at:].lstrip()

    if remaining:
        chunks.append(remaining)
    return chunks


def chunk_for_delivery(report: str, transport_max_chars: int) -> list[str]:
    """Split a report and prefix ``[i/n]`` headers when it spans several parts."""

    limit = max(MIN_SEGMENT_CHARS, transport_max_chars - PART_HEADER_RESERVE)
    chunks = split_for_transport(report, limit)
    if len(chunks) <= 1:
        return chunks
    total = len(chunks)
    return [f"[{index}/{total}]\n{chunk}" for index, chunk in enumerate(chunks, start=1)]
