"""Deep link helpers for messages in the scanned group."""

from __future__ import annotations

from typing import Optional

from core.models import GroupInfo

SUPERGROUP_PREFIX = "-100"


def resolve_message_link(group: GroupInfo, message_id: int) -> Optional[str]:
    """Return a t.me link to the message, or None when none can be built.

    Public groups use their alias. Private groups use the /c/ form with the
    supergroup marker and any sign stripped from the numeric id.
    """

    if group.username:
        return f"https://t.me/{group.username}/{message_id}"

    raw_id = str(group.id) if group.id else ""
    if not raw_id:
        return None

    if raw_id.startswith(SUPERGROUP_PREFIX):
        raw_id = raw_id[len(SUPERGROUP_PREFIX):]
    clean_id = raw_id.lstrip("-")
    if not clean_id:
        return None

    return f"https://t.me/c/{clean_id}/{message_id}"
