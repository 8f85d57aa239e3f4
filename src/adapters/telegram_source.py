"""Telegram message feed adapter.

This keeps Telethon-specific details out of the core scan. Telethon
``Message`` objects already expose ``id``, ``date``, ``message`` and an
async ``get_sender()``, so they are handed to the core unchanged.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional, Union

from telethon import errors

from core.errors import ConfigurationError
from core.models import GroupInfo

LOGGER = logging.getLogger(__name__)


def parse_group_identifier(raw: str) -> Union[int, str]:
    """Numeric ids (optionally negative) become ints, anything else stays a string."""

    value = raw.strip()
    if value.lstrip("-").isdigit():
        return int(value)
    return value


def group_info_from_entity(entity: Any, fallback_title: str) -> GroupInfo:
    username = getattr(entity, "username", None) or None
    title = getattr(entity, "title", None) or username or fallback_title
    return GroupInfo(title=str(title), username=username, id=getattr(entity, "id", None))


class TelegramGroupSource:
    """Reverse-chronological feed of one group via a Telethon client."""

    def __init__(self, client, group_identifier: str) -> None:
        self._client = client
        self._identifier = group_identifier
        self._entity: Optional[Any] = None

    async def resolve_group(self) -> GroupInfo:
        if self._entity is None:
            try:
                self._entity = await self._client.get_entity(parse_group_identifier(self._identifier))
            except (ValueError, errors.RPCError) as exc:
                raise ConfigurationError(
                    f"Cannot resolve GROUP_ID_OR_USERNAME={self._identifier}: {exc}"
                ) from exc
            LOGGER.info("Resolved group %s", self._identifier)
        return group_info_from_entity(self._entity, self._identifier)

    async def iter_messages(self, limit: int) -> AsyncIterator[Any]:
        if self._entity is None:
            await self.resolve_group()
        # Telethon yields newest first by default.
        async for message in self._client.iter_messages(self._entity, limit=limit):
            yield message
