"""Telegram delivery adapter using the logged-in user account.

Targets are anything Telethon can resolve: ``me`` for Saved Messages,
``@username`` or a numeric chat id.
"""

from __future__ import annotations

from telethon import errors

from adapters.telegram_source import parse_group_identifier
from core.errors import DeliveryError


class TelegramUserDelivery:
    """Delivery adapter that sends report segments as the user account."""

    def __init__(self, client) -> None:
        self._client = client

    async def send(self, target: str, text: str) -> None:
        """Send one plain-text segment to ``target``."""

        try:
            await self._client.send_message(parse_group_identifier(target), text)
        except (ValueError, errors.RPCError, ConnectionError) as exc:
            raise DeliveryError(target, str(exc)) from exc
