"""Telegram Bot API delivery adapter.

Uses the Bot API for delivery so reports can be routed via a bot chat.
"""

from __future__ import annotations

from typing import Optional

import httpx

from core.errors import DeliveryError


class TelegramBotDelivery:
    """Delivery adapter that sends messages via the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._bot_token = bot_token
        self._timeout = timeout
        self._transport = transport

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    async def send(self, target: str, text: str) -> None:
        """Send one plain-text segment to the chat ``target``."""

        payload = {
            "chat_id": target,
            "text": text,
            "disable_web_page_preview": True,
        }
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint(), json=payload)
        except httpx.HTTPError as exc:
            raise DeliveryError(target, f"Bot API request failed: {exc}") from exc
        if response.status_code != 200:
            raise DeliveryError(target, f"Bot API error {response.status_code}: {response.text}")
