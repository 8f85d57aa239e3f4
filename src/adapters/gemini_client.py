"""Gemini generateContent HTTP adapter.

Implements the core TextGenerationPort. Rate limits and failures are
translated into the core error taxonomy; the cooldown policy itself lives
in the core summarizer.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from core.errors import ExternalServiceError, RateLimitedError
from core.rate_limit import parse_retry_after

LOGGER = logging.getLogger(__name__)

API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GeminiClient:
    """Thin async client for a single Gemini model."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._timeout = timeout
        self._transport = transport

    def _endpoint(self) -> str:
        return f"{API_BASE}/models/{quote(self._model, safe='')}:generateContent"

    async def generate(self, body: dict) -> dict:
        # The key travels in a header so it never shows up in logged URLs.
        headers = {"x-goog-api-key": self._api_key}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(self._endpoint(), json=body, headers=headers)
        except httpx.HTTPError as exc:
            raise ExternalServiceError(None, f"{type(exc).__name__}: {exc}") from exc

        if response.status_code == 429:
            retry_after = parse_retry_after(response.headers.get("retry-after"), response.text)
            raise RateLimitedError(retry_after, response.text)
        if not response.is_success:
            raise ExternalServiceError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as exc:
            raise ExternalServiceError(response.status_code, "Response body is not valid JSON") from exc
        if not isinstance(data, dict):
            raise ExternalServiceError(response.status_code, "Unexpected response shape")
        return data
