"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the message feed, LLM, delivery, and
report storage adapters so that the core can be reused with different
backends and tested with fakes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, AsyncIterator, Protocol

from core.models import GroupInfo


class FeedMessage(Protocol):
    """One message as exposed by the feed, newest first."""

    id: int
    date: Any
    message: Any

    async def get_sender(self) -> Any:
        ...


class MessageSourcePort(Protocol):
    """Reverse-chronological access to the configured group."""

    async def resolve_group(self) -> GroupInfo:
        ...

    def iter_messages(self, limit: int) -> AsyncIterator[FeedMessage]:
        ...


class TextGenerationPort(Protocol):
    """One LLM request per call.

    Returns the decoded JSON body on success. Raises ``RateLimitedError`` on
    HTTP 429 and ``ExternalServiceError`` on any other failure.
    """

    async def generate(self, body: dict) -> dict:
        ...


class DeliveryPort(Protocol):
    """Sends one text segment to one target; raises ``DeliveryError``."""

    async def send(self, target: str, text: str) -> None:
        ...


class ReportStorePort(Protocol):
    """Persists the full report text and returns where it was written."""

    def save(self, date_label: str, run_at: datetime, text: str) -> str:
        ...
