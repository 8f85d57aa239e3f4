"""Error taxonomy shared by the core and adapters."""

from __future__ import annotations

from typing import Optional


class DaybriefError(Exception):
    """Base class for all daybrief errors."""


class ConfigurationError(DaybriefError):
    """Required identifiers or credentials are missing or invalid."""


class ExternalServiceError(DaybriefError):
    """An external HTTP service answered with a non-success status."""

    def __init__(self, status_code: Optional[int], body: str) -> None:
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        super().__init__(f"External service failed ({status}): {body}")


class RateLimitedError(ExternalServiceError):
    """The external service asked us to back off (HTTP 429)."""

    def __init__(self, retry_after_seconds: float, body: str) -> None:
        super().__init__(429, body)
        self.retry_after_seconds = retry_after_seconds


class DeliveryError(DaybriefError):
    """Delivering a report segment to one target failed."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Delivery to {target} failed: {reason}")
