"""Logging configuration for the daybrief entry points.

Handlers are driven by the ``logging`` section of config.json. Secrets taken
from the environment are masked in every formatted record, because request
errors from HTTP clients can echo tokens back.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Env vars masked when redaction is enabled without explicit patterns.
DEFAULT_REDACT_ENV = ("API_HASH", "STRING_SESSION", "GEMINI_API_KEY", "BOT_API")

# Request lines from these libraries drown out the run diagnostics.
QUIET_LOGGERS = ("httpx", "apscheduler")


class RedactingFormatter(logging.Formatter):
    def __init__(self, secrets: list[str], fmt: str = _FORMAT, datefmt: Optional[str] = _DATEFMT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def collect_redaction_values(config: dict) -> list[str]:
    redact_cfg = (config or {}).get("redact", {})
    if not redact_cfg.get("enabled", False):
        return []
    names = redact_cfg.get("patterns") or DEFAULT_REDACT_ENV
    return [os.environ[name] for name in names if os.environ.get(name)]


def _file_handler(file_cfg: dict, project_root: str) -> logging.Handler:
    path = file_cfg.get("path", "logs/daybrief.log")
    if not os.path.isabs(path):
        path = os.path.join(project_root, path)
    os.makedirs(os.path.dirname(path), exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def configure_logging(config: Optional[dict], project_root: str) -> None:
    """Install console and/or rotating file handlers on the root logger."""

    config = config or {}
    if not config.get("enabled", True):
        return

    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    formatter = RedactingFormatter(collect_redaction_values(config))

    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, project_root))
    if not handlers:
        return

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
