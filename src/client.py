"""Telegram client factory for daybrief.

Callers own the lifecycle: one-shot runs connect and disconnect around a
single job, the scheduler keeps the client connected until shutdown.
"""

from __future__ import annotations

import logging
import os
from typing import Mapping

from dotenv import load_dotenv
from telethon import TelegramClient
from telethon.sessions import StringSession

from core.errors import ConfigurationError


def build_client(env: Mapping[str, str] = os.environ) -> TelegramClient:
    """Create a Telethon client from environment variables.

    API_ID/API_HASH are read via python-dotenv to keep secrets out of the
    repo. A non-empty STRING_SESSION wins; otherwise a local .session file
    named after SESSION_NAME (default "daybrief") is used.
    """

    load_dotenv()

    api_id = env.get("API_ID")
    api_hash = env.get("API_HASH")

    # Missing credentials fail before Telethon prompts for anything.
    missing = [name for name, value in (("API_ID", api_id), ("API_HASH", api_hash)) if not value]
    if missing:
        raise ConfigurationError(f"Missing env vars: {', '.join(missing)}")
    try:
        numeric_api_id = int(api_id)
    except ValueError as exc:
        raise ConfigurationError("API_ID must be an integer") from exc

    string_session = env.get("STRING_SESSION", "")
    session = StringSession(string_session) if string_session else env.get("SESSION_NAME", "daybrief")

    logging.getLogger(__name__).info("Initializing Telegram client")

    return TelegramClient(session, numeric_api_id, api_hash, connection_retries=5)
