from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from adapters.telegram_source import TelegramGroupSource, group_info_from_entity, parse_group_identifier
from core.errors import ConfigurationError


class DummyEntity:
    def __init__(self, title: "str | None", username: "str | None", entity_id: int) -> None:
        self.title = title
        self.username = username
        self.id = entity_id


class DummyMessage:
    def __init__(self, message_id: int) -> None:
        self.id = message_id
        self.date = datetime(2026, 10, 19, tzinfo=timezone.utc)
        self.message = "hello"


class DummyClient:
    def __init__(self, entity=None, error: "Exception | None" = None) -> None:
        self._entity = entity
        self._error = error
        self.lookups: list[object] = []
        self.iter_calls: list[tuple[object, int]] = []

    async def get_entity(self, identifier):
        self.lookups.append(identifier)
        if self._error:
            raise self._error
        return self._entity

    async def _iterate(self, limit: int):
        for message_id in range(limit, 0, -1):
            yield DummyMessage(message_id)

    def iter_messages(self, entity, limit: int):
        self.iter_calls.append((entity, limit))
        return self._iterate(limit)


def test_parse_group_identifier() -> None:
    assert parse_group_identifier("-1001234") == -1001234
    assert parse_group_identifier(" 42 ") == 42
    assert parse_group_identifier("@team") == "@team"
    assert parse_group_identifier("me") == "me"


def test_group_title_falls_back_to_alias_then_identifier() -> None:
    assert group_info_from_entity(DummyEntity("Team", "team", 1), "@team").title == "Team"
    assert group_info_from_entity(DummyEntity(None, "team", 1), "@team").title == "team"
    assert group_info_from_entity(DummyEntity(None, None, 1), "-1001").title == "-1001"


def test_resolve_group_caches_entity_and_feeds_messages() -> None:
    entity = DummyEntity("Team", None, 1234)
    client = DummyClient(entity)
    source = TelegramGroupSource(client, "-1001234")

    async def _collect():
        group = await source.resolve_group()
        ids = [message.id async for message in source.iter_messages(limit=3)]
        return group, ids

    group, ids = asyncio.run(_collect())

    assert group.id == 1234
    assert group.username is None
    assert ids == [3, 2, 1]
    assert client.lookups == [-1001234]
    assert client.iter_calls == [(entity, 3)]


def test_unresolvable_group_is_configuration_error() -> None:
    source = TelegramGroupSource(DummyClient(error=ValueError("Cannot find any entity")), "@ghost")
    with pytest.raises(ConfigurationError):
        asyncio.run(source.resolve_group())
