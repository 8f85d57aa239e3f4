from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Optional

from core.config import AiConfig, SummaryConfig
from core.errors import DeliveryError, ExternalServiceError
from core.models import AiFailed, AiSkipped, AiSucceeded, GroupInfo
from core.rate_limit import RateLimitState
from core.summarizer import AiSummarizer
from core.summary_job import SummaryJob
from core.time_window import IST

RUN_AT = datetime(2026, 10, 19, 20, 0, tzinfo=IST)


class DummySender:
    def __init__(self, username: str) -> None:
        self.username = username
        self.id = 1


class DummyMessage:
    def __init__(self, message_id: int, hour: int, text: str, username: str = "alice") -> None:
        self.id = message_id
        self.date = datetime(2026, 10, 19, hour, 0, tzinfo=IST)
        self.message = text
        self._sender = DummySender(username)

    async def get_sender(self):
        return self._sender


class FakeSource:
    def __init__(self, messages: list[DummyMessage], group: Optional[GroupInfo] = None) -> None:
        self._messages = messages
        self._group = group or GroupInfo(title="Team", username="team", id=None)
        self.limits: list[int] = []

    async def resolve_group(self) -> GroupInfo:
        return self._group

    async def iter_messages(self, limit: int):
        self.limits.append(limit)
        for message in self._messages[:limit]:
            yield message


class FakeDelivery:
    def __init__(self, failing: tuple[str, ...] = (), crash: tuple[str, ...] = ()) -> None:
        self._failing = failing
        self._crash = crash
        self.sent: list[tuple[str, str]] = []

    async def send(self, target: str, text: str) -> None:
        if target in self._failing:
            raise DeliveryError(target, "chat not found")
        if target in self._crash:
            raise TimeoutError("send timed out")
        self.sent.append((target, text))


class FakeStore:
    def __init__(self, fail: bool = False) -> None:
        self._fail = fail
        self.saved: list[tuple[str, datetime, str]] = []

    def save(self, date_label: str, run_at: datetime, text: str) -> str:
        if self._fail:
            raise OSError("disk full")
        self.saved.append((date_label, run_at, text))
        return f"output/summary-{date_label}.txt"


class FakeGenerator:
    def __init__(self, response) -> None:
        self._response = response
        self.calls = 0

    async def generate(self, body: dict) -> dict:
        self.calls += 1
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


def _messages(count: int) -> list[DummyMessage]:
    return [DummyMessage(100 - i, 19 - (i % 10), f"message {i}") for i in range(count)]


def _job(
    source: FakeSource,
    delivery: Optional[FakeDelivery] = None,
    store: Optional[FakeStore] = None,
    generator: Optional[FakeGenerator] = None,
    **config,
) -> SummaryJob:
    summarizer = AiSummarizer(
        generator,
        AiConfig(api_key="key" if generator else None),
        RateLimitState(),
        clock=lambda: RUN_AT,
    )
    return SummaryJob(
        source=source,
        delivery=delivery or FakeDelivery(),
        store=store or FakeStore(),
        summarizer=summarizer,
        config=SummaryConfig(**config),
        clock=lambda: RUN_AT,
    )


def test_run_saves_and_delivers_report() -> None:
    delivery = FakeDelivery()
    store = FakeStore()
    source = FakeSource(_messages(5))
    outcome = asyncio.run(_job(source, delivery, store, targets=("me",)).run())

    assert outcome.scan.window.label == "2026-10-19"
    assert len(outcome.scan.messages) == 5
    assert store.saved[0][0] == "2026-10-19"
    assert store.saved[0][2] == outcome.report
    assert outcome.artifact_path == "output/summary-2026-10-19.txt"
    assert delivery.sent == [("me", outcome.report)]
    assert outcome.delivered_targets == ["me"]
    assert "Total Messages: 5" in outcome.report
    assert source.limits == [3000]


def test_failed_target_does_not_block_others() -> None:
    delivery = FakeDelivery(failing=("@broken",))
    outcome = asyncio.run(
        _job(FakeSource(_messages(2)), delivery, targets=("@broken", "me", "@team")).run()
    )
    assert outcome.failed_targets == ["@broken"]
    assert outcome.delivered_targets == ["me", "@team"]
    assert [target for target, _ in delivery.sent] == ["me", "@team"]


def test_report_is_saved_even_when_no_target_succeeds() -> None:
    store = FakeStore()
    delivery = FakeDelivery(failing=("me",))
    outcome = asyncio.run(_job(FakeSource(_messages(2)), delivery, store).run())
    assert store.saved
    assert outcome.delivered_targets == []


def test_save_failure_still_delivers() -> None:
    delivery = FakeDelivery()
    outcome = asyncio.run(_job(FakeSource(_messages(2)), delivery, FakeStore(fail=True)).run())
    assert outcome.artifact_path is None
    assert outcome.delivered_targets == ["me"]


def test_ai_brief_is_included_when_enabled() -> None:
    generator = FakeGenerator({"candidates": [{"content": {"parts": [{"text": "All good."}]}}]})
    outcome = asyncio.run(_job(FakeSource(_messages(5)), generator=generator).run())
    assert outcome.ai_result == AiSucceeded("All good.")
    assert outcome.ai_summary == "All good."
    assert "AI Summary:\nAll good." in outcome.report


def test_ai_disabled_or_below_threshold_makes_no_call() -> None:
    generator = FakeGenerator({"candidates": []})

    disabled = asyncio.run(_job(FakeSource(_messages(5)), generator=generator).run(enable_ai=False))
    assert isinstance(disabled.ai_result, AiSkipped)

    below = asyncio.run(_job(FakeSource(_messages(2)), generator=generator, ai_min_messages=3).run())
    assert isinstance(below.ai_result, AiSkipped)
    assert generator.calls == 0


def test_ai_failure_does_not_stop_the_run() -> None:
    generator = FakeGenerator(ExternalServiceError(500, "internal"))
    delivery = FakeDelivery()
    outcome = asyncio.run(_job(FakeSource(_messages(5)), delivery, generator=generator).run())
    assert isinstance(outcome.ai_result, AiFailed)
    assert "AI Summary:" not in outcome.report
    assert outcome.delivered_targets == ["me"]


def test_long_report_is_delivered_in_numbered_parts() -> None:
    long_text = " ".join(["word"] * 50)
    messages = [DummyMessage(500 - i, 19 - (i % 10), f"{long_text} {i}") for i in range(50)]
    delivery = FakeDelivery()
    outcome = asyncio.run(
        _job(FakeSource(messages), delivery, include_highlights=True, transport_max_chars=1500).run()
    )
    parts = [text for _, text in delivery.sent]
    assert len(parts) > 1
    assert parts[0].startswith(f"[1/{len(parts)}]\n")
    assert all(len(part) <= 1500 for part in parts)
    assert outcome.delivered_targets == ["me"]


def test_links_use_group_alias() -> None:
    source = FakeSource(_messages(1), GroupInfo(title="Team", username="teamchat", id=None))
    outcome = asyncio.run(_job(source, include_highlights=True).run())
    assert outcome.scan.messages[0].link == "https://t.me/teamchat/100"
    assert "Link: https://t.me/teamchat/100" in outcome.report


def test_sender_filter_is_applied_and_described() -> None:
    messages = [
        DummyMessage(3, 12, "hi", username="alice"),
        DummyMessage(2, 11, "yo", username="bob"),
    ]
    outcome = asyncio.run(_job(FakeSource(messages), sender_filter=("@bob",)).run())
    assert [m.sender_display for m in outcome.scan.messages] == ["@bob"]
    assert "Sender Filter: @bob" in outcome.report


def test_yesterday_messages_stop_the_scan() -> None:
    yesterday = DummyMessage(1, 10, "old")
    yesterday.date = yesterday.date - timedelta(days=1)
    messages = _messages(3) + [yesterday] + [DummyMessage(0, 9, "unreachable")]
    outcome = asyncio.run(_job(FakeSource(messages)).run())
    assert outcome.scan.diagnostics.stopped_before_window
    assert outcome.scan.diagnostics.scanned == 4
    assert len(outcome.scan.messages) == 3
    assert outcome.scan.messages[0].timestamp <= outcome.scan.messages[-1].timestamp
    assert outcome.scan.messages[0].timestamp.tzinfo == timezone.utc


def test_unexpected_delivery_error_does_not_block_others() -> None:
    delivery = FakeDelivery(crash=("@flaky",))
    store = FakeStore()
    outcome = asyncio.run(
        _job(FakeSource(_messages(2)), delivery, store, targets=("@flaky", "me")).run()
    )
    assert outcome.failed_targets == ["@flaky"]
    assert outcome.delivered_targets == ["me"]
    assert [target for target, _ in delivery.sent] == ["me"]
    assert len(store.saved) == 1


def test_malformed_ai_response_still_saves_and_delivers() -> None:
    generator = FakeGenerator({"candidates": ["unexpected"], "usageMetadata": "none"})
    delivery = FakeDelivery()
    store = FakeStore()
    outcome = asyncio.run(_job(FakeSource(_messages(5)), delivery, store, generator=generator).run())
    assert generator.calls == 1
    assert isinstance(outcome.ai_result, AiSkipped)
    assert "AI Summary:" not in outcome.report
    assert len(store.saved) == 1
    assert outcome.delivered_targets == ["me"]


class ExplodingSummarizer:
    async def summarize(self, messages):
        raise KeyError("candidates")


def test_unexpected_summarizer_error_becomes_failed_result() -> None:
    store = FakeStore()
    job = SummaryJob(
        source=FakeSource(_messages(5)),
        delivery=FakeDelivery(),
        store=store,
        summarizer=ExplodingSummarizer(),
        config=SummaryConfig(),
        clock=lambda: RUN_AT,
    )
    outcome = asyncio.run(job.run())
    assert isinstance(outcome.ai_result, AiFailed)
    assert isinstance(outcome.ai_result.error, KeyError)
    assert len(store.saved) == 1
    assert outcome.delivered_targets == ["me"]
