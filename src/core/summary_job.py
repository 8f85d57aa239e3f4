"""Core daily summary job.

This module is integration-agnostic. It only relies on ports for the
message feed, delivery, and report storage, enabling other transports or
frontends without changes here.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from core.chunker import chunk_for_delivery
from core.config import SummaryConfig
from core.errors import DeliveryError
from core.links import resolve_message_link
from core.models import AiFailed, AiResult, AiSkipped, AiSucceeded, RunOutcome, ScanResult
from core.ports import DeliveryPort, MessageSourcePort, ReportStorePort
from core.report import build_report
from core.scanner import scan_messages
from core.summarizer import AiSummarizer
from core.time_window import resolve_time_window

LOGGER = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SummaryJob:
    """Orchestrates scan, AI brief, report, local save, and delivery."""

    def __init__(
        self,
        source: MessageSourcePort,
        delivery: DeliveryPort,
        store: ReportStorePort,
        summarizer: AiSummarizer,
        config: SummaryConfig,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._source = source
        self._delivery = delivery
        self._store = store
        self._summarizer = summarizer
        self._config = config
        self._clock = clock

    async def run(self, enable_ai: bool = True) -> RunOutcome:
        """Run the pipeline once for the civil day containing now."""

        run_at = self._clock()
        LOGGER.info("Running summary job...")

        group = await self._source.resolve_group()
        window = resolve_time_window(run_at)
        scan = await scan_messages(
            self._source.iter_messages(limit=self._config.max_messages_per_run),
            window,
            sender_filter=self._config.sender_filter,
            max_messages=self._config.max_messages_per_run,
            link_resolver=lambda message_id: resolve_message_link(group, message_id),
        )
        self._log_scan(scan)

        ai_result = await self._summarize(scan, enable_ai)
        ai_summary = ai_result.text if isinstance(ai_result, AiSucceeded) else None

        report = build_report(
            group_title=group.title,
            date_label=window.label,
            messages=scan.messages,
            sender_filter=self._config.sender_filter,
            ai_summary=ai_summary,
            include_highlights=self._config.include_highlights,
        )
        outcome = RunOutcome(group=group, scan=scan, ai_result=ai_result, report=report)

        # The local copy is written before any delivery is attempted.
        try:
            outcome.artifact_path = self._store.save(window.label, run_at, report)
        except OSError:
            LOGGER.exception("Failed to save local report copy")

        await self._deliver(outcome)

        if outcome.delivered_targets:
            LOGGER.info("Summary sent to: %s.", ", ".join(outcome.delivered_targets))
        else:
            LOGGER.warning("Summary was not sent to any target.")
        if outcome.artifact_path:
            LOGGER.info("Saved copy to %s", outcome.artifact_path)
        return outcome

    async def _summarize(self, scan: ScanResult, enable_ai: bool) -> AiResult:
        count = len(scan.messages)
        if not enable_ai:
            LOGGER.info("AI summary skipped: disabled for this scheduled run.")
            return AiSkipped("disabled for this run")
        if count < self._config.ai_min_messages:
            LOGGER.info(
                "AI summary skipped: only %s messages (minimum %s).",
                count,
                self._config.ai_min_messages,
            )
            return AiSkipped("below minimum message count")

        try:
            result = await self._summarizer.summarize(scan.messages)
        except Exception as exc:
            result = AiFailed(exc)
        if isinstance(result, AiFailed):
            LOGGER.warning("AI summary skipped: %s", result.error)
        elif isinstance(result, AiSkipped):
            LOGGER.info("AI summary skipped: %s.", result.reason)
        return result

    async def _deliver(self, outcome: RunOutcome) -> None:
        chunks = chunk_for_delivery(outcome.report, self._config.transport_max_chars)
        for target in self._config.targets:
            try:
                for chunk in chunks:
                    await self._delivery.send(target, chunk)
            except DeliveryError as exc:
                LOGGER.error("Failed to send summary to %s: %s", target, exc.reason)
                outcome.failed_targets.append(target)
                continue
            except Exception:
                LOGGER.exception("Unexpected error sending summary to %s", target)
                outcome.failed_targets.append(target)
                continue
            if len(chunks) > 1:
                LOGGER.info("Summary sent to %s in %s parts.", target, len(chunks))
            outcome.delivered_targets.append(target)

    @staticmethod
    def _log_scan(scan: ScanResult) -> None:
        stats = scan.diagnostics
        LOGGER.info("Scanned: %s messages. Included: %s.", stats.scanned, len(scan.messages))
        LOGGER.info(
            "Filter diagnostics -> missingDate: %s, afterWindow: %s, emptyText: %s, "
            "senderFilter: %s, stoppedBeforeWindow: %s, reachedScanCap: %s",
            stats.skipped_missing_date,
            stats.skipped_after_window,
            stats.skipped_empty_text,
            stats.skipped_sender_filter,
            stats.stopped_before_window,
            stats.reached_scan_cap,
        )
