"""Values passed between the scan, summary, report and delivery steps.

Telethon objects stop at the adapters; everything here is plain data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union


@dataclass(frozen=True)
class TimeWindow:
    """Absolute bounds of one civil day in the report timezone."""

    start: datetime
    end: datetime
    label: str

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


@dataclass(frozen=True)
class NormalizedSender:
    """Canonical identity of a message author."""

    handle: str
    full_name: str
    id: str
    display: str

    def identities(self) -> list[str]:
        """Lower-cased non-empty identity strings used for filter matching."""

        return [value.lower() for value in (self.handle, self.full_name, self.id) if value]


@dataclass(frozen=True)
class GroupInfo:
    """Minimal description of the scanned group."""

    title: str
    username: Optional[str]
    id: Optional[int]


@dataclass(frozen=True)
class AcceptedMessage:
    """A feed message that survived every scan filter."""

    id: int
    timestamp: datetime
    text: str
    sender_display: str
    link: Optional[str]


@dataclass
class ScanDiagnostics:
    """Counters accumulated during one scan."""

    scanned: int = 0
    skipped_missing_date: int = 0
    skipped_after_window: int = 0
    skipped_empty_text: int = 0
    skipped_sender_filter: int = 0
    stopped_before_window: bool = False
    reached_scan_cap: bool = False

    def skipped_total(self) -> int:
        return (
            self.skipped_missing_date
            + self.skipped_after_window
            + self.skipped_empty_text
            + self.skipped_sender_filter
        )


@dataclass(frozen=True)
class ScanResult:
    """Accepted messages (chronological) plus the scan diagnostics."""

    window: TimeWindow
    messages: list[AcceptedMessage]
    diagnostics: ScanDiagnostics


@dataclass(frozen=True)
class AiSkipped:
    """No brief was requested, or the request was absorbed (rate limit)."""

    reason: str


@dataclass(frozen=True)
class AiSucceeded:
    text: str


@dataclass(frozen=True)
class AiFailed:
    """The LLM call failed; the run continues without a brief."""

    error: Exception


AiResult = Union[AiSkipped, AiSucceeded, AiFailed]


@dataclass
class RunOutcome:
    """Everything one summary run produced."""

    group: GroupInfo
    scan: ScanResult
    ai_result: AiResult
    report: str
    artifact_path: Optional[str] = None
    delivered_targets: list[str] = field(default_factory=list)
    failed_targets: list[str] = field(default_factory=list)

    @property
    def ai_summary(self) -> Optional[str]:
        if isinstance(self.ai_result, AiSucceeded):
            return self.ai_result.text
        return None
