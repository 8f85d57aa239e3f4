"""Flat-file report storage adapter.

Implements the core ReportStorePort: one UTF-8 text file per run.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone


def artifact_filename(date_label: str, run_at: datetime) -> str:
    """``summary-<label>-<ISO run time>.txt`` with colons and periods dashed."""

    if run_at.tzinfo is None:
        run_at = run_at.replace(tzinfo=timezone.utc)
    stamp = run_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + (
        f"{run_at.microsecond // 1000:03d}Z"
    )
    stamp = stamp.replace(":", "-").replace(".", "-")
    return f"summary-{date_label}-{stamp}.txt"


class FileReportStore:
    """Writes each report into a fixed output directory."""

    def __init__(self, output_dir: str) -> None:
        self._output_dir = output_dir

    def save(self, date_label: str, run_at: datetime, text: str) -> str:
        os.makedirs(self._output_dir, exist_ok=True)
        path = os.path.join(self._output_dir, artifact_filename(date_label, run_at))
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text)
        return path
