from __future__ import annotations

import logging

from logging_setup import RedactingFormatter, collect_redaction_values, configure_logging


def _record(message: str, *args) -> logging.LogRecord:
    return logging.LogRecord("x", logging.INFO, __file__, 1, message, args, None)


def test_redacting_formatter_masks_secrets() -> None:
    formatter = RedactingFormatter(["s3cr3t", "s3cr3t-long"], fmt="%(message)s")
    assert formatter.format(_record("key=%s", "s3cr3t")) == "key=***"
    assert formatter.format(_record("key=%s", "s3cr3t-long")) == "key=***"


def test_redaction_defaults_to_known_secret_vars(monkeypatch) -> None:
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    monkeypatch.setenv("API_HASH", "hash-value")
    values = collect_redaction_values({"redact": {"enabled": True}})
    assert "gem-key" in values
    assert "hash-value" in values
    assert collect_redaction_values({}) == []


def test_redaction_uses_explicit_patterns(monkeypatch) -> None:
    monkeypatch.setenv("CUSTOM_TOKEN", "tok")
    monkeypatch.setenv("GEMINI_API_KEY", "gem-key")
    values = collect_redaction_values({"redact": {"enabled": True, "patterns": ["CUSTOM_TOKEN"]}})
    assert values == ["tok"]


def test_file_logging_creates_directory(tmp_path) -> None:
    root = logging.getLogger()
    before = list(root.handlers)
    level_before = root.level
    root.handlers = []
    try:
        configure_logging(
            {"console": False, "file": {"enabled": True, "path": "logs/daybrief.log"}},
            str(tmp_path),
        )
        assert (tmp_path / "logs").is_dir()
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = before
        root.setLevel(level_before)
