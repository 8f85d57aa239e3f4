"""Application entry point for the daybrief daily summary."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from art import tprint

import settings
from adapters.file_report_store import FileReportStore
from adapters.gemini_client import GeminiClient
from adapters.telegram_bot_notifier import TelegramBotDelivery
from adapters.telegram_notifier import TelegramUserDelivery
from adapters.telegram_source import TelegramGroupSource
from client import build_client
from core.errors import ConfigurationError
from core.rate_limit import RateLimitState
from core.summarizer import AiSummarizer
from core.summary_job import SummaryJob
from get_session import init_session
from logging_setup import configure_logging

NAME = "DAYBRIEF"
FONT = "tarty-1"

# One cooldown shared by every run in this process.
RATE_LIMIT_STATE = RateLimitState()


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _build_delivery(client):
    # DELIVERY_METHOD picks the adapter; the job only sees DeliveryPort.
    if settings.DELIVERY_METHOD == "bot":
        bot_token = os.getenv("BOT_API")
        if not bot_token:
            raise ConfigurationError("BOT_API is required when DELIVERY_METHOD=bot")
        return TelegramBotDelivery(bot_token)
    if settings.DELIVERY_METHOD == "user":
        return TelegramUserDelivery(client)
    raise ConfigurationError("DELIVERY_METHOD must be 'user' or 'bot'")


def _build_job(client) -> SummaryJob:
    group = settings.require_group_identifier()
    generator = None
    if settings.AI.api_key:
        generator = GeminiClient(settings.AI.api_key, settings.AI.model)
    summarizer = AiSummarizer(generator, settings.AI, RATE_LIMIT_STATE)
    return SummaryJob(
        source=TelegramGroupSource(client, group),
        delivery=_build_delivery(client),
        store=FileReportStore(settings.OUTPUT_DIR),
        summarizer=summarizer,
        config=settings.SUMMARY,
    )


async def _connect(client) -> None:
    await client.connect()
    if not await client.is_user_authorized():
        await client.disconnect()
        raise ConfigurationError("Telegram session is not authorized. Run: daybrief init-session")


_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _weekday_number(value: str) -> int:
    if value.lower() in _WEEKDAYS:
        return _WEEKDAYS.index(value.lower())
    number = int(value)
    if not 0 <= number <= 7:
        raise ValueError(f"day of week out of range: {value}")
    return number


def _cron_day_of_week(field: str) -> str:
    """Translate a crontab day-of-week field (0 or 7 = Sunday) to APScheduler names.

    APScheduler counts from Monday, so numeric items are expanded into an
    explicit list of day names.
    """

    if field in ("*", "?"):
        return "*"
    days: list[int] = []
    for item in field.split(","):
        base, _, step = item.partition("/")
        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            start, end = base.split("-", 1)
            first, last = _weekday_number(start), _weekday_number(end)
        else:
            first = last = _weekday_number(base)
            if step:
                last = 6
        for number in range(first, last + 1, int(step) if step else 1):
            if number % 7 not in days:
                days.append(number % 7)
    if not days:
        raise ValueError(f"empty day-of-week field: {field}")
    return ",".join(_WEEKDAYS[number] for number in sorted(days))


def _cron_trigger(expression: str, timezone: str) -> CronTrigger:
    """Build a trigger from a 5-field or 6-field (leading seconds) cron expression."""

    fields = expression.split()
    if len(fields) == 5:
        fields = ["0"] + fields
    if len(fields) != 6:
        raise ConfigurationError(f"Invalid cron expression: {expression!r}")
    second, minute, hour, day, month, day_of_week = fields
    try:
        return CronTrigger(
            second=second,
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=_cron_day_of_week(day_of_week),
            timezone=timezone,
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid cron expression: {expression!r}") from exc


async def _scheduled_run(job: SummaryJob, enable_ai: bool) -> None:
    try:
        await job.run(enable_ai=enable_ai)
    except Exception:
        logging.getLogger(__name__).exception("Scheduled run failed")


def _run_once() -> None:
    client = build_client()
    job = _build_job(client)
    client.loop.run_until_complete(_connect(client))
    try:
        client.loop.run_until_complete(job.run())
    finally:
        client.loop.run_until_complete(client.disconnect())


def _run_scheduler() -> None:
    logger = logging.getLogger(__name__)
    schedule = settings.SCHEDULE

    client = build_client()
    job = _build_job(client)
    no_ai_trigger = _cron_trigger(schedule.cron_no_ai, schedule.timezone)
    with_ai_trigger = _cron_trigger(schedule.cron_with_ai, schedule.timezone)
    client.loop.run_until_complete(_connect(client))

    scheduler = AsyncIOScheduler(event_loop=client.loop, timezone=schedule.timezone)
    scheduler.add_job(_scheduled_run, no_ai_trigger, args=[job, False], id="summary-no-ai")
    scheduler.add_job(_scheduled_run, with_ai_trigger, args=[job, True], id="summary-with-ai")
    scheduler.start()

    logger.info("Telegram daily summary scheduler started.")
    logger.info(
        'Schedules (%s) -> no-AI: "%s", with-AI: "%s".',
        schedule.timezone,
        schedule.cron_no_ai,
        schedule.cron_with_ai,
    )

    try:
        client.run_until_disconnected()
    finally:
        scheduler.shutdown(wait=False)


def _init_session() -> None:
    client = build_client()
    session_string = client.loop.run_until_complete(init_session(client))
    print("\nSet this in your .env as STRING_SESSION:")
    print(session_string)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="daybrief")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the scheduler with both daily triggers")
    subparsers.add_parser("once", help="Run the daily summary once and exit")
    subparsers.add_parser("init-session", help="Log in and print a STRING_SESSION value")

    args = parser.parse_args(argv)
    _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)

    try:
        if args.command == "init-session":
            _init_session()
        elif args.command == "once":
            _run_once()
        else:
            _run_scheduler()
    except ConfigurationError as exc:
        logger.error("%s", exc)
        print("Copy .env.example to .env and fill required values.", file=sys.stderr)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
