"""Send today's birthday digests once, for use from a system cron.

Usage:
    python send_reminders.py                       # today in TIMEZONE, weekly on the configured weekday
    python send_reminders.py --date 2024-06-15     # re-run a specific day
    python send_reminders.py --weekly / --no-weekly
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path

# Ensure backend/ is on sys.path so api.* and shared.* are importable
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from api.core.config import get_settings
from api.core.logging import setup_logging
from api.services import DispatchOutcome, ReminderScheduler, build_notifier, resolve_run_date
from shared.database import DatabaseManager, PoolConfig
from shared.repositories import BirthdayRepository, UserRepository


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send birthday reminder digests")
    parser.add_argument("--date", type=date.fromisoformat, help="Run date (YYYY-MM-DD)")
    parser.add_argument(
        "--weekly",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force the weekly roundup on or off",
    )
    return parser.parse_args(argv)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(settings)

    today, is_weekly = resolve_run_date(settings)
    if args.date:
        today = args.date
        is_weekly = today.weekday() == settings.weekly_digest_weekday
    if args.weekly is not None:
        is_weekly = args.weekly

    db = DatabaseManager(settings.database_url, PoolConfig.for_service("scheduler"))
    notifier = build_notifier(settings.notify_webhook_url, timeout=settings.notify_timeout)
    try:
        await db.connect()
        scheduler = ReminderScheduler(
            UserRepository(db.pool),
            BirthdayRepository(db.pool),
            notifier,
            concurrency=settings.dispatch_concurrency,
        )
        report = await scheduler.run(today, is_weekly)
    finally:
        await notifier.close()
        await db.disconnect()

    print(
        f"{today.isoformat()} weekly={is_weekly}: "
        f"sent={report.count(DispatchOutcome.SENT)} "
        f"skipped={report.count(DispatchOutcome.SKIPPED_EMPTY)} "
        f"errors={report.count(DispatchOutcome.ERROR)}"
    )
    return 1 if report.count(DispatchOutcome.ERROR) else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
