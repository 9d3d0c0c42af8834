"""Scheduled birthday digest run.

Triggered once a day (cron route or ``scripts/send_reminders.py``). Every
run is stateless: what gets sent depends only on ``today`` and the stored
contacts.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Protocol

from api.core.config import Settings
from shared.birthdays.digest import build_digest
from shared.models.birthday import BirthdayRecord, NotificationUser

from .notifier import Notifier

logger = logging.getLogger(__name__)


class UserSource(Protocol):
    async def list_notification_users(self) -> list[NotificationUser]: ...


class RecordSource(Protocol):
    async def list_for_user(self, user_id: str) -> list[BirthdayRecord]: ...


class DispatchOutcome(str, Enum):
    SENT = "sent"
    SKIPPED_EMPTY = "skipped_empty"
    ERROR = "error"


@dataclass
class UserDispatchResult:
    user_id: str
    outcome: DispatchOutcome
    due_today: int = 0
    due_this_week: int = 0
    error: str | None = None


@dataclass
class ReminderRunReport:
    today: date
    weekly: bool
    results: list[UserDispatchResult] = field(default_factory=list)

    def count(self, outcome: DispatchOutcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)


def resolve_run_date(settings: Settings, now: datetime | None = None) -> tuple[date, bool]:
    """Today's civil date in the configured zone and whether it is the weekly run.

    The only place the wall clock is read.
    """
    now = now.astimezone(settings.tz) if now else datetime.now(settings.tz)
    today = now.date()
    return today, today.weekday() == settings.weekly_digest_weekday


class ReminderScheduler:
    """Builds and dispatches every opted-in user's digest for one day."""

    def __init__(
        self,
        users: UserSource,
        records: RecordSource,
        notifier: Notifier,
        *,
        concurrency: int = 5,
    ) -> None:
        self.users = users
        self.records = records
        self.notifier = notifier
        self.concurrency = max(1, concurrency)

    async def run(self, today: date, is_weekly_run: bool) -> ReminderRunReport:
        recipients = await self.users.list_notification_users()
        logger.info(
            f"Reminder run for {today.isoformat()} (weekly={is_weekly_run}): "
            f"{len(recipients)} user(s)"
        )

        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(user: NotificationUser) -> UserDispatchResult:
            async with semaphore:
                return await self._process_user(user, today, is_weekly_run)

        # gather keeps input order regardless of completion order
        results = await asyncio.gather(*(bounded(u) for u in recipients))
        report = ReminderRunReport(today=today, weekly=is_weekly_run, results=list(results))

        logger.info(
            f"Reminder run done: sent={report.count(DispatchOutcome.SENT)}, "
            f"skipped={report.count(DispatchOutcome.SKIPPED_EMPTY)}, "
            f"errors={report.count(DispatchOutcome.ERROR)}"
        )
        return report

    async def _process_user(
        self, user: NotificationUser, today: date, is_weekly_run: bool
    ) -> UserDispatchResult:
        try:
            records = await self.records.list_for_user(user.id)
            digest = build_digest(user.id, records, today, include_weekly=is_weekly_run)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to build digest for user {user.id}: {type(e).__name__}: {e}")
            return UserDispatchResult(user.id, DispatchOutcome.ERROR, error=str(e))

        counts = {"due_today": len(digest.due_today), "due_this_week": len(digest.due_this_week)}
        if digest.is_empty:
            return UserDispatchResult(user.id, DispatchOutcome.SKIPPED_EMPTY)

        try:
            await self.notifier.send(digest, user.display_name)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Failed to send digest to user {user.id}: {type(e).__name__}: {e}")
            return UserDispatchResult(user.id, DispatchOutcome.ERROR, error=str(e), **counts)

        return UserDispatchResult(user.id, DispatchOutcome.SENT, **counts)
