"""Scheduled reminder trigger, called by an external cron."""

from __future__ import annotations

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from api.core.config import Settings, get_settings
from api.core.dependencies import get_reminder_scheduler, verify_cron_secret
from api.services import DispatchOutcome, ReminderScheduler, resolve_run_date

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/cron", tags=["cron"], dependencies=[Depends(verify_cron_secret)]
)


# ============================================
# Response Models
# ============================================


class UserResultResponse(BaseModel):
    user_id: str
    outcome: str
    due_today: int
    due_this_week: int
    error: str | None = None


class CronRunResponse(BaseModel):
    ok: bool
    started_at: datetime
    today: date
    weekly: bool
    sent: int
    skipped: int
    errors: int
    results: list[UserResultResponse]


# ============================================
# Endpoints
# ============================================


@router.get("/birthday-reminders", response_model=CronRunResponse)
async def run_birthday_reminders(
    today: date | None = Query(None, description="Override the run date (re-runs)"),
    weekly: bool | None = Query(None, description="Override the weekly roundup flag"),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
    settings: Settings = Depends(get_settings),
) -> CronRunResponse:
    """Send today's digests; the weekly roundup is added on the configured weekday."""
    started_at = datetime.now(settings.tz)
    run_date, is_weekly = resolve_run_date(settings, started_at)
    if today is not None:
        run_date = today
        is_weekly = run_date.weekday() == settings.weekly_digest_weekday
    if weekly is not None:
        is_weekly = weekly

    report = await scheduler.run(run_date, is_weekly)

    return CronRunResponse(
        ok=True,
        started_at=started_at,
        today=report.today,
        weekly=report.weekly,
        sent=report.count(DispatchOutcome.SENT),
        skipped=report.count(DispatchOutcome.SKIPPED_EMPTY),
        errors=report.count(DispatchOutcome.ERROR),
        results=[
            UserResultResponse(
                user_id=r.user_id,
                outcome=r.outcome.value,
                due_today=r.due_today,
                due_this_week=r.due_this_week,
                error=r.error,
            )
            for r in report.results
        ],
    )
