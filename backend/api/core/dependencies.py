"""Dependency injection utilities for FastAPI"""

import logging
import secrets
from collections.abc import AsyncGenerator
from datetime import date

import asyncpg
from fastapi import Depends, Header, HTTPException

from api.core.config import Settings, get_settings
from api.core.database import get_database_manager
from api.services import (
    AcknowledgmentService,
    BirthdayService,
    ReminderScheduler,
    build_notifier,
    resolve_run_date,
)
from shared.repositories import BirthdayRepository, UserRepository

logger = logging.getLogger(__name__)


# ============================================
# Service Dependencies
# ============================================


def get_db_pool() -> asyncpg.Pool:
    db_manager = get_database_manager()
    if not db_manager.is_connected:
        raise HTTPException(status_code=503, detail="Database not ready")
    return db_manager.pool


def get_birthday_service(pool: asyncpg.Pool = Depends(get_db_pool)) -> BirthdayService:
    return BirthdayService(pool)


def get_acknowledgment_service(
    pool: asyncpg.Pool = Depends(get_db_pool),
) -> AcknowledgmentService:
    return AcknowledgmentService(pool)


async def get_reminder_scheduler(
    pool: asyncpg.Pool = Depends(get_db_pool),
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[ReminderScheduler, None]:
    """Scheduler wired to the database; its notifier is closed after the request"""
    notifier = build_notifier(settings.notify_webhook_url, timeout=settings.notify_timeout)
    try:
        yield ReminderScheduler(
            UserRepository(pool),
            BirthdayRepository(pool),
            notifier,
            concurrency=settings.dispatch_concurrency,
        )
    finally:
        await notifier.close()


def get_today(settings: Settings = Depends(get_settings)) -> date:
    """Civil date in the configured timezone"""
    today, _ = resolve_run_date(settings)
    return today


# ============================================
# Cron Authentication
# ============================================


def verify_cron_secret(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Require ``Authorization: Bearer <CRON_SECRET>`` when a secret is configured"""
    if not settings.cron_secret:
        return

    expected = f"Bearer {settings.cron_secret}"
    if not authorization or not secrets.compare_digest(authorization, expected):
        logger.warning("Rejected cron request with missing or invalid secret")
        raise HTTPException(status_code=401, detail="Invalid cron secret")
