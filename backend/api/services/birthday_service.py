"""Birthday list service: a user's contacts with their computed status."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

import asyncpg

from shared.birthdays.dates import (
    InvalidBirthdayError,
    next_occurrence,
    turning_age,
    visual_sort_date,
)
from shared.birthdays.status import classify
from shared.birthdays.streak import current_streak
from shared.models.birthday import BirthdayRecord, StreakState
from shared.repositories.birthday import BirthdayRepository
from shared.repositories.user import UserRepository

logger = logging.getLogger(__name__)


def describe(record: BirthdayRecord, today: date) -> dict[str, Any]:
    """Record fields plus status, countdown and age as of ``today``."""
    try:
        upcoming = next_occurrence(record.day, record.month, today)
        sort_date = visual_sort_date(record.day, record.month, today)
        age = turning_age(record.day, record.month, record.year, today)
    except InvalidBirthdayError as e:
        logger.warning(f"Contact {record.id} has an unusable birthday: {e}")
        upcoming = sort_date = None
        age = None

    return {
        "id": record.id,
        "name": record.name,
        "day": record.day,
        "month": record.month,
        "year": record.year,
        "relationship": record.relationship,
        "reminder_preference": record.reminder_preference.value,
        "last_acknowledged_year": record.last_acknowledged_year,
        "status": classify(record, today).value,
        "next_occurrence": upcoming,
        "days_until": (upcoming - today).days if upcoming else None,
        "turning_age": age,
        "sort_date": sort_date,
    }


class BirthdayService:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool
        self.records = BirthdayRepository(pool)
        self.users = UserRepository(pool)

    async def list_birthdays(self, user_id: str, today: date) -> list[dict[str, Any]]:
        """Contacts in list order: missed-this-month first, then by next occurrence."""
        records = await self.records.list_for_user(user_id)
        items = [describe(r, today) for r in records]
        items.sort(key=lambda i: (i["sort_date"] is None, i["sort_date"] or today, i["name"]))
        return items

    async def get_streak(self, user_id: str, today: date) -> dict[str, Any] | None:
        state = await self.users.get_streak(user_id)
        if state is None:
            return None
        return streak_view(state, today)


def streak_view(state: StreakState, today: date) -> dict[str, Any]:
    return {
        "count": state.count,
        "last_acknowledgment_date": state.last_acknowledgment_date,
        "current": current_streak(state, today),
    }
