"""Acknowledgment service: marks a contact's birthday as wished for this year."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

import asyncpg

from shared.birthdays.status import apply_acknowledgment, classify
from shared.models.birthday import BirthdayRecord, CycleStatus, StreakState
from shared.repositories.birthday import BirthdayRepository
from shared.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class RecordNotFoundError(LookupError):
    pass


@dataclass
class AcknowledgmentResult:
    record: BirthdayRecord
    status: CycleStatus
    streak: StreakState
    changed: bool


class AcknowledgmentService:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool
        self.records = BirthdayRepository(pool)
        self.users = UserRepository(pool)

    async def set_acknowledged(
        self, record_id: str, acknowledged: bool, today: date
    ) -> AcknowledgmentResult:
        """Set or clear this year's acknowledgment on a record.

        The owner's streak only moves when this call is the one that flipped
        the record from pending to acknowledged. Clearing never touches it.
        The contact write and the streak update commit or roll back together.
        """
        record = await self.records.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Contact {record_id} not found")

        change = apply_acknowledgment(record, acknowledged, today)
        written = False
        streak: StreakState | None = None
        if change.changed:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    written = await self.records.set_acknowledged_year(
                        record.id,
                        record.user_id,
                        change.record.last_acknowledged_year,
                        conn=conn,
                    )
                    if written and change.became_acknowledged:
                        streak = await self.users.advance_streak(
                            record.user_id, today, conn=conn
                        )
            if streak is not None:
                logger.info(f"User {record.user_id} streak is now {streak.count}")

        if streak is None:
            streak = await self.users.get_streak(record.user_id) or StreakState()

        return AcknowledgmentResult(
            record=change.record,
            status=classify(change.record, today),
            streak=streak,
            changed=written,
        )
