"""Repository for users: digest recipients and acknowledgment streaks."""

from __future__ import annotations

from datetime import date

import asyncpg

from shared.birthdays.streak import record_acknowledgment
from shared.cache import AsyncTTLCache, cached
from shared.models.birthday import NotificationUser, StreakState

_notify_users_cache = AsyncTTLCache(maxsize=1, ttl=300)


class UserRepository:
    """Pure SQL operations for the users table."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    @cached(_notify_users_cache, key_func=lambda self: "notify_users")
    async def list_notification_users(self) -> list[NotificationUser]:
        """Users with email notifications enabled and an address on file."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, name, email
                FROM users
                WHERE wants_email_notifications = TRUE AND email IS NOT NULL
                ORDER BY id
                """
            )
        return [
            NotificationUser(id=str(row["id"]), display_name=row["name"], email=row["email"])
            for row in rows
        ]

    async def get_streak(self, user_id: str) -> StreakState | None:
        """The user's streak, or None if the user does not exist."""
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT streak, last_wish_date FROM users WHERE id = $1",
                user_id,
            )
        if not row:
            return None
        return StreakState(count=row["streak"], last_acknowledgment_date=row["last_wish_date"])

    async def advance_streak(
        self, user_id: str, today: date, *, conn: asyncpg.Connection | None = None
    ) -> StreakState:
        """Apply one acknowledgment made on ``today`` to the user's streak.

        The row is locked for the read-modify-write so two devices
        acknowledging at once still advance the streak at most once per day.
        Given *conn*, the update joins that connection's open transaction.
        """
        if conn is None:
            async with self.pool.acquire() as conn:
                return await self.advance_streak(user_id, today, conn=conn)

        async with conn.transaction():
            row = await conn.fetchrow(
                "SELECT streak, last_wish_date FROM users WHERE id = $1 FOR UPDATE",
                user_id,
            )
            if not row:
                raise LookupError(f"User {user_id} not found")

            current = StreakState(
                count=row["streak"], last_acknowledgment_date=row["last_wish_date"]
            )
            updated = record_acknowledgment(current, today)
            await conn.execute(
                """
                UPDATE users
                SET streak = $2,
                    last_wish_date = $3,
                    wishes_delivered = wishes_delivered + 1,
                    updated_at = NOW()
                WHERE id = $1
                """,
                user_id,
                updated.count,
                updated.last_acknowledgment_date,
            )
        return updated
