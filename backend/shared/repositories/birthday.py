"""Repository for the contacts table (birthday records)."""

from __future__ import annotations

from typing import Any

import asyncpg

from shared.cache import _MISSING, AsyncTTLCache
from shared.models.birthday import BirthdayRecord, ReminderPreference

# --- In-process caches ---
_records_cache = AsyncTTLCache(maxsize=256, ttl=60)

_COLUMNS = """
    id, user_id, name, day, month, year, relationship,
    reminder_type, last_wished_year, created_at, updated_at
"""


def _row_to_record(row: asyncpg.Record | dict[str, Any]) -> BirthdayRecord:
    return BirthdayRecord(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        name=row["name"],
        day=row["day"],
        month=row["month"],
        year=row["year"],
        relationship=row["relationship"],
        reminder_preference=ReminderPreference.coerce(row["reminder_type"]),
        last_acknowledged_year=row["last_wished_year"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class BirthdayRepository:
    """Pure SQL operations for birthday records."""

    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool = pool

    async def list_for_user(self, user_id: str) -> list[BirthdayRecord]:
        """All of a user's contacts, ordered by month and day."""
        cache_key = f"contacts:{user_id}"
        cached = _records_cache.get(cache_key)
        if cached is not _MISSING:
            return list(cached)

        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"SELECT {_COLUMNS} FROM contacts WHERE user_id = $1 ORDER BY month, day, name",
                user_id,
            )
        result = [_row_to_record(row) for row in rows]
        _records_cache.set(cache_key, result)
        return list(result)

    async def get(self, record_id: str) -> BirthdayRecord | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM contacts WHERE id = $1",
                record_id,
            )
        return _row_to_record(row) if row else None

    async def set_acknowledged_year(
        self,
        record_id: str,
        user_id: str,
        year: int | None,
        *,
        conn: asyncpg.Connection | None = None,
    ) -> bool:
        """Write ``last_wished_year``. Returns True only if the stored value changed.

        The conditional update makes concurrent identical writes count once.
        Pass *conn* to run inside a caller's transaction.
        """
        if conn is None:
            async with self.pool.acquire() as conn:
                return await self.set_acknowledged_year(record_id, user_id, year, conn=conn)

        row = await conn.fetchrow(
            """
            UPDATE contacts
            SET last_wished_year = $2, updated_at = NOW()
            WHERE id = $1 AND last_wished_year IS DISTINCT FROM $2
            RETURNING id
            """,
            record_id,
            year,
        )
        _records_cache.invalidate(f"contacts:{user_id}")
        return row is not None
