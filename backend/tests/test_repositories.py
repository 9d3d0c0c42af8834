"""Repository tests against a mocked asyncpg pool."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from shared.models.birthday import ReminderPreference, StreakState
from shared.repositories import birthday as birthday_repo
from shared.repositories import user as user_repo
from shared.repositories.birthday import BirthdayRepository
from shared.repositories.user import UserRepository


def _pool():
    conn = MagicMock()
    conn.fetch = AsyncMock()
    conn.fetchrow = AsyncMock()
    conn.execute = AsyncMock()
    pool = MagicMock()
    pool.acquire.return_value.__aenter__.return_value = conn
    return pool, conn


def _contact_row(**overrides):
    row = {
        "id": "c1",
        "user_id": "u1",
        "name": "Grace",
        "day": 9,
        "month": 12,
        "year": 1906,
        "relationship": "Friend",
        "reminder_type": "1 day before",
        "last_wished_year": None,
        "created_at": None,
        "updated_at": None,
    }
    row.update(overrides)
    return row


@pytest.fixture(autouse=True)
def _clear_caches():
    birthday_repo._records_cache.clear()
    user_repo._notify_users_cache.clear()


class TestBirthdayRepository:
    def test_rows_map_to_records(self):
        pool, conn = _pool()
        conn.fetch.return_value = [_contact_row(), _contact_row(id="c2", reminder_type="bogus")]

        records = asyncio.run(BirthdayRepository(pool).list_for_user("u1"))

        assert [r.id for r in records] == ["c1", "c2"]
        assert records[0].reminder_preference is ReminderPreference.DUE_ONE_DAY_BEFORE
        assert records[1].reminder_preference is ReminderPreference.DUE_MORNING_OF
        assert records[0].last_acknowledged_year is None

    def test_list_is_cached_until_a_write(self):
        pool, conn = _pool()
        conn.fetch.return_value = [_contact_row()]
        conn.fetchrow.return_value = {"id": "c1"}
        repo = BirthdayRepository(pool)

        async def run():
            await repo.list_for_user("u1")
            await repo.list_for_user("u1")
            assert conn.fetch.await_count == 1
            await repo.set_acknowledged_year("c1", "u1", 2024)
            await repo.list_for_user("u1")

        asyncio.run(run())
        assert conn.fetch.await_count == 2

    def test_set_acknowledged_year_reports_no_change(self):
        pool, conn = _pool()
        conn.fetchrow.return_value = None
        changed = asyncio.run(BirthdayRepository(pool).set_acknowledged_year("c1", "u1", 2024))
        assert changed is False
        assert conn.fetchrow.await_args.args[1:] == ("c1", 2024)

    def test_write_uses_callers_connection(self):
        pool, _ = _pool()
        conn = MagicMock()
        conn.fetchrow = AsyncMock(return_value={"id": "c1"})

        changed = asyncio.run(
            BirthdayRepository(pool).set_acknowledged_year("c1", "u1", 2024, conn=conn)
        )

        assert changed is True
        conn.fetchrow.assert_awaited_once()
        pool.acquire.assert_not_called()

    def test_get_missing(self):
        pool, conn = _pool()
        conn.fetchrow.return_value = None
        assert asyncio.run(BirthdayRepository(pool).get("nope")) is None


class TestUserRepository:
    def test_notification_users(self):
        pool, conn = _pool()
        conn.fetch.return_value = [{"id": 7, "name": "Ada", "email": "ada@example.com"}]

        users = asyncio.run(UserRepository(pool).list_notification_users())

        assert users[0].id == "7"
        assert users[0].display_name == "Ada"

    def test_get_streak(self):
        pool, conn = _pool()
        conn.fetchrow.return_value = {"streak": 2, "last_wish_date": date(2024, 6, 14)}
        state = asyncio.run(UserRepository(pool).get_streak("u1"))
        assert state == StreakState(count=2, last_acknowledgment_date=date(2024, 6, 14))

    def test_advance_streak_writes_next_state(self):
        pool, conn = _pool()
        conn.fetchrow.return_value = {"streak": 2, "last_wish_date": date(2024, 6, 14)}

        state = asyncio.run(UserRepository(pool).advance_streak("u1", date(2024, 6, 15)))

        assert state == StreakState(count=3, last_acknowledgment_date=date(2024, 6, 15))
        assert conn.execute.await_args.args[1:] == ("u1", 3, date(2024, 6, 15))

    def test_advance_streak_joins_callers_transaction(self):
        pool, _ = _pool()
        conn = MagicMock()
        conn.fetchrow = AsyncMock(return_value={"streak": 0, "last_wish_date": None})
        conn.execute = AsyncMock()

        state = asyncio.run(
            UserRepository(pool).advance_streak("u1", date(2024, 6, 15), conn=conn)
        )

        assert state.count == 1
        conn.transaction.assert_called_once()
        pool.acquire.assert_not_called()

    def test_advance_streak_unknown_user(self):
        pool, conn = _pool()
        conn.fetchrow.return_value = None
        with pytest.raises(LookupError):
            asyncio.run(UserRepository(pool).advance_streak("ghost", date(2024, 6, 15)))
