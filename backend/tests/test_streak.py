"""Tests for the acknowledgment streak."""

from datetime import date

from shared.birthdays.streak import current_streak, record_acknowledgment
from shared.models.birthday import StreakState


def test_first_acknowledgment_starts_at_one():
    state = record_acknowledgment(StreakState(), date(2024, 6, 1))
    assert state == StreakState(count=1, last_acknowledgment_date=date(2024, 6, 1))


def test_next_day_increments():
    state = StreakState(count=5, last_acknowledgment_date=date(2024, 6, 1))
    assert record_acknowledgment(state, date(2024, 6, 2)).count == 6


def test_same_day_is_unchanged():
    state = StreakState(count=5, last_acknowledgment_date=date(2024, 6, 1))
    assert record_acknowledgment(state, date(2024, 6, 1)) is state


def test_gap_resets_to_one():
    state = StreakState(count=5, last_acknowledgment_date=date(2024, 6, 1))
    result = record_acknowledgment(state, date(2024, 6, 3))
    assert result == StreakState(count=1, last_acknowledgment_date=date(2024, 6, 3))


def test_continues_across_month_and_year_end():
    state = StreakState(count=2, last_acknowledgment_date=date(2024, 12, 31))
    assert record_acknowledgment(state, date(2025, 1, 1)).count == 3
    leap = StreakState(count=2, last_acknowledgment_date=date(2024, 2, 29))
    assert record_acknowledgment(leap, date(2024, 3, 1)).count == 3


def test_many_acknowledgments_in_one_day_count_once():
    state = StreakState()
    for _ in range(4):
        state = record_acknowledgment(state, date(2024, 6, 1))
    assert state.count == 1


class TestCurrentStreak:
    def test_empty(self):
        assert current_streak(StreakState(), date(2024, 6, 1)) == 0

    def test_alive_today_and_yesterday(self):
        state = StreakState(count=4, last_acknowledgment_date=date(2024, 6, 1))
        assert current_streak(state, date(2024, 6, 1)) == 4
        assert current_streak(state, date(2024, 6, 2)) == 4

    def test_broken_after_skipped_day(self):
        state = StreakState(count=4, last_acknowledgment_date=date(2024, 6, 1))
        assert current_streak(state, date(2024, 6, 3)) == 0
