"""Day-keyed acknowledgment streak."""

from __future__ import annotations

from datetime import date, timedelta

from shared.models.birthday import StreakState


def record_acknowledgment(state: StreakState, today: date) -> StreakState:
    """Advance the streak for an acknowledgment made on ``today``.

    At most one increment per day. A skipped day restarts the count at 1,
    since today's acknowledgment is the first day of the new streak.
    """
    last = state.last_acknowledgment_date
    if last == today:
        return state
    if last == today - timedelta(days=1):
        return StreakState(count=state.count + 1, last_acknowledgment_date=today)
    return StreakState(count=1, last_acknowledgment_date=today)


def current_streak(state: StreakState, today: date) -> int:
    """Streak length as displayed on ``today`` (0 once a day has been skipped)."""
    last = state.last_acknowledgment_date
    if last is None:
        return 0
    if last >= today - timedelta(days=1):
        return state.count
    return 0
