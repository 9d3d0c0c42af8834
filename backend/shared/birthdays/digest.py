"""Select which birthdays go into a user's reminder digests.

Records passed in are expected to belong to a single user.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date

from shared.models.birthday import (
    BirthdayRecord,
    CycleStatus,
    Digest,
    DigestEntry,
    ReminderPreference,
)

from .dates import days_until, is_valid_birthday, turning_age
from .status import classify

logger = logging.getLogger(__name__)

WEEKLY_WINDOW_DAYS = 7

# "7 days before" opts out of the day-of reminder; NONE opts out of everything
_DAY_OF_PREFERENCES = frozenset(
    {ReminderPreference.DUE_MORNING_OF, ReminderPreference.DUE_ONE_DAY_BEFORE}
)


def _with_countdown(
    records: Iterable[BirthdayRecord], today: date
) -> list[tuple[BirthdayRecord, int]]:
    """Pair each usable record with its countdown, skipping malformed ones."""
    pairs: list[tuple[BirthdayRecord, int]] = []
    for record in records:
        if not is_valid_birthday(record.day, record.month):
            logger.warning(
                f"Skipping contact {record.id} (user {record.user_id}): "
                f"invalid birthday {record.day}/{record.month}"
            )
            continue
        pairs.append((record, days_until(record.day, record.month, today)))
    return pairs


def _ordered(pairs: list[tuple[BirthdayRecord, int]]) -> list[BirthdayRecord]:
    pairs.sort(key=lambda pair: (pair[1], pair[0].name.lower(), pair[0].id))
    return [record for record, _ in pairs]


def select_due_today(records: Iterable[BirthdayRecord], today: date) -> list[BirthdayRecord]:
    """Records whose birthday is today and that want a day-of reminder."""
    pairs = [
        (record, countdown)
        for record, countdown in _with_countdown(records, today)
        if record.reminder_preference in _DAY_OF_PREFERENCES
        and classify(record, today) is CycleStatus.DUE_TODAY
    ]
    return _ordered(pairs)


def select_upcoming_within_week(
    records: Iterable[BirthdayRecord], today: date
) -> list[BirthdayRecord]:
    """Records occurring in the next seven days (today included), any active preference."""
    pairs = [
        (record, countdown)
        for record, countdown in _with_countdown(records, today)
        if record.reminder_preference is not ReminderPreference.NONE
        and 0 <= countdown <= WEEKLY_WINDOW_DAYS
    ]
    return _ordered(pairs)


def to_entry(record: BirthdayRecord, today: date) -> DigestEntry:
    return DigestEntry(
        user_id=record.user_id,
        record_id=record.id,
        name=record.name,
        day=record.day,
        month=record.month,
        year=record.year,
        relationship=record.relationship,
        reminder_preference=record.reminder_preference,
        days_until=days_until(record.day, record.month, today),
        turning_age=turning_age(record.day, record.month, record.year, today),
    )


def build_digest(
    user_id: str,
    records: Iterable[BirthdayRecord],
    today: date,
    *,
    include_weekly: bool,
) -> Digest:
    """Build one user's digest; the weekly roundup is only filled when requested."""
    records = list(records)
    digest = Digest(
        user_id=user_id,
        due_today=[to_entry(r, today) for r in select_due_today(records, today)],
    )
    if include_weekly:
        digest.due_this_week = [
            to_entry(r, today) for r in select_upcoming_within_week(records, today)
        ]
    return digest
