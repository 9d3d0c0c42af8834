"""Cycle status of a birthday and the acknowledgment toggle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date

from shared.models.birthday import BirthdayRecord, CycleStatus

from .dates import is_valid_birthday, occurrence_in_year

logger = logging.getLogger(__name__)


def classify(record: BirthdayRecord, today: date) -> CycleStatus:
    """Derive the record's status for ``today``'s calendar year.

    MISSED only applies while still inside the birthday's own month; a
    birthday from an earlier month is simply upcoming for next year.
    Malformed records are reported as UPCOMING.
    """
    if not is_valid_birthday(record.day, record.month):
        logger.debug(f"Record {record.id} has invalid date {record.day}/{record.month}")
        return CycleStatus.UPCOMING

    if record.last_acknowledged_year == today.year:
        return CycleStatus.ACKNOWLEDGED

    this_year = occurrence_in_year(record.day, record.month, today.year)
    if this_year == today:
        return CycleStatus.DUE_TODAY
    if this_year < today and this_year.month == today.month:
        return CycleStatus.MISSED
    return CycleStatus.UPCOMING


@dataclass(frozen=True)
class AcknowledgmentChange:
    """Result of toggling a record's acknowledgment."""

    record: BirthdayRecord
    previous_year: int | None

    @property
    def changed(self) -> bool:
        return self.record.last_acknowledged_year != self.previous_year

    @property
    def became_acknowledged(self) -> bool:
        """True only on a pending -> acknowledged transition for this year."""
        return self.changed and self.record.last_acknowledged_year is not None


def apply_acknowledgment(
    record: BirthdayRecord, acknowledged: bool, today: date
) -> AcknowledgmentChange:
    """Set or clear ``last_acknowledged_year``. Repeating either call is a no-op."""
    new_year = today.year if acknowledged else None
    return AcknowledgmentChange(
        record=replace(record, last_acknowledged_year=new_year),
        previous_year=record.last_acknowledged_year,
    )
