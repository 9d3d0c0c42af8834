"""Civil-calendar arithmetic for annual birthdays.

Every function takes an explicit ``today`` so results never depend on the
process clock or time zone. Dates are built from integers with
``datetime.date``; nothing here parses or formats date strings.

Leap days: a day that does not exist in the target month is clamped to the
month's last day, so a 29 February birthday occurs on 28 February in common
years.
"""

from __future__ import annotations

import calendar
from datetime import date

# Used to check whether a (day, month) pair exists in any year at all
_LEAP_REFERENCE_YEAR = 2000

MAX_PLAUSIBLE_AGE = 120


class InvalidBirthdayError(ValueError):
    """Raised when a day or month is outside the calendar range."""


def _check_range(day: int, month: int) -> None:
    if not 1 <= month <= 12:
        raise InvalidBirthdayError(f"month out of range: {month}")
    if not 1 <= day <= 31:
        raise InvalidBirthdayError(f"day out of range: {day}")


def is_valid_birthday(day: int, month: int) -> bool:
    """True when ``(day, month)`` exists in at least one calendar year."""
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= calendar.monthrange(_LEAP_REFERENCE_YEAR, month)[1]


def occurrence_in_year(day: int, month: int, year: int) -> date:
    """The birthday's date in ``year``, clamping to the end of the month."""
    _check_range(day, month)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def next_occurrence(day: int, month: int, today: date) -> date:
    """Next date on or after ``today`` that the birthday falls on."""
    candidate = occurrence_in_year(day, month, today.year)
    if candidate < today:
        candidate = occurrence_in_year(day, month, today.year + 1)
    return candidate


def days_until(day: int, month: int, today: date) -> int:
    """Whole calendar days from ``today`` to the next occurrence (0 on the day)."""
    return (next_occurrence(day, month, today) - today).days


def visual_sort_date(day: int, month: int, today: date) -> date:
    """Sort key for birthday lists.

    Same as :func:`next_occurrence`, except a birthday that already passed in
    the current month keeps this year's date so it stays at the top of the
    list as missed.
    """
    candidate = occurrence_in_year(day, month, today.year)
    if candidate < today and candidate.month != today.month:
        return occurrence_in_year(day, month, today.year + 1)
    return candidate


def turning_age(day: int, month: int, year: int | None, today: date) -> int | None:
    """Age the person turns at the next occurrence, or None when unknown.

    Implausible results (negative or above ``MAX_PLAUSIBLE_AGE``) are treated
    as bad data and also return None.
    """
    if year is None:
        return None
    age = next_occurrence(day, month, today).year - year
    if age < 0 or age > MAX_PLAUSIBLE_AGE:
        return None
    return age
