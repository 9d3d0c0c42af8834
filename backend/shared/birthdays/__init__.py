"""Birthday recurrence, status, streak and digest rules."""

from .dates import (
    InvalidBirthdayError,
    days_until,
    is_valid_birthday,
    next_occurrence,
    turning_age,
    visual_sort_date,
)
from .digest import build_digest, select_due_today, select_upcoming_within_week
from .status import AcknowledgmentChange, apply_acknowledgment, classify
from .streak import current_streak, record_acknowledgment

__all__ = [
    "AcknowledgmentChange",
    "InvalidBirthdayError",
    "apply_acknowledgment",
    "build_digest",
    "classify",
    "current_streak",
    "days_until",
    "is_valid_birthday",
    "next_occurrence",
    "record_acknowledgment",
    "select_due_today",
    "select_upcoming_within_week",
    "turning_age",
    "visual_sort_date",
]
