"""Data models for contact birthdays, acknowledgment streaks and digests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class ReminderPreference(str, Enum):
    """How far ahead a contact's owner wants to be reminded.

    Values match the strings stored in ``contacts.reminder_type``.
    """

    DUE_MORNING_OF = "Morning of"
    DUE_ONE_DAY_BEFORE = "1 day before"
    DUE_SEVEN_DAYS_BEFORE = "7 days before"
    NONE = "None"

    @classmethod
    def coerce(cls, value: str | ReminderPreference | None) -> ReminderPreference:
        """Map a stored value to a preference, defaulting to ``DUE_MORNING_OF``."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.DUE_MORNING_OF
        for member in cls:
            if value in (member.value, member.name):
                return member
        return cls.DUE_MORNING_OF


class CycleStatus(str, Enum):
    """Status of a birthday within the current calendar year. Never stored."""

    UPCOMING = "upcoming"
    DUE_TODAY = "today"
    MISSED = "missed"
    ACKNOWLEDGED = "acknowledged"


@dataclass
class BirthdayRecord:
    """A contact's recurring birthday."""

    id: str
    user_id: str
    name: str
    day: int
    month: int
    year: int | None = None
    reminder_preference: ReminderPreference = ReminderPreference.DUE_MORNING_OF
    last_acknowledged_year: int | None = None
    relationship: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        self.reminder_preference = ReminderPreference.coerce(self.reminder_preference)


@dataclass(frozen=True)
class StreakState:
    """Consecutive days on which the user acknowledged at least one birthday."""

    count: int = 0
    last_acknowledgment_date: date | None = None


@dataclass
class NotificationUser:
    """A user who opted into birthday digests."""

    id: str
    display_name: str | None = None
    email: str | None = None


@dataclass
class DigestEntry:
    """One contact inside a digest, with its computed countdown."""

    user_id: str
    record_id: str
    name: str
    day: int
    month: int
    year: int | None
    relationship: str | None
    reminder_preference: ReminderPreference
    days_until: int
    turning_age: int | None = None


@dataclass
class Digest:
    """Everything one user is notified about in a single scheduler run."""

    user_id: str
    due_today: list[DigestEntry] = field(default_factory=list)
    due_this_week: list[DigestEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.due_today and not self.due_this_week
