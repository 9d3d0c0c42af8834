"""Shared data models for the birthday reminder backend."""

from .birthday import (
    BirthdayRecord,
    CycleStatus,
    Digest,
    DigestEntry,
    NotificationUser,
    ReminderPreference,
    StreakState,
)

__all__ = [
    "BirthdayRecord",
    "CycleStatus",
    "Digest",
    "DigestEntry",
    "NotificationUser",
    "ReminderPreference",
    "StreakState",
]
