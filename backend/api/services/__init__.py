"""Services layer - Business logic

Services wrap the shared repositories and birthday rules for the routers and
the reminder script.
"""

from .acknowledgment_service import AcknowledgmentResult, AcknowledgmentService, RecordNotFoundError
from .birthday_service import BirthdayService
from .notifier import LogNotifier, Notifier, WebhookNotifier, build_notifier
from .reminder_service import (
    DispatchOutcome,
    ReminderRunReport,
    ReminderScheduler,
    UserDispatchResult,
    resolve_run_date,
)

__all__ = [
    "AcknowledgmentResult",
    "AcknowledgmentService",
    "BirthdayService",
    "DispatchOutcome",
    "LogNotifier",
    "Notifier",
    "RecordNotFoundError",
    "ReminderRunReport",
    "ReminderScheduler",
    "UserDispatchResult",
    "WebhookNotifier",
    "build_notifier",
    "resolve_run_date",
]
