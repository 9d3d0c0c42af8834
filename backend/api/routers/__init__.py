"""API Routers package

Routers are organized by feature domain.
"""

from . import birthdays_router, cron_router

__all__ = [
    "birthdays_router",
    "cron_router",
]
