"""Digest dispatch collaborators.

Rendering the digest into an email is the receiver's job; these classes only
hand the digest over.
"""

from __future__ import annotations

import logging
from typing import Protocol

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shared.models.birthday import Digest

logger = logging.getLogger(__name__)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DigestEntryPayload(_CamelModel):
    user_id: str
    record_id: str
    name: str
    day: int
    month: int
    year: int | None = None
    relationship: str | None = None
    reminder_preference: str
    days_until: int
    turning_age: int | None = None


class DigestPayload(_CamelModel):
    """Wire shape: ``{userId, displayName, dueToday: [...], dueThisWeek: [...]}``."""

    user_id: str
    display_name: str | None = None
    due_today: list[DigestEntryPayload]
    due_this_week: list[DigestEntryPayload]

    @classmethod
    def from_digest(cls, digest: Digest, display_name: str | None) -> DigestPayload:
        def entries(items) -> list[DigestEntryPayload]:
            return [
                DigestEntryPayload(
                    user_id=e.user_id,
                    record_id=e.record_id,
                    name=e.name,
                    day=e.day,
                    month=e.month,
                    year=e.year,
                    relationship=e.relationship,
                    reminder_preference=e.reminder_preference.value,
                    days_until=e.days_until,
                    turning_age=e.turning_age,
                )
                for e in items
            ]

        return cls(
            user_id=digest.user_id,
            display_name=display_name,
            due_today=entries(digest.due_today),
            due_this_week=entries(digest.due_this_week),
        )


class Notifier(Protocol):
    async def send(self, digest: Digest, display_name: str | None) -> None: ...

    async def close(self) -> None: ...


class LogNotifier:
    """Logs digests instead of delivering them (no webhook configured)."""

    async def send(self, digest: Digest, display_name: str | None) -> None:
        logger.info(
            f"Digest for {display_name or digest.user_id}: "
            f"{len(digest.due_today)} today, {len(digest.due_this_week)} this week"
        )

    async def close(self) -> None:
        return None


class WebhookNotifier:
    """POSTs each digest as JSON to a webhook. Non-2xx responses raise."""

    def __init__(
        self, url: str, timeout: float = 10.0, client: httpx.AsyncClient | None = None
    ) -> None:
        self.url = url
        # Shared HTTP client, reused for every user in a run
        self._http = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, digest: Digest, display_name: str | None) -> None:
        payload = DigestPayload.from_digest(digest, display_name)
        response = await self._http.post(
            self.url, json=payload.model_dump(mode="json", by_alias=True)
        )
        response.raise_for_status()

    async def close(self) -> None:
        await self._http.aclose()


def build_notifier(webhook_url: str, timeout: float = 10.0) -> Notifier:
    if webhook_url:
        return WebhookNotifier(webhook_url, timeout=timeout)
    logger.warning("NOTIFY_WEBHOOK_URL not set, digests will only be logged")
    return LogNotifier()
