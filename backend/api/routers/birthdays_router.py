"""Birthday list, streak and acknowledgment API routes."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.core.dependencies import get_acknowledgment_service, get_birthday_service, get_today
from api.services import AcknowledgmentService, BirthdayService, RecordNotFoundError
from api.services.birthday_service import describe, streak_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["birthdays"])


# ============================================
# Request / Response Models
# ============================================


class BirthdayResponse(BaseModel):
    id: str
    name: str
    day: int
    month: int
    year: int | None = None
    relationship: str | None = None
    reminder_preference: str
    last_acknowledged_year: int | None = None
    status: str
    next_occurrence: date | None = None
    days_until: int | None = None
    turning_age: int | None = None


class StreakResponse(BaseModel):
    count: int
    last_acknowledgment_date: date | None = None
    current: int


class AcknowledgmentRequest(BaseModel):
    acknowledged: bool


class AcknowledgmentResponse(BaseModel):
    birthday: BirthdayResponse
    streak: StreakResponse
    changed: bool


# ============================================
# Endpoints
# ============================================


@router.get("/users/{user_id}/birthdays", response_model=list[BirthdayResponse])
async def list_birthdays(
    user_id: str,
    today: date = Depends(get_today),
    service: BirthdayService = Depends(get_birthday_service),
) -> list[BirthdayResponse]:
    """A user's contacts with status, countdown and age, in list order."""
    items = await service.list_birthdays(user_id, today)
    return [BirthdayResponse(**item) for item in items]


@router.get("/users/{user_id}/streak", response_model=StreakResponse)
async def get_streak(
    user_id: str,
    today: date = Depends(get_today),
    service: BirthdayService = Depends(get_birthday_service),
) -> StreakResponse:
    streak = await service.get_streak(user_id, today)
    if streak is None:
        raise HTTPException(status_code=404, detail="User not found")
    return StreakResponse(**streak)


@router.post("/birthdays/{record_id}/acknowledgment", response_model=AcknowledgmentResponse)
async def set_acknowledgment(
    record_id: str,
    body: AcknowledgmentRequest,
    today: date = Depends(get_today),
    service: AcknowledgmentService = Depends(get_acknowledgment_service),
) -> AcknowledgmentResponse:
    """Mark (or unmark) a contact as wished this year."""
    try:
        result = await service.set_acknowledged(record_id, body.acknowledged, today)
    except RecordNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e

    return AcknowledgmentResponse(
        birthday=BirthdayResponse(**describe(result.record, today)),
        streak=StreakResponse(**streak_view(result.streak, today)),
        changed=result.changed,
    )
