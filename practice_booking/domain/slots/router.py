"""Slot router - FastAPI endpoints for slot availability"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from .schemas import SlotSearchResponse
from .service import SlotService

router = APIRouter(prefix="/v1/slots", tags=["Slots"])


def get_slot_service(request: Request) -> SlotService:
    """Dependency injection for SlotService"""
    return request.app.state.slot_service


@router.get("", response_model=SlotSearchResponse)
def search_slots(
    practice_id: Optional[str] = Query(None, alias="practiceId"),
    provider_id: Optional[str] = Query(None, alias="providerId"),
    date_from: Optional[str] = Query(None, alias="from", description="YYYY-MM-DD, defaults to today"),
    date_to: Optional[str] = Query(None, alias="to", description="YYYY-MM-DD, defaults to from + 7 days"),
    service: SlotService = Depends(get_slot_service),
):
    """Search available slots for a practice"""
    return service.search_slots(practice_id, provider_id, date_from, date_to)
