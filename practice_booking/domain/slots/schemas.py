"""Slot domain schemas - Pydantic models for slot search"""

from pydantic import BaseModel


class AvailableSlot(BaseModel):
    slotId: str
    providerId: str
    practiceId: str
    start: str
    end: str
    apptTypeCode: str = "standard"
    available: bool = True


class SlotSearchResponse(BaseModel):
    slots: list[AvailableSlot]
    count: int
    searchParams: dict
