"""Practice domain schemas - Pydantic models for validation"""

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

HH_MM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class Address(BaseModel):
    line1: str
    suburb: str
    state: str
    postcode: str
    country: str = "AU"


class Geo(BaseModel):
    lat: float
    lng: float


class OpeningHours(BaseModel):
    dayOfWeek: int
    openTime: str
    closeTime: str


class PracticeCreate(BaseModel):
    """Schema for registering a practice under the caller's tenant"""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1, max_length=200)
    abn: Optional[str] = None
    address: Address
    geo: Optional[Geo] = None
    services: list[str] = []
    hours: list[OpeningHours] = []
    billingPolicy: Optional[str] = None

    @field_validator("address")
    @classmethod
    def validate_postcode(cls, v):
        if not v.postcode.strip():
            raise ValueError("Postcode is required")
        return v

    @field_validator("hours")
    @classmethod
    def validate_hours(cls, v):
        for entry in v:
            if not 0 <= entry.dayOfWeek <= 6:
                raise ValueError("dayOfWeek must be between 0 (Sunday) and 6")
            if not HH_MM.match(entry.openTime) or not HH_MM.match(entry.closeTime):
                raise ValueError("Opening hours must be formatted HH:MM")
            if entry.closeTime <= entry.openTime:
                raise ValueError("closeTime must be after openTime")
        return v


class Practice(BaseModel):
    practiceId: str
    tenantId: str
    name: str
    abn: Optional[str] = None
    address: Address
    geo: Optional[Geo] = None
    services: list[str] = []
    hours: list[OpeningHours] = []
    billingPolicy: Optional[str] = None
    createdAt: str
    updatedAt: str
