"""Booking domain schemas - Pydantic models for validation"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from ...shared.validators import parse_iso_datetime, validate_phone


class BookingStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


class PreferredChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    VOICE = "voice"


class Contact(BaseModel):
    """Patient contact snapshot taken at booking time"""

    model_config = ConfigDict(extra="forbid")

    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    preferredChannel: PreferredChannel = PreferredChannel.EMAIL

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return validate_phone(v)


class SlotRef(BaseModel):
    """Immutable reference to the slot being booked"""

    model_config = ConfigDict(extra="forbid")

    slotId: str = Field(..., min_length=1)
    providerId: str = Field(..., min_length=1)
    practiceId: str = Field(..., min_length=1)
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_timestamp(cls, v):
        parse_iso_datetime(v)
        return v

    @model_validator(mode="after")
    def validate_window(self):
        if parse_iso_datetime(self.end) <= parse_iso_datetime(self.start):
            raise ValueError("slotRef.end must be after slotRef.start")
        return self


class BookingCreate(BaseModel):
    """Schema for a public booking request"""

    model_config = ConfigDict(extra="forbid")

    patientId: Optional[str] = None
    contact: Contact
    slotRef: SlotRef
    notes: Optional[str] = Field(None, max_length=1000)


class BookingConfirm(BaseModel):
    """Schema for confirming a booking; the code comes from the create response"""

    confirmationCode: Optional[str] = None


class ContactRecord(BaseModel):
    """Contact as stored; input rules are not re-applied on read"""

    firstName: str
    lastName: str
    email: str
    phone: str
    preferredChannel: Optional[str] = None


class SlotRefRecord(BaseModel):
    slotId: str
    providerId: str
    practiceId: str
    start: str
    end: str


class Booking(BaseModel):
    """Stored booking as exposed to callers (internal fields never included)"""

    bookingId: str
    tenantId: str
    patientId: Optional[str] = None
    contact: ContactRecord
    slotRef: SlotRefRecord
    status: BookingStatus
    confirmationCode: Optional[str] = None
    notes: Optional[str] = None
    createdAt: str
    updatedAt: str


class BookingResponse(Booking):
    message: Optional[str] = None


class BookingListResponse(BaseModel):
    bookings: list[Booking]
    count: int
