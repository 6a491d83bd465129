"""Provider domain schemas - Pydantic models for validation"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class SessionRules(BaseModel):
    """Defaults used when generating a provider's sessions, in minutes"""

    defaultSessionDuration: int
    defaultBreakDuration: int


class ProviderCreate(BaseModel):
    """Schema for adding a provider to one of the caller's practices"""

    model_config = ConfigDict(extra="forbid")

    practiceId: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=200)
    gender: Optional[Gender] = None
    languages: list[str] = []
    specialties: list[str] = []
    sessionRules: Optional[SessionRules] = None

    @field_validator("sessionRules")
    @classmethod
    def validate_session_rules(cls, v):
        if v is None:
            return v
        if v.defaultSessionDuration <= 0:
            raise ValueError("defaultSessionDuration must be positive")
        if v.defaultBreakDuration < 0:
            raise ValueError("defaultBreakDuration must not be negative")
        return v


class Provider(BaseModel):
    providerId: str
    tenantId: str
    practiceId: str
    name: str
    gender: Optional[str] = None
    languages: list[str] = []
    specialties: list[str] = []
    sessionRules: Optional[SessionRules] = None
    createdAt: str
    updatedAt: str


class ProviderListResponse(BaseModel):
    providers: list[Provider]
    count: int
    practiceId: Optional[str] = None
