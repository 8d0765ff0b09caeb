"""Availability domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_string


class AvailableHoursResponse(BaseModel):
    start: str
    end: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class ValidationResultResponse(BaseModel):
    """Schema for a date/time validation result"""

    is_valid: bool
    reason: Optional[str] = None
    available_hours: Optional[AvailableHoursResponse] = None


class SlotsResponse(BaseModel):
    date: date
    duration: int
    staff_id: Optional[int] = None
    slots: list[str]


class AvailabilityCheckResponse(BaseModel):
    available: bool
    reason: Optional[str] = None


class BookedIntervalInput(BaseModel):
    time: str
    duration: int = Field(..., gt=0)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_string(v)


class OverlapRequest(BaseModel):
    """Schema for an ad-hoc overlap check against a list of bookings"""

    time: str
    duration: int = Field(..., gt=0)
    booked: list[BookedIntervalInput] = Field(default_factory=list)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_string(v)


class OverlapResponse(BaseModel):
    has_overlap: bool


class ScheduleConflictResponse(BaseModel):
    day: str
    type: str
    message: str
    severity: str


class StaffConflictsResponse(BaseModel):
    staff_id: int
    can_save: bool
    conflicts: list[ScheduleConflictResponse]
