"""Recurrence domain schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_string
from .rules import RecurrenceConfig


class RecurringPreviewRequest(BaseModel):
    """Schema for previewing a recurring booking before it is created"""

    start_date: date
    time: str
    recurrence: RecurrenceConfig
    duration: int = Field(30, gt=0, le=600)
    staff_id: Optional[int] = None
    unit_id: Optional[int] = None
    service_price: Optional[float] = Field(None, ge=0)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_string(v)


class PreviewDate(BaseModel):
    date: date
    index: int
    available: bool
    reason: Optional[str] = None


class RecurringPreviewResponse(BaseModel):
    summary: str
    dates: list[PreviewDate]
    available_count: int
    unavailable_count: int
    total_price: Optional[float] = None
