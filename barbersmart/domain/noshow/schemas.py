"""No-show domain schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_string


class SuggestedSlotSchema(BaseModel):
    date: date
    time: str
    formatted: str = ""

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return validate_time_string(v)


class RescheduleSuggestionResponse(BaseModel):
    appointment_id: int
    client_id: int
    phone: str
    slots: list[SuggestedSlotSchema]
    message: str


class NoShowRunResponse(BaseModel):
    processed: int
    suggested: int
    skipped: int
    suggestions: list[RescheduleSuggestionResponse]
    skip_reasons: dict[int, str] = {}


class DeliveredRequest(BaseModel):
    """Sent by the messaging layer once the reschedule offer reached the client"""

    slots: list[SuggestedSlotSchema] = Field(..., min_length=1)


class DeliveredResponse(BaseModel):
    appointment_id: int
    reschedule_suggested_at: str


class ClientReplyRequest(BaseModel):
    phone: str = Field(..., min_length=8)
    message: str


class ClientReplyResponse(BaseModel):
    matched: bool
    appointment_id: Optional[int] = None
    slot: Optional[SuggestedSlotSchema] = None
