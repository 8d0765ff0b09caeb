"""No-show router - Reschedule suggestions for missed appointments"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    ClientReplyRequest,
    ClientReplyResponse,
    DeliveredRequest,
    DeliveredResponse,
    NoShowRunResponse,
    RescheduleSuggestionResponse,
    SuggestedSlotSchema,
)
from .service import NoShowRecoveryService, SuggestedSlot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/barbershops/{barbershop_id}/no-show", tags=["No-show"])


def get_no_show_service(db: Session = Depends(get_db)) -> NoShowRecoveryService:
    """Dependency injection for NoShowRecoveryService"""
    return NoShowRecoveryService(db)


def _slot_schema(slot: SuggestedSlot) -> SuggestedSlotSchema:
    return SuggestedSlotSchema(date=slot.date, time=slot.time, formatted=slot.formatted)


@router.get("/suggestions", response_model=NoShowRunResponse)
async def get_reschedule_suggestions(
    barbershop_id: int,
    today: Optional[date] = Query(None, description="Defaults to today in the business timezone"),
    service: NoShowRecoveryService = Depends(get_no_show_service),
):
    """Reschedule offers for no-shows that have not been contacted yet"""
    service.availability.get_barbershop(barbershop_id)
    result = service.build_suggestions(barbershop_id, today)
    return NoShowRunResponse(
        processed=result.processed,
        suggested=len(result.suggestions),
        skipped=len(result.skipped),
        suggestions=[
            RescheduleSuggestionResponse(
                appointment_id=s.appointment_id,
                client_id=s.client_id,
                phone=s.phone,
                slots=[_slot_schema(slot) for slot in s.slots],
                message=s.message,
            )
            for s in result.suggestions
        ],
        skip_reasons=result.skipped,
    )


@router.post("/appointments/{appointment_id}/delivered", response_model=DeliveredResponse)
async def mark_suggestion_delivered(
    barbershop_id: int,
    appointment_id: int,
    data: DeliveredRequest,
    service: NoShowRecoveryService = Depends(get_no_show_service),
):
    """Mark the offer as sent so the client is not contacted twice"""
    slots = [
        SuggestedSlot(date=s.date, time=s.time, formatted=s.formatted or f"{s.date.isoformat()} {s.time}")
        for s in data.slots
    ]
    appointment = service.mark_delivered(barbershop_id, appointment_id, slots)
    logger.info(f"✅ Reschedule offer delivered for appointment {appointment_id}")
    return DeliveredResponse(
        appointment_id=appointment.id,
        reschedule_suggested_at=appointment.reschedule_suggested_at.isoformat(),
    )


@router.post("/replies", response_model=ClientReplyResponse)
async def resolve_client_reply(
    barbershop_id: int,
    data: ClientReplyRequest,
    service: NoShowRecoveryService = Depends(get_no_show_service),
):
    """Match a client's numeric reply to one of the offered slots"""
    resolved = service.resolve_reply(barbershop_id, data.phone, data.message)
    if resolved is None:
        return ClientReplyResponse(matched=False)

    appointment_id, slot = resolved
    return ClientReplyResponse(matched=True, appointment_id=appointment_id, slot=_slot_schema(slot))
