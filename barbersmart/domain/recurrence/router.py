"""Recurrence router - Preview of recurring bookings with per-date availability"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from ..availability.router import get_availability_service
from ..availability.service import AvailabilityService
from .prober import ProbeResult, probe_all
from .rules import (
    RecurrenceRule,
    calculate_total_price,
    format_recurrence_summary,
    generate_recurring_dates,
    get_count_options,
)
from .schemas import PreviewDate, RecurringPreviewRequest, RecurringPreviewResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/barbershops/{barbershop_id}/recurrence", tags=["Recurrence"])


@router.get("/count-options")
async def get_recurrence_count_options(barbershop_id: int, rule: RecurrenceRule, custom_days: int = 7):
    """Repetition counts with their approximate span, for the booking form"""
    return get_count_options(rule, custom_days)


@router.post("/preview", response_model=RecurringPreviewResponse)
async def preview_recurring_booking(
    barbershop_id: int,
    data: RecurringPreviewRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    """
    Expand the recurrence rule and check availability for every date.
    A date that cannot be checked comes back unavailable.
    """
    service.get_barbershop(barbershop_id)
    service.require_staff(barbershop_id, data.staff_id)

    dates = generate_recurring_dates(data.start_date, data.recurrence)
    logger.info(
        f"🔁 Recurring preview for barbershop {barbershop_id}: "
        f"{data.recurrence.rule.value} x{len(dates)} from {data.start_date}"
    )

    try:
        checker = service.build_availability_checker(
            barbershop_id,
            [d.date for d in dates],
            data.duration,
            staff_id=data.staff_id,
            unit_id=data.unit_id,
        )
    except SQLAlchemyError as e:
        logger.error(f"❌ Failed to load availability data for recurring preview: {e}")
        raise HTTPException(status_code=503, detail="Availability is temporarily unavailable") from None

    def log_progress(partial: dict[str, ProbeResult]) -> None:
        done = sum(1 for r in partial.values() if not r.checking)
        logger.debug(f"Recurring preview progress: {done}/{len(partial)}")

    results = await probe_all(dates, data.time, checker, on_progress=log_progress)

    preview = [
        PreviewDate(
            date=d.date,
            index=d.index,
            available=results[d.formatted_key].available,
            reason=results[d.formatted_key].reason,
        )
        for d in dates
    ]
    available_count = sum(1 for p in preview if p.available)

    return RecurringPreviewResponse(
        summary=format_recurrence_summary(data.recurrence, data.start_date, len(dates)),
        dates=preview,
        available_count=available_count,
        unavailable_count=len(preview) - available_count,
        total_price=(
            calculate_total_price(data.service_price, available_count)
            if data.service_price is not None
            else None
        ),
    )
