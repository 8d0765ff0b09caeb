"""Availability router - FastAPI endpoints for business hours validation and slots"""

import logging
from dataclasses import asdict
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import (
    AvailabilityCheckResponse,
    AvailableHoursResponse,
    OverlapRequest,
    OverlapResponse,
    ScheduleConflictResponse,
    SlotsResponse,
    StaffConflictsResponse,
    ValidationResultResponse,
)
from .service import AvailabilityService
from .slots import BookedInterval, has_overlap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/barbershops/{barbershop_id}/availability", tags=["Availability"])

TIME_QUERY = Query(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$", description="HH:MM")


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("/validate", response_model=ValidationResultResponse)
async def validate_date_time(
    barbershop_id: int,
    date: date,
    time: Optional[str] = TIME_QUERY,
    staff_id: Optional[int] = Query(None),
    unit_id: Optional[int] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Check a date (and optionally a time) against blocked dates, special hours and schedules"""
    service.get_barbershop(barbershop_id)
    service.require_staff(barbershop_id, staff_id)

    result = service.validate(barbershop_id, date, time, staff_id, unit_id)
    return ValidationResultResponse(
        is_valid=result.is_valid,
        reason=result.reason,
        available_hours=(
            AvailableHoursResponse(**asdict(result.available_hours)) if result.available_hours else None
        ),
    )


@router.get("/slots", response_model=SlotsResponse)
async def get_time_slots(
    barbershop_id: int,
    date: date,
    duration: int = Query(30, gt=0, le=600),
    staff_id: Optional[int] = Query(None),
    unit_id: Optional[int] = Query(None),
    exclude_booked: bool = Query(True),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Slot start times for a day, on the fixed slot grid"""
    service.get_barbershop(barbershop_id)
    service.require_staff(barbershop_id, staff_id)

    slots = service.get_slots(barbershop_id, date, duration, staff_id, unit_id, exclude_booked)
    logger.info(f"📅 {len(slots)} slots for barbershop {barbershop_id} on {date} (staff={staff_id})")
    return SlotsResponse(date=date, duration=duration, staff_id=staff_id, slots=slots)


@router.get("/check", response_model=AvailabilityCheckResponse)
async def check_availability(
    barbershop_id: int,
    date: date,
    time: str = Query(..., pattern=r"^([01]\d|2[0-3]):[0-5]\d$"),
    duration: int = Query(30, gt=0, le=600),
    staff_id: Optional[int] = Query(None),
    unit_id: Optional[int] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Business rules plus collisions with existing appointments"""
    service.get_barbershop(barbershop_id)
    service.require_staff(barbershop_id, staff_id)

    check = service.check_availability(barbershop_id, date, time, duration, staff_id, unit_id)
    return AvailabilityCheckResponse(available=check.available, reason=check.reason)


@router.post("/overlap", response_model=OverlapResponse)
async def check_overlap(barbershop_id: int, data: OverlapRequest):
    """Check a candidate booking against a caller-supplied list of bookings"""
    booked = [BookedInterval.from_appointment(b.time, b.duration) for b in data.booked]
    return OverlapResponse(has_overlap=has_overlap(data.time, data.duration, booked))


@router.get("/staff/{staff_id}/conflicts", response_model=StaffConflictsResponse)
async def get_staff_schedule_conflicts(
    barbershop_id: int,
    staff_id: int,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Staff working hours that fall outside business hours"""
    service.get_barbershop(barbershop_id)
    conflicts = service.find_staff_conflicts(barbershop_id, staff_id)
    return StaffConflictsResponse(
        staff_id=staff_id,
        can_save=not any(c.severity == "error" for c in conflicts),
        conflicts=[ScheduleConflictResponse(**asdict(c)) for c in conflicts],
    )
