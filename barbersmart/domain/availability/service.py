"""Availability service - Loads schedule sources and runs the rule engine"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import Barbershop
from ...shared.time_utils import require_positive_duration
from .conflicts import ScheduleConflict, find_schedule_conflicts
from .repository import AvailabilityRepository
from .resolver import RuleResolver, ScheduleSnapshot, SpecialHoursEntry, ValidationResult
from .schedule import business_hours_to_day_schedule, normalize_day_schedule
from .slots import BookedInterval, bookable_slots, generate_slots, has_overlap

logger = logging.getLogger(__name__)

REASON_ALREADY_BOOKED = "Time slot already booked"


@dataclass(frozen=True)
class AvailabilityCheck:
    available: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class OpenSlot:
    date: date
    time: str


class AvailabilityService:
    """Service layer for availability checks"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def get_barbershop(self, barbershop_id: int) -> Barbershop:
        barbershop = self.repo.get_barbershop(self.db, barbershop_id)
        if not barbershop:
            raise HTTPException(status_code=404, detail="Barbershop not found")
        return barbershop

    def require_staff(self, barbershop_id: int, staff_id: Optional[int]) -> None:
        if staff_id is None:
            return
        if not self.repo.get_staff(self.db, barbershop_id, staff_id):
            raise HTTPException(status_code=404, detail="Staff member not found")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_snapshot(
        self,
        barbershop_id: int,
        unit_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ScheduleSnapshot:
        """Read every schedule source for a barbershop. Database errors propagate."""
        snapshot = ScheduleSnapshot()

        # Barbershop-wide rows first so unit rows overwrite them
        rows = self.repo.get_business_hours(self.db, barbershop_id, unit_id)
        for row in sorted(rows, key=lambda r: r.unit_id is not None):
            snapshot.business_hours[row.day_of_week] = business_hours_to_day_schedule(row)

        for row in self.repo.get_special_hours(self.db, barbershop_id, start_date, end_date):
            schedule = None
            if row.is_open:
                schedule = normalize_day_schedule(
                    {
                        "is_open": True,
                        "open_time": row.open_time,
                        "close_time": row.close_time,
                        "break_start": row.break_start,
                        "break_end": row.break_end,
                    }
                )
            snapshot.special_hours[row.special_date] = SpecialHoursEntry(
                special_date=row.special_date, is_open=row.is_open, schedule=schedule
            )

        snapshot.blocked_dates = set(
            self.repo.get_blocked_dates(self.db, barbershop_id, start_date, end_date)
        )
        snapshot.staff_schedules = self.repo.get_staff_schedules(self.db, barbershop_id)

        logger.debug(
            f"Loaded schedule snapshot for barbershop {barbershop_id}: "
            f"{len(snapshot.business_hours)} weekdays, {len(snapshot.special_hours)} special, "
            f"{len(snapshot.blocked_dates)} blocked, {len(snapshot.staff_schedules)} staff"
        )
        return snapshot

    def get_resolver(self, barbershop_id: int, unit_id: Optional[int] = None, **date_range) -> Optional[RuleResolver]:
        """Resolver for a barbershop, or ``None`` if the schedule sources could not be read"""
        try:
            return RuleResolver(self.load_snapshot(barbershop_id, unit_id, **date_range))
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load schedule data for barbershop {barbershop_id}: {e}")
            return None

    def get_booked_intervals(
        self, barbershop_id: int, staff_id: Optional[int], dates: Iterable[date]
    ) -> dict[date, list[BookedInterval]]:
        """Booked intervals per date. Database errors propagate."""
        booked = defaultdict(list)
        for appointment in self.repo.get_booked_appointments(self.db, barbershop_id, staff_id, dates):
            try:
                booked[appointment.date].append(
                    BookedInterval.from_appointment(appointment.time, appointment.duration)
                )
            except ValueError:
                logger.warning(f"⚠️ Appointment {appointment.id} has unreadable time {appointment.time!r}")
        return booked

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def validate(
        self,
        barbershop_id: int,
        target: date,
        time: Optional[str] = None,
        staff_id: Optional[int] = None,
        unit_id: Optional[int] = None,
    ) -> ValidationResult:
        resolver = self.get_resolver(barbershop_id, unit_id, start_date=target, end_date=target)
        if resolver is None:
            return ValidationResult(is_valid=False)
        return resolver.resolve(target, time, staff_id=staff_id, unit_id=unit_id)

    def get_slots(
        self,
        barbershop_id: int,
        target: date,
        duration_minutes: int,
        staff_id: Optional[int] = None,
        unit_id: Optional[int] = None,
        exclude_booked: bool = True,
    ) -> list[str]:
        """Slots for a day; booked ones removed unless ``exclude_booked`` is False"""
        require_positive_duration(duration_minutes)
        resolver = self.get_resolver(barbershop_id, unit_id, start_date=target, end_date=target)
        if resolver is None:
            return []

        slots = generate_slots(resolver, target, duration_minutes, staff_id=staff_id, unit_id=unit_id)
        if not exclude_booked or not slots:
            return slots

        try:
            booked = self.get_booked_intervals(barbershop_id, staff_id, [target])
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load appointments for barbershop {barbershop_id}: {e}")
            return []
        return bookable_slots(slots, duration_minutes, booked.get(target, []))

    def check_availability(
        self,
        barbershop_id: int,
        target: date,
        time: str,
        duration_minutes: int,
        staff_id: Optional[int] = None,
        unit_id: Optional[int] = None,
    ) -> AvailabilityCheck:
        """Business rules first, then collisions with existing appointments"""
        validation = self.validate(barbershop_id, target, time, staff_id, unit_id)
        if not validation.is_valid:
            return AvailabilityCheck(available=False, reason=validation.reason)

        try:
            booked = self.get_booked_intervals(barbershop_id, staff_id, [target])
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load appointments for barbershop {barbershop_id}: {e}")
            return AvailabilityCheck(available=False)

        if has_overlap(time, duration_minutes, booked.get(target, [])):
            return AvailabilityCheck(available=False, reason=REASON_ALREADY_BOOKED)
        return AvailabilityCheck(available=True)

    def build_availability_checker(
        self,
        barbershop_id: int,
        dates: list[date],
        duration_minutes: int,
        staff_id: Optional[int] = None,
        unit_id: Optional[int] = None,
    ):
        """
        Async ``(date, time) -> AvailabilityCheck`` callable for a known set of dates.

        Schedule sources and bookings for the whole range are read once here,
        so the per-date checks never touch the session concurrently.
        """
        require_positive_duration(duration_minutes)
        start_date, end_date = (min(dates), max(dates)) if dates else (None, None)
        snapshot = self.load_snapshot(barbershop_id, unit_id, start_date=start_date, end_date=end_date)
        resolver = RuleResolver(snapshot)
        booked = self.get_booked_intervals(barbershop_id, staff_id, dates)

        async def check(target: date, time: str) -> AvailabilityCheck:
            validation = resolver.resolve(target, time, staff_id=staff_id, unit_id=unit_id)
            if not validation.is_valid:
                return AvailabilityCheck(available=False, reason=validation.reason)
            if has_overlap(time, duration_minutes, booked.get(target, [])):
                return AvailabilityCheck(available=False, reason=REASON_ALREADY_BOOKED)
            return AvailabilityCheck(available=True)

        return check

    def find_next_open_slots(
        self,
        barbershop_id: int,
        staff_id: Optional[int],
        duration_minutes: int,
        today: date,
        max_slots: int = 3,
        days_to_search: int = 7,
        unit_id: Optional[int] = None,
    ) -> list[OpenSlot]:
        """Earliest bookable slots, searching from tomorrow for ``days_to_search`` days"""
        require_positive_duration(duration_minutes)
        dates = [today + timedelta(days=offset) for offset in range(1, days_to_search + 1)]
        if not dates or max_slots <= 0:
            return []

        try:
            resolver = RuleResolver(
                self.load_snapshot(barbershop_id, unit_id, start_date=dates[0], end_date=dates[-1])
            )
            booked = self.get_booked_intervals(barbershop_id, staff_id, dates)
        except SQLAlchemyError as e:
            logger.error(f"❌ Failed to load availability for barbershop {barbershop_id}: {e}")
            return []

        results = []
        for target in dates:
            slots = generate_slots(resolver, target, duration_minutes, staff_id=staff_id, unit_id=unit_id)
            for slot in bookable_slots(slots, duration_minutes, booked.get(target, [])):
                results.append(OpenSlot(date=target, time=slot))
                if len(results) >= max_slots:
                    return results
        return results

    def find_staff_conflicts(self, barbershop_id: int, staff_id: int) -> list[ScheduleConflict]:
        staff = self.repo.get_staff(self.db, barbershop_id, staff_id)
        if not staff:
            raise HTTPException(status_code=404, detail="Staff member not found")

        snapshot = self.load_snapshot(barbershop_id)
        return find_schedule_conflicts(staff.schedule, snapshot.business_hours)
