"""
Rule resolution for a date (and optionally a time, staff member and unit).

Precedence, highest first, first match wins:

1. blocked date
2. special hours for the exact date
3. staff member's individual schedule for the weekday
4. business hours for the weekday (unit rows before barbershop-wide rows)
5. built-in default: open Monday-Saturday 09:00-18:00, closed Sunday

Invalid outcomes are returned as ``ValidationResult`` values, never raised.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from ...shared.time_utils import day_name, day_of_week, parse_time
from .schedule import DaySchedule, default_day_schedule, staff_day_schedule

logger = logging.getLogger(__name__)

REASON_BLOCKED = "Date is blocked for bookings"
REASON_SPECIAL_CLOSED = "Closed on this date (special hours)"
REASON_STAFF_DAY_OFF = "Staff member does not work on this day"
REASON_CLOSED_WEEKDAY = "Closed on this day of the week"


def reason_outside_hours(start: str, end: str) -> str:
    return f"Outside business hours ({start} - {end})"


def reason_inside_break(break_start: str, break_end: str) -> str:
    return f"Inside break ({break_start} - {break_end})"


@dataclass(frozen=True)
class AvailableHours:
    start: str
    end: str
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @classmethod
    def from_schedule(cls, schedule: DaySchedule) -> "AvailableHours":
        return cls(
            start=schedule.start,
            end=schedule.end,
            break_start=schedule.break_start if schedule.has_break else None,
            break_end=schedule.break_end if schedule.has_break else None,
        )


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    reason: Optional[str] = None
    available_hours: Optional[AvailableHours] = None


@dataclass(frozen=True)
class SpecialHoursEntry:
    special_date: date
    is_open: bool
    schedule: Optional[DaySchedule] = None


@dataclass
class ScheduleSnapshot:
    """
    Everything the resolver needs for one barbershop, loaded up front.

    ``business_hours`` is keyed by day_of_week (0=Sunday) and already holds
    the unit-specific rows when a unit was requested.
    """

    business_hours: dict[int, DaySchedule] = field(default_factory=dict)
    special_hours: dict[date, SpecialHoursEntry] = field(default_factory=dict)
    blocked_dates: set[date] = field(default_factory=set)
    staff_schedules: dict[Any, Optional[Mapping[str, Any]]] = field(default_factory=dict)


def check_time_window(hours: AvailableHours, time: str) -> ValidationResult:
    """Check a time of day against ``[start, end)`` and the ``[break_start, break_end)`` window"""
    minutes = parse_time(time)

    if not parse_time(hours.start) <= minutes < parse_time(hours.end):
        return ValidationResult(
            is_valid=False,
            reason=reason_outside_hours(hours.start, hours.end),
            available_hours=hours,
        )

    if hours.break_start and hours.break_end:
        if parse_time(hours.break_start) <= minutes < parse_time(hours.break_end):
            return ValidationResult(
                is_valid=False,
                reason=reason_inside_break(hours.break_start, hours.break_end),
                available_hours=hours,
            )

    return ValidationResult(is_valid=True, available_hours=hours)


class RuleResolver:
    """Picks the effective schedule for a date and validates times against it"""

    def __init__(self, snapshot: ScheduleSnapshot):
        self.snapshot = snapshot

    def effective_schedule(self, target: date, staff_id=None, unit_id=None) -> tuple[DaySchedule, str]:
        """
        Effective weekday schedule ignoring date overrides.

        Returns the schedule and where it came from: ``staff``, ``business``
        or ``default``.
        """
        weekday = day_name(target)

        if staff_id is not None:
            staff_schedule = staff_day_schedule(
                self.snapshot.staff_schedules.get(staff_id), weekday, unit_id
            )
            if staff_schedule is not None:
                return staff_schedule, "staff"

        business = self.snapshot.business_hours.get(day_of_week(target))
        if business is not None:
            return business, "business"

        return default_day_schedule(weekday), "default"

    def resolve(self, target: date, time: Optional[str] = None, staff_id=None, unit_id=None) -> ValidationResult:
        if target in self.snapshot.blocked_dates:
            return ValidationResult(is_valid=False, reason=REASON_BLOCKED)

        special = self.snapshot.special_hours.get(target)
        if special is not None:
            if not special.is_open or special.schedule is None or not special.schedule.enabled:
                return ValidationResult(is_valid=False, reason=REASON_SPECIAL_CLOSED)
            hours = AvailableHours.from_schedule(special.schedule)
        else:
            schedule, source = self.effective_schedule(target, staff_id, unit_id)
            if not schedule.enabled:
                reason = REASON_STAFF_DAY_OFF if source == "staff" else REASON_CLOSED_WEEKDAY
                return ValidationResult(is_valid=False, reason=reason)
            hours = AvailableHours.from_schedule(schedule)

        if time is None:
            return ValidationResult(is_valid=True, available_hours=hours)

        result = check_time_window(hours, time)
        if not result.is_valid:
            logger.debug(f"{target} {time} rejected: {result.reason}")
        return result
