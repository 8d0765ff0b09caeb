"""Detect staff working hours that fall outside the barbershop's business hours"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ...shared.time_utils import DAY_NAMES, parse_time
from .schedule import DaySchedule, default_day_schedule, normalize_day_schedule

# Monday first, the order the week is shown in the staff form
WEEK_ORDER = DAY_NAMES[1:] + DAY_NAMES[:1]


@dataclass(frozen=True)
class ScheduleConflict:
    day: str
    type: str  # closed_day, outside_hours
    message: str
    severity: str = "error"


def find_schedule_conflicts(
    staff_schedule: Optional[Mapping[str, Any]],
    business_hours: Mapping[int, DaySchedule],
) -> list[ScheduleConflict]:
    """
    Compare a staff member's default weekly schedule with business hours.

    Days the staff member does not work are skipped. Missing business hours
    for a weekday fall back to the built-in default week.
    """
    if not staff_schedule:
        return []

    conflicts = []
    for day in WEEK_ORDER:
        raw = staff_schedule.get(day)
        if not raw:
            continue

        staff_day = normalize_day_schedule(raw)
        if not staff_day.enabled:
            continue

        business_day = business_hours.get(DAY_NAMES.index(day)) or default_day_schedule(day)
        if not business_day.enabled:
            conflicts.append(
                ScheduleConflict(day=day, type="closed_day", message="Barbershop is closed on this day")
            )
            continue

        if parse_time(staff_day.start) < parse_time(business_day.start):
            conflicts.append(
                ScheduleConflict(
                    day=day,
                    type="outside_hours",
                    message=f"Start ({staff_day.start}) is before the barbershop opens ({business_day.start})",
                )
            )

        if parse_time(staff_day.end) > parse_time(business_day.end):
            conflicts.append(
                ScheduleConflict(
                    day=day,
                    type="outside_hours",
                    message=f"End ({staff_day.end}) is after the barbershop closes ({business_day.end})",
                )
            )

    return conflicts
