"""Slot generation and overlap checks"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from ...config import SLOT_STEP_MINUTES
from ...shared.time_utils import format_minutes, parse_time, require_positive_duration
from .resolver import AvailableHours, RuleResolver


@dataclass(frozen=True)
class BookedInterval:
    """An existing appointment, in minutes since midnight"""

    start_minutes: int
    duration_minutes: int

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes

    @classmethod
    def from_appointment(cls, time: str, duration: Optional[int], default_duration: int = 30) -> "BookedInterval":
        return cls(start_minutes=parse_time(time), duration_minutes=duration or default_duration)


def _to_minutes(value: Union[str, int]) -> int:
    return value if isinstance(value, int) else parse_time(value)


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """Half-open interval intersection; touching endpoints do not overlap"""
    return a_start < b_end and a_end > b_start


def has_overlap(candidate_start: Union[str, int], duration_minutes: int, booked: Iterable[BookedInterval]) -> bool:
    require_positive_duration(duration_minutes)
    start = _to_minutes(candidate_start)
    end = start + duration_minutes

    for interval in booked:
        if intervals_overlap(start, end, interval.start_minutes, interval.end_minutes):
            return True
    return False


def slots_for_hours(hours: AvailableHours, duration_minutes: int, step_minutes: int = SLOT_STEP_MINUTES) -> list[str]:
    """
    Enumerate slot start times across an open window.

    Starts sit on a fixed grid from opening time regardless of the service
    duration. A slot is kept only if the whole service fits before closing
    and does not intersect the break.
    """
    require_positive_duration(duration_minutes)
    require_positive_duration(step_minutes)

    start = parse_time(hours.start)
    end = parse_time(hours.end)
    break_window = None
    if hours.break_start and hours.break_end:
        break_window = (parse_time(hours.break_start), parse_time(hours.break_end))

    slots = []
    for slot_start in range(start, end, step_minutes):
        slot_end = slot_start + duration_minutes
        if slot_end > end:
            continue
        if break_window and intervals_overlap(slot_start, slot_end, *break_window):
            continue
        slots.append(format_minutes(slot_start))
    return slots


def generate_slots(
    resolver: RuleResolver,
    target: date,
    duration_minutes: int,
    staff_id=None,
    unit_id=None,
    step_minutes: int = SLOT_STEP_MINUTES,
) -> list[str]:
    """All slots for a day, or an empty list when the day is closed"""
    require_positive_duration(duration_minutes)
    validation = resolver.resolve(target, staff_id=staff_id, unit_id=unit_id)
    if not validation.is_valid or validation.available_hours is None:
        return []
    return slots_for_hours(validation.available_hours, duration_minutes, step_minutes)


def bookable_slots(slots: Iterable[str], duration_minutes: int, booked: Iterable[BookedInterval]) -> list[str]:
    """Drop slots that collide with existing appointments"""
    booked = list(booked)
    return [slot for slot in slots if not has_overlap(slot, duration_minutes, booked)]
