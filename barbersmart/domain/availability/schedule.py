"""
Schedule normalization.

Business hours rows, staff schedule JSON (single-unit or multi-unit) and
legacy day entries all come in slightly different shapes. Everything here
converts them into one ``DaySchedule`` so the resolver only ever deals with
a single shape.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from ...shared.time_utils import normalize_time, parse_time

logger = logging.getLogger(__name__)

DEFAULT_OPEN_TIME = "09:00"
DEFAULT_CLOSE_TIME = "18:00"
# Used when a barbershop has no business hours row for a weekday
DEFAULT_CLOSED_DAYS = frozenset({"sunday"})


@dataclass(frozen=True)
class DaySchedule:
    """Canonical schedule for one day"""

    enabled: bool
    start: str = DEFAULT_OPEN_TIME
    end: str = DEFAULT_CLOSE_TIME
    break_start: Optional[str] = None
    break_end: Optional[str] = None

    @property
    def has_break(self) -> bool:
        return bool(self.break_start and self.break_end)

    def is_consistent(self) -> bool:
        """start < end, and a break (when present) sits inside the open window"""
        if not self.enabled:
            return True
        start, end = parse_time(self.start), parse_time(self.end)
        if start >= end:
            return False
        if self.has_break:
            break_start, break_end = parse_time(self.break_start), parse_time(self.break_end)
            return start <= break_start < break_end <= end
        return True


CLOSED_DAY = DaySchedule(enabled=False)


def default_day_schedule(day: str) -> DaySchedule:
    """Fallback when neither staff nor business hours are configured"""
    return DaySchedule(enabled=day not in DEFAULT_CLOSED_DAYS)


def _first_present(raw: Mapping[str, Any], *keys, default=None):
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _clean_break(schedule: DaySchedule) -> DaySchedule:
    # A half-configured break (only start or only end) is treated as no break
    if bool(schedule.break_start) != bool(schedule.break_end):
        return replace(schedule, break_start=None, break_end=None)
    return schedule


def normalize_day_schedule(raw: Optional[Mapping[str, Any]]) -> DaySchedule:
    """
    Normalize a raw day entry to ``DaySchedule``.

    Accepts the current format (``enabled``/``start``/``end``) as well as the
    legacy ones (``is_open``/``is_working``, ``open_time``/``close_time``).
    A missing or malformed entry becomes a closed day rather than an error.
    """
    if not raw or not isinstance(raw, Mapping):
        return CLOSED_DAY

    try:
        schedule = DaySchedule(
            enabled=bool(_first_present(raw, "enabled", "is_open", "is_working", default=False)),
            start=normalize_time(_first_present(raw, "start", "open_time", default=DEFAULT_OPEN_TIME)),
            end=normalize_time(_first_present(raw, "end", "close_time", default=DEFAULT_CLOSE_TIME)),
            break_start=normalize_time(_first_present(raw, "break_start", "breakStart")),
            break_end=normalize_time(_first_present(raw, "break_end", "breakEnd")),
        )
    except ValueError as e:
        logger.warning(f"⚠️ Malformed day schedule {raw!r}, treating as closed: {e}")
        return CLOSED_DAY

    schedule = _clean_break(schedule)
    if not schedule.is_consistent():
        logger.warning(f"⚠️ Inconsistent day schedule {raw!r}, treating as closed")
        return CLOSED_DAY
    return schedule


def business_hours_to_day_schedule(row) -> DaySchedule:
    """Convert a ``business_hours`` row (or a dict with the same keys)"""
    if row is None:
        return CLOSED_DAY
    if isinstance(row, Mapping):
        # the business_hours flag is is_open; staff-style aliases must not override it
        raw = {k: v for k, v in row.items() if k not in ("enabled", "is_working")}
    else:
        raw = {
            "is_open": row.is_open,
            "open_time": row.open_time,
            "close_time": row.close_time,
            "break_start": row.break_start,
            "break_end": row.break_end,
        }
    # is_open=False must win even if the row still carries times
    return normalize_day_schedule({**raw, "is_open": bool(raw.get("is_open"))})


def is_multi_unit_schedule(schedule: Any) -> bool:
    return isinstance(schedule, Mapping) and isinstance(schedule.get("units"), Mapping)


def staff_day_schedule(
    schedule: Optional[Mapping[str, Any]], day: str, unit_id=None
) -> Optional[DaySchedule]:
    """
    Look up a staff member's schedule for a weekday name.

    Returns ``None`` when the staff member has no individual schedule at all,
    so the caller falls back to business hours. When the staff member does
    have a schedule:

    - a per-unit override for ``unit_id`` wins if present,
    - otherwise the default per-day entry applies,
    - a missing entry for ``day`` means the staff member is off that day.
    """
    if not schedule or not isinstance(schedule, Mapping):
        return None

    if unit_id is not None and is_multi_unit_schedule(schedule):
        unit_schedule = schedule["units"].get(str(unit_id))
        if isinstance(unit_schedule, Mapping) and unit_schedule.get(day):
            return normalize_day_schedule(unit_schedule[day])

    return normalize_day_schedule(schedule.get(day))
