"""Time-of-day helpers shared by the availability engine.

Times of day travel as zero-padded ``HH:MM`` strings (24-hour clock), which
sort lexicographically in the same order as chronologically. Arithmetic is
done in minutes since midnight.
"""

import re
from datetime import date

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# day_of_week as stored in business_hours: 0=Sunday .. 6=Saturday
DAY_NAMES = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


def is_valid_time(value: str) -> bool:
    return bool(value) and TIME_PATTERN.match(value) is not None


def parse_time(value: str) -> int:
    """
    Convert ``HH:MM`` to minutes since midnight.

    Raises:
        ValueError: If the value is not a 24-hour ``HH:MM`` string
    """
    # Postgres TIME columns come back as HH:MM:SS
    if value and len(value) == 8 and value[5] == ":":
        value = value[:5]

    match = TIME_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid time format: {value!r}. Expected HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_minutes(minutes: int) -> str:
    """Convert minutes since midnight back to ``HH:MM``"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value):
    """Trim seconds from ``HH:MM:SS`` values, pass ``None`` through"""
    if value is None:
        return None
    return format_minutes(parse_time(value))


def require_positive_duration(duration_minutes: int) -> int:
    if duration_minutes is None or duration_minutes <= 0:
        raise ValueError(f"Duration must be a positive number of minutes, got {duration_minutes!r}")
    return duration_minutes


def day_of_week(target: date) -> int:
    """0=Sunday .. 6=Saturday"""
    return (target.weekday() + 1) % 7


def day_name(target: date) -> str:
    return DAY_NAMES[day_of_week(target)]
