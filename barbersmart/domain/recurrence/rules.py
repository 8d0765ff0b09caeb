"""
Recurring appointment date generation.

A series always starts at the anchor date (index 0). Fixed-interval rules
add whole days; ``monthly`` keeps the anchor's day of month and clamps to
the last day of shorter months (Jan 31 -> Feb 28/29 -> Mar 31).
"""

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel, Field, model_validator

# Hard cap on a series, also applies when the series is bounded by end_date
MAX_OCCURRENCES = 52
COUNT_OPTIONS = [2, 3, 4, 5, 6, 8, 10, 12]


class RecurrenceRule(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    TRIWEEKLY = "triweekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


FIXED_INTERVAL_DAYS = {
    RecurrenceRule.WEEKLY: 7,
    RecurrenceRule.BIWEEKLY: 14,
    RecurrenceRule.TRIWEEKLY: 21,
}


class RecurrenceConfig(BaseModel):
    """Schema for a recurrence rule"""

    rule: RecurrenceRule
    count: int = Field(..., ge=1, le=MAX_OCCURRENCES)
    custom_interval_days: Optional[int] = Field(None, ge=1, le=90)
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def validate_custom_interval(self):
        if self.rule == RecurrenceRule.CUSTOM and self.custom_interval_days is None:
            raise ValueError("custom_interval_days is required for the custom rule")
        if self.rule != RecurrenceRule.CUSTOM and self.custom_interval_days is not None:
            raise ValueError("custom_interval_days is only allowed for the custom rule")
        return self

    def interval_days(self) -> Optional[int]:
        """Days between occurrences, ``None`` for monthly"""
        if self.rule == RecurrenceRule.CUSTOM:
            return self.custom_interval_days
        return FIXED_INTERVAL_DAYS.get(self.rule)


@dataclass(frozen=True)
class GeneratedDate:
    date: date
    index: int

    @property
    def formatted_key(self) -> str:
        return self.date.isoformat()


def occurrence_date(anchor: date, config: RecurrenceConfig, index: int) -> date:
    if config.rule == RecurrenceRule.MONTHLY:
        # Offset from the anchor, not from the previous occurrence, so a clamped
        # month does not drag every later occurrence to an earlier day
        return anchor + relativedelta(months=index)
    return anchor + timedelta(days=config.interval_days() * index)


def generate_recurring_dates(anchor: date, config: RecurrenceConfig) -> list[GeneratedDate]:
    """
    Expand a recurrence rule into an ordered series of dates.

    Without ``end_date`` the series has exactly ``config.count`` entries.
    With ``end_date`` it runs until the next occurrence would pass it,
    capped at ``MAX_OCCURRENCES``.
    """
    limit = MAX_OCCURRENCES if config.end_date else config.count

    dates = []
    for index in range(limit):
        current = occurrence_date(anchor, config, index)
        if config.end_date and current > config.end_date:
            break
        dates.append(GeneratedDate(date=current, index=index))
    return dates


def get_recurrence_label(rule: RecurrenceRule, custom_days: Optional[int] = None) -> str:
    labels = {
        RecurrenceRule.WEEKLY: "Weekly",
        RecurrenceRule.BIWEEKLY: "Every 2 weeks",
        RecurrenceRule.TRIWEEKLY: "Every 3 weeks",
        RecurrenceRule.MONTHLY: "Monthly",
    }
    if rule == RecurrenceRule.CUSTOM:
        return f"Every {custom_days} days"
    return labels.get(rule, "Custom")


def format_recurrence_summary(config: RecurrenceConfig, anchor: date, occurrences: Optional[int] = None) -> str:
    """Pass ``occurrences`` when an end date cut the series to a different length"""
    label = get_recurrence_label(config.rule, config.custom_interval_days)
    count = occurrences if occurrences is not None else config.count
    times = "time" if count == 1 else "times"
    return f"{label}, {count} {times}, starting {anchor:%d/%m/%Y}"


def get_count_duration_label(count: int, rule: RecurrenceRule, custom_days: Optional[int] = None) -> str:
    """Rough span of a series, e.g. ``(3 weeks)`` or ``(2 months)``"""
    if rule == RecurrenceRule.MONTHLY:
        days_per_repetition = 30
    elif rule == RecurrenceRule.CUSTOM:
        days_per_repetition = custom_days or 7
    else:
        days_per_repetition = FIXED_INTERVAL_DAYS.get(rule, 7)

    # The first occurrence is the start, so it adds no span
    total_days = (count - 1) * days_per_repetition
    weeks = round(total_days / 7)
    months = round(total_days / 30)

    if total_days < 7:
        return ""
    if weeks < 4:
        return f"({weeks} {'week' if weeks == 1 else 'weeks'})"
    return f"({months} {'month' if months == 1 else 'months'})"


def get_count_options(rule: RecurrenceRule, custom_days: Optional[int] = None) -> list[dict]:
    options = []
    for count in COUNT_OPTIONS:
        duration = get_count_duration_label(count, rule, custom_days)
        label = f"{count} times {duration}" if duration else f"{count} times"
        options.append({"value": count, "label": label})
    return options


def calculate_total_price(service_price: float, date_count: int) -> float:
    return service_price * date_count
