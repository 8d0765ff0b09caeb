"""Shared validation utilities"""

import re
from typing import Optional

from .time_utils import is_valid_time


def validate_time_string(value: Optional[str]) -> Optional[str]:
    """
    Validate a time of day in 24-hour ``HH:MM`` form.

    Raises:
        ValueError: If the time format is invalid
    """
    if value is None:
        return value

    value = value.strip()
    if not is_valid_time(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return value


def normalize_br_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a Brazilian phone number to digits with the 55 country code.

    Args:
        phone: Phone number string in various formats

    Returns:
        Digits only, prefixed with 55 (e.g. 5511999998888)

    Raises:
        ValueError: If phone number has no digits
    """
    if not phone:
        return phone

    # Remove all non-digit characters
    digits = re.sub(r"\D", "", phone)
    if not digits:
        raise ValueError("Phone number must contain digits")

    if not digits.startswith("55"):
        digits = "55" + digits

    return digits
