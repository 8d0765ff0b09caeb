from datetime import date

import pytest

from barbersmart.shared.time_utils import (
    day_name,
    day_of_week,
    format_minutes,
    is_valid_time,
    normalize_time,
    parse_time,
    require_positive_duration,
)
from barbersmart.shared.validators import normalize_br_phone, validate_time_string


class TestParseTime:
    def test_minutes_since_midnight(self):
        assert parse_time("00:00") == 0
        assert parse_time("09:30") == 570
        assert parse_time("23:59") == 1439

    def test_seconds_are_dropped(self):
        assert parse_time("09:30:00") == 570

    @pytest.mark.parametrize("value", ["9:30", "24:00", "12:60", "noon", "", None, "12-30"])
    def test_malformed_time_raises(self, value):
        with pytest.raises(ValueError):
            parse_time(value)

    def test_format_round_trip(self):
        assert format_minutes(parse_time("07:05")) == "07:05"

    def test_normalize_passes_none_through(self):
        assert normalize_time(None) is None
        assert normalize_time("18:00:00") == "18:00"


def test_is_valid_time():
    assert is_valid_time("13:45")
    assert not is_valid_time("1:45")
    assert not is_valid_time("")


def test_require_positive_duration():
    assert require_positive_duration(30) == 30
    with pytest.raises(ValueError):
        require_positive_duration(0)
    with pytest.raises(ValueError):
        require_positive_duration(-15)


def test_day_of_week_is_sunday_based():
    assert day_of_week(date(2025, 1, 5)) == 0  # Sunday
    assert day_of_week(date(2025, 1, 6)) == 1  # Monday
    assert day_of_week(date(2025, 1, 11)) == 6  # Saturday
    assert day_name(date(2025, 1, 8)) == "wednesday"


class TestValidators:
    def test_validate_time_string_strips(self):
        assert validate_time_string(" 10:00 ") == "10:00"
        assert validate_time_string(None) is None

    def test_validate_time_string_rejects_garbage(self):
        with pytest.raises(ValueError):
            validate_time_string("25:00")

    @pytest.mark.parametrize(
        "phone", ["(11) 99999-8888", "11999998888", "+55 11 99999-8888", "5511999998888"]
    )
    def test_normalize_br_phone(self, phone):
        assert normalize_br_phone(phone) == "5511999998888"

    def test_normalize_br_phone_without_digits(self):
        with pytest.raises(ValueError):
            normalize_br_phone("call me")
