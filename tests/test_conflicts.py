from barbersmart.domain.availability.conflicts import find_schedule_conflicts
from barbersmart.domain.availability.schedule import DaySchedule

BUSINESS_HOURS = {
    0: DaySchedule(False),
    1: DaySchedule(True, "09:00", "18:00"),
    2: DaySchedule(True, "09:00", "18:00"),
    6: DaySchedule(True, "09:00", "13:00"),
}


def test_no_schedule_no_conflicts():
    assert find_schedule_conflicts(None, BUSINESS_HOURS) == []


def test_schedule_inside_business_hours():
    schedule = {"monday": {"enabled": True, "start": "09:00", "end": "18:00"}}
    assert find_schedule_conflicts(schedule, BUSINESS_HOURS) == []


def test_working_on_closed_day():
    conflicts = find_schedule_conflicts({"sunday": {"enabled": True, "start": "09:00", "end": "12:00"}}, BUSINESS_HOURS)
    assert [(c.day, c.type) for c in conflicts] == [("sunday", "closed_day")]


def test_start_and_end_outside_hours():
    schedule = {"saturday": {"enabled": True, "start": "08:00", "end": "15:00"}}
    conflicts = find_schedule_conflicts(schedule, BUSINESS_HOURS)
    assert [c.type for c in conflicts] == ["outside_hours", "outside_hours"]
    assert "08:00" in conflicts[0].message
    assert "15:00" in conflicts[1].message
    assert all(c.severity == "error" for c in conflicts)


def test_days_off_are_ignored():
    schedule = {"sunday": {"enabled": False}, "tuesday": {"enabled": True, "start": "10:00", "end": "17:00"}}
    assert find_schedule_conflicts(schedule, BUSINESS_HOURS) == []


def test_missing_business_day_uses_default_week():
    # No wednesday row: default 09:00-18:00
    schedule = {"wednesday": {"enabled": True, "start": "08:30", "end": "17:00"}}
    conflicts = find_schedule_conflicts(schedule, BUSINESS_HOURS)
    assert len(conflicts) == 1
    assert conflicts[0].day == "wednesday"


def test_conflicts_are_reported_monday_first():
    schedule = {
        "sunday": {"enabled": True, "start": "09:00", "end": "12:00"},
        "monday": {"enabled": True, "start": "07:00", "end": "12:00"},
    }
    assert [c.day for c in find_schedule_conflicts(schedule, BUSINESS_HOURS)] == ["monday", "sunday"]
