"""
Unit Tests for timetable slot rules
"""
import pytest

from synexa.core.exceptions import ValidationError
from synexa.models.schedule import Schedule, Weekday
from synexa.services.schedule_service import overlaps, validate_range, timetable_order


class TestOverlaps:

    @pytest.mark.parametrize("start,end,expected", [
        ("08:30", "09:00", True),
        ("07:00", "08:01", True),
        ("07:00", "12:00", True),
        ("09:30", "10:00", False),
        ("07:00", "08:00", False),
    ])
    def test_against_morning_slot(self, start, end, expected):
        assert overlaps("08:00", "09:30", start, end) is expected


class TestValidateRange:

    def test_end_must_follow_start(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_range("10:00", "09:59")

        assert exc_info.value.details == {"field": "end_time"}

    def test_single_digit_hour(self):
        validate_range("7:45", "08:30")


class TestTimetableOrder:

    def test_weekday_then_start(self):
        slots = [
            Schedule(weekday=Weekday.SABADO, start_time="08:00", end_time="09:00"),
            Schedule(weekday=Weekday.SEGUNDA, start_time="10:00", end_time="11:00"),
            Schedule(weekday=Weekday.SEGUNDA, start_time="7:30", end_time="08:00"),
        ]

        ordered = [(s.weekday, s.start_time) for s in timetable_order(slots)]

        assert ordered == [(Weekday.SEGUNDA, "7:30"), (Weekday.SEGUNDA, "10:00"), (Weekday.SABADO, "08:00")]
