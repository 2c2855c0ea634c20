"""Unit tests for the recurring date expander and selection checks."""

from datetime import date, time, timedelta

import pytest

from sportbook.core.exceptions import ValidationException
from sportbook.schemas.availability import TimeSlot
from sportbook.services.booking_dates import (
    PlanDuration,
    expand_booking_dates,
    resolve_duration_days,
    validate_selection,
    weekday_index,
)

MON, WED, FRI = 1, 3, 5
SLOT = TimeSlot(start_time=time(9, 0), end_time=time(10, 0))


class TestWeekdayIndex:
    def test_sunday_is_zero(self):
        assert weekday_index(date(2024, 6, 2)) == 0

    def test_monday_through_saturday(self):
        monday = date(2024, 6, 3)
        assert [weekday_index(monday + timedelta(days=i)) for i in range(6)] == [1, 2, 3, 4, 5, 6]


class TestResolveDuration:
    @pytest.mark.parametrize(
        "duration,expected",
        [
            (PlanDuration.ONE_WEEK, 7),
            (PlanDuration.TWO_WEEKS, 14),
            (PlanDuration.ONE_MONTH, 30),
            (PlanDuration.TWO_MONTHS, 60),
            (PlanDuration.THREE_MONTHS, 90),
        ],
    )
    def test_enum_values(self, duration, expected):
        assert resolve_duration_days(duration) == expected
        assert duration.days == expected

    def test_accepts_string_value_and_day_count(self):
        assert resolve_duration_days("2_weeks") == 14
        assert resolve_duration_days(60) == 60

    @pytest.mark.parametrize("bad", ["6_weeks", 10, 0, True])
    def test_rejects_unknown_durations(self, bad):
        with pytest.raises(ValidationException) as exc_info:
            resolve_duration_days(bad)
        assert exc_info.value.code == "INVALID_DURATION"


class TestExpandBookingDates:
    def test_two_weeks_mon_wed_fri_includes_boundary_day(self):
        dates = expand_booking_dates(date(2024, 6, 3), {MON, WED, FRI}, 14)

        assert dates == [
            date(2024, 6, 3),
            date(2024, 6, 5),
            date(2024, 6, 7),
            date(2024, 6, 10),
            date(2024, 6, 12),
            date(2024, 6, 14),
            date(2024, 6, 17),  # start + 14 days is a Monday
        ]

    def test_boundary_day_excluded_when_weekday_not_selected(self):
        dates = expand_booking_dates(date(2024, 6, 3), {WED, FRI}, 14)
        assert dates[-1] == date(2024, 6, 14)
        assert len(dates) == 4

    @pytest.mark.parametrize("duration_days", [7, 14, 30, 60, 90])
    @pytest.mark.parametrize("weekdays", [{0}, {1, 3, 5}, {2, 4, 6}, set(range(7))])
    def test_every_date_in_range_on_selected_weekday_and_ascending(self, duration_days, weekdays):
        start = date(2024, 2, 27)
        dates = expand_booking_dates(start, weekdays, duration_days)

        assert dates, "every week contains each selected weekday"
        assert all(start <= d <= start + timedelta(days=duration_days) for d in dates)
        assert all(weekday_index(d) in weekdays for d in dates)
        assert all(a < b for a, b in zip(dates, dates[1:]))

    def test_every_day_selected_yields_duration_plus_one_dates(self):
        assert len(expand_booking_dates(date(2024, 1, 1), range(7), 30)) == 31

    def test_same_inputs_give_same_list(self):
        first = expand_booking_dates(date(2024, 6, 3), [FRI, MON], 30)
        second = expand_booking_dates(date(2024, 6, 3), [MON, FRI, MON], 30)
        assert first == second

    def test_empty_weekdays_yield_nothing(self):
        assert expand_booking_dates(date(2024, 6, 3), [], 30) == []


class TestValidateSelection:
    TODAY = date(2024, 6, 1)

    def test_valid_selection_passes(self):
        validate_selection(date(2024, 6, 3), [MON], SLOT, self.TODAY)

    def test_start_today_is_allowed(self):
        validate_selection(self.TODAY, [6], SLOT, self.TODAY)

    @pytest.mark.parametrize(
        "start,weekdays,slot,code",
        [
            (None, [MON], SLOT, "MISSING_START_DATE"),
            (date(2024, 5, 31), [MON], SLOT, "START_DATE_IN_PAST"),
            (date(2024, 6, 3), [], SLOT, "NO_WEEKDAYS_SELECTED"),
            (date(2024, 6, 3), [7], SLOT, "NO_WEEKDAYS_SELECTED"),
            (date(2024, 6, 3), [MON], None, "NO_TIME_SLOT"),
        ],
    )
    def test_rejections(self, start, weekdays, slot, code):
        with pytest.raises(ValidationException) as exc_info:
            validate_selection(start, weekdays, slot, self.TODAY)
        assert exc_info.value.code == code
        assert exc_info.value.kind == "validation"
