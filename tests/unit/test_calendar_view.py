# File: tests/unit/test_calendar_view.py
"""
Unit tests for calendar range and title helpers.
"""

import pytest
import datetime

from quest_calendar.processors.calendar_view import (
    CalendarScope, common_ranges, current_title, day_range, month_days, month_range,
    range_for, step, week_days, week_range, weekday_labels,
)

D = datetime.date


@pytest.mark.unit
class TestRanges:
    """Tests for half-open date ranges."""

    def test_day_range(self, today):
        assert day_range(today) == (today, D(2026, 10, 20))

    def test_week_range_monday_first(self):
        assert week_range(D(2026, 10, 22), 0) == (D(2026, 10, 19), D(2026, 10, 26))
        assert week_range(D(2026, 10, 25), 0) == (D(2026, 10, 19), D(2026, 10, 26))

    def test_week_range_sunday_first(self):
        assert week_range(D(2026, 10, 22), 6) == (D(2026, 10, 18), D(2026, 10, 25))

    def test_month_range(self):
        assert month_range(D(2026, 2, 14)) == (D(2026, 2, 1), D(2026, 3, 1))
        assert month_range(D(2026, 12, 31)) == (D(2026, 12, 1), D(2027, 1, 1))

    def test_range_for(self, today):
        assert range_for(CalendarScope.DAY, today) == day_range(today)
        assert range_for(CalendarScope.WEEK, today, 0) == week_range(today, 0)
        assert range_for(CalendarScope.MONTH, today) == month_range(today)

    def test_common_ranges(self, today):
        assert common_ranges(today, 0) == [
            (D(2026, 10, 19), D(2026, 10, 26)),
            (D(2026, 10, 26), D(2026, 11, 2)),
            (D(2026, 10, 1), D(2026, 11, 1)),
            (D(2026, 11, 1), D(2026, 12, 1)),
        ]

    @pytest.mark.parametrize("scope,day,direction,expected", [
        (CalendarScope.DAY, D(2026, 12, 31), 1, D(2027, 1, 1)),
        (CalendarScope.WEEK, D(2026, 10, 19), -1, D(2026, 10, 12)),
        (CalendarScope.MONTH, D(2026, 1, 31), 1, D(2026, 2, 28)),
        (CalendarScope.MONTH, D(2026, 1, 15), -1, D(2025, 12, 15)),
    ])
    def test_step(self, scope, day, direction, expected):
        assert step(scope, day, direction) == expected


@pytest.mark.unit
class TestTitles:
    """Tests for view headers."""

    def test_day_title(self, today):
        assert current_title(CalendarScope.DAY, today) == "Monday 19 October"

    def test_week_title_single_month(self, today):
        assert current_title(CalendarScope.WEEK, today, 0) == "October"

    def test_week_title_spanning_months(self):
        assert current_title(CalendarScope.WEEK, D(2026, 10, 28), 0) == "Oct - Nov"

    def test_month_title(self, today):
        assert current_title(CalendarScope.MONTH, today) == "October 2026"

    def test_weekday_labels(self):
        assert weekday_labels(0) == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert weekday_labels(6) == ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@pytest.mark.unit
class TestGrids:
    """Tests for week and month grids."""

    def test_week_days(self, today):
        days = week_days(D(2026, 10, 21), 0)

        assert [d.date for d in days] == [today + datetime.timedelta(days=i) for i in range(7)]
        assert all(d.in_current_month for d in days)

    def test_month_days_cover_whole_weeks(self):
        days = month_days(D(2026, 10, 19), 0)

        assert len(days) % 7 == 0
        assert days[0].date == D(2026, 9, 28)
        assert days[-1].date == D(2026, 11, 1)
        assert days[0].in_current_month is False
        assert sum(d.in_current_month for d in days) == 31
