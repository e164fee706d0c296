# File: quest_calendar/processors/calendar_view.py
"""
Date-range and title helpers for day/week/month calendar views.
"""

import calendar
import datetime
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from quest_calendar.core.config_manager import Config

DateRange = Tuple[datetime.date, datetime.date]


class CalendarScope(Enum):
    """Calendar view granularity."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class CalendarDay:
    """One cell in a week or month grid."""
    date: datetime.date
    in_current_month: bool


def day_range(day: datetime.date) -> DateRange:
    """Half-open range covering ``day``."""
    return day, day + datetime.timedelta(days=1)


def week_range(day: datetime.date, first_weekday: int = Config.FIRST_WEEKDAY) -> DateRange:
    """Half-open range of the week containing ``day``."""
    offset = (day.weekday() - first_weekday) % 7
    start = day - datetime.timedelta(days=offset)
    return start, start + datetime.timedelta(days=7)


def month_range(day: datetime.date) -> DateRange:
    """Half-open range of the month containing ``day``."""
    start = day.replace(day=1)
    days_in_month = calendar.monthrange(day.year, day.month)[1]
    return start, start + datetime.timedelta(days=days_in_month)


def range_for(scope: CalendarScope, day: datetime.date, first_weekday: int = Config.FIRST_WEEKDAY) -> DateRange:
    if scope is CalendarScope.DAY:
        return day_range(day)
    if scope is CalendarScope.WEEK:
        return week_range(day, first_weekday)
    return month_range(day)


def common_ranges(today: datetime.date, first_weekday: int = Config.FIRST_WEEKDAY) -> List[DateRange]:
    """Current week, next week, current month and next month."""
    this_week = week_range(today, first_weekday)
    this_month = month_range(today)
    return [
        this_week,
        week_range(this_week[1], first_weekday),
        this_month,
        month_range(this_month[1]),
    ]


def step(scope: CalendarScope, day: datetime.date, direction: int = 1) -> datetime.date:
    """Move one scope unit forward (direction=1) or backward (direction=-1)."""
    if scope is CalendarScope.DAY:
        return day + datetime.timedelta(days=direction)
    if scope is CalendarScope.WEEK:
        return day + datetime.timedelta(weeks=direction)
    month_index = day.year * 12 + (day.month - 1) + direction
    year, month = divmod(month_index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return datetime.date(year, month + 1, min(day.day, last_day))


def current_title(scope: CalendarScope, day: datetime.date, first_weekday: int = Config.FIRST_WEEKDAY) -> str:
    """
    Header text for a calendar view.

    Examples:
        >>> current_title(CalendarScope.DAY, datetime.date(2026, 10, 19))
        'Monday 19 October'
        >>> current_title(CalendarScope.MONTH, datetime.date(2026, 10, 19))
        'October 2026'
    """
    if scope is CalendarScope.DAY:
        return f"{day:%A} {day.day} {day:%B}"

    if scope is CalendarScope.WEEK:
        start, end = week_range(day, first_weekday)
        last = end - datetime.timedelta(days=1)
        if (start.year, start.month) == (last.year, last.month):
            return f"{start:%B}"
        return f"{start:%b} - {last:%b}"

    return f"{day:%B} {day.year}"


def weekday_labels(first_weekday: int = Config.FIRST_WEEKDAY) -> List[str]:
    """Short weekday names starting at ``first_weekday``."""
    names = list(calendar.day_abbr)
    return names[first_weekday:] + names[:first_weekday]


def week_days(day: datetime.date, first_weekday: int = Config.FIRST_WEEKDAY) -> List[CalendarDay]:
    start, _ = week_range(day, first_weekday)
    return [CalendarDay(start + datetime.timedelta(days=i), True) for i in range(7)]


def month_days(day: datetime.date, first_weekday: int = Config.FIRST_WEEKDAY) -> List[CalendarDay]:
    """Whole weeks covering the month of ``day``, flagging days outside it."""
    month_start, month_end = month_range(day)
    grid_start, _ = week_range(month_start, first_weekday)
    _, grid_end = week_range(month_end - datetime.timedelta(days=1), first_weekday)

    days: List[CalendarDay] = []
    current = grid_start
    while current < grid_end:
        days.append(CalendarDay(current, current.month == day.month and current.year == day.year))
        current += datetime.timedelta(days=1)
    return days
