# File: quest_calendar/models/common.py

import datetime
from enum import Enum
from typing import Optional, Type, TypeVar, Union

import pytz

E = TypeVar("E", bound=Enum)

DateLike = Union[datetime.date, datetime.datetime]


def parse_iso_datetime(date_str: Optional[str]) -> Optional[datetime.datetime]:
    """Robustly parse ISO date strings with 'Z' or offsets."""
    if not date_str:
        return None
    try:
        # fromisoformat only accepts 'Z' from Python 3.11 on
        clean_str = date_str.replace('Z', '+00:00')
        return datetime.datetime.fromisoformat(clean_str)
    except ValueError:
        # Fallback for simple date strings without time
        try:
            return datetime.datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            return None


def parse_iso_date(date_str: Optional[str]) -> Optional[datetime.date]:
    """Parse a YYYY-MM-DD string, returning None when absent or malformed."""
    if not date_str:
        return None
    try:
        return datetime.date.fromisoformat(date_str)
    except ValueError:
        return None


def enum_from_value(enum_cls: Type[E], raw, default: E) -> E:
    """Convert a raw value (or "Enum.NAME" string) to an enum member, with fallback."""
    if isinstance(raw, enum_cls):
        return raw
    if not isinstance(raw, str):
        return default
    for candidate in (raw, raw.strip().lower(), raw.split('.')[-1]):
        try:
            return enum_cls(candidate)
        except ValueError:
            pass
        try:
            return enum_cls[candidate.upper()]
        except KeyError:
            pass
    return default


def localize(value: DateLike, tz: pytz.BaseTzInfo) -> datetime.datetime:
    """
    Return a timezone-aware datetime in ``tz``.

    Dates become local midnight, naive datetimes are treated as local
    wall-clock time, aware datetimes are converted.
    """
    if not isinstance(value, datetime.datetime):
        value = datetime.datetime.combine(value, datetime.time.min)
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return tz.localize(value)
    return value.astimezone(tz)


def start_of_day(value: DateLike, tz: pytz.BaseTzInfo) -> datetime.datetime:
    """Local midnight of the day ``value`` falls on."""
    local = localize(value, tz)
    return tz.localize(datetime.datetime.combine(local.date(), datetime.time.min))
