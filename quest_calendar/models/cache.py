# File: quest_calendar/models/cache.py

import datetime
from dataclasses import dataclass
from typing import List
from .occurrence import Occurrence


def cache_key(start: datetime.date, end: datetime.date) -> str:
    """Canonical day-granularity key for a date range."""
    return f"{start:%Y-%m-%d}_{end:%Y-%m-%d}"


@dataclass
class CacheEntry:
    """Materialized occurrences for one date range."""
    key: str
    occurrences: List[Occurrence]
    created_at: float  # monotonic seconds

    def is_live(self, now: float, ttl_seconds: float) -> bool:
        return now - self.created_at < ttl_seconds
