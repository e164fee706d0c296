# File: quest_calendar/services/occurrence_cache.py
"""
Occurrence cache for Quest Calendar.

Memoizes materialized occurrences per day-granularity date range, with one
shared validity window, FIFO eviction, and a bounded warm-up worker pool
that pre-computes the ranges a calendar view asks for most.
"""

import datetime
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence, Tuple

import pytz

from quest_calendar.core.config_manager import Config
from quest_calendar.utils.logger import LoggerMixin
from quest_calendar.models import CacheEntry, Occurrence, Task, cache_key, localize
from quest_calendar.models.common import DateLike
from quest_calendar.processors.calendar_view import common_ranges
from quest_calendar.processors.event_materializer import materialize_all

Materializer = Callable[[Sequence[Task], datetime.datetime, datetime.datetime], List[Occurrence]]


class OccurrenceCache(LoggerMixin):
    """Thread-safe memo of materializer output keyed by date range."""

    def __init__(
        self,
        materializer: Optional[Materializer] = None,
        ttl_seconds: float = Config.CACHE_TTL_SECONDS,
        max_entries: int = Config.CACHE_MAX_ENTRIES,
        timezone: Optional[pytz.BaseTzInfo] = None,
        clock: Callable[[], float] = time.monotonic,
        warmup_workers: int = Config.WARMUP_WORKERS,
        first_weekday: int = Config.FIRST_WEEKDAY
    ):
        """
        Initialize the cache.

        Args:
            materializer: Callable(tasks, start, end) -> occurrences
                (default: materialize_all in the cache's timezone)
            ttl_seconds: Validity window shared by every entry
            max_entries: Entry count above which the oldest entries are evicted
            timezone: pytz timezone used for day boundaries
            clock: Monotonic time source, injectable for tests
            warmup_workers: Size of the warm-up worker pool
            first_weekday: First day of the week for warm-up ranges
        """
        self.timezone = timezone or Config.timezone()
        self.materializer = materializer or (
            lambda tasks, start, end: materialize_all(tasks, start, end, self.timezone)
        )
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self.first_weekday = first_weekday
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()
        self._generation = 0
        self._warmup_workers = warmup_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    # ==================== Keys ====================

    def normalize_range(self, range_start: DateLike, range_end: DateLike) -> Tuple[datetime.datetime, datetime.datetime]:
        """Widen a range to local midnights; an end inside a day rounds up."""
        start_local = localize(range_start, self.timezone)
        end_local = localize(range_end, self.timezone)

        start_day = start_local.date()
        end_day = end_local.date()
        if end_local.time() != datetime.time.min:
            end_day += datetime.timedelta(days=1)

        start = self.timezone.localize(datetime.datetime.combine(start_day, datetime.time.min))
        end = self.timezone.localize(datetime.datetime.combine(end_day, datetime.time.min))
        return start, end

    def key_for(self, range_start: DateLike, range_end: DateLike) -> str:
        start, end = self.normalize_range(range_start, range_end)
        return cache_key(start.date(), end.date())

    # ==================== Reads ====================

    def get(self, tasks: Sequence[Task], range_start: DateLike, range_end: DateLike) -> List[Occurrence]:
        """
        Occurrences for ``tasks`` in the given range, cached.

        A live entry is returned as the same list object without invoking
        the materializer.
        """
        start, end = self.normalize_range(range_start, range_end)
        key = cache_key(start.date(), end.date())

        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_live(self._clock(), self.ttl_seconds):
                self.logger.debug(f"Cache hit for {key}")
                return entry.occurrences
            generation = self._generation

        self.logger.debug(f"Cache miss for {key}; materializing {len(tasks)} tasks")
        occurrences = self.materializer(tasks, start, end)

        with self._lock:
            # Results computed before an invalidate are returned but not kept
            if generation == self._generation:
                self._store(key, occurrences)
        return occurrences

    def peek(self, range_start: DateLike, range_end: DateLike) -> Optional[List[Occurrence]]:
        """Live cached occurrences for a range, or None; never materializes."""
        key = self.key_for(range_start, range_end)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_live(self._clock(), self.ttl_seconds):
                return entry.occurrences
        return None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> List[str]:
        """Keys in insertion order (oldest first)."""
        with self._lock:
            return list(self._entries.keys())

    # ==================== Writes ====================

    def _store(self, key: str, occurrences: List[Occurrence]) -> None:
        """Insert an entry and evict the oldest ones. Caller holds the lock."""
        # Re-inserting moves the key to the newest position
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, occurrences=occurrences, created_at=self._clock())

        while len(self._entries) > self.max_entries:
            evicted_key, _ = self._entries.popitem(last=False)
            self.logger.debug(f"Evicted cache entry {evicted_key}")

    def invalidate(self) -> None:
        """Drop every entry; in-flight warm-ups for older task sets are discarded."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._generation += 1
        self.logger.info(f"Occurrence cache invalidated ({count} entries dropped)")

    def purge_expired(self) -> int:
        """Remove entries older than the validity window; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, e in self._entries.items() if not e.is_live(now, self.ttl_seconds)]
            for key in expired:
                del self._entries[key]
        if expired:
            self.logger.debug(f"Purged {len(expired)} expired cache entries")
        return len(expired)

    # ==================== Warm-up ====================

    def _pool(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._warmup_workers,
                thread_name_prefix="occurrence-warmup",
            )
        return self._executor

    def _warm_range(self, tasks: Tuple[Task, ...], start: datetime.datetime,
                    end: datetime.datetime, generation: int) -> bool:
        """Worker body: materialize outside the lock, hand off under it."""
        key = cache_key(start.date(), end.date())
        try:
            occurrences = self.materializer(tasks, start, end)
        except Exception as e:
            self.logger.warning(f"Warm-up failed for {key}: {e}")
            return False

        with self._lock:
            if generation != self._generation:
                self.logger.debug(f"Discarding warm-up for {key}: cache was invalidated")
                return False
            entry = self._entries.get(key)
            if entry is not None and entry.is_live(self._clock(), self.ttl_seconds):
                # A synchronous get already filled it
                return False
            self._store(key, occurrences)
        self.logger.debug(f"Warmed cache entry {key}")
        return True

    def warm_up(self, tasks: Sequence[Task], today: Optional[datetime.date] = None) -> List[Future]:
        """
        Pre-compute current/next week and current/next month in the background.

        Returns immediately with the submitted futures; ranges that already
        have a live entry are skipped.
        """
        today = today or datetime.datetime.now(self.timezone).date()
        snapshot = tuple(tasks)

        with self._lock:
            generation = self._generation

        futures: List[Future] = []
        for range_start, range_end in common_ranges(today, self.first_weekday):
            start, end = self.normalize_range(range_start, range_end)
            if self.peek(start, end) is not None:
                continue
            futures.append(self._pool().submit(self._warm_range, snapshot, start, end, generation))

        self.logger.debug(f"Submitted {len(futures)} warm-up ranges")
        return futures

    def shutdown(self, wait: bool = True) -> None:
        """Stop the warm-up pool."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

