# File: tests/unit/test_occurrence_cache.py
"""
Unit tests for the occurrence cache.
"""

import pytest
import datetime
import threading
from concurrent.futures import wait
from unittest.mock import Mock

from quest_calendar.processors.event_materializer import materialize_all
from quest_calendar.services.occurrence_cache import OccurrenceCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self):
        self.value = 1000.0

    def __call__(self):
        return self.value

    def advance(self, seconds: float):
        self.value += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def counting_materializer(tz):
    """Real materializer wrapped so calls can be counted."""
    return Mock(side_effect=lambda tasks, start, end: materialize_all(tasks, start, end, tz))


@pytest.fixture
def cache(counting_materializer, tz, clock):
    cache = OccurrenceCache(
        materializer=counting_materializer,
        ttl_seconds=300,
        max_entries=3,
        timezone=tz,
        clock=clock,
    )
    yield cache
    cache.shutdown()


def _week(today: datetime.date, offset: int = 0):
    start = today + datetime.timedelta(weeks=offset)
    return start, start + datetime.timedelta(days=7)


@pytest.mark.unit
class TestCacheReads:
    """Tests for get/peek behaviour."""

    def test_second_get_is_same_object_without_materializing(self, cache, counting_materializer, sample_tasks, today):
        """Test a live entry is returned as-is and the materializer is not re-run."""
        first = cache.get(sample_tasks, *_week(today))
        second = cache.get(sample_tasks, *_week(today))

        assert second is first
        assert counting_materializer.call_count == 1

    def test_different_range_materializes(self, cache, counting_materializer, sample_tasks, today):
        cache.get(sample_tasks, *_week(today))
        cache.get(sample_tasks, *_week(today, 1))

        assert counting_materializer.call_count == 2
        assert len(cache) == 2

    def test_ranges_normalize_to_days(self, cache, counting_materializer, sample_tasks, today, tz):
        """Test datetimes inside the same days share one entry."""
        start, end = _week(today)
        cache.get(sample_tasks, start, end)
        cache.get(
            sample_tasks,
            tz.localize(datetime.datetime.combine(start, datetime.time(13, 0))),
            tz.localize(datetime.datetime.combine(end - datetime.timedelta(days=1), datetime.time(18, 0))),
        )

        assert counting_materializer.call_count == 1
        assert cache.key_for(start, end) == f"{start:%Y-%m-%d}_{end:%Y-%m-%d}"

    def test_peek_never_materializes(self, cache, counting_materializer, sample_tasks, today):
        assert cache.peek(*_week(today)) is None
        occurrences = cache.get(sample_tasks, *_week(today))

        assert cache.peek(*_week(today)) is occurrences
        assert counting_materializer.call_count == 1


@pytest.mark.unit
class TestCacheExpiry:
    """Tests for TTL, eviction and invalidation."""

    def test_entry_expires_after_ttl(self, cache, counting_materializer, sample_tasks, today, clock):
        first = cache.get(sample_tasks, *_week(today))
        clock.advance(299)
        assert cache.get(sample_tasks, *_week(today)) is first

        clock.advance(2)
        refreshed = cache.get(sample_tasks, *_week(today))

        assert refreshed is not first
        assert refreshed == first
        assert counting_materializer.call_count == 2

    def test_fifo_eviction(self, cache, sample_tasks, today):
        """Test the oldest entry goes first once max_entries is exceeded."""
        keys = []
        for offset in range(4):
            cache.get(sample_tasks, *_week(today, offset))
            keys.append(cache.key_for(*_week(today, offset)))

        assert len(cache) == 3
        assert cache.keys() == keys[1:]

    def test_invalidate_drops_everything(self, cache, counting_materializer, sample_tasks, today):
        cache.get(sample_tasks, *_week(today))
        cache.invalidate()

        assert len(cache) == 0
        cache.get(sample_tasks, *_week(today))
        assert counting_materializer.call_count == 2

    def test_purge_expired(self, cache, sample_tasks, today, clock):
        cache.get(sample_tasks, *_week(today))
        clock.advance(200)
        cache.get(sample_tasks, *_week(today, 1))
        clock.advance(150)

        assert cache.purge_expired() == 1
        assert cache.keys() == [cache.key_for(*_week(today, 1))]


@pytest.mark.unit
class TestWarmUp:
    """Tests for background warm-up."""

    def test_warm_up_fills_common_ranges(self, cache, sample_tasks, today):
        cache.max_entries = 10
        futures = cache.warm_up(sample_tasks, today)
        wait(futures, timeout=10)

        assert len(futures) == 4
        assert all(f.result() for f in futures)
        # Current week: Monday 19 Oct to Monday 26 Oct
        assert cache.peek(today, today + datetime.timedelta(days=7)) is not None
        assert cache.peek(datetime.date(2026, 11, 1), datetime.date(2026, 12, 1)) is not None

    def test_warm_up_skips_live_ranges(self, cache, sample_tasks, today):
        cache.max_entries = 10
        cache.get(sample_tasks, *_week(today))

        futures = cache.warm_up(sample_tasks, today)
        wait(futures, timeout=10)

        assert len(futures) == 3

    def test_warm_up_does_not_block_and_is_discarded_after_invalidate(self, tz, clock, sample_tasks, today):
        """Test warm-up returns immediately and superseded results are dropped."""
        release = threading.Event()

        def slow_materializer(tasks, start, end):
            release.wait(timeout=10)
            return materialize_all(tasks, start, end, tz)

        cache = OccurrenceCache(materializer=slow_materializer, timezone=tz, clock=clock, max_entries=10)
        try:
            futures = cache.warm_up(sample_tasks, today)
            assert not all(f.done() for f in futures)

            cache.invalidate()
            release.set()
            wait(futures, timeout=10)

            assert [f.result() for f in futures] == [False] * 4
            assert len(cache) == 0
        finally:
            release.set()
            cache.shutdown()

    def test_warm_up_failure_is_contained(self, tz, clock, sample_tasks, today):
        cache = OccurrenceCache(materializer=Mock(side_effect=RuntimeError("boom")), timezone=tz, clock=clock)
        try:
            futures = cache.warm_up(sample_tasks, today)
            wait(futures, timeout=10)

            assert [f.result() for f in futures] == [False] * 4
            assert len(cache) == 0
        finally:
            cache.shutdown()
