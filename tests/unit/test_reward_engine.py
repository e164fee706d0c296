# File: tests/unit/test_reward_engine.py
"""
Unit tests for reward formulas.
"""

import pytest
import itertools

from quest_calendar.models import Recurrence
from quest_calendar.processors.event_materializer import build_occurrence
from quest_calendar.processors.reward_engine import (
    Rewards, base_coins, base_xp, coins_for, final_coins, final_xp, rewards_for, xp_for
)

WEIRD_NUMBERS = [-1e9, -5, -0.5, 0, 0.5, 1, 7, 1e12, float('inf'), float('-inf'), float('nan')]


@pytest.mark.unit
class TestBaseRewards:
    """Tests for base XP and coins."""

    @pytest.mark.parametrize("recurrence,energy,expected", [
        (Recurrence.NONE, 3, 30),
        (Recurrence.DAILY, 1, 15),
        (Recurrence.WEEKLY, 5, 45),
        (Recurrence.MONTHLY, 5, 55),
    ])
    def test_base_xp(self, recurrence, energy, expected):
        assert base_xp(recurrence, energy) == expected

    @pytest.mark.parametrize("recurrence,energy,expected", [
        (Recurrence.NONE, 3, 10),
        (Recurrence.DAILY, 1, 4),
        (Recurrence.WEEKLY, 5, 16),
        (Recurrence.MONTHLY, 5, 20),
    ])
    def test_base_coins(self, recurrence, energy, expected):
        assert base_coins(recurrence, energy) == expected

    def test_energy_outside_range_is_clamped(self):
        """Test negative and oversized energy use the nearest valid level."""
        assert base_xp(Recurrence.DAILY, -4) == base_xp(Recurrence.DAILY, 1)
        assert base_coins(Recurrence.DAILY, 42) == base_coins(Recurrence.DAILY, 5)


@pytest.mark.unit
class TestFinalRewards:
    """Tests for duration and completion scaling."""

    def test_final_xp_adds_quarter_hour_blocks(self):
        assert final_xp(30, 1800) == 40
        assert final_xp(30, 1799) == 35
        assert final_xp(30, 0) == 30

    def test_final_coins_adds_half_hour_blocks(self):
        assert final_coins(4, 3600) == 8
        assert final_coins(4, 3599) == 6

    def test_completion_scales_and_floors(self):
        assert final_xp(30, 1800, completion=0.5) == 20
        assert final_xp(30, 1800, completion=0.33) == 13
        assert final_coins(10, 0, completion=0.25) == 2

    def test_multiplier(self):
        assert final_xp(30, 0, multiplier=2.0) == 60
        assert final_coins(10, 0, multiplier=1.5) == 15

    def test_results_saturate(self):
        """Test long durations hit the upper bounds."""
        assert final_xp(100, 10 * 3600) == 100
        assert final_coins(30, 10 * 3600) == 30

    @pytest.mark.parametrize("duration,completion,multiplier", list(itertools.product(WEIRD_NUMBERS, repeat=3))[::7])
    def test_never_raises_and_stays_in_bounds(self, duration, completion, multiplier):
        """Test malformed inputs still produce bounded integers."""
        xp = final_xp(55, duration, completion, multiplier)
        coins = final_coins(20, duration, completion, multiplier)

        assert isinstance(xp, int) and 0 <= xp <= 100
        assert isinstance(coins, int) and 0 <= coins <= 30


@pytest.mark.unit
class TestOccurrenceRewards:
    """Tests for rewards computed from an occurrence snapshot."""

    @pytest.fixture
    def occurrence(self, daily_task, now):
        return build_occurrence(daily_task, now)

    def test_default_completion_is_the_occurrences_own(self, occurrence):
        assert xp_for(occurrence) == 0
        assert xp_for(occurrence.with_completion(1.0)) == 40

    def test_explicit_completion(self, occurrence):
        assert xp_for(occurrence, completion=1.0) == 40
        assert coins_for(occurrence, completion=1.0) == 12

    def test_rewards_for(self, occurrence):
        assert rewards_for(occurrence, completion=0.5) == Rewards(xp=20, coins=6)
