# File: quest_calendar/processors/progression_ledger.py
"""
XP, level and currency bookkeeping with a per-day XP cap.
"""

import datetime
import math
from decimal import Decimal
from typing import Optional

from quest_calendar.core.config_manager import Config
from quest_calendar.utils.logger import LoggerMixin
from quest_calendar.models import Occurrence, ProgressionState
from quest_calendar.processors.reward_engine import coins_for, xp_for

LEVEL_BASE_XP = Decimal(100)
LEVEL_GROWTH = Decimal("1.14")


def required_xp(level: int) -> int:
    """
    XP needed to advance from ``level`` to the next one.

    Decimal arithmetic keeps the curve exact: 100 * 1.14 is 114, not 113.99...
    """
    level = max(int(level), 1)
    return int(math.floor(LEVEL_BASE_XP * LEVEL_GROWTH ** (level - 1)))


class ProgressionLedger(LoggerMixin):
    """Applies rewards to a ProgressionState in place."""

    def __init__(self, state: Optional[ProgressionState] = None, daily_cap: int = Config.DAILY_XP_CAP):
        self.state = state if state is not None else ProgressionState()
        self.daily_cap = daily_cap

    @staticmethod
    def required_xp(level: int) -> int:
        return required_xp(level)

    @property
    def level_progress(self) -> float:
        """Fraction of the current level earned; not clamped."""
        return self.state.xp / required_xp(self.state.level)

    def add_xp(self, amount: int) -> int:
        """
        Add XP and resolve any level-ups.

        Args:
            amount: XP to add; negative amounts are ignored

        Returns:
            Number of levels gained
        """
        if amount is None or amount <= 0:
            return 0

        self.state.xp += int(amount)
        levels_gained = 0
        while self.state.xp >= required_xp(self.state.level):
            self.state.xp -= required_xp(self.state.level)
            self.state.level += 1
            levels_gained += 1

        if levels_gained:
            self.logger.info(f"Level up! Now level {self.state.level} ({self.state.xp} XP)")
        return levels_gained

    def award_xp(self, occurrence: Occurrence, daily_cap: Optional[int] = None,
                 today: Optional[datetime.date] = None) -> int:
        """
        Award XP for a completed occurrence, respecting the daily cap.

        Args:
            occurrence: Completed occurrence
            daily_cap: Maximum XP per day (default: the ledger's cap)
            today: Award date (default: today in the configured timezone)

        Returns:
            XP actually granted
        """
        cap = self.daily_cap if daily_cap is None else daily_cap
        today = today or datetime.datetime.now(Config.timezone()).date()

        if self.state.last_award_date != today:
            self.state.xp_earned_today = 0

        candidate = xp_for(occurrence)
        grant = min(candidate, cap - self.state.xp_earned_today)
        if grant <= 0:
            self.logger.debug(f"Daily XP cap reached; no XP for '{occurrence.task_name}'")
            return 0

        self.add_xp(grant)
        self.state.xp_earned_today += grant
        self.state.last_award_date = today
        self.logger.debug(f"Awarded {grant} XP for '{occurrence.task_name}' ({self.state.xp_earned_today}/{cap} today)")
        return grant

    def award_coins(self, occurrence: Occurrence) -> int:
        """Award coins for a completed occurrence; coins are uncapped."""
        coins = coins_for(occurrence)
        self.state.currency += coins
        return coins
