# File: quest_calendar/models/progression.py

import datetime
from dataclasses import dataclass
from typing import Optional
from .common import parse_iso_date

@dataclass
class ProgressionState:
    """A user's XP, level and currency, plus the daily cap bookkeeping."""
    xp: int = 0
    level: int = 1
    currency: int = 0
    xp_earned_today: int = 0
    last_award_date: Optional[datetime.date] = None

    def __post_init__(self):
        """Repair values that fall outside their invariants."""
        self.xp = max(int(self.xp), 0)
        self.level = max(int(self.level), 1)
        self.currency = max(int(self.currency), 0)
        self.xp_earned_today = max(int(self.xp_earned_today), 0)

    def earned_on(self, today: datetime.date) -> int:
        """XP earned on ``today``; stale counters read as zero."""
        if self.last_award_date != today:
            return 0
        return self.xp_earned_today

    def to_dict(self) -> dict:
        return {
            'xp': self.xp,
            'level': self.level,
            'currency': self.currency,
            'xp_earned_today': self.xp_earned_today,
            'last_award_date': self.last_award_date.isoformat() if self.last_award_date else None,
        }


def progression_from_dict(data: dict) -> ProgressionState:
    """Create ProgressionState from dictionary, defaulting missing fields."""
    data = data or {}
    return ProgressionState(
        xp=int(data.get('xp', 0)),
        level=int(data.get('level', 1)),
        currency=int(data.get('currency', 0)),
        xp_earned_today=int(data.get('xp_earned_today', 0)),
        last_award_date=parse_iso_date(data.get('last_award_date')),
    )
