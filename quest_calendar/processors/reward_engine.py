# File: quest_calendar/processors/reward_engine.py
"""
Reward formulas for Quest Calendar.

Pure functions mapping task/occurrence attributes to XP and coin amounts.
Every input is clamped before use and every output is clamped to its
documented bounds, so none of these functions raise.
"""

import math
from dataclasses import dataclass
from typing import Dict, Optional

from quest_calendar.models import Occurrence, Recurrence
from quest_calendar.models.occurrence import clamp_fraction
from quest_calendar.models.tasks import clamp_energy

XP_BOUNDS = (5, 100)
COIN_BOUNDS = (1, 30)
FINAL_XP_BOUNDS = (0, 100)
FINAL_COIN_BOUNDS = (0, 30)

XP_BLOCK_SECONDS = 15 * 60
COIN_BLOCK_SECONDS = 30 * 60
MAX_DURATION_SECONDS = 366 * 24 * 3600.0

XP_RECURRENCE_BONUS: Dict[Recurrence, int] = {
    Recurrence.NONE: 5,
    Recurrence.DAILY: 0,
    Recurrence.WEEKLY: 10,
    Recurrence.MONTHLY: 20,
}

COIN_RECURRENCE_BONUS: Dict[Recurrence, int] = {
    Recurrence.NONE: 2,
    Recurrence.DAILY: 0,
    Recurrence.WEEKLY: 4,
    Recurrence.MONTHLY: 8,
}


@dataclass(frozen=True)
class Rewards:
    """XP and coins earned for one occurrence."""
    xp: int
    coins: int


def _clamp_int(value: float, low: int, high: int) -> int:
    """Floor ``value`` to an int inside [low, high]; non-finite values hit the bounds."""
    if value != value:
        return low
    if value >= high:
        return high
    if value <= low:
        return low
    return int(math.floor(value))


def _safe_duration(duration_seconds) -> float:
    try:
        duration = float(duration_seconds)
    except (TypeError, ValueError):
        return 0.0
    if duration != duration or duration < 0:
        return 0.0
    # Any duration past a year already saturates both reward bounds
    return min(duration, MAX_DURATION_SECONDS)


def _safe_multiplier(multiplier) -> float:
    try:
        value = float(multiplier)
    except (TypeError, ValueError):
        return 1.0
    if value != value:
        return 0.0
    return value


def base_xp(recurrence: Recurrence, energy: int) -> int:
    """Base XP from recurrence and energy, ignoring duration."""
    raw = 10 + clamp_energy(energy) * 5 + XP_RECURRENCE_BONUS.get(recurrence, 0)
    return _clamp_int(raw, *XP_BOUNDS)


def base_coins(recurrence: Recurrence, energy: int) -> int:
    """Base coins from recurrence and energy, ignoring duration."""
    raw = 2 + clamp_energy(energy) * 2 + COIN_RECURRENCE_BONUS.get(recurrence, 0)
    return _clamp_int(raw, *COIN_BOUNDS)


def final_xp(base: int, duration_seconds: float, completion: float = 1.0, multiplier: float = 1.0) -> int:
    """
    XP for a completed occurrence.

    Adds 5 XP per whole 15-minute block, then scales by the multiplier and
    the completion fraction.

    Args:
        base: Result of base_xp()
        duration_seconds: Occurrence length
        completion: Fraction completed, clamped to [0, 1]
        multiplier: User multiplier (default 1.0)

    Returns:
        XP in [0, 100]
    """
    blocks = int(_safe_duration(duration_seconds) // XP_BLOCK_SECONDS)
    total = (base + blocks * 5) * _safe_multiplier(multiplier) * clamp_fraction(completion)
    return _clamp_int(total, *FINAL_XP_BOUNDS)


def final_coins(base: int, duration_seconds: float, completion: float = 1.0, multiplier: float = 1.0) -> int:
    """Coins for a completed occurrence: 2 per whole 30-minute block, clamped to [0, 30]."""
    blocks = int(_safe_duration(duration_seconds) // COIN_BLOCK_SECONDS)
    total = (base + blocks * 2) * _safe_multiplier(multiplier) * clamp_fraction(completion)
    return _clamp_int(total, *FINAL_COIN_BOUNDS)


def xp_for(occurrence: Occurrence, completion: Optional[float] = None, multiplier: float = 1.0) -> int:
    """XP for an occurrence using its own snapshot; completion defaults to the occurrence's."""
    if completion is None:
        completion = occurrence.completion
    return final_xp(occurrence.base_xp, occurrence.duration_seconds, completion, multiplier)


def coins_for(occurrence: Occurrence, completion: Optional[float] = None, multiplier: float = 1.0) -> int:
    """Coins for an occurrence using its own snapshot; completion defaults to the occurrence's."""
    if completion is None:
        completion = occurrence.completion
    return final_coins(occurrence.base_coins, occurrence.duration_seconds, completion, multiplier)


def rewards_for(occurrence: Occurrence, completion: Optional[float] = None, multiplier: float = 1.0) -> Rewards:
    return Rewards(
        xp=xp_for(occurrence, completion, multiplier),
        coins=coins_for(occurrence, completion, multiplier),
    )
