# File: quest_calendar/processors/event_materializer.py
"""
Event materialization for Quest Calendar.
Expands task recurrence rules into dated occurrences within a bounded window.
"""

import datetime
from typing import Iterable, List, Optional

import pytz
from dateutil.relativedelta import relativedelta

from quest_calendar.core.config_manager import Config
from quest_calendar.utils.logger import setup_logger
from quest_calendar.models import Occurrence, Recurrence, Task, occurrence_id_for
from quest_calendar.models.common import DateLike, localize
from quest_calendar.processors.reward_engine import base_coins, base_xp

logger = setup_logger(__name__)

RECURRENCE_STEPS = {
    Recurrence.DAILY: relativedelta(days=1),
    Recurrence.WEEKLY: relativedelta(weeks=1),
    Recurrence.MONTHLY: relativedelta(months=1),
}


def build_occurrence(task: Task, scheduled_at: datetime.datetime) -> Occurrence:
    """Snapshot the task's reward-relevant fields onto a new occurrence."""
    return Occurrence(
        id=occurrence_id_for(task.id, scheduled_at),
        task_id=task.id,
        task_name=task.name,
        scheduled_at=scheduled_at,
        duration_seconds=task.duration_seconds,
        category=task.category,
        energy=task.energy,
        recurrence=task.recurrence,
        base_xp=base_xp(task.recurrence, task.energy),
        base_coins=base_coins(task.recurrence, task.energy),
        reminder=task.reminder,
    )


def _step(anchor_wall: datetime.datetime, recurrence: Recurrence, count: int,
          tz: pytz.BaseTzInfo) -> datetime.datetime:
    """
    The anchor advanced by ``count`` calendar units, localized.

    Steps are taken from the anchor each time so month-end clamping
    does not drift (Jan 31 -> Feb 28 -> Mar 31).
    """
    unit = RECURRENCE_STEPS[recurrence]
    return tz.normalize(tz.localize(anchor_wall + unit * count))


def _first_step_index(anchor_wall: datetime.datetime, start_wall: datetime.datetime,
                      recurrence: Recurrence) -> int:
    """Lower-bound estimate of the first step index at or after ``start_wall``."""
    if start_wall <= anchor_wall:
        return 0
    if recurrence is Recurrence.DAILY:
        return max((start_wall - anchor_wall).days - 1, 0)
    if recurrence is Recurrence.WEEKLY:
        return max((start_wall - anchor_wall).days // 7 - 1, 0)
    months = (start_wall.year - anchor_wall.year) * 12 + (start_wall.month - anchor_wall.month)
    return max(months - 1, 0)


def materialize(
    task: Task,
    range_start: DateLike,
    range_end: DateLike,
    timezone: Optional[pytz.BaseTzInfo] = None
) -> List[Occurrence]:
    """
    Produce occurrences of one task inside ``[range_start, range_end)``.

    Args:
        task: Task to expand
        range_start: Inclusive start (date = local midnight)
        range_end: Exclusive end (date = local midnight)
        timezone: pytz timezone for wall-clock arithmetic (default: Config)

    Returns:
        Occurrences ordered by scheduled time
    """
    tz = timezone or Config.timezone()
    start = localize(range_start, tz)
    end = localize(range_end, tz)
    anchor = localize(task.anchor, tz)

    if end <= start:
        return []

    if task.recurrence is Recurrence.NONE:
        if start <= anchor < end:
            return [build_occurrence(task, anchor)]
        return []

    if task.recurrence not in RECURRENCE_STEPS:
        logger.warning(f"Unknown recurrence '{task.recurrence}' for task: {task.name}")
        return []

    anchor_wall = anchor.replace(tzinfo=None)
    cursor_floor = max(anchor, start)
    index = _first_step_index(anchor_wall, cursor_floor.replace(tzinfo=None), task.recurrence)

    occurrences: List[Occurrence] = []
    while True:
        try:
            cursor = _step(anchor_wall, task.recurrence, index, tz)
        except (OverflowError, ValueError) as e:
            # Calendar arithmetic ran out; treat as end of range
            logger.debug(f"Stopping materialization of '{task.name}' at step {index}: {e}")
            break

        if cursor >= end:
            break
        if cursor >= cursor_floor:
            occurrences.append(build_occurrence(task, cursor))
        index += 1

    logger.debug(
        f"Materialized {len(occurrences)} occurrences of '{task.name}' "
        f"between {start.date()} and {end.date()}"
    )
    return occurrences


def materialize_all(
    tasks: Iterable[Task],
    range_start: DateLike,
    range_end: DateLike,
    timezone: Optional[pytz.BaseTzInfo] = None
) -> List[Occurrence]:
    """Union of every task's occurrences, sorted by time then task id."""
    occurrences: List[Occurrence] = []
    task_count = 0
    for task in tasks:
        task_count += 1
        occurrences.extend(materialize(task, range_start, range_end, timezone))

    occurrences.sort(key=lambda o: (o.scheduled_at, o.task_id))
    logger.debug(f"Materialized {len(occurrences)} occurrences from {task_count} tasks")
    return occurrences
