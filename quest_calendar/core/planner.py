# File: quest_calendar/core/planner.py
"""
Planner core for Quest Calendar.

State changes are pure functions over an immutable PlannerSnapshot that
return the new snapshot plus a list of effects. The Planner class holds the
current snapshot and runs those effects against the cache, the reminder
scheduler and the blob store, in order.
"""

import datetime
from concurrent.futures import Future
from dataclasses import dataclass, replace
from typing import List, Optional, Sequence, Tuple, Union

import pytz

from quest_calendar.core.config_manager import Config
from quest_calendar.utils.logger import setup_logger
from quest_calendar.models import Occurrence, PlannerSnapshot, Task
from quest_calendar.models.common import DateLike
from quest_calendar.processors import calendar_view
from quest_calendar.processors.calendar_view import CalendarScope
from quest_calendar.processors.event_materializer import materialize_all
from quest_calendar.processors.progression_ledger import ProgressionLedger
from quest_calendar.processors.reminder_scheduler import ReminderPlan, ReminderScheduler
from quest_calendar.services.occurrence_cache import OccurrenceCache
from quest_calendar.services.ports import BlobStore, NotificationService
from quest_calendar.services.storage_service import snapshot_from_blob, snapshot_to_blob

logger = setup_logger(__name__)


# ==================== Effects ====================

@dataclass(frozen=True)
class InvalidateCache:
    pass


@dataclass(frozen=True)
class SyncReminders:
    """Reconcile reminders between two versions of the task catalog."""
    previous_tasks: Tuple[Task, ...]
    current_tasks: Tuple[Task, ...]


@dataclass(frozen=True)
class CancelTaskReminders:
    task_id: str


@dataclass(frozen=True)
class SaveSnapshot:
    pass


Effect = Union[InvalidateCache, SyncReminders, CancelTaskReminders, SaveSnapshot]


@dataclass(frozen=True)
class CompletionResult:
    """Outcome of completing one occurrence."""
    occurrence: Occurrence
    xp: int
    coins: int
    levels_gained: int


# ==================== Pure updates ====================

def _catalog_changed(previous: PlannerSnapshot, current: PlannerSnapshot) -> List[Effect]:
    return [
        InvalidateCache(),
        SyncReminders(previous.tasks, current.tasks),
        SaveSnapshot(),
    ]


def add_task(snapshot: PlannerSnapshot, task: Task) -> Tuple[PlannerSnapshot, List[Effect]]:
    """Append a task to the catalog."""
    if snapshot.find_task(task.id) is not None:
        raise ValueError(f"Task {task.id} already exists")
    new_snapshot = replace(snapshot, tasks=snapshot.tasks + (task,))
    return new_snapshot, _catalog_changed(snapshot, new_snapshot)


def update_task(snapshot: PlannerSnapshot, task_id: str, **changes) -> Tuple[PlannerSnapshot, List[Effect]]:
    """
    Replace fields of one task.

    Args:
        snapshot: Current state
        task_id: Task to edit
        **changes: Task fields to replace (the id cannot change)

    Returns:
        (new snapshot, effects)

    Raises:
        KeyError: Unknown task id
    """
    task = snapshot.find_task(task_id)
    if task is None:
        raise KeyError(task_id)
    if 'id' in changes and changes['id'] != task_id:
        raise ValueError("A task's id cannot be changed")

    updated = replace(task, **changes)
    tasks = tuple(updated if t.id == task_id else t for t in snapshot.tasks)
    new_snapshot = replace(snapshot, tasks=tasks)
    return new_snapshot, _catalog_changed(snapshot, new_snapshot)


def remove_task(snapshot: PlannerSnapshot, task_id: str) -> Tuple[PlannerSnapshot, List[Effect]]:
    """Drop a task; its occurrences and reminders go with it."""
    if snapshot.find_task(task_id) is None:
        raise KeyError(task_id)

    new_snapshot = replace(snapshot, tasks=tuple(t for t in snapshot.tasks if t.id != task_id))
    effects: List[Effect] = [
        InvalidateCache(),
        CancelTaskReminders(task_id),
        SyncReminders(snapshot.tasks, new_snapshot.tasks),
        SaveSnapshot(),
    ]
    return new_snapshot, effects


def complete_occurrence(
    snapshot: PlannerSnapshot,
    occurrence: Occurrence,
    completion: Optional[float] = None,
    time_worked_seconds: Optional[float] = None,
    today: Optional[datetime.date] = None,
    daily_cap: int = Config.DAILY_XP_CAP
) -> Tuple[PlannerSnapshot, CompletionResult, List[Effect]]:
    """
    Credit an occurrence to the progression ledger.

    Completion comes from ``time_worked_seconds`` when given, else from
    ``completion``, else the occurrence counts as fully done.

    Returns:
        (new snapshot, CompletionResult, effects)
    """
    if time_worked_seconds is not None:
        fraction = occurrence.with_progress(time_worked_seconds).completion
    elif completion is not None:
        fraction = completion
    else:
        fraction = 1.0
    completed = occurrence.with_completion(fraction)

    ledger = ProgressionLedger(replace(snapshot.progression), daily_cap=daily_cap)
    level_before = ledger.state.level
    xp = ledger.award_xp(completed, today=today)
    coins = ledger.award_coins(completed)

    result = CompletionResult(
        occurrence=completed,
        xp=xp,
        coins=coins,
        levels_gained=ledger.state.level - level_before,
    )
    new_snapshot = replace(snapshot, progression=ledger.state)
    return new_snapshot, result, [SaveSnapshot()]


# ==================== Orchestrator ====================

class Planner:
    """
    Holds the current snapshot and runs effects against its collaborators.

    Reminder and save failures are logged and never undo a state change.
    """

    def __init__(
        self,
        store: BlobStore,
        notifications: NotificationService,
        cache: Optional[OccurrenceCache] = None,
        scheduler: Optional[ReminderScheduler] = None,
        timezone: Optional[pytz.BaseTzInfo] = None,
        first_weekday: int = Config.FIRST_WEEKDAY,
        daily_cap: int = Config.DAILY_XP_CAP
    ):
        """
        Initialize the planner.

        Args:
            store: Where the snapshot is loaded from and saved to
            notifications: Reminder backend
            cache: Occurrence cache (default: one in ``timezone``)
            scheduler: Reminder scheduler (default: one over ``notifications``)
            timezone: pytz timezone for day boundaries (default: Config)
            first_weekday: First day of the week, 0 = Monday
            daily_cap: Maximum XP per day
        """
        self.timezone = timezone or Config.timezone()
        self.store = store
        self.scheduler = scheduler or ReminderScheduler(notifications)
        self.cache = cache or OccurrenceCache(timezone=self.timezone, first_weekday=first_weekday)
        self.first_weekday = first_weekday
        self.daily_cap = daily_cap
        self.snapshot = PlannerSnapshot()

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self.snapshot.tasks

    @property
    def ledger(self) -> ProgressionLedger:
        """Read-only view helper over the current progression state."""
        return ProgressionLedger(replace(self.snapshot.progression), daily_cap=self.daily_cap)

    def _now(self) -> datetime.datetime:
        return datetime.datetime.now(self.timezone)

    # ==================== Persistence ====================

    def load(self) -> PlannerSnapshot:
        """Replace the current snapshot with the stored one."""
        try:
            blob = self.store.load()
        except OSError as e:
            logger.warning(f"Could not read planner data: {e}")
            blob = None

        self.snapshot = snapshot_from_blob(blob)
        self.cache.invalidate()
        logger.info(f"Loaded {len(self.snapshot.tasks)} tasks (level {self.snapshot.progression.level})")
        return self.snapshot

    def save(self) -> bool:
        try:
            self.store.save(snapshot_to_blob(self.snapshot))
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not save planner data: {e}")
            return False

    # ==================== Effects ====================

    def _reminder_window(self, tasks: Sequence[Task], now: datetime.datetime) -> List[Occurrence]:
        return materialize_all(tasks, now, now + self.scheduler.lookahead, self.timezone)

    def _run_effect(self, effect: Effect, now: datetime.datetime) -> None:
        if isinstance(effect, InvalidateCache):
            self.cache.invalidate()
        elif isinstance(effect, CancelTaskReminders):
            self.scheduler.cancel_task(effect.task_id)
        elif isinstance(effect, SyncReminders):
            previous = self._reminder_window(effect.previous_tasks, now)
            current = self._reminder_window(effect.current_tasks, now)
            self.scheduler.reconcile(previous, current, now)
        elif isinstance(effect, SaveSnapshot):
            self.save()
        else:
            logger.warning(f"Unknown effect ignored: {effect!r}")

    def apply(self, snapshot: PlannerSnapshot, effects: Sequence[Effect],
              now: Optional[datetime.datetime] = None) -> None:
        """Adopt ``snapshot`` and run its effects in order."""
        self.snapshot = snapshot
        now = now or self._now()
        for effect in effects:
            try:
                self._run_effect(effect, now)
            except Exception as e:
                logger.error(f"Effect {type(effect).__name__} failed: {e}", exc_info=True)

    # ==================== Commands ====================

    def add_task(self, task: Task, now: Optional[datetime.datetime] = None) -> Task:
        snapshot, effects = add_task(self.snapshot, task)
        self.apply(snapshot, effects, now)
        logger.info(f"Added task: {task.name}")
        return task

    def update_task(self, task_id: str, now: Optional[datetime.datetime] = None, **changes) -> Task:
        snapshot, effects = update_task(self.snapshot, task_id, **changes)
        self.apply(snapshot, effects, now)
        updated = snapshot.find_task(task_id)
        logger.info(f"Updated task: {updated.name} ({', '.join(sorted(changes))})")
        return updated

    def remove_task(self, task_id: str, now: Optional[datetime.datetime] = None) -> Task:
        removed = self.snapshot.find_task(task_id)
        snapshot, effects = remove_task(self.snapshot, task_id)
        self.apply(snapshot, effects, now)
        logger.info(f"Removed task: {removed.name}")
        return removed

    def complete_occurrence(self, occurrence: Occurrence, completion: Optional[float] = None,
                            time_worked_seconds: Optional[float] = None,
                            today: Optional[datetime.date] = None) -> CompletionResult:
        today = today or self._now().date()
        snapshot, result, effects = complete_occurrence(
            self.snapshot, occurrence, completion, time_worked_seconds, today, self.daily_cap
        )
        self.apply(snapshot, effects)
        logger.info(
            f"Completed '{occurrence.task_name}': +{result.xp} XP, +{result.coins} coins"
            + (f", +{result.levels_gained} level(s)" if result.levels_gained else "")
        )
        return result

    def sync_reminders(self, now: Optional[datetime.datetime] = None) -> ReminderPlan:
        """
        Re-issue reminders for every upcoming occurrence of the current catalog.

        The current window is also passed as the previous one, so slots left
        behind by an earlier process are cancelled before rescheduling.
        """
        now = now or self._now()
        current = self._reminder_window(self.snapshot.tasks, now)
        return self.scheduler.reconcile(current, current, now)

    # ==================== Queries ====================

    def occurrences_between(self, range_start: DateLike, range_end: DateLike) -> List[Occurrence]:
        return self.cache.get(self.snapshot.tasks, range_start, range_end)

    def occurrences_for_day(self, day: datetime.date) -> List[Occurrence]:
        return self.occurrences_between(*calendar_view.day_range(day))

    def occurrences_for_week(self, day: datetime.date) -> List[Occurrence]:
        return self.occurrences_between(*calendar_view.week_range(day, self.first_weekday))

    def occurrences_for_month(self, day: datetime.date) -> List[Occurrence]:
        return self.occurrences_between(*calendar_view.month_range(day))

    def invalidate_cache(self) -> None:
        self.cache.invalidate()

    def warm_up(self, today: Optional[datetime.date] = None) -> List[Future]:
        return self.cache.warm_up(self.snapshot.tasks, today or self._now().date())

    def current_title(self, scope: CalendarScope, day: datetime.date) -> str:
        return calendar_view.current_title(scope, day, self.first_weekday)

    def weekday_labels(self) -> List[str]:
        return calendar_view.weekday_labels(self.first_weekday)

    def close(self) -> None:
        self.cache.shutdown()
