# File: quest_calendar/processors/reminder_scheduler.py
"""
Reminder reconciliation for Quest Calendar.

Diffs the occurrence set before and after a change and turns the result
into cancel/schedule commands for a NotificationService. Every change is a
full cancel-then-reschedule of the lookahead window, so no reminder built
from an old task configuration survives an edit.
"""

import datetime
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pytz

from quest_calendar.core.config_manager import Config
from quest_calendar.utils.logger import LoggerMixin
from quest_calendar.models import Occurrence, ReminderState
from quest_calendar.services.ports import NotificationService

DEFAULT_REMINDER_BODY = "Your task is starting soon!"


def reminder_id(occurrence_id: str, timing_index: int) -> str:
    """Identifier shared by the schedule and cancel commands of one timing."""
    return f"{occurrence_id}-{timing_index}"


@dataclass(frozen=True)
class ReminderRequest:
    """One schedule command."""
    identifier: str
    occurrence_id: str
    task_id: str
    trigger_at: datetime.datetime
    repeats: bool
    payload: Dict[str, Any]


@dataclass(frozen=True)
class ReminderPlan:
    """Commands for one reconciliation: cancels are always issued first."""
    cancel_ids: Tuple[str, ...]
    requests: Tuple[ReminderRequest, ...]

    @property
    def is_empty(self) -> bool:
        return not self.cancel_ids and not self.requests


def build_payload(occurrence: Occurrence) -> Dict[str, Any]:
    spec = occurrence.reminder
    return {
        'title': occurrence.task_name,
        'body': spec.body or DEFAULT_REMINDER_BODY,
        'sound': spec.sound.file_name,
        'occurrence_id': occurrence.id,
        'task_id': occurrence.task_id,
        'category': occurrence.category.value,
        'scheduled_at': occurrence.scheduled_at.isoformat(),
        'duration_seconds': occurrence.duration_seconds,
    }


class ReminderScheduler(LoggerMixin):
    """Keeps a NotificationService in step with the upcoming occurrences."""

    def __init__(self, service: NotificationService,
                 lookahead_days: int = Config.REMINDER_LOOKAHEAD_DAYS):
        """
        Initialize the scheduler.

        Args:
            service: Backend receiving schedule/cancel commands
            lookahead_days: Only occurrences starting within this many days are reminded
        """
        self.service = service
        self.lookahead = datetime.timedelta(days=lookahead_days)
        # identifier -> (occurrence id, task id) for reminders currently scheduled
        self._owners: Dict[str, Tuple[str, str]] = {}
        self._states: Dict[str, ReminderState] = {}
        # occurrence id -> start, for occurrences seen in a window that has not passed yet
        self._starts: Dict[str, datetime.datetime] = {}

    # ==================== Introspection ====================

    def state_of(self, identifier: str) -> ReminderState:
        return self._states.get(identifier, ReminderState.UNSCHEDULED)

    def scheduled_ids(self) -> Set[str]:
        return set(self._owners)

    def scheduled_ids_for_task(self, task_id: str) -> Set[str]:
        return {ident for ident, (_, owner) in self._owners.items() if owner == task_id}

    # ==================== Planning ====================

    def window(self, occurrences: Iterable[Occurrence], now: datetime.datetime) -> List[Occurrence]:
        """Occurrences starting inside [now, now + lookahead)."""
        horizon = now + self.lookahead
        return [o for o in occurrences if now <= o.scheduled_at < horizon]

    def plan(self, previous: Sequence[Occurrence], new: Sequence[Occurrence],
             now: datetime.datetime) -> ReminderPlan:
        """
        Compute the commands that move the backend from ``previous`` to ``new``.

        Args:
            previous: Occurrences before the change
            new: Occurrences after the change
            now: Reference time; triggers at or before it are skipped

        Returns:
            ReminderPlan with the cancel set and the schedule requests
        """
        previous_window = self.window(previous, now)
        new_window = self.window(new, now)

        cancel_ids = sorted(self._owners)
        cancel_set = set(cancel_ids)
        owned = {occurrence_id for occurrence_id, _ in self._owners.values()}
        for occurrence in previous_window:
            if occurrence.id in owned:
                continue
            # Possibly scheduled by an earlier process; cancel every slot of its old timings
            for index in range(len(occurrence.reminder.timings)):
                ident = reminder_id(occurrence.id, index)
                if ident not in cancel_set:
                    cancel_set.add(ident)
                    cancel_ids.append(ident)

        requests: List[ReminderRequest] = []
        for occurrence in new_window:
            spec = occurrence.reminder
            if not spec.is_active:
                continue
            payload = build_payload(occurrence)
            for index, timing in spec.enabled_timings():
                trigger_at = occurrence.scheduled_at + datetime.timedelta(minutes=timing.offset_minutes)
                if trigger_at <= now:
                    continue
                requests.append(ReminderRequest(
                    identifier=reminder_id(occurrence.id, index),
                    occurrence_id=occurrence.id,
                    task_id=occurrence.task_id,
                    trigger_at=trigger_at,
                    repeats=spec.repeats,
                    payload=payload,
                ))

        return ReminderPlan(cancel_ids=tuple(cancel_ids), requests=tuple(requests))

    # ==================== Execution ====================

    def _issue_cancel(self, identifiers: Sequence[str]) -> None:
        if not identifiers:
            return
        try:
            self.service.cancel(list(identifiers))
        except Exception as e:
            self.logger.warning(f"Failed to cancel {len(identifiers)} reminders: {e}")

        for ident in identifiers:
            self._owners.pop(ident, None)
            self._states[ident] = ReminderState.CANCELLED

    def _prune(self, now: datetime.datetime) -> None:
        """Forget occurrences that have started and the cancelled slots belonging to them."""
        self._starts = {occ_id: start for occ_id, start in self._starts.items() if start >= now}
        for ident, state in list(self._states.items()):
            if state is ReminderState.CANCELLED and ident.rsplit("-", 1)[0] not in self._starts:
                del self._states[ident]

    def reconcile(self, previous: Sequence[Occurrence], new: Sequence[Occurrence],
                  now: Optional[datetime.datetime] = None) -> ReminderPlan:
        """Plan and issue commands; all cancels go out before any schedule."""
        now = now or datetime.datetime.now(pytz.utc)
        plan = self.plan(previous, new, now)

        self._issue_cancel(plan.cancel_ids)

        scheduled = 0
        for request in plan.requests:
            try:
                self.service.schedule(request.identifier, request.trigger_at,
                                      request.repeats, request.payload)
            except Exception as e:
                self.logger.warning(f"Failed to schedule reminder {request.identifier}: {e}")
                continue
            self._owners[request.identifier] = (request.occurrence_id, request.task_id)
            self._states[request.identifier] = ReminderState.SCHEDULED
            scheduled += 1

        for occurrence in self.window(previous, now) + self.window(new, now):
            self._starts[occurrence.id] = occurrence.scheduled_at
        self._prune(now)
        self.logger.info(f"Reminders reconciled: {len(plan.cancel_ids)} cancelled, {scheduled} scheduled")
        return plan

    def cancel_task(self, task_id: str) -> List[str]:
        """Cancel every tracked reminder of one task; returns the cancelled identifiers."""
        identifiers = sorted(self.scheduled_ids_for_task(task_id))
        self._issue_cancel(identifiers)
        if identifiers:
            self.logger.info(f"Cancelled {len(identifiers)} reminders for task {task_id}")
        return identifiers

    def cancel_all(self) -> None:
        try:
            self.service.cancel_all()
        except Exception as e:
            self.logger.warning(f"Failed to cancel all reminders: {e}")

        for ident in list(self._owners):
            self._states[ident] = ReminderState.CANCELLED
        self._owners.clear()
