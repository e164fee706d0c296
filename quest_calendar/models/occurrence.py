# File: quest_calendar/models/occurrence.py
"""
Materialized, dated instances of tasks.
"""

import datetime
import uuid
from dataclasses import dataclass, field, replace

from .enums import Recurrence, TaskCategory
from .notification import NotificationSpec, notification_from_dict
from .common import parse_iso_datetime, enum_from_value

# Fixed namespace so occurrence ids are stable across processes
OCCURRENCE_NAMESPACE = uuid.UUID("6f1c1f3e-93a2-4f0e-8d1b-1f6b8f2f7a10")


def occurrence_id_for(task_id: str, scheduled_at: datetime.datetime) -> str:
    """Deterministic id for the occurrence of ``task_id`` at ``scheduled_at``."""
    instant = scheduled_at.astimezone(datetime.timezone.utc) if scheduled_at.tzinfo else scheduled_at
    return str(uuid.uuid5(OCCURRENCE_NAMESPACE, f"{task_id}|{instant.isoformat()}"))


def clamp_fraction(value) -> float:
    """Clamp to [0.0, 1.0]; NaN and garbage become 0.0."""
    try:
        fraction = float(value)
    except (TypeError, ValueError):
        return 0.0
    if fraction != fraction:
        return 0.0
    return min(max(fraction, 0.0), 1.0)


@dataclass(frozen=True)
class Occurrence:
    """A single scheduled instance of a task with a frozen reward snapshot."""
    id: str
    task_id: str
    task_name: str
    scheduled_at: datetime.datetime
    duration_seconds: float
    category: TaskCategory
    energy: int
    recurrence: Recurrence
    base_xp: int
    base_coins: int
    reminder: NotificationSpec = field(default_factory=NotificationSpec)
    completion: float = 0.0
    is_completed: bool = False

    def __post_init__(self):
        """Keep completion inside its invariant."""
        object.__setattr__(self, 'completion', clamp_fraction(self.completion))
        if self.duration_seconds is None or self.duration_seconds < 0:
            object.__setattr__(self, 'duration_seconds', 0.0)

    @property
    def end_at(self) -> datetime.datetime:
        return self.scheduled_at + datetime.timedelta(seconds=self.duration_seconds)

    def is_today(self, today: datetime.date) -> bool:
        return self.scheduled_at.date() == today

    def with_progress(self, time_worked_seconds: float) -> 'Occurrence':
        """
        Copy with completion set from the time worked on it.

        Args:
            time_worked_seconds: Seconds spent on the occurrence

        Returns:
            New Occurrence, completion clamped to [0, 1]
        """
        worked = max(float(time_worked_seconds or 0.0), 0.0)
        if self.duration_seconds <= 0:
            progress = 1.0 if worked > 0 else 0.0
        else:
            progress = worked / self.duration_seconds
        return replace(self, completion=clamp_fraction(progress))

    def with_completion(self, completion: float) -> 'Occurrence':
        return replace(self, completion=clamp_fraction(completion), is_completed=True)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'task_id': self.task_id,
            'task_name': self.task_name,
            'scheduled_at': self.scheduled_at.isoformat(),
            'duration_seconds': self.duration_seconds,
            'category': self.category.value,
            'energy': self.energy,
            'recurrence': self.recurrence.value,
            'base_xp': self.base_xp,
            'base_coins': self.base_coins,
            'reminder': self.reminder.to_dict(),
            'completion': self.completion,
            'is_completed': self.is_completed,
        }


def occurrence_from_dict(data: dict) -> Occurrence:
    """Create Occurrence from dictionary."""
    scheduled_at = parse_iso_datetime(data['scheduled_at'])
    if scheduled_at is None:
        raise ValueError(f"Invalid scheduled_at for occurrence {data.get('id')}")

    return Occurrence(
        id=str(data.get('id') or occurrence_id_for(str(data['task_id']), scheduled_at)),
        task_id=str(data['task_id']),
        task_name=str(data.get('task_name', '')),
        scheduled_at=scheduled_at,
        duration_seconds=float(data.get('duration_seconds', 0.0)),
        category=enum_from_value(TaskCategory, data.get('category'), TaskCategory.OTHER),
        energy=int(data.get('energy', 3)),
        recurrence=enum_from_value(Recurrence, data.get('recurrence'), Recurrence.NONE),
        base_xp=int(data.get('base_xp', 0)),
        base_coins=int(data.get('base_coins', 0)),
        reminder=notification_from_dict(data.get('reminder') or {}),
        completion=data.get('completion', 0.0),
        is_completed=bool(data.get('is_completed', False)),
    )
