# quest_calendar/models/tasks.py

import datetime
import uuid
from dataclasses import dataclass, field, replace
from .enums import Recurrence, TaskCategory
from .notification import NotificationSpec, notification_from_dict
from .common import parse_iso_datetime, enum_from_value

ENERGY_DESCRIPTIONS = {
    1: "Very Low",
    2: "Low",
    3: "Medium",
    4: "High",
    5: "Very High",
}


def clamp_energy(value) -> int:
    """Clamp an energy level into 1-5."""
    try:
        energy = int(value)
    except (TypeError, ValueError):
        return 3
    return min(max(energy, 1), 5)


@dataclass(frozen=True)
class Task:
    """A user-defined recurring or one-off task."""
    name: str
    anchor: datetime.datetime
    recurrence: Recurrence = Recurrence.NONE
    energy: int = 3
    duration_seconds: float = 1800.0
    category: TaskCategory = TaskCategory.OTHER
    description: str = ""
    reminder: NotificationSpec = field(default_factory=NotificationSpec)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime.datetime = field(default_factory=lambda: datetime.datetime.now(datetime.timezone.utc))
    is_completed: bool = False

    def __post_init__(self):
        """Validate task data and auto-convert types."""
        if not self.name or not str(self.name).strip():
            raise ValueError("Task name must not be empty")

        # Energy is always clamped, never rejected
        object.__setattr__(self, 'energy', clamp_energy(self.energy))

        if isinstance(self.recurrence, str):
            object.__setattr__(self, 'recurrence', enum_from_value(Recurrence, self.recurrence, Recurrence.NONE))
        if isinstance(self.category, str):
            object.__setattr__(self, 'category', enum_from_value(TaskCategory, self.category, TaskCategory.OTHER))

        if isinstance(self.anchor, str):
            parsed = parse_iso_datetime(self.anchor)
            if parsed is None:
                raise ValueError(f"Invalid anchor date for task {self.name}: {self.anchor}")
            object.__setattr__(self, 'anchor', parsed)
        elif not isinstance(self.anchor, datetime.datetime):
            # Plain dates anchor at midnight
            object.__setattr__(self, 'anchor', datetime.datetime.combine(self.anchor, datetime.time.min))

        if self.duration_seconds is None or self.duration_seconds < 0:
            object.__setattr__(self, 'duration_seconds', 0.0)

    @property
    def energy_description(self) -> str:
        return ENERGY_DESCRIPTIONS.get(self.energy, "Unknown")

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not Recurrence.NONE

    def duplicate(self) -> 'Task':
        """Copy of this task under a new id."""
        return replace(
            self,
            name=f"{self.name} (Copy)",
            id=str(uuid.uuid4()),
            created_at=datetime.datetime.now(datetime.timezone.utc),
            is_completed=False,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'category': self.category.value,
            'energy': self.energy,
            'recurrence': self.recurrence.value,
            'anchor': self.anchor.isoformat(),
            'duration_seconds': self.duration_seconds,
            'reminder': self.reminder.to_dict(),
            'created_at': self.created_at.isoformat(),
            'is_completed': self.is_completed,
        }

    def __str__(self) -> str:
        return f"Task(name: {self.name}, category: {self.category.display_name}, energy: {self.energy})"


def task_from_dict(data: dict) -> Task:
    """Create Task from dictionary with type safety."""
    anchor = parse_iso_datetime(data.get('anchor'))
    if anchor is None:
        raise ValueError(f"Task {data.get('name', 'Unknown')} has no valid anchor date")

    created_at = parse_iso_datetime(data.get('created_at')) or datetime.datetime.now(datetime.timezone.utc)

    try:
        duration = float(data.get('duration_seconds', 1800.0))
    except (TypeError, ValueError):
        duration = 1800.0

    return Task(
        id=str(data.get('id') or uuid.uuid4()),
        name=str(data.get('name', 'Untitled Task')),
        description=str(data.get('description', '')),
        category=enum_from_value(TaskCategory, data.get('category'), TaskCategory.OTHER),
        energy=clamp_energy(data.get('energy', 3)),
        recurrence=enum_from_value(Recurrence, data.get('recurrence'), Recurrence.NONE),
        anchor=anchor,
        duration_seconds=duration,
        reminder=notification_from_dict(data.get('reminder') or {}),
        created_at=created_at,
        is_completed=bool(data.get('is_completed', False)),
    )
