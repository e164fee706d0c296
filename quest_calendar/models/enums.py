# File: quest_calendar/models/enums.py

from enum import Enum
from typing import Optional

class Recurrence(Enum):
    """Task repetition rule."""
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class TaskCategory(Enum):
    """Closed set of task categories."""
    WORK = "work"
    HEALTH = "health"
    PERSONAL = "personal"
    STUDY = "study"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class NotificationType(Enum):
    """How reminders for a task are delivered."""
    NONE = "none"
    LOCAL = "local"


class NotificationFrequency(Enum):
    """Whether a delivered reminder repeats."""
    NONE = "none"
    ONCE = "once"
    CUSTOM = "custom"


class NotificationSound(Enum):
    """Reminder sound selector."""
    DEFAULT = "default"
    CHIME = "chime.caf"
    ALERT = "alert.caf"

    @property
    def file_name(self) -> Optional[str]:
        """Sound file to play, or None for the system default."""
        if self is NotificationSound.DEFAULT:
            return None
        return self.value


class ReminderState(Enum):
    """Lifecycle of a single reminder identifier."""
    UNSCHEDULED = "unscheduled"
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
