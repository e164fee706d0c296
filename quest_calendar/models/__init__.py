from .enums import (
    Recurrence,
    TaskCategory,
    NotificationType,
    NotificationFrequency,
    NotificationSound,
    ReminderState,
)
from .common import parse_iso_datetime, parse_iso_date, localize, start_of_day
from .notification import NotificationTiming, NotificationSpec, notification_from_dict
from .tasks import Task, task_from_dict
from .occurrence import Occurrence, occurrence_from_dict, occurrence_id_for
from .progression import ProgressionState, progression_from_dict
from .cache import CacheEntry, cache_key
from .snapshot import PlannerSnapshot, snapshot_from_dict

__all__ = [
    "Recurrence",
    "TaskCategory",
    "NotificationType",
    "NotificationFrequency",
    "NotificationSound",
    "ReminderState",
    "parse_iso_datetime",
    "parse_iso_date",
    "localize",
    "start_of_day",
    "NotificationTiming",
    "NotificationSpec",
    "notification_from_dict",
    "Task",
    "task_from_dict",
    "Occurrence",
    "occurrence_from_dict",
    "occurrence_id_for",
    "ProgressionState",
    "progression_from_dict",
    "CacheEntry",
    "cache_key",
    "PlannerSnapshot",
    "snapshot_from_dict",
]
