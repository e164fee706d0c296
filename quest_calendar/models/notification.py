# File: quest_calendar/models/notification.py
"""
Reminder configuration attached to tasks and snapshotted onto occurrences.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .enums import NotificationFrequency, NotificationSound, NotificationType
from .common import enum_from_value

MAX_TIMINGS = 5


@dataclass(frozen=True)
class NotificationTiming:
    """A reminder offset in minutes relative to the occurrence start (negative = before)."""
    offset_minutes: int
    enabled: bool = True

    @property
    def display_text(self) -> str:
        if self.offset_minutes == 0:
            return "At event time"
        if self.offset_minutes > 0:
            return f"{self.offset_minutes} min after"
        return f"{abs(self.offset_minutes)} min before"

    def to_dict(self) -> dict:
        return {'offset_minutes': self.offset_minutes, 'enabled': self.enabled}


@dataclass(frozen=True)
class NotificationSpec:
    """Ordered reminder timings plus delivery options."""
    timings: Tuple[NotificationTiming, ...] = field(default_factory=tuple)
    sound: NotificationSound = NotificationSound.DEFAULT
    body: str = ""
    type: NotificationType = NotificationType.NONE
    frequency: NotificationFrequency = NotificationFrequency.ONCE

    def __post_init__(self):
        """Normalize timings to a tuple and validate multiplicity."""
        timings = tuple(self.timings)
        if len(timings) > MAX_TIMINGS:
            raise ValueError(
                f"At most {MAX_TIMINGS} reminder timings are supported, got {len(timings)}"
            )
        object.__setattr__(self, 'timings', timings)

        if isinstance(self.sound, str):
            object.__setattr__(self, 'sound', enum_from_value(NotificationSound, self.sound, NotificationSound.DEFAULT))
        if isinstance(self.type, str):
            object.__setattr__(self, 'type', enum_from_value(NotificationType, self.type, NotificationType.NONE))
        if isinstance(self.frequency, str):
            object.__setattr__(self, 'frequency', enum_from_value(NotificationFrequency, self.frequency, NotificationFrequency.ONCE))

    @property
    def is_active(self) -> bool:
        """True when reminders should be delivered at all."""
        return self.type is NotificationType.LOCAL

    @property
    def repeats(self) -> bool:
        return self.frequency is NotificationFrequency.CUSTOM

    def enabled_timings(self) -> List[Tuple[int, NotificationTiming]]:
        """(index, timing) pairs for enabled timings, index preserved."""
        return [(i, t) for i, t in enumerate(self.timings) if t.enabled]

    @classmethod
    def standard(cls) -> 'NotificationSpec':
        """Fifteen minutes before, default sound."""
        return cls(
            timings=(NotificationTiming(-15),),
            sound=NotificationSound.DEFAULT,
            body="Your task is starting soon!",
            type=NotificationType.LOCAL,
            frequency=NotificationFrequency.ONCE,
        )

    @classmethod
    def reminder(cls) -> 'NotificationSpec':
        """Ten minutes before, chime."""
        return cls(
            timings=(NotificationTiming(-10),),
            sound=NotificationSound.CHIME,
            body="Don't forget your task!",
            type=NotificationType.LOCAL,
            frequency=NotificationFrequency.ONCE,
        )

    def to_dict(self) -> dict:
        return {
            'timings': [t.to_dict() for t in self.timings],
            'sound': self.sound.value,
            'body': self.body,
            'type': self.type.value,
            'frequency': self.frequency.value,
        }


def notification_from_dict(data: dict) -> NotificationSpec:
    """Create NotificationSpec from dictionary; extra timings beyond the limit are dropped."""
    if not data:
        return NotificationSpec()

    timings = []
    for raw in data.get('timings') or []:
        try:
            timings.append(NotificationTiming(
                offset_minutes=int(raw.get('offset_minutes', -15)),
                enabled=bool(raw.get('enabled', True)),
            ))
        except (TypeError, ValueError, AttributeError):
            continue

    return NotificationSpec(
        timings=tuple(timings[:MAX_TIMINGS]),
        sound=enum_from_value(NotificationSound, data.get('sound'), NotificationSound.DEFAULT),
        body=str(data.get('body', '')),
        type=enum_from_value(NotificationType, data.get('type'), NotificationType.NONE),
        frequency=enum_from_value(NotificationFrequency, data.get('frequency'), NotificationFrequency.ONCE),
    )
