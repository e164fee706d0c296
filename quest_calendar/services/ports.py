# File: quest_calendar/services/ports.py
"""
Ports used by the planner core.

The core depends on these Protocols instead of concrete backends, so the
reminder delivery and persistence layers can be swapped or faked in tests.
"""

import datetime
from typing import Any, Dict, Iterable, Optional, Protocol

from quest_calendar.utils.logger import LoggerMixin


class NotificationService(Protocol):
    """Delivers reminder commands to some backend."""

    def schedule(self, identifier: str, trigger_at: datetime.datetime,
                 repeats: bool, payload: Dict[str, Any]) -> None: ...

    def cancel(self, identifiers: Iterable[str]) -> None: ...

    def cancel_all(self) -> None: ...


class BlobStore(Protocol):
    """Persists a single serialized planner snapshot."""

    def load(self) -> Optional[str]: ...

    def save(self, blob: str) -> None: ...


class NullNotificationService(LoggerMixin):
    """Backend that only logs; used when no real backend is configured."""

    def schedule(self, identifier: str, trigger_at: datetime.datetime,
                 repeats: bool, payload: Dict[str, Any]) -> None:
        self.logger.debug(f"Reminder {identifier} at {trigger_at.isoformat()}: {payload.get('title')}")

    def cancel(self, identifiers: Iterable[str]) -> None:
        self.logger.debug(f"Cancelled {len(list(identifiers))} reminders")

    def cancel_all(self) -> None:
        self.logger.debug("Cancelled all reminders")
