# File: tests/conftest.py
"""
Pytest configuration and shared fixtures.
Provides reusable test data and fakes for all tests.
"""

import pytest
import datetime
from pathlib import Path
from unittest.mock import Mock
import sys

import pytz

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quest_calendar.models import (
    NotificationSpec, NotificationTiming, NotificationType, Recurrence, Task, TaskCategory
)


# ==================== Time Fixtures ====================

@pytest.fixture
def tz():
    """Planner timezone used throughout the tests."""
    return pytz.timezone("Europe/Amsterdam")


@pytest.fixture
def today():
    """A fixed Monday."""
    return datetime.date(2026, 10, 19)


@pytest.fixture
def now(tz, today):
    """Fixed reference time: 06:00 local on ``today``."""
    return tz.localize(datetime.datetime.combine(today, datetime.time(6, 0)))


# ==================== Task Fixtures ====================

@pytest.fixture
def daily_task(today):
    """Daily task at 07:00 with a reminder 15 minutes before."""
    return Task(
        id="daily_1",
        name="Morning Workout",
        description="30-minute cardio session",
        category=TaskCategory.HEALTH,
        energy=4,
        recurrence=Recurrence.DAILY,
        anchor=datetime.datetime.combine(today, datetime.time(7, 0)),
        duration_seconds=1800,
        reminder=NotificationSpec.standard(),
    )


@pytest.fixture
def weekly_task(today):
    """Weekly task with two reminder timings."""
    return Task(
        id="weekly_1",
        name="Study Python",
        category=TaskCategory.STUDY,
        energy=5,
        recurrence=Recurrence.WEEKLY,
        anchor=datetime.datetime.combine(today, datetime.time(19, 0)),
        duration_seconds=6300,
        reminder=NotificationSpec(
            timings=(NotificationTiming(-30), NotificationTiming(-5)),
            body="Study time",
            type=NotificationType.LOCAL,
        ),
    )


@pytest.fixture
def one_off_task(today):
    """Non-recurring task two days from ``today``."""
    return Task(
        id="once_1",
        name="Dentist",
        category=TaskCategory.PERSONAL,
        energy=2,
        recurrence=Recurrence.NONE,
        anchor=datetime.datetime.combine(today + datetime.timedelta(days=2), datetime.time(14, 30)),
        duration_seconds=3600,
        reminder=NotificationSpec.reminder(),
    )


@pytest.fixture
def sample_tasks(daily_task, weekly_task, one_off_task):
    """Collection of sample tasks."""
    return [daily_task, weekly_task, one_off_task]


@pytest.fixture
def create_test_task(today):
    """Factory fixture for creating test tasks."""
    def _create(
        name: str = "Test Task",
        recurrence: Recurrence = Recurrence.DAILY,
        energy: int = 3,
        duration_seconds: float = 1800,
        hour: int = 9,
        anchor_date: datetime.date = None,
        reminder: NotificationSpec = None
    ) -> Task:
        """Create a test task with given parameters."""
        return Task(
            id=f"test_{name.lower().replace(' ', '_')}",
            name=name,
            recurrence=recurrence,
            energy=energy,
            duration_seconds=duration_seconds,
            anchor=datetime.datetime.combine(anchor_date or today, datetime.time(hour, 0)),
            reminder=reminder or NotificationSpec(),
        )

    return _create


# ==================== Fakes ====================

class FakeNotificationService:
    """NotificationService that records every command it receives."""

    def __init__(self):
        self.calls = []
        self.scheduled = {}
        self.fail_schedule = False
        self.fail_cancel = False

    def schedule(self, identifier, trigger_at, repeats, payload):
        self.calls.append(('schedule', identifier))
        if self.fail_schedule:
            raise RuntimeError("notification permission denied")
        self.scheduled[identifier] = {'trigger_at': trigger_at, 'repeats': repeats, 'payload': payload}

    def cancel(self, identifiers):
        identifiers = list(identifiers)
        self.calls.append(('cancel', identifiers))
        if self.fail_cancel:
            raise RuntimeError("notification service unavailable")
        for identifier in identifiers:
            self.scheduled.pop(identifier, None)

    def cancel_all(self):
        self.calls.append(('cancel_all', None))
        self.scheduled.clear()

    def cancelled_ids(self, since: int = 0) -> set:
        """Every identifier passed to cancel() from call index ``since`` on."""
        ids = set()
        for kind, arg in self.calls[since:]:
            if kind == 'cancel':
                ids.update(arg)
        return ids

    def call_kinds(self, since: int = 0) -> list:
        return [kind for kind, _ in self.calls[since:]]


class FakeBlobStore:
    """BlobStore kept in memory."""

    def __init__(self, blob=None):
        self.blob = blob
        self.save_count = 0
        self.fail_save = False

    def load(self):
        return self.blob

    def save(self, blob):
        if self.fail_save:
            raise OSError("disk full")
        self.blob = blob
        self.save_count += 1


@pytest.fixture
def fake_notifications():
    return FakeNotificationService()


@pytest.fixture
def fake_store():
    return FakeBlobStore()


@pytest.fixture
def mock_calendar_service():
    """Mock Google Calendar resource."""
    mock = Mock()
    mock.events().list().execute.return_value = {'items': []}
    mock.events().insert().execute.return_value = {'id': 'new_event_id'}
    mock.events().delete().execute.return_value = None
    return mock


# ==================== Pytest Markers ====================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
