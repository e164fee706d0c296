"""
One-time setup for Quest Calendar.
Creates the planner data file with a few sample quests and, when
credentials.json is present, connects Google Calendar for reminders.
"""

import datetime
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import pytz
from dotenv import set_key

from quest_calendar.core.config_manager import Config
from quest_calendar.models import NotificationSpec, PlannerSnapshot, Recurrence, Task, TaskCategory
from quest_calendar.services.storage_service import JsonFileStore, snapshot_to_blob
from quest_calendar.utils.logger import setup_logger

logger = setup_logger(__name__)


def sample_tasks(today: datetime.date) -> list:
    """The starter quests, anchored on ``today``."""
    def at(hour: int, minute: int = 0) -> datetime.datetime:
        return datetime.datetime.combine(today, datetime.time(hour, minute))

    return [
        Task(
            name="Morning Workout",
            description="30-minute cardio session",
            category=TaskCategory.HEALTH,
            energy=4,
            recurrence=Recurrence.DAILY,
            anchor=at(7),
            duration_seconds=30 * 60,
            reminder=NotificationSpec.standard(),
        ),
        Task(
            name="Review Code",
            description="Review pull requests",
            category=TaskCategory.WORK,
            energy=3,
            recurrence=Recurrence.DAILY,
            anchor=at(10),
            duration_seconds=45 * 60,
            reminder=NotificationSpec.reminder(),
        ),
        Task(
            name="Read Book",
            description="Read 20 pages",
            category=TaskCategory.PERSONAL,
            energy=2,
            recurrence=Recurrence.DAILY,
            anchor=at(21),
            duration_seconds=30 * 60,
        ),
        Task(
            name="Study Python",
            description="Learn new standard library features",
            category=TaskCategory.STUDY,
            energy=4,
            recurrence=Recurrence.WEEKLY,
            anchor=at(19),
            duration_seconds=90 * 60,
            reminder=NotificationSpec.standard(),
        ),
    ]


def configure_timezone() -> None:
    """Ask for the planner timezone and store it in .env."""
    current = Config.TARGET_TIMEZONE
    tz = input(f"Enter Timezone (default {current}): ").strip() or current
    if tz not in pytz.all_timezones_set:
        print(f"Unknown timezone '{tz}', keeping {current}")
        return

    Config.ENV_FILE.touch(exist_ok=True)
    set_key(str(Config.ENV_FILE), "TIMEZONE", tz)
    Config.TARGET_TIMEZONE = tz
    print(f"Timezone saved to .env: {tz}")


def create_data_file() -> bool:
    """Write the sample quests unless a data file already exists."""
    if Config.DATA_FILE.exists():
        choice = input(f"Existing data found at {Config.DATA_FILE}. Overwrite with sample quests? (y/N): ").lower()
        if choice != 'y':
            print("Keeping existing data")
            return True

    today = datetime.datetime.now(Config.timezone()).date()
    snapshot = PlannerSnapshot(tasks=tuple(sample_tasks(today)))
    try:
        JsonFileStore(Config.DATA_FILE).save(snapshot_to_blob(snapshot))
    except OSError as e:
        logger.error(f"Could not write data file: {e}", exc_info=True)
        return False

    print(f"Created {len(snapshot.tasks)} sample quests in {Config.DATA_FILE}")
    return True


def connect_google_calendar() -> None:
    """Run the OAuth flow when credentials are available."""
    from quest_calendar.auth.google_auth import create_initial_token

    if Config.TOKEN_FILE.exists():
        print("Existing token.json found")
        return

    if not Config.CREDENTIALS_FILE.exists():
        print("No credentials.json found; reminders will only be logged.")
        print("Download OAuth client credentials from Google Cloud Console to enable Calendar reminders.")
        return

    choice = input("Connect Google Calendar for reminders? (Y/n): ").lower()
    if choice == 'n':
        return
    if not create_initial_token():
        print("Google authentication failed; reminders will only be logged.")


def main() -> int:
    """Main setup wizard."""
    print("Setting up Quest Calendar...")
    print("="*60)

    try:
        print("\nStep 1: Timezone")
        configure_timezone()

        print("\nStep 2: Planner Data")
        if not create_data_file():
            return 1

        print("\nStep 3: Google Calendar Reminders (optional)")
        connect_google_calendar()

        print("\nStep 4: Verification")
        if not Config.validate():
            print("Configuration is invalid; check the log output above.")
            return 1

    except KeyboardInterrupt:
        print("\nSetup interrupted")
        return 1

    logger.info("Setup completed successfully")
    print("="*60)
    print("Setup complete!")
    print("="*60)
    print("\nYou can now run: python scripts/agenda.py")
    return 0


if __name__ == '__main__':
    sys.exit(main())
