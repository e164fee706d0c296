# File: scripts/clear.py
"""
Script to remove every reminder event this application created in Google Calendar.
Events are found through the private GENERATOR_ID tag, so manual events are never touched.
"""

import datetime
import sys
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quest_calendar.core.config_manager import Config
from quest_calendar.auth.google_auth import get_calendar_service
from quest_calendar.services.calendar_service import GoogleCalendarReminderService
from quest_calendar.utils.logger import setup_logger

logger = setup_logger(__name__)


def main() -> int:
    """
    Delete all tagged reminder events from the configured calendar.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    start_time = datetime.datetime.now()

    logger.info("="*60)
    logger.info("Starting Quest Calendar reminder cleanup")
    logger.info("="*60)

    try:
        calendar_service = get_calendar_service()
        if calendar_service is None:
            logger.critical("Could not initialize Google Calendar service. Run 'python scripts/setup.py' first.")
            return 1

        reminders = GoogleCalendarReminderService(calendar_service, Config.CALENDAR_ID)
        logger.info(f"Clearing reminders tagged '{Config.GENERATOR_ID}' from calendar '{Config.CALENDAR_ID}'")
        reminders.cancel_all()

        elapsed = (datetime.datetime.now() - start_time).total_seconds()
        logger.info(f"Cleanup completed in {elapsed:.2f} seconds")
        return 0

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1

    except Exception as e:
        elapsed = (datetime.datetime.now() - start_time).total_seconds()
        logger.error(f"Cleanup failed after {elapsed:.2f} seconds", exc_info=True)
        logger.error(f"Error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
