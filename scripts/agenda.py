# File: scripts/agenda.py
"""
Daily agenda entry point.
Run this file every day to refresh reminders and print today's quests.
Make sure you have run 'python scripts/setup.py' at least once.
"""

import datetime
import sys
import time
from pathlib import Path

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from quest_calendar.core.config_manager import Config
from quest_calendar.core.planner import Planner
from quest_calendar.auth.google_auth import get_calendar_service
from quest_calendar.processors.calendar_view import CalendarScope
from quest_calendar.processors.reward_engine import final_coins, final_xp
from quest_calendar.services.service_factory import ServiceFactory
from quest_calendar.utils.logger import setup_logger

logger = setup_logger(__name__)


def format_agenda(planner: Planner, today: datetime.date) -> str:
    """Render today's occurrences and the progression line."""
    lines = [planner.current_title(CalendarScope.DAY, today), ""]

    occurrences = planner.occurrences_for_day(today)
    if not occurrences:
        lines.append("  No quests today.")
    for occ in occurrences:
        xp = final_xp(occ.base_xp, occ.duration_seconds)
        coins = final_coins(occ.base_coins, occ.duration_seconds)
        minutes = int(occ.duration_seconds // 60)
        lines.append(
            f"  {occ.scheduled_at:%H:%M}  {occ.task_name:<24} {minutes:>4} min  "
            f"[{occ.category.display_name}]  +{xp} XP  +{coins} coins"
        )

    ledger = planner.ledger
    state = ledger.state
    lines.append("")
    lines.append(
        f"Level {state.level}  |  XP {state.xp}/{ledger.required_xp(state.level)} "
        f"({ledger.level_progress:.0%})  |  Coins {state.currency}"
    )
    return "\n".join(lines)


def main() -> int:
    """
    Main execution function.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    start_time = time.time()

    logger.info("="*60)
    logger.info("Starting Quest Calendar")
    logger.info("="*60)

    planner = None
    try:
        if not Config.validate():
            logger.error("Configuration validation failed")
            return 1

        planner = ServiceFactory.create_planner(get_calendar_service())

        logger.info("STEP 1: Loading planner data")
        planner.load()

        logger.info("STEP 2: Syncing reminders")
        planner.sync_reminders()

        logger.info("STEP 3: Warming occurrence cache")
        planner.warm_up()

        today = datetime.datetime.now(Config.timezone()).date()
        print(format_agenda(planner, today))
        return 0

    except FileNotFoundError as e:
        logger.error("Missing required file", exc_info=True)
        logger.error(f"Could not find: {e.filename}")
        return 1

    except ConnectionError as e:
        logger.error("Connection to Google failed", exc_info=True)
        logger.error(str(e))
        return 1

    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        return 1

    except Exception as e:
        logger.error("Unexpected fatal error", exc_info=True)
        logger.error(f"Error: {e}")
        return 1

    finally:
        if planner is not None:
            planner.close()
        elapsed = time.time() - start_time
        logger.info(f"Total execution time: {elapsed:.2f} seconds")


if __name__ == "__main__":
    sys.exit(main())
