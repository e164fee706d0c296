# File: quest_calendar/core/config_manager.py
"""
Centralized configuration management for Quest Calendar.
Loads settings from environment variables and the optional .env file.
"""

import os
from pathlib import Path
from typing import List

import pytz
from dotenv import load_dotenv

from quest_calendar.utils.logger import setup_logger

# Load environment variables
load_dotenv()

logger = setup_logger(__name__)


def _int_env(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    """Application configuration singleton."""

    # Base directories
    BASE_DIR = Path(__file__).parent.parent.parent  # Go up 3 levels from quest_calendar/core/

    # Subdirectories
    DATA_DIR = BASE_DIR / "data"
    LOGS_DIR = BASE_DIR / "logs"

    # Files
    DATA_FILE = Path(os.getenv("DATA_FILE", str(DATA_DIR / "planner.json")))
    TOKEN_FILE = BASE_DIR / "token.json"
    CREDENTIALS_FILE = BASE_DIR / "credentials.json"
    ENV_FILE = BASE_DIR / ".env"

    # Google Services
    CALENDAR_ID = os.getenv("CALENDAR_ID", "primary")
    GOOGLE_SCOPES = [
        'https://www.googleapis.com/auth/calendar',
    ]

    # Application Settings
    TARGET_TIMEZONE = os.getenv("TIMEZONE", "Europe/Amsterdam")
    GENERATOR_ID = "Quest_Calendar_Reminders_v1"
    FIRST_WEEKDAY = _int_env("FIRST_WEEKDAY", 0)  # 0 = Monday

    # Occurrence cache
    CACHE_TTL_SECONDS = _int_env("CACHE_TTL_SECONDS", 300)
    CACHE_MAX_ENTRIES = _int_env("CACHE_MAX_ENTRIES", 50)
    WARMUP_WORKERS = _int_env("WARMUP_WORKERS", 2)

    # Progression
    DAILY_XP_CAP = _int_env("DAILY_XP_CAP", 200)

    # Reminders
    REMINDER_LOOKAHEAD_DAYS = _int_env("REMINDER_LOOKAHEAD_DAYS", 30)

    @classmethod
    def timezone(cls) -> pytz.BaseTzInfo:
        """Return the configured pytz timezone."""
        return pytz.timezone(cls.TARGET_TIMEZONE)

    @classmethod
    def validate(cls) -> bool:
        """Validate that all configuration values are usable."""
        errors: List[str] = []

        if cls.TARGET_TIMEZONE not in pytz.all_timezones_set:
            errors.append(f"Unknown timezone: {cls.TARGET_TIMEZONE}")

        for name in ("CACHE_TTL_SECONDS", "CACHE_MAX_ENTRIES", "WARMUP_WORKERS",
                     "DAILY_XP_CAP", "REMINDER_LOOKAHEAD_DAYS"):
            if getattr(cls, name) <= 0:
                errors.append(f"{name} must be positive")

        if not 0 <= cls.FIRST_WEEKDAY <= 6:
            errors.append("FIRST_WEEKDAY must be between 0 (Monday) and 6 (Sunday)")

        if errors:
            for error in errors:
                logger.error(f"Configuration Error: {error}")
            return False

        return True
