# File: quest_calendar/utils/logger.py
"""
Centralized logging configuration for Quest Calendar.

Handlers are attached once, to the "quest_calendar" logger. Module and
class loggers are its children and propagate to it, so the whole
application shares one console stream and one daily log file.
"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime

ROOT_LOGGER_NAME = "quest_calendar"


def _level_from_env(default: int) -> int:
    """LOG_LEVEL (e.g. DEBUG) overrides the requested level."""
    raw = os.getenv("LOG_LEVEL", "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def _configure_root(level: int) -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)

    # Prevent duplicate handlers
    if root.handlers:
        return root

    root.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
        datefmt='%H:%M:%S'
    ))

    # File handler for persistent logs
    log_dir = Path(os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / f"quest_calendar_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    root.addHandler(console_handler)
    root.addHandler(file_handler)
    return root


def setup_logger(name: str = ROOT_LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """
    Return a logger inside the application namespace.

    Args:
        name: Logger name; names outside "quest_calendar" (scripts, __main__) are nested under it
        level: Logging level used when the handlers are first attached (default: INFO)

    Returns:
        Logger that propagates to the shared handlers
    """
    _configure_root(_level_from_env(level))

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class LoggerMixin:
    """Mixin to add logging capability to any class."""

    @property
    def logger(self) -> logging.Logger:
        """Get logger for this class."""
        if not hasattr(self, '_logger'):
            self._logger = setup_logger(self.__class__.__name__)
        return self._logger
