# File: quest_calendar/services/service_factory.py

from pathlib import Path
from typing import Optional, Union
from googleapiclient.discovery import Resource

from quest_calendar.core.config_manager import Config
from quest_calendar.core.planner import Planner
from quest_calendar.utils.logger import setup_logger
from quest_calendar.services.calendar_service import GoogleCalendarReminderService
from quest_calendar.services.ports import NotificationService, NullNotificationService
from quest_calendar.services.storage_service import JsonFileStore

logger = setup_logger(__name__)


class ServiceFactory:
    """Factory for creating service instances."""

    @staticmethod
    def create_notification_service(calendar_service: Optional[Resource]) -> NotificationService:
        """
        Pick the reminder backend.

        Args:
            calendar_service: Authenticated calendar API resource, or None

        Returns:
            Google Calendar backend when authenticated, otherwise the logging-only one
        """
        if calendar_service is None:
            logger.info("Reminders will only be logged (no Google Calendar access)")
            return NullNotificationService()
        return GoogleCalendarReminderService(calendar_service, Config.CALENDAR_ID)

    @staticmethod
    def create_planner(
        calendar_service: Optional[Resource] = None,
        data_file: Optional[Union[str, Path]] = None
    ) -> Planner:
        """
        Create a Planner wired to the configured store and reminder backend.

        Args:
            calendar_service: Authenticated calendar API resource, or None
            data_file: Snapshot file (default: Config.DATA_FILE)

        Returns:
            Planner instance (not yet loaded)
        """
        store = JsonFileStore(data_file or Config.DATA_FILE)
        notifications = ServiceFactory.create_notification_service(calendar_service)
        return Planner(store, notifications)
