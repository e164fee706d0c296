# File: quest_calendar/services/calendar_service.py
"""
Google Calendar reminder backend.

Each reminder becomes a short calendar event with a popup at its start,
tagged with the application's sourceId so it can be found and removed.
"""

import datetime
import hashlib
from typing import Any, Dict, Iterable, List

from googleapiclient.discovery import Resource
from googleapiclient.errors import HttpError

from quest_calendar.core.config_manager import Config
from quest_calendar.utils.logger import setup_logger

logger = setup_logger(__name__)

REMINDER_EVENT_MINUTES = 5


def event_id_for(identifier: str) -> str:
    """Calendar event id for a reminder identifier (hex is valid base32hex)."""
    return hashlib.sha1(identifier.encode("utf-8")).hexdigest()


class GoogleCalendarReminderService:
    """NotificationService backed by Google Calendar events."""

    def __init__(self, calendar_service: Resource, calendar_id: str = Config.CALENDAR_ID):
        """
        Initialize the reminder backend.

        Args:
            calendar_service: Authenticated Google Calendar API resource
            calendar_id: Calendar receiving the reminder events
        """
        self.service = calendar_service
        self.calendar_id = calendar_id
        self.generator_id = Config.GENERATOR_ID

    def _build_event(self, identifier: str, trigger_at: datetime.datetime,
                     repeats: bool, payload: Dict[str, Any]) -> dict:
        end_at = trigger_at + datetime.timedelta(minutes=REMINDER_EVENT_MINUTES)
        event = {
            'id': event_id_for(identifier),
            'summary': f"[Reminder] {payload.get('title', 'Task')}",
            'description': payload.get('body', ''),
            'start': {
                'dateTime': trigger_at.isoformat(),
                'timeZone': Config.TARGET_TIMEZONE,
            },
            'end': {
                'dateTime': end_at.isoformat(),
                'timeZone': Config.TARGET_TIMEZONE,
            },
            'reminders': {
                'useDefault': False,
                'overrides': [{'method': 'popup', 'minutes': 0}],
            },
            'extendedProperties': {
                'private': {
                    'sourceId': self.generator_id,
                    'reminderId': identifier,
                    'occurrenceId': str(payload.get('occurrence_id', '')),
                    'taskId': str(payload.get('task_id', '')),
                }
            },
        }
        if repeats:
            event['recurrence'] = ['RRULE:FREQ=DAILY']
        return event

    def schedule(self, identifier: str, trigger_at: datetime.datetime,
                 repeats: bool, payload: Dict[str, Any]) -> None:
        """Create the reminder event, or overwrite it if the id already exists."""
        event = self._build_event(identifier, trigger_at, repeats, payload)
        try:
            self.service.events().insert(calendarId=self.calendar_id, body=event).execute()
        except HttpError as err:
            if getattr(err.resp, 'status', None) != 409:
                raise
            # Deleted events keep their id; overwrite instead
            logger.debug(f"Reminder event {event['id']} exists; updating")
            self.service.events().update(
                calendarId=self.calendar_id,
                eventId=event['id'],
                body=event
            ).execute()
        logger.debug(f"Scheduled reminder {identifier} at {trigger_at.isoformat()}")

    def _batch_delete(self, event_ids: List[str]) -> int:
        if not event_ids:
            return 0

        batch = self.service.new_batch_http_request()
        deleted_count = 0

        def callback(request_id, response, exception):
            nonlocal deleted_count
            if exception is None:
                deleted_count += 1
            elif getattr(getattr(exception, 'resp', None), 'status', None) in (404, 410):
                # Already gone
                deleted_count += 1
            else:
                logger.warning(f"Failed to delete reminder event {request_id}: {exception}")

        for event_id in event_ids:
            batch.add(
                self.service.events().delete(calendarId=self.calendar_id, eventId=event_id),
                callback=callback
            )

        batch.execute()
        return deleted_count

    def cancel(self, identifiers: Iterable[str]) -> None:
        event_ids = [event_id_for(ident) for ident in identifiers]
        deleted = self._batch_delete(event_ids)
        logger.info(f"Deleted {deleted}/{len(event_ids)} reminder events")

    def cancel_all(self) -> None:
        """Delete every event tagged with this application's sourceId."""
        event_ids: List[str] = []
        page_token = None
        while True:
            events_result = self.service.events().list(
                calendarId=self.calendar_id,
                privateExtendedProperty=f'sourceId={self.generator_id}',
                pageToken=page_token
            ).execute()
            event_ids.extend(event['id'] for event in events_result.get('items', []))
            page_token = events_result.get('nextPageToken')
            if not page_token:
                break

        if not event_ids:
            logger.info("No reminder events found")
            return

        deleted = self._batch_delete(event_ids)
        logger.info(f"Deleted {deleted} reminder events")
