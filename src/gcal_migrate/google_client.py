"""
Google Calendar API connectivity wrapper.
"""

import logging

import httplib2
from google.auth.exceptions import GoogleAuthError
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiError

from gcal_migrate.models import DEFAULT_CALENDAR_ID
from gcal_migrate.models import EventListingError
from gcal_migrate.models import MigrationError

logger = logging.getLogger(__name__)

# API errors (HttpError and friends), credential refresh failures, and
# connection-level failures from httplib2 or the socket layer.
_TRANSPORT_ERRORS = (GoogleApiError, GoogleAuthError, httplib2.HttpLib2Error, OSError)


def build_service(credentials):
    """Build a Calendar v3 service object for an authorized account."""
    return build("calendar", "v3", credentials=credentials, cache_discovery=False)


class GoogleCalendarClient:
    """Wrapper for the Calendar API operations used by a migration."""

    def __init__(self, service, calendar_id: str = DEFAULT_CALENDAR_ID):
        self.service = service
        self.calendar_id = calendar_id

    def _list_page(self, page_token: str | None) -> dict:
        try:
            return (
                self.service.events()
                .list(
                    calendarId=self.calendar_id,
                    showDeleted=False,
                    singleEvents=True,
                    orderBy="startTime",
                    pageToken=page_token,
                )
                .execute()
            )
        except _TRANSPORT_ERRORS as e:
            raise EventListingError(f"Unable to retrieve events: {e}") from e

    def get_all_events(self) -> list[dict]:
        """Retrieve every non-deleted event, following pagination to the end."""
        page = self._list_page(None)
        events = list(page.get("items", []))
        pages = 1
        while page.get("nextPageToken"):
            page = self._list_page(page["nextPageToken"])
            events.extend(page.get("items", []))
            pages += 1
        logger.debug(f"Fetched {len(events)} events in {pages} page(s)")
        return events

    def create_event(self, body: dict) -> str | None:
        """Create a new event and return the id the server assigned."""
        created = self.service.events().insert(calendarId=self.calendar_id, body=body).execute()
        return created.get("id")

    def remove_event(self, event_id: str):
        """Remove an event from the calendar."""
        self.service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()

    def get_account_name(self) -> str:
        """Return the account's primary calendar id (its email address)."""
        try:
            calendar = self.service.calendars().get(calendarId="primary").execute()
        except _TRANSPORT_ERRORS as e:
            raise MigrationError(f"Failed to look up account: {e}") from e
        return calendar.get("id", "")
