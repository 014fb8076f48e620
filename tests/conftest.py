"""
Shared pytest fixtures and event helpers.
"""

import logging

import pytest

from gcal_migrate.models import MigrationConfig
from gcal_migrate.models import RetryPolicy


def make_event(event_id: str, summary: str = "Test Event", **extra) -> dict:
    """Return a minimal timed event resource as the Calendar API lists it."""
    event = {
        "kind": "calendar#event",
        "id": event_id,
        "status": "confirmed",
        "summary": summary,
        "start": {"dateTime": "2026-03-01T10:00:00Z"},
        "end": {"dateTime": "2026-03-01T11:00:00Z"},
        "reminders": {"useDefault": True},
    }
    event.update(extra)
    return event


def make_all_day_event(event_id: str, summary: str = "All Day Event") -> dict:
    """Return an all-day event (date-only start/end)."""
    return make_event(
        event_id,
        summary,
        start={"date": "2026-03-01"},
        end={"date": "2026-03-02"},
    )


def make_invitation(event_id: str, summary: str = "Team Sync") -> dict:
    """Return an event carrying every account-bound field the API hands out."""
    return make_event(
        event_id,
        summary,
        etag='"3181161784712000"',
        htmlLink=f"https://www.google.com/calendar/event?eid={event_id}",
        hangoutLink="https://meet.google.com/abc-defg-hij",
        iCalUID=f"{event_id}@google.com",
        recurringEventId="series123",
        originalStartTime={"dateTime": "2026-03-01T10:00:00Z"},
        creator={"email": "boss@example.com"},
        organizer={"email": "boss@example.com", "displayName": "The Boss"},
        attendees=[
            {"email": "boss@example.com", "organizer": True, "responseStatus": "accepted"},
            {"email": "me@example.com", "self": True, "responseStatus": "needsAction"},
        ],
        reminders={
            "useDefault": True,
            "overrides": [{"method": "popup", "minutes": 10}],
        },
    )


class SleepRecorder:
    """Stand-in for time.sleep that records each requested delay."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float):
        self.calls.append(seconds)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def migration_config():
    return MigrationConfig(
        copy_retry=RetryPolicy(attempts=12, delay=5.0),
        delete_retry=RetryPolicy(attempts=12, delay=5.0),
    )


@pytest.fixture
def migration_logger():
    return logging.getLogger("test_migration")
