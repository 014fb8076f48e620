"""
Event sanitization — strips account-bound data before recreating an event.
"""

import copy

# Fields the Calendar API assigns per account.  Sending any of them back in an
# insert either gets rejected (id, iCalUID collisions) or ties the new event to
# identities that only exist on the source account.
_PROVIDER_FIELDS = (
    "id",
    "etag",
    "creator",
    "organizer",
    "htmlLink",
    "hangoutLink",
    "iCalUID",
    "recurringEventId",
    "originalStartTime",
)


class EventSanitizer:
    """Builds creation payloads from events read off another account."""

    @staticmethod
    def sanitize(event: dict) -> dict:
        """
        Return a copy of ``event`` that is safe to insert as a new event.

        The source event is left untouched.

        Args:
            event: Event resource as returned by ``events().list``

        Returns:
            A new event body without identity or provider-assigned fields
        """
        sanitized = copy.deepcopy(event)

        for name in _PROVIDER_FIELDS:
            sanitized.pop(name, None)

        # Attendees would receive invitations from the destination account.
        sanitized["attendees"] = []

        # The API rejects reminder overrides combined with useDefault=true.
        reminders = sanitized.get("reminders")
        if reminders and reminders.get("useDefault"):
            reminders.pop("overrides", None)

        return sanitized


def describe_start(event: dict) -> str:
    """Return the event's start as ``dateTime<TAB>date``.

    Timed events fill the first column, all-day events the second.
    """
    start = event.get("start") or {}
    return f"{start.get('dateTime', '')}\t{start.get('date', '')}"
