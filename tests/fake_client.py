"""
In-memory fake calendar client for testing.

Duck-type-compatible stand-in for GoogleCalendarClient.  No network connection
is required — events are kept in a plain dict keyed by id.
"""

import itertools
import math


class ProviderError(Exception):
    """Simulated failure of a Calendar API call."""


class FakeCalendarClient:
    """In-memory stub that satisfies the GoogleCalendarClient duck-type contract.

    ``create_failures`` maps an event summary to the number of times creating
    it fails before succeeding (``math.inf`` for never); ``remove_failures``
    does the same keyed by event id.  Creating the event whose summary is
    ``interrupt_on`` raises KeyboardInterrupt, as if Ctrl-C hit mid-call.
    """

    _ids = itertools.count(1)

    def __init__(
        self,
        initial_events: list[dict] | None = None,
        create_failures: dict[str, float] | None = None,
        remove_failures: dict[str, float] | None = None,
        account: str = "someone@example.com",
        interrupt_on: str | None = None,
    ):
        self._events: dict[str, dict] = {e["id"]: e for e in (initial_events or [])}
        self._create_failures = dict(create_failures or {})
        self._remove_failures = dict(remove_failures or {})
        self.account = account
        self.interrupt_on = interrupt_on
        self.creates: list[dict] = []
        self.removes: list[str] = []
        self.create_attempts: list[dict] = []
        self.remove_attempts: list[str] = []
        # Shared call log across clients, set by tests that check ordering.
        self.journal: list[tuple] | None = None

    # ------------------------------------------------------------------ #
    # GoogleCalendarClient interface                                        #
    # ------------------------------------------------------------------ #

    def get_all_events(self) -> list[dict]:
        return list(self._events.values())

    def create_event(self, body: dict) -> str:
        self.create_attempts.append(body)
        summary = body.get("summary", "")
        self._journal("create", summary)
        if self.interrupt_on is not None and summary == self.interrupt_on:
            raise KeyboardInterrupt
        if self._should_fail(self._create_failures, summary):
            raise ProviderError(f"create failed for {summary}")
        new_id = f"created{next(self._ids)}"
        self._events[new_id] = dict(body, id=new_id)
        self.creates.append(body)
        return new_id

    def remove_event(self, event_id: str):
        self.remove_attempts.append(event_id)
        self._journal("remove", event_id)
        if self._should_fail(self._remove_failures, event_id):
            raise ProviderError(f"remove failed for {event_id}")
        self._events.pop(event_id, None)
        self.removes.append(event_id)

    def get_account_name(self) -> str:
        return self.account

    # ------------------------------------------------------------------ #
    # Test helpers                                                          #
    # ------------------------------------------------------------------ #

    def _journal(self, op: str, key: str):
        if self.journal is not None:
            self.journal.append((op, key))

    @staticmethod
    def _should_fail(failures: dict[str, float], key: str) -> bool:
        remaining = failures.get(key, 0)
        if remaining <= 0:
            return False
        if not math.isinf(remaining):
            failures[key] = remaining - 1
        return True

    @property
    def event_count(self) -> int:
        return len(self._events)

    def has_id(self, event_id: str) -> bool:
        return event_id in self._events
