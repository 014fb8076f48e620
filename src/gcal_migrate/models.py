"""
Pure data models — no Google API or network imports.
"""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path

DEFAULT_CONFIG = Path.home() / ".config/gcal-migrate.conf"
DEFAULT_CREDENTIALS = Path("credentials.json")
DEFAULT_CALENDAR_ID = "primary"
DEFAULT_CALLBACK_HOST = "localhost"
DEFAULT_CALLBACK_PORT = 42069
DEFAULT_AUTH_TIMEOUT = 300.0

COPY_RETRIES = 12
DELETE_RETRIES = 12
COPY_RETRY_DELAY = 5.0
DELETE_RETRY_DELAY = 5.0

CALENDAR_READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"
CALENDAR_EVENTS_SCOPE = "https://www.googleapis.com/auth/calendar.events"
SCOPES = [CALENDAR_READONLY_SCOPE, CALENDAR_EVENTS_SCOPE]


class MigrationError(Exception):
    """Base exception for calendar migration errors."""

    pass


class CredentialsError(MigrationError):
    """The OAuth client secret file is missing or malformed."""

    pass


class AuthorizationError(MigrationError):
    """An account could not be authorized."""

    pass


class AuthorizationTimeout(AuthorizationError):
    """No authorization callback arrived in time."""

    pass


class EventListingError(MigrationError):
    """A page of events could not be fetched from the source account."""

    pass


class MigrationOutcome(Enum):
    MIGRATED = "migrated"
    COPY_FAILED = "copy-failed"
    DELETE_FAILED = "delete-failed"


@dataclass(frozen=True)
class RetryPolicy:
    """Flat retry: a fixed number of attempts with a fixed delay between them."""

    attempts: int
    delay: float


@dataclass
class MigrationConfig:
    """Configuration for a migration run."""

    credentials_path: Path = DEFAULT_CREDENTIALS
    calendar_id: str = DEFAULT_CALENDAR_ID
    callback_host: str = DEFAULT_CALLBACK_HOST
    callback_port: int = DEFAULT_CALLBACK_PORT
    auth_timeout: float = DEFAULT_AUTH_TIMEOUT
    copy_retry: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(COPY_RETRIES, COPY_RETRY_DELAY)
    )
    delete_retry: RetryPolicy = field(
        default_factory=lambda: RetryPolicy(DELETE_RETRIES, DELETE_RETRY_DELAY)
    )
    dry_run: bool = False
    yes: bool = False  # Auto-confirm without prompting
    strict: bool = False  # Exit non-zero when any event failed
    open_browser: bool = False
    verbose: bool = False


@dataclass
class MigrationResult:
    """Outcome of a migration run.

    Events are the original source events, never the sanitized copies.
    An event whose copy failed is listed in both ``copy_failed`` and
    ``delete_failed``: it was never removed from the source.
    """

    migrated: int = 0
    copy_failed: list[dict] = field(default_factory=list)
    delete_failed: list[dict] = field(default_factory=list)

    def record(self, event: dict, outcome: MigrationOutcome) -> None:
        if outcome is MigrationOutcome.MIGRATED:
            self.migrated += 1
        elif outcome is MigrationOutcome.COPY_FAILED:
            self.copy_failed.append(event)
            self.delete_failed.append(event)
        elif outcome is MigrationOutcome.DELETE_FAILED:
            self.delete_failed.append(event)

    @property
    def has_failures(self) -> bool:
        return bool(self.copy_failed or self.delete_failed)
