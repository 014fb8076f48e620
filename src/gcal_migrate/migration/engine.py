"""
Source→destination event migration: copy each event, then delete the original.
"""

import time
from typing import TYPE_CHECKING
from typing import Callable

from gcal_migrate.migration.retry import call_with_retry
from gcal_migrate.models import MigrationConfig
from gcal_migrate.models import MigrationOutcome
from gcal_migrate.models import MigrationResult
from gcal_migrate.sanitizer import EventSanitizer
from gcal_migrate.sanitizer import describe_start

if TYPE_CHECKING:
    from gcal_migrate.google_client import GoogleCalendarClient


def _migrate_one(
    config: MigrationConfig,
    logger,
    event: dict,
    source_client: "GoogleCalendarClient",
    dest_client: "GoogleCalendarClient",
    sleep: Callable[[float], None],
) -> MigrationOutcome:
    """Copy one event to the destination, then remove it from the source."""
    event_id = event.get("id", "")
    label = f"{event.get('summary', '(no title)')!r} [{event_id}]"

    if config.dry_run:
        logger.info(f"[DRY RUN] Would MOVE event: {label}")
        return MigrationOutcome.MIGRATED

    sanitized = EventSanitizer.sanitize(event)
    copied = call_with_retry(
        dest_client.create_event,
        sanitized,
        policy=config.copy_retry,
        logger=logger,
        action=f"copying event {label}",
        sleep=sleep,
    )
    if not copied:
        # Never delete what was not duplicated first.
        return MigrationOutcome.COPY_FAILED

    deleted = call_with_retry(
        source_client.remove_event,
        event_id,
        policy=config.delete_retry,
        logger=logger,
        action=f"deleting event {label}",
        sleep=sleep,
    )
    if not deleted:
        logger.warning(f"Event {label} now exists on both accounts")
        return MigrationOutcome.DELETE_FAILED

    logger.debug(f"Moved event {label}")
    return MigrationOutcome.MIGRATED


def migrate_events(
    config: MigrationConfig,
    logger,
    events: list[dict],
    source_client: "GoogleCalendarClient",
    dest_client: "GoogleCalendarClient",
    sleep: Callable[[float], None] = time.sleep,
    result: MigrationResult | None = None,
) -> MigrationResult:
    """
    Move ``events`` from the source account to the destination, one at a time.

    Each event is fully resolved (copied and deleted, or given up on) before
    the next one starts.  Failures are collected into the result instead of
    aborting the run.

    Pass ``result`` to keep the partial outcome when the run is interrupted:
    the event in flight at that moment is recorded as a delete failure, since
    it may still be on the source and may already have been copied.
    """
    if result is None:
        result = MigrationResult()
    total = len(events)

    for i, event in enumerate(events, 1):
        try:
            outcome = _migrate_one(config, logger, event, source_client, dest_client, sleep)
        except KeyboardInterrupt:
            result.record(event, MigrationOutcome.DELETE_FAILED)
            logger.warning(f"Interrupted at {i}/{total}: {describe_start(event)}")
            raise
        result.record(event, outcome)
        if outcome is not MigrationOutcome.MIGRATED:
            logger.debug(f"{outcome.value}: {describe_start(event)}")

        logger.info(f"{i}/{total} ({100.0 * i / total:.2f}%)")

    return result
