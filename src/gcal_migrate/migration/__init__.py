"""
CalendarMigrator — thin orchestrator: authorize, list, then hand off to the engine.
"""

import logging
import time
from typing import Callable

from gcal_migrate.auth import CallbackListener
from gcal_migrate.auth import authorize_account
from gcal_migrate.auth import load_client_config
from gcal_migrate.google_client import GoogleCalendarClient
from gcal_migrate.google_client import build_service
from gcal_migrate.migration.engine import migrate_events
from gcal_migrate.models import SCOPES
from gcal_migrate.models import MigrationConfig
from gcal_migrate.models import MigrationError
from gcal_migrate.models import MigrationResult

SOURCE = "source"
DESTINATION = "destination"


class CalendarMigrator:
    """Main migration engine."""

    def __init__(self, config: MigrationConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.source_client: GoogleCalendarClient | None = None
        self.dest_client: GoogleCalendarClient | None = None
        self.source_account = ""
        self.dest_account = ""

    def connect(self, announce: Callable[[str, str], None] | None = None):
        """
        Authorize the source account, then the destination account.

        ``announce(role, url)`` is called with each consent URL; ``role`` is
        ``"source"`` or ``"destination"``.
        """
        if announce is None:
            announce = self._log_url

        client_config = load_client_config(self.config.credentials_path)

        clients = {}
        with CallbackListener(self.config.callback_host, self.config.callback_port) as listener:
            for role in (SOURCE, DESTINATION):
                self.logger.debug(f"Authorizing {role} account...")
                credentials = authorize_account(
                    client_config,
                    SCOPES,
                    listener,
                    lambda url, role=role: announce(role, url),
                    timeout=self.config.auth_timeout,
                )
                clients[role] = GoogleCalendarClient(
                    build_service(credentials), self.config.calendar_id
                )

        self.source_client = clients[SOURCE]
        self.dest_client = clients[DESTINATION]

        self.source_account = self.source_client.get_account_name()
        self.dest_account = self.dest_client.get_account_name()
        if self.source_account and self.source_account == self.dest_account:
            raise MigrationError(
                f"Source and destination are the same account ({self.source_account})"
            )

    def list_source_events(self) -> list[dict]:
        """Fetch every event on the source calendar."""
        if not self.source_client:
            raise MigrationError("Accounts not connected")
        self.logger.info("Fetching source events...")
        events = self.source_client.get_all_events()
        self.logger.info(f"Found {len(events)} events.")
        return events

    def migrate(
        self, events: list[dict], sleep=time.sleep, result: MigrationResult | None = None
    ) -> MigrationResult:
        """Move ``events`` to the destination account, filling ``result`` if given."""
        if not self.source_client or not self.dest_client:
            raise MigrationError("Accounts not connected")
        return migrate_events(
            self.config,
            self.logger,
            events,
            self.source_client,
            self.dest_client,
            sleep=sleep,
            result=result,
        )

    def _log_url(self, role: str, url: str):
        direction = "from" if role == SOURCE else "to"
        self.logger.info(f"Authorize the account to move events {direction}: {url}")
