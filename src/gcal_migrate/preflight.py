"""
Preflight checks run before authorization to catch common misconfigurations early.
"""

import errno
import logging
import socket

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from gcal_migrate.auth import load_client_config
from gcal_migrate.models import CredentialsError
from gcal_migrate.models import MigrationConfig

logger = logging.getLogger(__name__)


def run_preflight_checks(cfg: MigrationConfig, console: Console) -> bool:
    """Return True if the migration may proceed; print issues and return False otherwise."""
    issues: list[tuple[str, str, str]] = []  # (label, detail, hint)

    # 1. Client secret file present and well-formed
    try:
        load_client_config(cfg.credentials_path)
    except CredentialsError as e:
        logger.error("Client secret file unusable: %s", e)
        issues.append(
            (
                "Credentials",
                str(e),
                "Download an OAuth client ID (Desktop app) JSON from the Google Cloud Console",
            )
        )

    # 2. Callback port valid and free
    if not 0 <= cfg.callback_port <= 65535:
        logger.error("Callback port out of range: %s", cfg.callback_port)
        issues.append(
            (
                "Callback listener",
                f"port {cfg.callback_port} is out of range",
                "Pick a port between 1 and 65535 (0 lets the OS choose)",
            )
        )
    elif cfg.callback_port:
        try:
            with socket.create_server((cfg.callback_host, cfg.callback_port)):
                pass
        except OSError as e:
            logger.error(
                "Cannot bind callback listener on %s:%s: %s",
                cfg.callback_host,
                cfg.callback_port,
                e,
            )
            if e.errno == errno.EADDRINUSE:
                hint = "Another process holds the port; pass --port to pick a different one"
            else:
                hint = e.strerror or str(e)
            issues.append(
                (
                    "Callback listener",
                    f"{cfg.callback_host}:{cfg.callback_port}: {e}",
                    hint,
                )
            )

    if issues:
        _print_issues(issues, console)
        return False

    return True


def _print_issues(issues: list[tuple[str, str, str]], console: Console) -> None:
    body = Text()
    for i, (label, detail, hint) in enumerate(issues):
        if i:
            body.append("\n")
        body.append(f"  ✗  {label}: ", style="bold red")
        body.append(detail, style="bold red")
        body.append(f"\n       → {hint}", style="yellow")

    console.print(Panel(body, title="[bold red]Preflight checks failed[/bold red]"))
