"""
Command-line interface for gcal-migrate.
"""

import logging
from configparser import ConfigParser
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gcal_migrate.migration import SOURCE
from gcal_migrate.migration import CalendarMigrator
from gcal_migrate.models import COPY_RETRIES
from gcal_migrate.models import COPY_RETRY_DELAY
from gcal_migrate.models import DEFAULT_AUTH_TIMEOUT
from gcal_migrate.models import DEFAULT_CALENDAR_ID
from gcal_migrate.models import DEFAULT_CALLBACK_HOST
from gcal_migrate.models import DEFAULT_CALLBACK_PORT
from gcal_migrate.models import DEFAULT_CONFIG
from gcal_migrate.models import DEFAULT_CREDENTIALS
from gcal_migrate.models import DELETE_RETRIES
from gcal_migrate.models import DELETE_RETRY_DELAY
from gcal_migrate.models import MigrationConfig
from gcal_migrate.models import MigrationError
from gcal_migrate.models import MigrationResult
from gcal_migrate.models import RetryPolicy
from gcal_migrate.sanitizer import describe_start

# ---------------------------------------------------------------------------
# Typer app
# ---------------------------------------------------------------------------

app = typer.Typer(
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Move every event from one Google Calendar account to another.",
)

console = Console()

CONFIG_SECTION = "gcal-migrate"


# ---------------------------------------------------------------------------
# Global state shared across subcommands
# ---------------------------------------------------------------------------


@dataclass
class _State:
    config_path: Path = field(default_factory=lambda: DEFAULT_CONFIG)
    verbose: bool = False


state = _State()


@app.callback()
def _global(
    config: Annotated[
        Path,
        typer.Option("--config", "-c", help=f"Config file path (default: {DEFAULT_CONFIG})"),
    ] = DEFAULT_CONFIG,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose debug output"),
    ] = False,
) -> None:
    state.config_path = config
    state.verbose = verbose
    _setup_logging(verbose)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, console=console)],
    )
    # googleapiclient logs every discovery fetch at INFO.
    logging.getLogger("googleapiclient").setLevel(logging.WARNING)


def _load_config_file(config_path: Path) -> dict[str, str]:
    if not config_path.exists():
        return {}
    parser = ConfigParser()
    parser.read(config_path)
    if CONFIG_SECTION not in parser:
        return {}
    return dict(parser[CONFIG_SECTION])


def _pick(cli_value, file_values: dict[str, str], key: str, convert, default):
    if cli_value is not None:
        return cli_value
    if key in file_values:
        try:
            return convert(file_values[key])
        except ValueError:
            raise typer.BadParameter(
                f"Invalid value for '{key}' in {state.config_path}: {file_values[key]!r}"
            ) from None
    return default


def _build_config(
    credentials: Path | None,
    calendar: str | None,
    host: str | None,
    port: int | None,
    retries: int | None,
    retry_delay: float | None,
    auth_timeout: float | None,
    dry_run: bool = False,
    yes: bool = False,
    strict: bool = False,
    browser: bool = False,
) -> MigrationConfig:
    file_values = _load_config_file(state.config_path)

    retries_copy = _pick(retries, file_values, "retries", int, COPY_RETRIES)
    retries_delete = _pick(retries, file_values, "retries", int, DELETE_RETRIES)
    delay_copy = _pick(retry_delay, file_values, "retry_delay", float, COPY_RETRY_DELAY)
    delay_delete = _pick(retry_delay, file_values, "retry_delay", float, DELETE_RETRY_DELAY)
    if retries_copy < 1:
        raise typer.BadParameter("retries must be at least 1")
    if delay_copy < 0:
        raise typer.BadParameter("retry_delay must not be negative")

    callback_port = _pick(port, file_values, "port", int, DEFAULT_CALLBACK_PORT)
    if not 0 <= callback_port <= 65535:
        raise typer.BadParameter(f"port must be between 0 and 65535, got {callback_port}")
    timeout = _pick(auth_timeout, file_values, "auth_timeout", float, DEFAULT_AUTH_TIMEOUT)
    if timeout <= 0:
        raise typer.BadParameter("auth_timeout must be positive")

    return MigrationConfig(
        credentials_path=_pick(credentials, file_values, "credentials", Path, DEFAULT_CREDENTIALS),
        calendar_id=_pick(calendar, file_values, "calendar_id", str, DEFAULT_CALENDAR_ID),
        callback_host=_pick(host, file_values, "host", str, DEFAULT_CALLBACK_HOST),
        callback_port=callback_port,
        auth_timeout=timeout,
        copy_retry=RetryPolicy(retries_copy, delay_copy),
        delete_retry=RetryPolicy(retries_delete, delay_delete),
        dry_run=dry_run,
        yes=yes,
        strict=strict,
        open_browser=browser,
        verbose=state.verbose,
    )


def _announce(cfg: MigrationConfig, role: str, url: str) -> None:
    direction = "[bold]from[/bold]" if role == SOURCE else "[bold]to[/bold]"
    console.print(
        f"Please navigate to the following link and authorize with the account "
        f"that you want to move events {direction}."
    )
    console.print(url, markup=False, highlight=False, soft_wrap=True)
    if cfg.open_browser:
        typer.launch(url)


def _print_failures(result: MigrationResult) -> None:
    """Audit trail: one ``dateTime<TAB>date`` line per event needing manual follow-up."""
    if result.copy_failed:
        typer.echo(f"{len(result.copy_failed)} items failed to copy:")
    for event in result.copy_failed:
        typer.echo(describe_start(event))
    if result.delete_failed:
        typer.echo(f"{len(result.delete_failed)} items failed to delete:")
    for event in result.delete_failed:
        typer.echo(describe_start(event))


def _run_migration(cfg: MigrationConfig) -> None:
    """Core runner: preflight, authorize, confirm, migrate, show results."""
    from gcal_migrate.preflight import run_preflight_checks

    if not run_preflight_checks(cfg, console):
        raise typer.Exit(1)

    migrator = CalendarMigrator(cfg)

    try:
        migrator.connect(lambda role, url: _announce(cfg, role, url))
        events = migrator.list_source_events()
    except MigrationError as e:
        console.print(f"[bold red]Migration failed:[/] {e}")
        raise typer.Exit(1) from None
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted by user[/]")
        raise typer.Exit(130) from None

    # -- Info panel ----------------------------------------------------------
    info = Text()
    info.append("  From:      ", style="bold")
    info.append(f"{migrator.source_account or '(unknown)'}\n")
    info.append("  To:        ", style="bold")
    info.append(f"{migrator.dest_account or '(unknown)'}\n")
    info.append("  Calendar:  ", style="bold")
    info.append(f"{cfg.calendar_id}\n")
    info.append("  Events:    ", style="bold")
    info.append(str(len(events)))
    info.append("\n  Retries:   ", style="bold")
    info.append(f"{cfg.copy_retry.attempts} × {cfg.copy_retry.delay:g}s", style="dim")
    if cfg.dry_run:
        info.append("\n  Mode:      ")
        info.append("DRY RUN", style="bold magenta")

    console.print(Panel(info, title="[bold]Google Calendar Migration[/bold]"))

    if not events:
        console.print("[green]Nothing to migrate.[/]")
        return

    # -- Confirmation --------------------------------------------------------
    if not cfg.yes and not cfg.dry_run:
        typer.confirm(
            f"Move {len(events)} events? They will be deleted from the source account.",
            abort=True,
        )

    # -- Run -----------------------------------------------------------------
    result = MigrationResult()
    try:
        migrator.migrate(events, result=result)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted by user[/]")
        _print_results(result)
        raise typer.Exit(130) from None

    _print_results(result)
    if result.has_failures and cfg.strict:
        raise typer.Exit(1)


def _print_results(result: MigrationResult) -> None:
    results = Table.grid(padding=(0, 2))
    results.add_column(style="bold")
    results.add_column(justify="right")
    results.add_row("Migrated", str(result.migrated))
    for label, failed in (
        ("Copy failed", result.copy_failed),
        ("Delete failed", result.delete_failed),
    ):
        value = Text(str(len(failed)))
        if failed:
            value.stylize("bold red")
        else:
            value.append(" ✓", style="green")
        results.add_row(label, value)

    console.print(Panel(results, title="[bold]Results[/bold]", expand=False))
    _print_failures(result)


# ---------------------------------------------------------------------------
# Shared options
# ---------------------------------------------------------------------------

_CREDS_OPT = Annotated[
    Path | None,
    typer.Option(
        "--credentials",
        help=f"OAuth client secret JSON (default: {DEFAULT_CREDENTIALS})",
    ),
]
_HOST_OPT = Annotated[
    str | None,
    typer.Option("--host", help=f"Callback listener address (default: {DEFAULT_CALLBACK_HOST})"),
]
_PORT_OPT = Annotated[
    int | None,
    typer.Option(
        "--port",
        min=0,
        max=65535,
        help=f"Callback listener port (default: {DEFAULT_CALLBACK_PORT})",
    ),
]


@app.command()
def migrate(
    credentials: _CREDS_OPT = None,
    calendar: Annotated[
        str | None,
        typer.Option(
            "--calendar", help=f"Calendar ID on both accounts (default: {DEFAULT_CALENDAR_ID})"
        ),
    ] = None,
    host: _HOST_OPT = None,
    port: _PORT_OPT = None,
    retries: Annotated[
        int | None,
        typer.Option("--retries", help=f"Attempts per copy/delete call (default: {COPY_RETRIES})"),
    ] = None,
    retry_delay: Annotated[
        float | None,
        typer.Option(
            "--retry-delay", help=f"Seconds between attempts (default: {COPY_RETRY_DELAY:g})"
        ),
    ] = None,
    auth_timeout: Annotated[
        float | None,
        typer.Option(
            "--auth-timeout",
            help=f"Seconds to wait for each authorization (default: {DEFAULT_AUTH_TIMEOUT:g})",
        ),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="List events without moving them")
    ] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")] = False,
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Exit with code 1 when any event failed to copy or delete"),
    ] = False,
    browser: Annotated[
        bool, typer.Option("--browser", help="Open each authorization link in a browser")
    ] = False,
) -> None:
    """Move all events from the source account to the destination account.

    You authorize the [bold]source[/bold] account first, then the
    [bold]destination[/bold].  Each event is copied, and only deleted from the
    source once the copy succeeded.
    """
    _run_migration(
        _build_config(
            credentials,
            calendar,
            host,
            port,
            retries,
            retry_delay,
            auth_timeout,
            dry_run=dry_run,
            yes=yes,
            strict=strict,
            browser=browser,
        )
    )


@app.command()
def check(
    credentials: _CREDS_OPT = None,
    host: _HOST_OPT = None,
    port: _PORT_OPT = None,
) -> None:
    """Run the preflight checks without authorizing any account."""
    from gcal_migrate.preflight import run_preflight_checks

    cfg = _build_config(credentials, None, host, port, None, None, None)
    if not run_preflight_checks(cfg, console):
        raise typer.Exit(1)
    console.print("[green]All preflight checks passed.[/]")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    app()
