"""
Tests for run_preflight_checks: credential file and callback port.
"""

import json
import socket

from rich.console import Console

from gcal_migrate.models import MigrationConfig
from gcal_migrate.preflight import run_preflight_checks


def _console() -> Console:
    return Console(record=True, width=200)


def _credentials(tmp_path):
    path = tmp_path / "credentials.json"
    path.write_text(json.dumps({"installed": {"client_id": "x", "client_secret": "y"}}))
    return path


def test_all_checks_pass(tmp_path):
    cfg = MigrationConfig(credentials_path=_credentials(tmp_path), callback_port=0)
    assert run_preflight_checks(cfg, _console()) is True


def test_missing_credentials(tmp_path):
    console = _console()
    cfg = MigrationConfig(credentials_path=tmp_path / "missing.json", callback_port=0)

    assert run_preflight_checks(cfg, console) is False
    output = console.export_text()
    assert "Credentials" in output
    assert "missing.json" in output


def test_port_in_use(tmp_path):
    console = _console()
    with socket.create_server(("127.0.0.1", 0)) as busy:
        port = busy.getsockname()[1]
        cfg = MigrationConfig(
            credentials_path=_credentials(tmp_path),
            callback_host="127.0.0.1",
            callback_port=port,
        )
        assert run_preflight_checks(cfg, console) is False
    assert "Callback listener" in console.export_text()


def test_port_out_of_range(tmp_path):
    console = _console()
    cfg = MigrationConfig(credentials_path=_credentials(tmp_path), callback_port=70000)

    assert run_preflight_checks(cfg, console) is False
    output = console.export_text()
    assert "Callback listener" in output
    assert "70000" in output
