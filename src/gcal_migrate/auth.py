"""
OAuth authorization for the source and destination accounts.

Each account goes through the installed-app authorization-code flow.  The
consent URL redirects back to a small local HTTP listener, which hands the
code to the waiting authorization through a one-shot future.
"""

import json
import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Callable
from urllib.parse import parse_qs
from wsgiref.simple_server import WSGIRequestHandler
from wsgiref.simple_server import make_server

from google_auth_oauthlib.flow import Flow

from gcal_migrate.models import DEFAULT_AUTH_TIMEOUT
from gcal_migrate.models import AuthorizationError
from gcal_migrate.models import AuthorizationTimeout
from gcal_migrate.models import CredentialsError

logger = logging.getLogger(__name__)

CONFIRMATION_BODY = b"You can now close this tab."


def load_client_config(path: Path) -> dict:
    """Read the OAuth client secret JSON downloaded from the Cloud Console."""
    try:
        raw = Path(path).read_text()
    except OSError as e:
        raise CredentialsError(f"Unable to read client secret file {path}: {e}") from e

    try:
        config = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CredentialsError(f"Unable to parse client secret file {path}: {e}") from e

    if not isinstance(config, dict) or not ("installed" in config or "web" in config):
        raise CredentialsError(
            f"Client secret file {path} has no 'installed' or 'web' client section"
        )
    return config


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug("Callback listener: " + format, *args)


class CallbackListener:
    """Local HTTP endpoint receiving the OAuth redirect.

    Only one authorization may wait at a time; ``arm()`` replaces any
    previous pending future.
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self._server = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._pending: Future | None = None

    @property
    def redirect_uri(self) -> str:
        return f"http://localhost:{self.port}/"

    def start(self):
        self._server = make_server(self.host, self.port, self.app, handler_class=_QuietHandler)
        # Port 0 binds an ephemeral port; report the real one.
        self.port = self._server.server_port
        self._thread = threading.Thread(
            target=self._server.serve_forever, name="oauth-callback", daemon=True
        )
        self._thread.start()
        logger.debug(f"Callback listener on {self.host}:{self.port}")

    def stop(self):
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._thread.join()
        self._server = None
        self._thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False

    def arm(self) -> Future:
        """Return a fresh future that the next callback will resolve."""
        future: Future = Future()
        with self._lock:
            self._pending = future
        return future

    def app(self, environ, start_response):
        if environ.get("PATH_INFO", "/") != "/":
            start_response("404 Not Found", [("Content-Type", "text/plain")])
            return [b"Not Found"]

        params = parse_qs(environ.get("QUERY_STRING", ""))
        code = params.get("code", [""])[0]
        error = params.get("error", [""])[0]

        if not code and not error:
            start_response("400 Bad Request", [("Content-Type", "text/plain")])
            return [b"Missing authorization code"]

        with self._lock:
            future, self._pending = self._pending, None

        if future is None or future.done():
            start_response("409 Conflict", [("Content-Type", "text/plain")])
            return [b"No authorization in progress"]

        if error:
            future.set_exception(AuthorizationError(f"Authorization denied: {error}"))
        else:
            future.set_result(code)

        start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
        return [CONFIRMATION_BODY]


def authorize_account(
    client_config: dict,
    scopes: list[str],
    listener: CallbackListener,
    announce: Callable[[str], None],
    timeout: float = DEFAULT_AUTH_TIMEOUT,
):
    """
    Run one authorization-code flow and return the account's credentials.

    Args:
        client_config: Parsed client secret JSON
        scopes: OAuth scopes to request
        listener: Running callback listener receiving the redirect
        announce: Called with the consent URL the user must open
        timeout: Seconds to wait for the redirect

    Raises:
        AuthorizationTimeout: the redirect did not arrive in time
        AuthorizationError: the user denied access or the token exchange failed
    """
    flow = Flow.from_client_config(client_config, scopes=scopes, redirect_uri=listener.redirect_uri)
    auth_url, _ = flow.authorization_url(access_type="offline", prompt="consent")

    future = listener.arm()
    announce(auth_url)

    try:
        code = future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        raise AuthorizationTimeout(
            f"No authorization received within {timeout:g} seconds"
        ) from None

    try:
        flow.fetch_token(code=code)
    except Exception as e:
        raise AuthorizationError(f"Unable to retrieve token from web: {e}") from e
    return flow.credentials
