"""Out-of-band OAuth bootstrap for put.io.

Used only when no token was supplied or stored. The service hands out a short
code, the user approves it in a browser, and we poll until a token appears,
the deadline passes, or the caller sets the cancellation event.
"""

from __future__ import annotations

import logging
import threading
import time
import urllib.parse
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

import httpx

from .errors import LazyputError, ServiceError, TransportError
from .putio import API_BASE

logger = logging.getLogger(__name__)

DEFAULT_APP_ID = "8918"
APPROVAL_BASE = "https://app.put.io/authenticate"
POLL_INTERVAL_SECONDS = 2.0
AUTH_TIMEOUT_SECONDS = 5 * 60.0


@dataclass(frozen=True)
class TokenIssued:
    token: str


@dataclass(frozen=True)
class TimedOut:
    waited: float


@dataclass(frozen=True)
class Cancelled:
    pass


@dataclass(frozen=True)
class RequestFailed:
    """The initial code request failed; no polling happened."""

    error: str


AuthOutcome = Union[TokenIssued, TimedOut, Cancelled, RequestFailed]


class OOBAuthenticator:
    """Run the out-of-band code flow against the put.io OAuth endpoints."""

    def __init__(
        self,
        *,
        app_id: str = DEFAULT_APP_ID,
        base_url: str = API_BASE,
        transport: httpx.BaseTransport | None = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        timeout: float = AUTH_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        wait: Callable[[threading.Event, float], bool] = threading.Event.wait,
        open_browser: Callable[[str], object] = webbrowser.open,
    ) -> None:
        self.app_id = app_id
        self.poll_interval = poll_interval
        self.timeout = timeout
        self._clock = clock
        self._wait = wait
        self._open_browser = open_browser
        self._client = httpx.Client(base_url=base_url, timeout=15.0, transport=transport)

    def close(self) -> None:
        self._client.close()

    def request_code(self) -> str:
        """Ask the service for a fresh out-of-band code."""
        try:
            resp = self._client.get("/oauth2/oob/code", params={"app_id": self.app_id})
        except httpx.HTTPError as exc:
            raise TransportError(f"requesting OOB code: {exc}") from exc
        if resp.status_code != 200:
            raise ServiceError(
                f"requesting OOB code: unexpected status {resp.status_code}: {resp.text[:200]}",
                resp.status_code,
            )
        try:
            code = resp.json().get("code")
        except (ValueError, AttributeError) as exc:
            raise ServiceError("requesting OOB code: malformed response") from exc
        if not isinstance(code, str) or not code:
            raise ServiceError("requesting OOB code: response has no code")
        return code

    def approval_url(self, code: str) -> str:
        params = {"client_id": self.app_id, "response_type": "oob", "oob_code": code}
        return f"{APPROVAL_BASE}?{urllib.parse.urlencode(params)}"

    def check_code(self, code: str) -> str | None:
        """Poll once. Returns the token, or ``None`` while not approved.

        Transport and decoding failures are treated as "not approved yet".
        """
        try:
            resp = self._client.get(f"/oauth2/oob/code/{code}")
        except httpx.HTTPError as exc:
            logger.debug("OOB poll failed: %s", exc)
            return None
        if resp.status_code != 200:
            return None
        try:
            token = resp.json().get("oauth_token")
        except (ValueError, AttributeError):
            return None
        return token if isinstance(token, str) and token else None

    def poll_for_token(self, code: str, cancel: threading.Event) -> AuthOutcome:
        """Poll every ``poll_interval`` seconds until a terminal outcome."""
        started = self._clock()
        deadline = started + self.timeout
        attempts = 0
        while True:
            if cancel.is_set():
                return Cancelled()
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            if self._wait(cancel, min(self.poll_interval, remaining)):
                return Cancelled()
            if self._clock() >= deadline:
                break
            attempts += 1
            token = self.check_code(code)
            if token:
                logger.info("OOB code approved after %d polls", attempts)
                return TokenIssued(token)
        waited = self._clock() - started
        logger.warning("OOB approval timed out after %d polls", attempts)
        return TimedOut(waited=waited)

    def authenticate(
        self,
        cancel: threading.Event,
        notify: Callable[[str], None] = print,
    ) -> AuthOutcome:
        """Full flow: request code, point the user at it, poll for approval."""
        try:
            code = self.request_code()
        except LazyputError as exc:
            logger.error("Could not start authentication: %s", exc)
            return RequestFailed(error=str(exc))

        url = self.approval_url(code)
        notify("Opening browser for authentication...")
        notify(f"If the browser doesn't open, visit:\n  {url}\n")
        try:
            self._open_browser(url)
        except webbrowser.Error as exc:
            logger.info("Could not open browser: %s", exc)

        notify("Waiting for approval...")
        return self.poll_for_token(code, cancel)


def describe_outcome(outcome: AuthOutcome) -> str:
    if isinstance(outcome, TokenIssued):
        return "authentication successful"
    if isinstance(outcome, TimedOut):
        return f"authentication timed out after {max(1, round(outcome.waited / 60))} minutes"
    if isinstance(outcome, Cancelled):
        return "authentication cancelled"
    return f"authentication failed: {outcome.error}"


__all__ = [
    "AUTH_TIMEOUT_SECONDS",
    "POLL_INTERVAL_SECONDS",
    "AuthOutcome",
    "Cancelled",
    "OOBAuthenticator",
    "RequestFailed",
    "TimedOut",
    "TokenIssued",
    "describe_outcome",
]
