"""Interactive authorisation handshake with the Joplin desktop app.

Joplin hands out an API token only after the user approves the request in
the app. The handshake has two steps:

1. ``POST /auth`` returns a short-lived auth token.
2. ``GET /auth/check?auth_token=...`` is polled until the user accepts or
   rejects the request. While the dialog is open the status is ``waiting``.

The poll cadence is a fixed one second; the latency is the human in front of
the dialog, not the server.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator

import httpx
from pydantic import BaseModel, ValidationError

from .errors import OperationCancelled, PairingError, PairingRejected, PairingTimeout
from .responses import decode_object, raise_for_status

logger = logging.getLogger(__name__)

MAX_WAITING_POLLS = 20
POLL_INTERVAL_SECONDS = 1.0

STATUS_ACCEPTED = "accepted"
STATUS_REJECTED = "rejected"
STATUS_WAITING = "waiting"


class AuthTokenResponse(BaseModel):
    auth_token: str


class AuthCheck(BaseModel):
    status: str
    token: str | None = None


def request_auth_token(http: httpx.Client, base_url: str) -> str:
    """Ask Joplin for a short-lived auth token. Any failure is final."""
    resp = http.post(f"{base_url}/auth")
    raise_for_status(resp)
    try:
        return AuthTokenResponse.model_validate(decode_object(resp)).auth_token
    except ValidationError as exc:
        raise PairingError(f"malformed response from {base_url}/auth: {resp.text!r}") from exc


def poll_for_approval(
    http: httpx.Client,
    base_url: str,
    auth_token: str,
    *,
    cancel: threading.Event | None = None,
) -> Iterator[AuthCheck]:
    """Yield one ``AuthCheck`` per ``/auth/check`` request, forever.

    The generator does not sleep or stop on its own; the caller decides how
    often to pull and when to give up.
    """
    while True:
        if cancel is not None and cancel.is_set():
            raise OperationCancelled("pairing cancelled")
        resp = http.get(f"{base_url}/auth/check", params={"auth_token": auth_token})
        raise_for_status(resp)
        try:
            check = AuthCheck.model_validate(decode_object(resp))
        except ValidationError as exc:
            raise PairingError(
                f"malformed response from {base_url}/auth/check: {resp.text!r}"
            ) from exc
        yield check


def negotiate_api_token(
    http: httpx.Client,
    base_url: str,
    *,
    max_waiting_polls: int = MAX_WAITING_POLLS,
    poll_interval: float = POLL_INTERVAL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    cancel: threading.Event | None = None,
) -> str:
    """Run the full handshake and return the durable API token.

    Nothing is persisted here; storing the token is up to the caller.
    """
    auth_token = request_auth_token(http, base_url)
    logger.warning("Please accept the authorisation request in the Joplin application")

    waiting = 0
    for check in poll_for_approval(http, base_url, auth_token, cancel=cancel):
        if check.status == STATUS_ACCEPTED:
            if not check.token:
                raise PairingError("authorisation accepted but no token was returned")
            logger.info("Authorisation accepted")
            return check.token
        if check.status == STATUS_REJECTED:
            logger.warning("Authorisation rejected by the user")
            raise PairingRejected("request rejected")
        if check.status != STATUS_WAITING:
            raise PairingError(f"unexpected authorisation status {check.status!r}")

        waiting += 1
        logger.debug("Waiting for authorisation (%d/%d)", waiting, max_waiting_polls)
        if waiting >= max_waiting_polls:
            logger.warning("No answer to the authorisation request")
            raise PairingTimeout("could not get an answer from user")
        sleep(poll_interval)

    raise PairingError("authorisation polling stopped unexpectedly")  # pragma: no cover
