"""Resolution of the endpoint session (port + API token)."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from .discovery import discover_port
from .pairing import negotiate_api_token
from .settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class EndpointSession:
    """Where Joplin listens and the token authorising calls against it.

    ``paired`` is true when the token was just obtained through the pairing
    handshake and has not been persisted yet.
    """

    port: int
    token: str
    host: str = "localhost"
    paired: bool = False

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def open_session(
    settings: Settings,
    *,
    transport: httpx.BaseTransport | None = None,
    sleep: Callable[[float], None] = time.sleep,
    cancel: threading.Event | None = None,
) -> EndpointSession:
    """Find the running Joplin instance and make sure we hold an API token.

    The port is looked up once; callers keep the returned session for the
    rest of the process.
    """
    with httpx.Client(timeout=httpx.Timeout(settings.timeout_seconds), transport=transport) as http:
        port = discover_port(http, host=settings.host, ports=settings.ports)
        if settings.api_token:
            return EndpointSession(port=port, token=settings.api_token, host=settings.host)

        logger.info("No API token configured, requesting authorisation from Joplin")
        token = negotiate_api_token(
            http,
            f"http://{settings.host}:{port}",
            max_waiting_polls=settings.max_waiting_polls,
            poll_interval=settings.poll_interval_seconds,
            sleep=sleep,
            cancel=cancel,
        )
        return EndpointSession(port=port, token=token, host=settings.host, paired=True)
