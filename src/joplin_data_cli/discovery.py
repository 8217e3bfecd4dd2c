"""Locate the port the Joplin Web Clipper service listens on."""

from __future__ import annotations

import logging

import httpx

from .errors import DiscoveryError, JoplinApiError
from .responses import error_from_response

logger = logging.getLogger(__name__)

JOPLIN_PORTS = range(41184, 41195)
PING_TIMEOUT_SECONDS = 5.0


def discover_port(
    http: httpx.Client,
    *,
    host: str = "localhost",
    ports: range = JOPLIN_PORTS,
    timeout_seconds: float = PING_TIMEOUT_SECONDS,
) -> int:
    """Return the first port in ``ports`` whose ``/ping`` answers with a 2xx.

    Ports are tried in ascending order and the scan stops at the first hit.
    When nothing answers, the error of the last port tried is attached to the
    ``DiscoveryError``; earlier failures are not kept.
    """
    last_error: BaseException | None = None
    for port in ports:
        url = f"http://{host}:{port}/ping"
        try:
            resp = http.get(url, timeout=timeout_seconds)
            if not resp.is_success:
                raise error_from_response(resp)
        except (httpx.HTTPError, JoplinApiError) as exc:
            logger.debug("No Joplin on port %d: %s", port, exc)
            last_error = exc
            continue
        logger.info("Found Joplin on port %d", port)
        return port
    raise DiscoveryError(ports, last_error)
