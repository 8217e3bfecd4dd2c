"""Domain errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class JoplinError(Exception):
    """Base class for errors raised by this package."""


@dataclass(frozen=True, slots=True)
class JoplinApiError(JoplinError):
    """Raised when the Joplin Data API returns a non-success response."""

    status_code: int
    method: str
    url: str
    response_text: str

    def __str__(self) -> str:
        return (
            f"Joplin API error {self.status_code} for {self.method} {self.url}: "
            f"{self.response_text}"
        )


@dataclass(frozen=True, slots=True)
class JoplinNotFoundError(JoplinApiError):
    """The requested item does not exist (HTTP 404)."""

    def __str__(self) -> str:
        return f"Not found: {self.method} {self.url}"


class DiscoveryError(JoplinError):
    """No port in the scanned range answered the ping."""

    def __init__(self, ports: range, last_error: BaseException | None) -> None:
        self.ports = ports
        self.last_error = last_error
        message = f"could not find Joplin on ports {ports.start}-{ports.stop - 1}"
        if last_error is not None:
            message = f"{message} (last error: {last_error})"
        super().__init__(message)


class PairingError(JoplinError):
    """The authorisation handshake with Joplin failed."""


class PairingRejected(PairingError):
    """The user declined the authorisation request in Joplin."""


class PairingTimeout(PairingError):
    """The user did not answer the authorisation request in time."""


class OperationCancelled(JoplinError):
    """A cancellation signal was observed between requests."""


class PaginationError(JoplinError):
    """A page request failed; ``items`` holds everything fetched before it.

    ``JoplinClient.fetch_all`` puts raw dicts in ``items``; the list functions
    in ``operations`` re-raise with the same items validated into models.
    """

    def __init__(self, items: list[Any], cause: BaseException) -> None:
        self.items = items
        self.cause = cause
        super().__init__(f"fetch aborted after {len(items)} item(s): {cause}")

    @property
    def not_found(self) -> bool:
        return isinstance(self.cause, JoplinNotFoundError)
