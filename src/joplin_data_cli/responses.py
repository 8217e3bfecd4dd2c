"""Status classification and body decoding shared by every request path."""

from __future__ import annotations

from typing import Any

import httpx

from .errors import JoplinApiError, JoplinNotFoundError


def error_from_response(resp: httpx.Response) -> JoplinApiError:
    """Build the API error for a response; 404 maps to ``JoplinNotFoundError``."""
    error_cls = JoplinNotFoundError if resp.status_code == 404 else JoplinApiError
    return error_cls(
        status_code=resp.status_code,
        method=resp.request.method,
        url=str(resp.request.url),
        response_text=(resp.text or "").strip(),
    )


def raise_for_status(resp: httpx.Response) -> None:
    """Raise ``JoplinNotFoundError`` for a 404 and ``JoplinApiError`` for any other error status."""
    if resp.status_code >= 400:
        raise error_from_response(resp)


def decode_object(resp: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; empty bodies (e.g. DELETE) decode to ``{}``."""
    if not resp.content:
        return {}
    try:
        data = resp.json()
    except ValueError as exc:
        raise JoplinApiError(
            status_code=resp.status_code,
            method=resp.request.method,
            url=str(resp.request.url),
            response_text=f"Invalid JSON: {exc}",
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise JoplinApiError(
            status_code=resp.status_code,
            method=resp.request.method,
            url=str(resp.request.url),
            response_text=f"Unexpected JSON type: {type(data).__name__}",
        )
    return data
