"""Client for the Joplin Data API (Web Clipper service)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

import httpx

from .errors import JoplinError, OperationCancelled, PaginationError
from .models import Page
from .responses import decode_object, raise_for_status
from .session import EndpointSession

logger = logging.getLogger(__name__)

USER_AGENT = "joplin-data-cli"


class JoplinClient:
    """Thin wrapper around Joplin's REST API, bound to one endpoint session."""

    def __init__(
        self,
        session: EndpointSession,
        *,
        timeout_seconds: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._session = session
        self._client = httpx.Client(
            base_url=session.base_url,
            timeout=httpx.Timeout(timeout_seconds),
            headers={"User-Agent": USER_AGENT},
            transport=transport,
        )

    @property
    def session(self) -> EndpointSession:
        return self._session

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> JoplinClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def request_json(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        method = method.upper()
        url_path = path if path.startswith("/") else f"/{path}"
        q = dict(params or {})
        q.setdefault("token", self._session.token)

        logger.debug("%s %s", method, url_path)
        resp = self._client.request(method, url_path, params=q, json=json_body)
        raise_for_status(resp)
        return decode_object(resp)

    def iter_pages(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        fields: str | None = None,
        order_by: str | None = None,
        order_dir: str | None = None,
        cancel: threading.Event | None = None,
    ) -> Iterator[Page]:
        """Yield the pages of a collection endpoint until ``has_more`` is false.

        ``order_by`` is passed through untouched and ``order_dir`` only
        upper-cased; Joplin rejects values it does not understand. There is no
        cap on the number of pages.
        """
        q = dict(params or {})
        if fields:
            q["fields"] = fields
        if order_by:
            q["order_by"] = order_by
        if order_dir:
            q["order_dir"] = order_dir.upper()

        page = 1
        while True:
            if cancel is not None and cancel.is_set():
                raise OperationCancelled(f"cancelled before page {page} of {path}")
            q["page"] = page
            raw = self.request_json("GET", path, params=q)
            result = Page(
                items=list(raw.get("items") or []),
                has_more=bool(raw.get("has_more")),
                page=page,
            )
            logger.debug(
                "%s page %d: %d item(s), has_more=%s",
                path,
                page,
                len(result.items),
                result.has_more,
            )
            yield result
            if not result.has_more:
                return
            page += 1

    def fetch_all(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        fields: str | None = None,
        order_by: str | None = None,
        order_dir: str | None = None,
        cancel: threading.Event | None = None,
    ) -> list[dict[str, Any]]:
        """Collect every item of a collection endpoint, in server order.

        A failing page raises ``PaginationError`` whose ``items`` holds what the
        earlier pages returned.
        """
        items: list[dict[str, Any]] = []
        pages = self.iter_pages(
            path,
            params=params,
            fields=fields,
            order_by=order_by,
            order_dir=order_dir,
            cancel=cancel,
        )
        try:
            for page in pages:
                items.extend(page.items)
        except (JoplinError, httpx.HTTPError) as exc:
            raise PaginationError(items, exc) from exc
        return items
