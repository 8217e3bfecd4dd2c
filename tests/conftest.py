from __future__ import annotations

from collections.abc import Callable, Iterator

import httpx
import pytest

from joplin_data_cli.joplin_client import JoplinClient
from joplin_data_cli.session import EndpointSession

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path) -> None:
    # Keep the user's ~/.joplin-data.yaml, .env and JOPLIN_* variables out of the tests.
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("JOPLIN_DATA_CONFIG", str(tmp_path / "joplin-data.yaml"))
    for name in ("JOPLIN_API_TOKEN", "JOPLIN_HOST", "JOPLIN_PORT_MIN", "JOPLIN_PORT_MAX"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_client() -> Iterator[Callable[..., JoplinClient]]:
    clients: list[JoplinClient] = []

    def factory(handler: Handler, *, token: str = "secret") -> JoplinClient:
        client = JoplinClient(
            EndpointSession(port=41184, token=token),
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()

