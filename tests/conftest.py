from __future__ import annotations

from typing import Any

import orjson
import pytest

from restdantic import Client, ClientOptions

SITE = "https://jira.example.com"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None) -> None:
        self.status_code = status_code
        self.text = orjson.dumps(payload).decode() if payload is not None else ""


class FakeSession:
    """Stands in for ``requests.Session`` and records every request made."""

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.auth: tuple[str, str] | None = None
        self.verify = True
        self.calls: list[tuple[str, str, Any]] = []
        self._routes: dict[tuple[str, str], list[FakeResponse]] = {}

    def route(self, method: str, path: str, payload: Any = None, status: int = 200) -> None:
        # queued responses are served in order; the last one repeats
        self._routes.setdefault((method, SITE + path), []).append(FakeResponse(status, payload))

    def request(self, method: str, url: str, data: Any = None, timeout: float | None = None) -> FakeResponse:
        body = orjson.loads(data) if data is not None else None
        self.calls.append((method, url[len(SITE):], body))
        queue = self._routes.get((method, url))
        if not queue:
            return FakeResponse(404, {"errorMessages": [f"No route for {method} {url}"]})
        return queue.pop(0) if len(queue) > 1 else queue[0]


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def client(session: FakeSession) -> Client:
    return Client(ClientOptions(site=SITE), session=session)


@pytest.fixture
def issue_payload() -> dict[str, Any]:
    return {
        "id": "10",
        "key": "PRJ-1",
        "fields": {
            "summary": "Broken build",
            "comment": {
                "comments": [
                    {"id": "1", "body": "first", "author": {"name": "bob"}, "visibility": 2},
                    {"id": "2", "body": "second", "author": {"name": "alice"}, "visibility": 1},
                    {"id": "3", "body": "third", "author": {"name": "bob"}, "visibility": 1},
                ]
            },
            "watches": {
                "watchCount": 2,
                "watchers": [{"name": "bob"}, {"name": "carol"}],
            },
        },
    }
