from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httpx
import pytest

# Ensure repo root is on sys.path so `import webex_oauth` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Settings are loaded at import time, so the environment must be in place
# before the application module is imported.
TEST_CLIENT_ID = "C-test-client"
TEST_CLIENT_SECRET = "test-client-secret-value"
TEST_STATE = "test-state-value"
TEST_AUTH_INIT_URL = (
    "https://webexapis.com/v1/authorize?client_id=C-test-client"
    "&response_type=code&redirect_uri=http%3A%2F%2Flocalhost%3A8080%2Foauth"
    "&scope=spark%3Aall%20spark%3Arooms_read&state=set_state_here"
)

os.environ["APP_ENV"] = "test"
os.environ["AUTH_INIT_URL"] = TEST_AUTH_INIT_URL
os.environ["CLIENT_SECRET"] = TEST_CLIENT_SECRET
os.environ["STATE"] = TEST_STATE
os.environ.pop("WEBEX_API_BASE", None)
os.environ.pop("WEBEX_LOGOUT_URL", None)

from fastapi.testclient import TestClient  # noqa: E402

from webex_oauth.api.dependencies import get_webex_client  # noqa: E402
from webex_oauth.main import app  # noqa: E402
from webex_oauth.services.webex_client import WebexClient  # noqa: E402

API_BASE = "https://webexapis.com/v1"

Reply = tuple[int, Any]


class FakeWebex:
    """httpx.MockTransport handler standing in for webexapis.com.

    Each endpoint's reply is a (status, body) pair; a dict/list body is sent
    as JSON, a str body as plain text.  Set a reply to an exception instance
    to simulate a transport failure.  Every request is recorded.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_reply: Reply | Exception = (
            200,
            {
                "access_token": "T1",
                "expires_in": 1209599,
                "refresh_token": "R1",
                "refresh_token_expires_in": 7775999,
            },
        )
        self.people_reply: Reply | Exception = (
            200,
            {"id": "P1", "displayName": "Ada Lovelace"},
        )
        self.rooms_reply: Reply | Exception = (
            200,
            {
                "items": [
                    {"id": "R-1", "title": "Design Review", "type": "group"},
                    {"id": "R-2", "title": "Ada & Charles", "type": "direct"},
                ]
            },
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/access_token"):
            reply = self.token_reply
        elif path.endswith("/people/me"):
            reply = self.people_reply
        elif path.endswith("/rooms"):
            reply = self.rooms_reply
        else:
            return httpx.Response(404, json={"message": "not found"})

        if isinstance(reply, Exception):
            raise reply
        status_code, body = reply
        if isinstance(body, str):
            return httpx.Response(status_code, text=body)
        return httpx.Response(status_code, json=body)

    def calls(self, suffix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(suffix)]

    def client(self) -> WebexClient:
        http = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return WebexClient(http, api_base=API_BASE)


@pytest.fixture(autouse=True)
def reset_sessions() -> None:
    """Clear the in-memory session store between tests."""
    app.state.sessions._by_id.clear()


@pytest.fixture
def fake_webex() -> FakeWebex:
    return FakeWebex()


@pytest.fixture
def client(fake_webex: FakeWebex) -> Iterator[TestClient]:
    webex = fake_webex.client()
    app.dependency_overrides[get_webex_client] = lambda: webex
    yield TestClient(app, follow_redirects=False)
    app.dependency_overrides.clear()


def authorize(client: TestClient) -> None:
    """Drive a successful /oauth callback so the client's session holds T1."""
    resp = client.get("/oauth", params={"code": "auth-code-123", "state": TEST_STATE})
    assert resp.status_code == 200, resp.text
