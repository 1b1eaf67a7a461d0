"""GET /oauth end to end: browser → callback → token exchange → welcome page.

The Webex side is an httpx.MockTransport, so every outbound call is counted.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import TEST_CLIENT_SECRET, TEST_STATE, FakeWebex
from webex_oauth.main import app


def _callbacks(outcome: str) -> float:
    return REGISTRY.get_sample_value("oauth_callbacks_total", {"outcome": outcome}) or 0.0


def _session_token(client: TestClient) -> str | None:
    session = app.state.sessions.get(client.cookies.get("session"))
    return session.token if session else None


def test_invalid_scope_renders_explanation_without_outbound_calls(
    client: TestClient, fake_webex: FakeWebex
) -> None:
    resp = client.get("/oauth", params={"error": "invalid_scope"})
    assert resp.status_code == 400
    assert "The application requested an invalid scope" in resp.text
    assert fake_webex.requests == []


@pytest.mark.parametrize(
    ("error", "text"),
    [
        ("access_denied", "User declined data access request"),
        ("server_error", "Webex sent a server error"),
        ("something_new", "Error case not implemented"),
    ],
)
def test_provider_errors_render_description(
    client: TestClient, fake_webex: FakeWebex, error: str, text: str
) -> None:
    resp = client.get(
        "/oauth",
        params={"error": error, "code": "c", "state": TEST_STATE},
    )
    assert resp.status_code == 400
    assert text in resp.text
    assert fake_webex.requests == []


@pytest.mark.parametrize(
    "params",
    [{}, {"code": "c"}, {"state": TEST_STATE}, {"code": "", "state": TEST_STATE}],
)
def test_missing_parameters_render_malformed(
    client: TestClient, fake_webex: FakeWebex, params: dict[str, str]
) -> None:
    resp = client.get("/oauth", params=params)
    assert resp.status_code == 400
    assert "Unexpected query parameters" in resp.text
    assert fake_webex.calls("/access_token") == []


def test_state_mismatch_renders_error(client: TestClient, fake_webex: FakeWebex) -> None:
    before = _callbacks("state_mismatch")
    resp = client.get("/oauth", params={"code": "c", "state": "not-the-state"})
    assert resp.status_code == 400
    assert "State in response does not match" in resp.text
    assert fake_webex.requests == []
    assert _callbacks("state_mismatch") == before + 1


def test_successful_callback_stores_token_and_shows_name(
    client: TestClient, fake_webex: FakeWebex
) -> None:
    before = _callbacks("success")
    resp = client.get("/oauth", params={"code": "auth-code", "state": TEST_STATE})

    assert resp.status_code == 200
    assert "Welcome, Ada Lovelace" in resp.text
    assert _session_token(client) == "T1"
    assert len(fake_webex.calls("/access_token")) == 1
    assert len(fake_webex.calls("/people/me")) == 1
    assert _callbacks("success") == before + 1


def test_token_exchange_failure_renders_502(
    client: TestClient, fake_webex: FakeWebex
) -> None:
    fake_webex.token_reply = (400, {"message": "invalid authorization code"})
    resp = client.get("/oauth", params={"code": "stale", "state": TEST_STATE})
    assert resp.status_code == 502
    assert "Exchanging the authorization code" in resp.text
    assert _session_token(client) is None
    assert fake_webex.calls("/people/me") == []


def test_server_keeps_serving_after_failures(
    client: TestClient, fake_webex: FakeWebex
) -> None:
    fake_webex.token_reply = (200, "not json")
    assert client.get("/oauth", params={"code": "c", "state": TEST_STATE}).status_code == 502

    fake_webex.token_reply = (200, {"access_token": "T9"})
    resp = client.get("/oauth", params={"code": "c", "state": TEST_STATE})
    assert resp.status_code == 200
    assert _session_token(client) == "T9"


def test_full_flow_login_list_logout(client: TestClient, fake_webex: FakeWebex) -> None:
    assert "Start Login" in client.get("/index.html").text

    client.get("/oauth", params={"code": "auth-code", "state": TEST_STATE})
    assert "Ada Lovelace" in client.get("/index.html").text
    assert "Design Review" in client.get("/listrooms").text

    resp = client.get("/logout")
    assert resp.headers["location"].endswith("?token=T1")
    assert "Start Login" in client.get("/index.html").text


def test_token_request_carries_client_credentials(
    client: TestClient, fake_webex: FakeWebex
) -> None:
    client.get("/oauth", params={"code": "auth-code", "state": TEST_STATE})
    [request] = fake_webex.calls("/access_token")
    body = request.content.decode()
    assert "grant_type=authorization_code" in body
    assert "client_id=C-test-client" in body
    assert f"client_secret={TEST_CLIENT_SECRET}" in body
    assert "redirect_uri=http%3A%2F%2Flocalhost%3A8080%2Foauth" in body
