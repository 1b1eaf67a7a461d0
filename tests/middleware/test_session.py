from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import authorize
from webex_oauth.main import app


def test_pages_without_cookie_store_nothing(client: TestClient) -> None:
    for path in ("/", "/index.html", "/listrooms", "/logout", "/favicon.ico", "/nope"):
        resp = client.get(path)
        assert "set-cookie" not in resp.headers, path
    assert len(app.state.sessions) == 0


def test_failed_callbacks_store_nothing(client: TestClient) -> None:
    client.get("/oauth", params={"error": "access_denied"})
    client.get("/oauth", params={"code": "abc", "state": "forged"})
    assert len(app.state.sessions) == 0
    assert client.cookies.get("session") is None


def test_successful_callback_sets_session_cookie(client: TestClient) -> None:
    resp = client.get("/oauth", params={"code": "auth-code-123", "state": "test-state-value"})
    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith("session=")
    assert "HttpOnly" in set_cookie
    assert "SameSite=lax" in set_cookie
    assert len(app.state.sessions) == 1
    assert app.state.sessions.get(client.cookies.get("session")).token == "T1"


def test_cookie_not_reissued_for_known_session(client: TestClient) -> None:
    authorize(client)
    resp = client.get("/index.html")
    assert "set-cookie" not in resp.headers
    assert len(app.state.sessions) == 1


def test_second_login_reuses_session(client: TestClient) -> None:
    authorize(client)
    first = client.cookies.get("session")
    resp = client.get("/oauth", params={"code": "auth-code-456", "state": "test-state-value"})
    assert "set-cookie" not in resp.headers
    assert client.cookies.get("session") == first
    assert len(app.state.sessions) == 1


def test_unknown_session_cookie_is_cleared(client: TestClient) -> None:
    client.cookies.set("session", "from-before-a-restart")
    resp = client.get("/index.html")
    assert resp.status_code == 200
    assert "Max-Age=0" in resp.headers["set-cookie"]
    assert len(app.state.sessions) == 0


def test_unknown_session_cookie_replaced_on_login(client: TestClient) -> None:
    client.cookies.set("session", "from-before-a-restart")
    authorize(client)
    new_id = client.cookies.get("session")
    assert new_id != "from-before-a-restart"
    assert app.state.sessions.get(new_id).token == "T1"
    assert len(app.state.sessions) == 1


def test_operational_endpoints_do_not_touch_sessions(client: TestClient) -> None:
    for path in ("/health", "/metrics", "/static/style.css", "/openapi.json"):
        resp = client.get(path)
        assert resp.status_code == 200, path
        assert "set-cookie" not in resp.headers, path
    assert len(app.state.sessions) == 0


def test_sessions_are_per_browser(client: TestClient) -> None:
    other = TestClient(app, follow_redirects=False)
    authorize(client)
    authorize(other)
    assert client.cookies.get("session") != other.cookies.get("session")
    assert len(app.state.sessions) == 2


def test_docs_are_served_only_in_dev(client: TestClient) -> None:
    assert app.docs_url is None
    assert app.redoc_url is None
    assert client.get("/docs").status_code == 404
    assert len(app.state.sessions) == 0
