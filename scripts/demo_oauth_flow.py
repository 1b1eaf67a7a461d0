"""Demo: walk the login → callback → rooms → logout flow against a fake Webex.

Nothing leaves the machine: outbound calls go to an httpx.MockTransport.

Run with:
    python scripts/demo_oauth_flow.py
"""

from __future__ import annotations

import os

import httpx

os.environ.setdefault(
    "AUTH_INIT_URL",
    "https://webexapis.com/v1/authorize?client_id=demo-client&response_type=code"
    "&redirect_uri=http%3A%2F%2Flocalhost%3A8080%2Foauth&scope=spark%3Aall",
)
os.environ.setdefault("CLIENT_SECRET", "demo-secret")
os.environ["STATE"] = "demo-state"

from fastapi.testclient import TestClient  # noqa: E402

from webex_oauth.api.dependencies import get_webex_client  # noqa: E402
from webex_oauth.main import app  # noqa: E402
from webex_oauth.services.webex_client import WebexClient  # noqa: E402


def _fake_webex(request: httpx.Request) -> httpx.Response:
    path = request.url.path
    if path.endswith("/access_token"):
        return httpx.Response(200, json={"access_token": "demo-token", "expires_in": 1209599})
    if path.endswith("/people/me"):
        return httpx.Response(200, json={"displayName": "Demo User"})
    if path.endswith("/rooms"):
        return httpx.Response(200, json={"items": [{"title": "Demo Space", "type": "group"}]})
    return httpx.Response(404)


def main() -> None:
    webex = WebexClient(httpx.AsyncClient(transport=httpx.MockTransport(_fake_webex)))
    app.dependency_overrides[get_webex_client] = lambda: webex
    client = TestClient(app, follow_redirects=False)

    # ── Step 1: landing page ────────────────────────────────────────
    r = client.get("/")
    print(f"1. GET  /                   → {r.status_code}  ({r.headers['location']})")
    r = client.get("/index.html")
    print(f"2. GET  /index.html         → {r.status_code}  (login link, no session yet)")

    # ── Step 2: callbacks that must fail ────────────────────────────
    r = client.get("/oauth", params={"error": "access_denied"})
    print(f"3. GET  /oauth (declined)   → {r.status_code}")
    r = client.get("/oauth", params={"code": "abc"})
    print(f"4. GET  /oauth (no state)   → {r.status_code}")
    r = client.get("/oauth", params={"code": "abc", "state": "forged"})
    print(f"5. GET  /oauth (bad state)  → {r.status_code}")

    # ── Step 3: /listrooms before authorization ─────────────────────
    r = client.get("/listrooms")
    print(f"6. GET  /listrooms (anon)   → {r.status_code}  ({r.headers['location']})")

    # ── Step 4: the real callback ───────────────────────────────────
    r = client.get("/oauth", params={"code": "abc", "state": "demo-state"})
    print(f"7. GET  /oauth (valid)      → {r.status_code}  (welcome page, session cookie set)")
    assert "Demo User" in r.text

    r = client.get("/listrooms")
    print(f"8. GET  /listrooms          → {r.status_code}  (rooms page)")
    assert "Demo Space" in r.text

    # ── Step 5: logout ──────────────────────────────────────────────
    r = client.get("/logout")
    print(f"9. GET  /logout             → {r.status_code}  ({r.headers['location']})")

    app.dependency_overrides.clear()


if __name__ == "__main__":
    main()
