"""Cookie-carried server-side sessions.

The browser only ever holds an opaque session id.  The token lives in the
SessionStore on app.state; the id is resolved here and exposed to routes as
``request.state.session_id`` (None when the browser has no stored session).

Sessions are lazy: nothing is stored until /oauth has a token to keep, and
that route publishes the new id on request.state so the cookie can be set on
the way out.  Cookies naming no stored session (logged out, server
restarted) are cleared.  Operational and docs endpoints skip all of this.
"""

from __future__ import annotations

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from webex_oauth.repos.session_repo import SessionStore

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session"

_SESSIONLESS_PREFIXES = (
    "/health",
    "/ready",
    "/metrics",
    "/static/",
    "/docs",
    "/redoc",
    "/openapi.json",
)


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        *,
        cookie_name: str = SESSION_COOKIE,
        secure: bool = False,
    ) -> None:
        super().__init__(app)
        self.cookie_name = cookie_name
        self.secure = secure

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path.startswith(_SESSIONLESS_PREFIXES):
            request.state.session_id = None
            return await call_next(request)

        store: SessionStore = request.app.state.sessions
        cookie_id = request.cookies.get(self.cookie_name)
        known = cookie_id if cookie_id and store.get(cookie_id) else None
        request.state.session_id = known

        response = await call_next(request)

        session_id: str | None = request.state.session_id
        if session_id is None or store.get(session_id) is None:
            if cookie_id:
                logger.debug("Clearing cookie for a session that is not stored")
                response.delete_cookie(self.cookie_name, path="/")
        elif session_id != cookie_id:
            response.set_cookie(
                key=self.cookie_name,
                value=session_id,
                httponly=True,
                samesite="lax",
                secure=self.secure,
                path="/",
            )
        return response
