from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from webex_oauth.core.config import SETTINGS
from webex_oauth.core.templates import Renderer
from webex_oauth.models.authorization import PendingAuthorization
from webex_oauth.models.session import Session
from webex_oauth.repos.session_repo import SessionStore
from webex_oauth.services.oauth_service import OAuthExchange
from webex_oauth.services.webex_client import WebexClient

logger = logging.getLogger(__name__)


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_pending(request: Request) -> PendingAuthorization:
    return request.app.state.pending


def get_renderer(request: Request) -> Renderer:
    return request.app.state.renderer


def get_webex_client(request: Request) -> WebexClient:
    """The shared Webex client opened by the lifespan."""
    webex: WebexClient | None = getattr(request.app.state, "webex", None)
    if webex is None:
        # Only reachable when the app is driven without its lifespan.
        logger.error("Webex client requested before application startup")
        raise HTTPException(status.HTTP_503_SERVICE_UNAVAILABLE, "not started")
    return webex


def get_session_id(request: Request) -> str | None:
    """Id of the browser's stored session; None until a token has been stored."""
    return getattr(request.state, "session_id", None)


def current_session(
    sessions: Annotated[SessionStore, Depends(get_sessions)],
    session_id: Annotated[str | None, Depends(get_session_id)],
) -> Session | None:
    if session_id is None:
        return None
    return sessions.get(session_id)


def get_oauth_exchange(
    pending: Annotated[PendingAuthorization, Depends(get_pending)],
    sessions: Annotated[SessionStore, Depends(get_sessions)],
    webex: Annotated[WebexClient, Depends(get_webex_client)],
) -> OAuthExchange:
    return OAuthExchange(
        pending=pending,
        client_secret=SETTINGS.client_secret,
        sessions=sessions,
        webex=webex,
        logout_url=SETTINGS.logout_url,
    )
