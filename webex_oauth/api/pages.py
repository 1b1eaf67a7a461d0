"""Browser-facing pages of the integration.

  GET /             redirect to /index.html
  GET /index.html   login link, or the user's display name once authorized
  GET /oauth        redirect URI registered with Webex (code/state or error)
  GET /logout       drop the session, hand the browser to the Webex logout
  GET /listrooms    the authorized user's rooms (spaces)

Every IntegrationError is rendered as error.html with the error's status;
nothing here is retried.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from webex_oauth.api.dependencies import (
    current_session,
    get_oauth_exchange,
    get_pending,
    get_renderer,
    get_session_id,
    get_webex_client,
)
from webex_oauth.core.templates import Renderer
from webex_oauth.models.authorization import PendingAuthorization
from webex_oauth.models.session import Session
from webex_oauth.services.errors import IntegrationError
from webex_oauth.services.oauth_service import OAuthExchange
from webex_oauth.services.webex_client import WebexClient

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pages"])


def _page(
    renderer: Renderer,
    name: str,
    context: Mapping[str, Any],
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    return HTMLResponse(renderer.render(name, context), status_code=status_code)


def _error_page(renderer: Renderer, exc: IntegrationError) -> HTMLResponse:
    return _page(
        renderer,
        "error.html",
        {"error_desc": exc.description},
        status_code=exc.status_code,
    )


async def _display_name_page(
    renderer: Renderer, webex: WebexClient, token: str
) -> HTMLResponse:
    try:
        display_name = await webex.get_display_name(token)
    except IntegrationError as exc:
        return _error_page(renderer, exc)
    return _page(renderer, "display_name.html", {"displayName": display_name})


# ============================== GET / ======================================


@router.get("/")
def root() -> RedirectResponse:
    return RedirectResponse(url="/index.html", status_code=status.HTTP_302_FOUND)


# =========================== GET /index.html ===============================


@router.get("/index.html", response_class=HTMLResponse)
async def index(
    session: Annotated[Session | None, Depends(current_session)],
    pending: Annotated[PendingAuthorization, Depends(get_pending)],
    renderer: Annotated[Renderer, Depends(get_renderer)],
    webex: Annotated[WebexClient, Depends(get_webex_client)],
) -> HTMLResponse:
    if session is not None and session.has_token:
        return await _display_name_page(renderer, webex, session.token)

    logger.info("Access token not in session, serving login page")
    return _page(renderer, "index.html", {"link": pending.authorization_url})


# ============================== GET /oauth =================================


@router.get("/oauth", response_class=HTMLResponse)
async def oauth_callback(
    request: Request,
    session_id: Annotated[str | None, Depends(get_session_id)],
    exchange: Annotated[OAuthExchange, Depends(get_oauth_exchange)],
    renderer: Annotated[Renderer, Depends(get_renderer)],
    webex: Annotated[WebexClient, Depends(get_webex_client)],
    error: str | None = Query(None),
    error_description: str | None = Query(None),
    code: str | None = Query(None),
    state: str | None = Query(None),
) -> HTMLResponse:
    logger.debug("OAuth redirect URL requested")
    try:
        session = await exchange.handle_callback(
            session_id=session_id,
            error=error,
            code=code,
            state=state,
            error_description=error_description,
        )
    except IntegrationError as exc:
        return _error_page(renderer, exc)

    # SessionMiddleware sets the cookie for a newly created session.
    request.state.session_id = session.id
    return await _display_name_page(renderer, webex, session.token)


# ============================== GET /logout ================================


@router.get("/logout")
def logout(
    session_id: Annotated[str | None, Depends(get_session_id)],
    exchange: Annotated[OAuthExchange, Depends(get_oauth_exchange)],
) -> RedirectResponse:
    url = exchange.logout(session_id)
    logger.info("Session destroyed, redirecting to Webex logout")
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


# ============================ GET /listrooms ===============================
# Needs the spark:rooms_read scope on the integration.


@router.get("/listrooms", response_model=None)
async def list_rooms(
    session: Annotated[Session | None, Depends(current_session)],
    renderer: Annotated[Renderer, Depends(get_renderer)],
    webex: Annotated[WebexClient, Depends(get_webex_client)],
) -> HTMLResponse | RedirectResponse:
    if session is None or not session.has_token:
        logger.info("Access token not in session, redirecting to home page")
        return RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)

    try:
        rooms = await webex.list_rooms(session.token)
    except IntegrationError as exc:
        return _error_page(renderer, exc)
    return _page(renderer, "list_rooms.html", {"rooms": rooms})
