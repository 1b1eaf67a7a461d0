from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from webex_oauth.api.health import router as health_router
from webex_oauth.api.metrics_endpoint import router as metrics_router
from webex_oauth.api.pages import router as pages_router
from webex_oauth.core.config import SETTINGS
from webex_oauth.core.logging import setup_logging
from webex_oauth.core.templates import JinjaRenderer
from webex_oauth.middleware.metrics import MetricsMiddleware
from webex_oauth.middleware.request_context import (
    RequestContextMiddleware,
    install_request_context_filter,
)
from webex_oauth.middleware.session import SessionMiddleware
from webex_oauth.models.authorization import PendingAuthorization
from webex_oauth.repos.session_repo import InMemorySessionStore
from webex_oauth.services.webex_client import WebexClient

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
install_request_context_filter()

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # One pooled client for all outbound Webex calls, no timeout.
    async with httpx.AsyncClient(timeout=None) as http:
        app.state.webex = WebexClient(http, api_base=SETTINGS.api_base)
        try:
            yield
        finally:
            app.state.webex = None


app = FastAPI(
    title="webex-oauth-integration",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

# Built once; read-only for the life of the process.
app.state.pending = PendingAuthorization.new(
    base_url=SETTINGS.auth_init_url, state=SETTINGS.state
)
app.state.sessions = InMemorySessionStore()
app.state.renderer = JinjaRenderer()

# Last added runs first: RequestContext → Metrics → Session → route.
app.add_middleware(SessionMiddleware, secure=SETTINGS.is_prod)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(pages_router)
app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

logger.debug(
    "OAuth integration settings  client_id=%s redirect_uri=%s scopes=%s",
    app.state.pending.client_id,
    app.state.pending.redirect_uri,
    app.state.pending.scope,
)


def run() -> None:
    logger.info("Webex OAuth Integration started on http://localhost:%d", SETTINGS.port)
    uvicorn.run(app, host="0.0.0.0", port=SETTINGS.port, log_config=None)


if __name__ == "__main__":
    run()
