"""Liveness and readiness checks.

/health answers "is the process alive" and reports the session count.
/ready answers "can this instance take traffic": it needs the shared Webex
client, which only exists once the lifespan has started.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from webex_oauth.api.dependencies import get_sessions
from webex_oauth.repos.session_repo import SessionStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(
    sessions: Annotated[SessionStore, Depends(get_sessions)],
) -> dict:
    return {
        "status": "ok",
        "sessions": len(sessions),
    }


@router.get("/ready")
async def ready(request: Request) -> Response:
    if getattr(request.app.state, "webex", None) is None:
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
