"""Prometheus metrics middleware: counts and times every HTTP request.

The endpoint label is the matched route's path template, so every static
asset shares the "/static" mount label.  Paths no route matches (404s from
scanners and typos) share one "unmatched" label to keep the number of time
series bounded.
"""

from __future__ import annotations

import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

from webex_oauth.core.metrics import ACTIVE_REQUESTS, REQUEST_COUNT, REQUEST_DURATION

UNMATCHED = "unmatched"


def _endpoint_label(request: Request) -> str:
    partial: str | None = None
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", UNMATCHED)
        if match == Match.PARTIAL and partial is None:
            # Right path, wrong method (405).
            partial = getattr(route, "path", None)
    return partial or UNMATCHED


class MetricsMiddleware(BaseHTTPMiddleware):
    """Collect Prometheus metrics for every HTTP request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        # Scrapes of /metrics itself are not counted.
        if request.url.path == "/metrics":
            return await call_next(request)

        endpoint = _endpoint_label(request)
        ACTIVE_REQUESTS.inc()
        start = time.monotonic()
        status_code = "500"

        try:
            response = await call_next(request)
            status_code = str(response.status_code)
        finally:
            ACTIVE_REQUESTS.dec()
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code,
            ).inc()
            REQUEST_DURATION.labels(
                method=request.method,
                endpoint=endpoint,
            ).observe(time.monotonic() - start)

        return response
