"""Prometheus metric inventory.

Every metric the integration exports is declared here; the modules that own
the behavior import and increment them.  Scraped from GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

# Page renders sit in the low milliseconds; anything that waits on Webex
# lands in the 100ms-5s buckets.
REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Integration metrics
# ---------------------------------------------------------------------------

OAUTH_CALLBACKS = Counter(
    "oauth_callbacks_total",
    "OAuth callback requests by outcome",
    # "success", "access_denied", "invalid_scope", "server_error", "unknown",
    # "malformed", "state_mismatch", "exchange_failed"
    ["outcome"],
)

WEBEX_API_REQUESTS = Counter(
    "webex_api_requests_total",
    "Outbound Webex API calls by endpoint and outcome",
    ["endpoint", "outcome"],  # endpoint: access_token|people_me|rooms
)

ACTIVE_SESSIONS = Gauge(
    "active_sessions",
    "Sessions currently held in the in-memory store",
)
