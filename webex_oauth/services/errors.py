"""Failures surfaced to the browser as a rendered error page.

Callback problems caused by the request itself map to 400; problems talking
to Webex map to 502.  None of them stop the server.
"""

from __future__ import annotations

from typing import Literal

DeclineReason = Literal["access_denied", "invalid_scope", "server_error", "unknown"]

_DECLINE_DESCRIPTIONS: dict[str, str] = {
    "access_denied": (
        "OAuth Integration could not complete. "
        "User declined data access request, bye."
    ),
    "invalid_scope": (
        "OAuth Integration could not complete. "
        "The application requested an invalid scope. Make sure your Integration "
        "contains all scopes being requested by the app, bye."
    ),
    "server_error": (
        "OAuth Integration could not complete. Webex sent a server error, bye."
    ),
    "unknown": (
        "OAuth Integration could not complete. Error case not implemented, bye."
    ),
}


class IntegrationError(Exception):
    status_code = 500
    outcome = "error"

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description


class OAuthError(IntegrationError):
    status_code = 400


class ProviderDeclined(OAuthError):
    def __init__(self, error: str) -> None:
        reason: DeclineReason = (
            error if error in _DECLINE_DESCRIPTIONS else "unknown"  # type: ignore[assignment]
        )
        super().__init__(_DECLINE_DESCRIPTIONS[reason])
        self.error = error
        self.reason = reason
        self.outcome = reason


class MalformedCallback(OAuthError):
    outcome = "malformed"

    def __init__(self) -> None:
        super().__init__(
            "OAuth Integration could not complete. "
            "Unexpected query parameters, ignoring..."
        )


class StateMismatch(OAuthError):
    outcome = "state_mismatch"

    def __init__(self) -> None:
        super().__init__(
            "OAuth Integration could not complete. "
            "State in response does not match the one in the request, aborting..."
        )


class TokenExchangeFailed(OAuthError):
    status_code = 502
    outcome = "exchange_failed"

    def __init__(self, detail: str) -> None:
        super().__init__(
            "OAuth Integration could not complete. "
            f"Exchanging the authorization code for an access token failed: {detail}"
        )


class ApiError(IntegrationError):
    status_code = 502
    outcome = "api_error"

    def __init__(self, endpoint: str, detail: str) -> None:
        super().__init__(f"Webex API call to {endpoint} failed: {detail}")
        self.endpoint = endpoint
