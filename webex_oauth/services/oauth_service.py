from __future__ import annotations

import logging
from urllib.parse import urlencode, urlsplit, urlunsplit

from webex_oauth.core.config import DEFAULT_LOGOUT_URL
from webex_oauth.core.metrics import ACTIVE_SESSIONS, OAUTH_CALLBACKS
from webex_oauth.models.authorization import PendingAuthorization
from webex_oauth.models.session import Session
from webex_oauth.repos.session_repo import SessionStore
from webex_oauth.services.errors import (
    MalformedCallback,
    OAuthError,
    ProviderDeclined,
    StateMismatch,
)
from webex_oauth.services.webex_client import WebexClient

# ---------------------------------------------------------------------------
# OAuth client side of the Authorization Code grant
#
#   GET  <authorization_url>    browser sent to Webex with client_id + state
#   GET  /oauth                 Webex redirects back with code + state
#   POST /v1/access_token       code exchanged for an access token
# ---------------------------------------------------------------------------

logger = logging.getLogger(__name__)


def build_logout_url(logout_url: str, token: str | None) -> str:
    """Provider logout URL carrying the session's token, when there is one."""
    if not token:
        return logout_url
    sep = "&" if urlsplit(logout_url).query else "?"
    return f"{logout_url}{sep}{urlencode({'token': token})}"


def origin_of(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, "", "", ""))


class OAuthExchange:
    """Validates callbacks and turns authorization codes into session tokens."""

    def __init__(
        self,
        *,
        pending: PendingAuthorization,
        client_secret: str,
        sessions: SessionStore,
        webex: WebexClient,
        logout_url: str = DEFAULT_LOGOUT_URL,
    ) -> None:
        self.pending = pending
        self._logout_url = logout_url
        self._client_secret = client_secret
        self._sessions = sessions
        self._webex = webex

    @property
    def authorization_url(self) -> str:
        return self.pending.authorization_url

    async def handle_callback(
        self,
        *,
        session_id: str | None,
        error: str | None,
        code: str | None,
        state: str | None,
        error_description: str | None = None,
    ) -> Session:
        """Run the callback checks in order and store the resulting token.

        The token goes into the caller's session, or into a new one when the
        browser has none yet; the session holding the token is returned.

        Raises ProviderDeclined, MalformedCallback or StateMismatch before any
        network call; TokenExchangeFailed if the token endpoint fails.
        """
        try:
            token = await self._exchange(
                error=error,
                code=code,
                state=state,
                error_description=error_description,
            )
        except OAuthError as exc:
            OAUTH_CALLBACKS.labels(outcome=exc.outcome).inc()
            raise

        session: Session | None = None
        if session_id is not None:
            # None if logged out in another tab while the exchange was in flight.
            session = self._sessions.set_token(session_id, token)
        if session is None:
            session = self._sessions.create(token)
            logger.debug("New session created for access token")
        OAUTH_CALLBACKS.labels(outcome="success").inc()
        ACTIVE_SESSIONS.set(len(self._sessions))
        logger.info("OAuth flow completed, access token stored in session")
        return session

    async def _exchange(
        self,
        *,
        error: str | None,
        code: str | None,
        state: str | None,
        error_description: str | None,
    ) -> str:
        # FAIL POINT: Webex redirected back with an error instead of a code.
        if error:
            logger.info(
                "Webex returned error=%s description=%s", error, error_description
            )
            raise ProviderDeclined(error)

        # FAIL POINT: both code and state are required by RFC 6749 §4.1.2.
        if not code or not state:
            logger.info("Expected code & state query parameters are not present")
            raise MalformedCallback()

        # FAIL POINT: state must be the value we put on the authorization URL.
        if not self.pending.matches(state):
            logger.warning("State in callback does not match pending authorization")
            raise StateMismatch()

        logger.debug("Callback validated, exchanging authorization code")
        token = await self._webex.exchange_code(
            client_id=self.pending.client_id,
            client_secret=self._client_secret,
            code=code,
            redirect_uri=self.pending.redirect_uri,
        )
        return token.access_token

    def logout(self, session_id: str | None) -> str:
        """Destroy the session and return where to send the browser."""
        token = None
        if session_id is not None:
            session = self._sessions.get(session_id)
            token = session.token if session else None
        logger.debug(
            "Logging out, integration root is %s",
            origin_of(self.pending.redirect_uri),
        )
        try:
            return build_logout_url(self._logout_url, token)
        finally:
            if session_id is not None:
                self._sessions.destroy(session_id)
            ACTIVE_SESSIONS.set(len(self._sessions))
