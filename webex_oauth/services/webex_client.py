"""Thin async client for the three Webex REST endpoints the integration uses.

The underlying httpx.AsyncClient is owned by the application lifespan and
shared by all requests.  It is created without a timeout and nothing here
retries; a failed call becomes TokenExchangeFailed or ApiError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from webex_oauth.core.config import DEFAULT_API_BASE
from webex_oauth.core.metrics import WEBEX_API_REQUESTS
from webex_oauth.models.token import TokenResponse
from webex_oauth.services.errors import ApiError, TokenExchangeFailed

logger = logging.getLogger(__name__)


class WebexClient:
    def __init__(self, http: httpx.AsyncClient, api_base: str = DEFAULT_API_BASE) -> None:
        self._http = http
        self._api_base = api_base.rstrip("/")

    @property
    def access_token_url(self) -> str:
        return f"{self._api_base}/access_token"

    @property
    def people_me_url(self) -> str:
        return f"{self._api_base}/people/me"

    @property
    def rooms_url(self) -> str:
        return f"{self._api_base}/rooms"

    # ------------------------------------------------------------------ token

    async def exchange_code(
        self,
        *,
        client_id: str,
        client_secret: str,
        code: str,
        redirect_uri: str,
    ) -> TokenResponse:
        """POST the authorization code to the token endpoint."""
        form = {
            "grant_type": "authorization_code",
            "client_id": client_id,
            "client_secret": client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
        }
        try:
            resp = await self._http.post(
                self.access_token_url,
                data=form,
                headers={"Content-Type": "application/x-www-form-urlencoded"},
            )
            resp.raise_for_status()
            token = TokenResponse.model_validate(resp.json())
        except httpx.HTTPStatusError as exc:
            WEBEX_API_REQUESTS.labels(endpoint="access_token", outcome="error").inc()
            logger.warning(
                "Token exchange rejected  status=%d", exc.response.status_code
            )
            raise TokenExchangeFailed(
                f"token endpoint returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            WEBEX_API_REQUESTS.labels(endpoint="access_token", outcome="error").inc()
            logger.warning("Token exchange transport error: %s", exc)
            raise TokenExchangeFailed("could not reach the token endpoint") from exc
        except ValueError as exc:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors.
            WEBEX_API_REQUESTS.labels(endpoint="access_token", outcome="error").inc()
            what = (
                "missing access_token"
                if isinstance(exc, ValidationError)
                else "response was not JSON"
            )
            logger.warning("Token exchange returned an unusable body: %s", what)
            raise TokenExchangeFailed(what) from exc

        WEBEX_API_REQUESTS.labels(endpoint="access_token", outcome="ok").inc()
        # Never log token values; the field names are enough to debug.
        logger.debug(
            "Token exchange completed  fields=%s",
            sorted(token.model_dump(exclude_none=True)),
        )
        return token

    # -------------------------------------------------------------- resources

    async def _get_json(self, endpoint: str, url: str, token: str) -> dict[str, Any]:
        try:
            resp = await self._http.get(
                url, headers={"Authorization": f"Bearer {token}"}
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            WEBEX_API_REQUESTS.labels(endpoint=endpoint, outcome="error").inc()
            logger.warning(
                "Webex API rejected request  endpoint=%s status=%d",
                endpoint,
                exc.response.status_code,
            )
            raise ApiError(endpoint, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            WEBEX_API_REQUESTS.labels(endpoint=endpoint, outcome="error").inc()
            logger.warning("Webex API transport error  endpoint=%s: %s", endpoint, exc)
            raise ApiError(endpoint, "could not reach Webex") from exc
        except ValueError as exc:
            WEBEX_API_REQUESTS.labels(endpoint=endpoint, outcome="error").inc()
            logger.warning("Webex API returned non-JSON body  endpoint=%s", endpoint)
            raise ApiError(endpoint, "response was not JSON") from exc

        if not isinstance(data, dict):
            WEBEX_API_REQUESTS.labels(endpoint=endpoint, outcome="error").inc()
            raise ApiError(endpoint, "unexpected response shape")

        WEBEX_API_REQUESTS.labels(endpoint=endpoint, outcome="ok").inc()
        return data

    async def get_display_name(self, token: str) -> str:
        data = await self._get_json("people_me", self.people_me_url, token)
        display_name = data.get("displayName")
        if not isinstance(display_name, str):
            logger.warning("people/me response has no displayName")
            raise ApiError("people_me", "displayName missing from response")
        return display_name

    async def list_rooms(self, token: str) -> list[dict[str, Any]]:
        """Return the ``items`` array of GET /rooms without interpreting it."""
        data = await self._get_json("rooms", self.rooms_url, token)
        items = data.get("items")
        if not isinstance(items, list):
            logger.warning("rooms response has no items array")
            raise ApiError("rooms", "items missing from response")
        return items
