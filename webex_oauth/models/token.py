from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TokenResponse(BaseModel):
    """Body of a successful POST /v1/access_token.

    Only access_token is used.  Refresh and expiry fields are parsed when
    present but never stored.
    """

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None
    refresh_token_expires_in: int | None = None
