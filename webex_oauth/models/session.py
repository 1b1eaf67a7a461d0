from __future__ import annotations

import secrets
import time
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Session:
    id: str
    token: str | None
    created_at: int

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    @staticmethod
    def new(token: str | None = None) -> Session:
        # The id is the only thing the browser sees; 32 bytes of URL-safe
        # randomness keeps it unguessable.
        return Session(
            id=secrets.token_urlsafe(32),
            token=token,
            created_at=int(time.time()),
        )
