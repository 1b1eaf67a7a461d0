from __future__ import annotations

import dataclasses
from typing import Protocol

from webex_oauth.models.session import Session


class SessionStore(Protocol):
    def create(self, token: str | None = None) -> Session: ...
    def get(self, session_id: str) -> Session | None: ...
    def set_token(self, session_id: str, token: str) -> Session | None: ...
    def destroy(self, session_id: str) -> None: ...
    def __len__(self) -> int: ...


class InMemorySessionStore:
    """Process-memory sessions; everything is lost on restart."""

    def __init__(self) -> None:
        self._by_id: dict[str, Session] = {}

    def create(self, token: str | None = None) -> Session:
        session = Session.new(token)
        self._by_id[session.id] = session
        return session

    def get(self, session_id: str) -> Session | None:
        return self._by_id.get(session_id)

    def set_token(self, session_id: str, token: str) -> Session | None:
        """Attach *token* to the session, replacing any earlier one.

        Returns None if the session does not exist (e.g. destroyed by a
        concurrent logout).
        """
        session = self._by_id.get(session_id)
        if session is None:
            return None
        updated = dataclasses.replace(session, token=token)
        self._by_id[session_id] = updated
        return updated

    def destroy(self, session_id: str) -> None:
        self._by_id.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._by_id)
