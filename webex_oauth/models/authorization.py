from __future__ import annotations

import hmac
from dataclasses import dataclass
from urllib.parse import parse_qsl, unquote_plus, urlencode, urlsplit, urlunsplit


def build_authorization_url(base_url: str, state: str) -> str:
    """Return *base_url* with its ``state`` query parameter set to *state*.

    An existing ``state`` is replaced in place; every other parameter keeps
    its position and its original encoding.  A missing one is appended.
    """
    parts = urlsplit(base_url)
    state_segment = urlencode({"state": state})

    segments: list[str] = []
    replaced = False
    for segment in parts.query.split("&") if parts.query else []:
        key = unquote_plus(segment.split("=", 1)[0])
        if key == "state":
            if not replaced:
                segments.append(state_segment)
                replaced = True
            continue
        segments.append(segment)
    if not replaced:
        segments.append(state_segment)

    return urlunsplit(parts._replace(query="&".join(segments)))


@dataclass(frozen=True, slots=True)
class PendingAuthorization:
    """The one authorization request this process will accept a callback for.

    Built once at startup.  Every browser is sent to the same
    ``authorization_url`` and every callback is checked against the same
    ``state``; the process supports a single flow value, not one per user.
    """

    state: str
    authorization_url: str
    client_id: str
    redirect_uri: str
    scope: str

    def matches(self, state: str) -> bool:
        return hmac.compare_digest(self.state.encode(), state.encode())

    @staticmethod
    def new(*, base_url: str, state: str) -> PendingAuthorization:
        query = dict(parse_qsl(urlsplit(base_url).query, keep_blank_values=True))
        return PendingAuthorization(
            state=state,
            authorization_url=build_authorization_url(base_url, state),
            client_id=query.get("client_id", ""),
            redirect_uri=query.get("redirect_uri", ""),
            scope=query.get("scope", ""),
        )
