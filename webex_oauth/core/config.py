from __future__ import annotations

import os
import secrets
from dataclasses import dataclass
from typing import Literal
from urllib.parse import parse_qs, urlsplit

from dotenv import load_dotenv

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

DEFAULT_API_BASE = "https://webexapis.com/v1"
DEFAULT_LOGOUT_URL = "https://idbroker.webex.com/idb/oauth2/v1/logout"


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _parse_bool(name: str, raw: str) -> bool:
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("", "0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    auth_init_url: str
    client_secret: str
    state: str
    api_base: str = DEFAULT_API_BASE
    logout_url: str = DEFAULT_LOGOUT_URL

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    def _auth_param(self, name: str) -> str:
        values = parse_qs(urlsplit(self.auth_init_url).query).get(name)
        return values[0] if values else ""

    @property
    def client_id(self) -> str:
        return self._auth_param("client_id")

    @property
    def redirect_uri(self) -> str:
        return self._auth_param("redirect_uri")

    @property
    def scope(self) -> str:
        return self._auth_param("scope")


def _validate_auth_init_url(raw: str) -> None:
    """Reject an authorization URL the integration could never complete a flow with."""
    if not raw:
        raise ValueError("AUTH_INIT_URL must be set (copy it from the integration page)")
    parts = urlsplit(raw)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"AUTH_INIT_URL must be an absolute http(s) URL (got {raw!r})")
    query = parse_qs(parts.query)
    for required in ("client_id", "redirect_uri"):
        if not query.get(required):
            raise ValueError(f"AUTH_INIT_URL is missing the {required!r} query parameter")


def load_settings() -> Settings:
    # Values already in the environment take precedence over .env entries.
    load_dotenv(override=False)

    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    log_json_raw = _getenv("LOG_JSON", "false").lower()
    port_raw = _getenv("PORT", "8080")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    auth_init_url = _getenv("AUTH_INIT_URL", "")
    _validate_auth_init_url(auth_init_url)

    # 64 random bytes, hex encoded, unless a fixed value is configured.
    state = _getenv("STATE", "") or secrets.token_hex(64)

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_parse_bool("LOG_JSON", log_json_raw),
        port=port,
        auth_init_url=auth_init_url,
        client_secret=_getenv("CLIENT_SECRET", ""),
        state=state,
        api_base=_getenv("WEBEX_API_BASE", DEFAULT_API_BASE).rstrip("/"),
        logout_url=_getenv("WEBEX_LOGOUT_URL", DEFAULT_LOGOUT_URL),
    )


SETTINGS = load_settings()
