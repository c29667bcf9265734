"""Runtime configuration read from the environment (``.env`` supported)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_BASE_URL = "https://hbs.ixosystem.eu/ixo"
DEFAULT_ORIGIN = "https://hbs.ixosystem.eu"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"
)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class PortalSettings:
    """Settings for talking to the Homebriefing portal and serving the API."""

    base_url: str = DEFAULT_BASE_URL
    origin: str = DEFAULT_ORIGIN
    user_agent: str = DEFAULT_USER_AGENT
    timeout_seconds: float = 20.0
    read_retries: int = 1
    lang: str = "en"
    session_cookie: str = "hb-session"
    secure_cookies: bool = False
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])

    @classmethod
    def from_env(cls) -> PortalSettings:
        return cls(
            base_url=os.environ.get("HB_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
            origin=os.environ.get("HB_ORIGIN", DEFAULT_ORIGIN),
            user_agent=os.environ.get("HB_USER_AGENT", DEFAULT_USER_AGENT),
            timeout_seconds=float(os.environ.get("HB_TIMEOUT_SECONDS", "20")),
            read_retries=max(0, int(os.environ.get("HB_READ_RETRIES", "1"))),
            lang=os.environ.get("HB_LANG", "en"),
            session_cookie=os.environ.get("FPLWEB_SESSION_COOKIE", "hb-session"),
            secure_cookies=_env_bool("FPLWEB_SECURE_COOKIES"),
            cors_origins=os.environ.get(
                "CORS_ORIGINS", "http://localhost:5173"
            ).split(","),
        )
