"""Browser session cookie handling.

The browser never sees portal credentials: it only holds an opaque session
identifier in an HttpOnly cookie, and every authenticated route resolves that
identifier through the session store.
"""

from __future__ import annotations

from fastapi import Response

from fplweb.persistence.session_store import SESSION_TIMEOUT
from fplweb.settings import PortalSettings


def set_session_cookie(response: Response, session_id: str, settings: PortalSettings) -> None:
    response.set_cookie(
        settings.session_cookie,
        session_id,
        max_age=int(SESSION_TIMEOUT.total_seconds()),
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: PortalSettings) -> None:
    response.delete_cookie(
        settings.session_cookie,
        path="/",
        httponly=True,
        secure=settings.secure_cookies,
        samesite="lax",
    )
