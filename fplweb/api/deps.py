"""FastAPI dependency injection wiring."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from fplweb.contracts.result import PortalResult
from fplweb.persistence.session_store import SessionStore
from fplweb.services.homebriefing.errors import SessionExpiredError
from fplweb.services.homebriefing.handshake import LoginHandshake
from fplweb.services.homebriefing.soap_client import HomebriefingClient, PortalCredentials
from fplweb.settings import PortalSettings


# ------------------------------------------------------------------
# Singletons from app.state
# ------------------------------------------------------------------


def get_settings(request: Request) -> PortalSettings:
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_handshake(request: Request) -> LoginHandshake:
    return request.app.state.handshake


def get_homebriefing_client(request: Request) -> HomebriefingClient:
    return request.app.state.homebriefing_client


# ------------------------------------------------------------------
# Current session
# ------------------------------------------------------------------


def get_session_id(
    request: Request,
    settings: PortalSettings = Depends(get_settings),
) -> str | None:
    return request.cookies.get(settings.session_cookie)


def get_credentials(
    session_id: str | None = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> PortalCredentials:
    """Resolve the browser cookie to portal credentials (sliding the expiry)."""
    if not session_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    session = store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return PortalCredentials(
        cookies=session.cookies,
        token=session.token,
        user_session=session.user_session,
    )


def ensure_session(result: PortalResult) -> None:
    """Raise if the portal reported its session as gone; other failures pass."""
    if result.session_expired:
        raise SessionExpiredError()
