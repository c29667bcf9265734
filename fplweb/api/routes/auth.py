"""Login handshake endpoints: init, captcha, login, check, logout."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from fplweb.api.auth import clear_session_cookie, set_session_cookie
from fplweb.api.deps import get_handshake, get_session_id, get_session_store, get_settings
from fplweb.persistence.session_store import SessionStore
from fplweb.services.homebriefing.handshake import LoginHandshake
from fplweb.settings import PortalSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    session_id: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    captcha: str = Field(..., min_length=1)


@router.post("/init")
async def init_login(
    handshake: LoginHandshake = Depends(get_handshake),
    store: SessionStore = Depends(get_session_store),
) -> dict:
    init = await handshake.init_login()
    session_id = store.create_pending_login(init.cookies, init.token)
    return {
        "session_id": session_id,
        "message": "Login initialized. Fetch captcha and submit credentials.",
    }


@router.get("/captcha")
async def get_captcha(
    session_id: str = Query(..., min_length=1),
    handshake: LoginHandshake = Depends(get_handshake),
    store: SessionStore = Depends(get_session_store),
) -> Response:
    pending = store.get_pending_login(session_id)
    if pending is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    image = await handshake.get_captcha(pending.cookies)
    return Response(
        content=image.content,
        media_type=image.content_type,
        headers={"Cache-Control": "no-store"},
    )


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    handshake: LoginHandshake = Depends(get_handshake),
    store: SessionStore = Depends(get_session_store),
    settings: PortalSettings = Depends(get_settings),
) -> dict:
    pending = store.get_pending_login(body.session_id)
    if pending is None:
        raise HTTPException(
            status_code=401,
            detail="Invalid or expired session. Please refresh and try again.",
        )

    success = await handshake.submit_login(
        pending.cookies,
        pending.token,
        body.username,
        body.password,
        body.captcha,
    )
    store.activate_session(
        body.session_id, success.cookies, success.token, success.user_session
    )
    set_session_cookie(response, body.session_id, settings)
    return {"success": True, "message": "Login successful"}


@router.get("/check")
async def check(
    session_id: str | None = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
) -> dict:
    authenticated = bool(session_id) and store.get_session(session_id) is not None
    return {"authenticated": authenticated}


@router.post("/logout")
async def logout(
    response: Response,
    session_id: str | None = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    settings: PortalSettings = Depends(get_settings),
) -> dict:
    if session_id:
        store.delete_session(session_id)
    clear_session_cookie(response, settings)
    logger.info("Session logged out")
    return {"success": True}
