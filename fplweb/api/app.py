"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request

# Load .env file from project root (must be before other imports)
load_dotenv()
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from fplweb.api.auth import clear_session_cookie  # noqa: E402
from fplweb.api.routes import auth, fields, flight_plans, templates  # noqa: E402
from fplweb.persistence.session_store import SessionStore  # noqa: E402
from fplweb.services.homebriefing.errors import (  # noqa: E402
    AuthHandshakeError,
    InitError,
    RemoteOperationError,
    SessionExpiredError,
    TransportError,
)
from fplweb.services.homebriefing.handshake import LoginHandshake  # noqa: E402
from fplweb.services.homebriefing.soap_client import HomebriefingClient  # noqa: E402
from fplweb.services.homebriefing.transport import PortalTransport  # noqa: E402
from fplweb.settings import PortalSettings  # noqa: E402

logger = logging.getLogger(__name__)

settings = PortalSettings.from_env()


def wire_services(app: FastAPI, http_client: httpx.AsyncClient) -> None:
    """Attach the portal services sharing ``http_client`` to ``app.state``."""
    transport = PortalTransport(app.state.settings, http_client=http_client)
    app.state.handshake = LoginHandshake(transport)
    app.state.homebriefing_client = HomebriefingClient(transport)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Own the outbound HTTP client and the session sweeper for the app's lifetime."""
    store: SessionStore = app.state.session_store
    async with httpx.AsyncClient(timeout=app.state.settings.timeout_seconds) as http_client:
        wire_services(app, http_client)
        store.start_sweeper()
        logger.info("Homebriefing portal: %s", app.state.settings.base_url)
        try:
            yield
        finally:
            await store.stop_sweeper()


app = FastAPI(
    title="fplweb API",
    description="Flight plan filing through the Homebriefing portal",
    version="0.1.0",
    lifespan=lifespan,
)
app.state.settings = settings
app.state.session_store = SessionStore()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router, prefix="/api")
app.include_router(templates.router, prefix="/api")
app.include_router(flight_plans.router, prefix="/api")
app.include_router(fields.router, prefix="/api")


# ------------------------------------------------------------------
# Portal errors
# ------------------------------------------------------------------


@app.exception_handler(SessionExpiredError)
async def session_expired_handler(request: Request, exc: SessionExpiredError) -> JSONResponse:
    """Forget the local session too; the user has to log in again."""
    app_settings: PortalSettings = request.app.state.settings
    session_id = request.cookies.get(app_settings.session_cookie)
    if session_id:
        request.app.state.session_store.delete_session(session_id)
    logger.info("Homebriefing session expired, local session removed")
    response = JSONResponse(
        status_code=401,
        content={"detail": str(exc), "code": "SESSION_EXPIRED"},
    )
    clear_session_cookie(response, app_settings)
    return response


@app.exception_handler(AuthHandshakeError)
async def handshake_error_handler(request: Request, exc: AuthHandshakeError) -> JSONResponse:
    status_code = 502 if isinstance(exc, InitError) else 401
    logger.warning("Login handshake failed: %s", exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": exc.code},
    )


@app.exception_handler(RemoteOperationError)
async def remote_error_handler(request: Request, exc: RemoteOperationError) -> JSONResponse:
    return JSONResponse(
        status_code=502,
        content={
            "detail": str(exc),
            "field_errors": [e.model_dump() for e in exc.field_errors],
            "error_messages": exc.error_messages,
            "raw_response": exc.raw_response,
        },
    )


@app.exception_handler(TransportError)
async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    logger.error("Homebriefing unreachable: %s", exc)
    return JSONResponse(
        status_code=502,
        content={"detail": "Homebriefing portal unavailable"},
    )


@app.get("/api/health")
async def health():
    store: SessionStore = app.state.session_store
    return {
        "status": "ok",
        "portal": app.state.settings.base_url,
        "sessions": store.counts(),
    }
