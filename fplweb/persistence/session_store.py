"""In-memory store for pending logins and authenticated portal sessions.

Sessions are keyed by an opaque identifier that the browser holds in an
HttpOnly cookie. The identifier is a bearer credential, so it is drawn from
``secrets`` with 256 bits of entropy.

- **Pending login**: created by the login page fetch, consumed by a
  successful login, gone after 5 minutes.
- **Active session**: holds the portal cookies, token and user session;
  every successful read slides its expiry 30 minutes forward.

A single lock guards both tables. Each public method runs as one critical
section, so the expiry check and the sliding extension in ``get_session``
cannot interleave with another caller.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

SESSION_TIMEOUT = timedelta(minutes=30)
PENDING_TIMEOUT = timedelta(minutes=5)
SWEEP_INTERVAL_SECONDS = 5 * 60


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class PendingLogin:
    cookies: str
    token: str
    created_at: datetime


@dataclass
class ActiveSession:
    cookies: str
    token: str
    user_session: str
    expires_at: datetime


class SessionStore:
    """Thread-safe session table with sliding expiry and a background sweeper."""

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        session_timeout: timedelta = SESSION_TIMEOUT,
        pending_timeout: timedelta = PENDING_TIMEOUT,
    ):
        self._clock = clock
        self._session_timeout = session_timeout
        self._pending_timeout = pending_timeout
        self._sessions: dict[str, ActiveSession] = {}
        self._pending: dict[str, PendingLogin] = {}
        self._lock = threading.Lock()
        self._sweeper: asyncio.Task | None = None

    # ------------------------------------------------------------------
    # Identifiers
    # ------------------------------------------------------------------

    @staticmethod
    def generate_id() -> str:
        return secrets.token_hex(32)

    # ------------------------------------------------------------------
    # Pending logins
    # ------------------------------------------------------------------

    def create_pending_login(self, cookies: str, token: str) -> str:
        session_id = self.generate_id()
        with self._lock:
            self._pending[session_id] = PendingLogin(
                cookies=cookies, token=token, created_at=self._clock()
            )
        return session_id

    def get_pending_login(self, session_id: str) -> PendingLogin | None:
        with self._lock:
            pending = self._pending.get(session_id)
            if pending is None:
                return None
            if self._clock() - pending.created_at > self._pending_timeout:
                del self._pending[session_id]
                return None
            return replace(pending)

    # ------------------------------------------------------------------
    # Active sessions
    # ------------------------------------------------------------------

    def activate_session(
        self, session_id: str, cookies: str, token: str, user_session: str
    ) -> bool:
        """Promote ``session_id`` to an authenticated session."""
        with self._lock:
            self._pending.pop(session_id, None)
            self._sessions[session_id] = ActiveSession(
                cookies=cookies,
                token=token,
                user_session=user_session,
                expires_at=self._clock() + self._session_timeout,
            )
        return True

    def get_session(self, session_id: str) -> ActiveSession | None:
        """Return a snapshot of the session and extend its expiry."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            now = self._clock()
            if now > session.expires_at:
                del self._sessions[session_id]
                return None
            session.expires_at = now + self._session_timeout
            return replace(session)

    def delete_session(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)
            self._pending.pop(session_id, None)

    def counts(self) -> dict[str, int]:
        with self._lock:
            return {"pending": len(self._pending), "active": len(self._sessions)}

    # ------------------------------------------------------------------
    # Expiry sweep
    # ------------------------------------------------------------------

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired_sessions = [
                sid for sid, s in self._sessions.items() if now > s.expires_at
            ]
            expired_pending = [
                sid
                for sid, p in self._pending.items()
                if now - p.created_at > self._pending_timeout
            ]
            for sid in expired_sessions:
                del self._sessions[sid]
            for sid in expired_pending:
                del self._pending[sid]
        return len(expired_sessions) + len(expired_pending)

    async def _sweep_forever(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            removed = self.sweep()
            if removed:
                logger.info("Session sweep removed %d expired entries", removed)

    def start_sweeper(self, interval: float = SWEEP_INTERVAL_SECONDS) -> asyncio.Task:
        """Start the periodic sweep on the running loop (no-op if running)."""
        if self._sweeper is not None and not self._sweeper.done():
            return self._sweeper
        self._sweeper = asyncio.get_running_loop().create_task(
            self._sweep_forever(interval), name="session-sweeper"
        )
        logger.info("Session sweeper started (every %ss)", interval)
        return self._sweeper

    async def stop_sweeper(self) -> None:
        task, self._sweeper = self._sweeper, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
