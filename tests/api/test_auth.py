"""Tests for the login handshake endpoints and session handling."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fplweb.persistence.session_store import SessionStore
from tests.api.conftest import TEST_SESSION_ID, soap


async def _init(client) -> str:
    response = await client.post("/api/auth/init")
    assert response.status_code == 200
    return response.json()["session_id"]


class TestLoginFlow:
    async def test_init_creates_pending_login(self, client, test_app):
        session_id = await _init(client)
        assert len(session_id) == 64
        pending = test_app.state.session_store.get_pending_login(session_id)
        assert pending.token == "init-token"
        assert "__Host-IxoWeb-NL=portal-1" in pending.cookies

    async def test_captcha(self, client):
        session_id = await _init(client)
        response = await client.get("/api/auth/captcha", params={"session_id": session_id})
        assert response.status_code == 200
        assert response.content == b"\x89PNG"
        assert response.headers["content-type"] == "image/png"
        assert response.headers["cache-control"] == "no-store"

    async def test_captcha_unknown_session(self, client):
        response = await client.get("/api/auth/captcha", params={"session_id": "nope"})
        assert response.status_code == 401

    async def test_login_sets_cookie_and_activates_session(self, client, test_app):
        session_id = await _init(client)
        response = await client.post(
            "/api/auth/login",
            json={"session_id": session_id, "username": "pilot", "password": "pw", "captcha": "AB12"},
        )
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Login successful"}

        set_cookie = response.headers["set-cookie"]
        assert f"hb-session={session_id}" in set_cookie
        assert "HttpOnly" in set_cookie
        assert "Max-Age=1800" in set_cookie
        assert "samesite=lax" in set_cookie.lower()

        session = test_app.state.session_store.get_session(session_id)
        assert session.token == "fresh-token"
        assert session.user_session == "user-session"

        check = await client.get("/api/auth/check", headers={"Cookie": f"hb-session={session_id}"})
        assert check.json() == {"authenticated": True}

    async def test_login_with_unknown_pending(self, client):
        response = await client.post(
            "/api/auth/login",
            json={"session_id": "nope", "username": "pilot", "password": "pw", "captcha": "AB12"},
        )
        assert response.status_code == 401

    async def test_login_rejected(self, client, portal):
        portal.login_body = "<Response><IsError>1</IsError></Response>"
        session_id = await _init(client)
        response = await client.post(
            "/api/auth/login",
            json={"session_id": session_id, "username": "pilot", "password": "bad", "captcha": "XX"},
        )
        assert response.status_code == 401
        assert response.json()["code"] == "INVALID_CREDENTIALS"

    async def test_login_missing_field(self, client):
        response = await client.post("/api/auth/login", json={"session_id": "s", "username": "pilot"})
        assert response.status_code == 422


class TestSessionLifecycle:
    async def test_check_without_cookie(self, client):
        response = await client.get("/api/auth/check")
        assert response.json() == {"authenticated": False}

    async def test_logout(self, client, test_app, auth_headers):
        response = await client.post("/api/auth/logout", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert 'hb-session=""' in response.headers["set-cookie"]
        assert test_app.state.session_store.get_session(TEST_SESSION_ID) is None

    async def test_local_session_timeout(self, client, test_app):
        now = [datetime(2026, 6, 15, 8, 0, tzinfo=timezone.utc)]
        store = SessionStore(clock=lambda: now[0])
        test_app.state.session_store = store
        store.activate_session(TEST_SESSION_ID, "c=1", "tok", "us")
        now[0] += timedelta(minutes=31)
        response = await client.get(
            "/api/flight-plans", headers={"Cookie": f"hb-session={TEST_SESSION_ID}"}
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Session expired"

    async def test_not_authenticated(self, client):
        response = await client.get("/api/flight-plans")
        assert response.status_code == 401
        assert response.json()["detail"] == "Not authenticated"

    async def test_portal_expiry_clears_local_session(self, client, test_app, portal, auth_headers):
        portal.answer("GetFPLListRequest", "<!DOCTYPE html><html><body>Login</body></html>")
        response = await client.get("/api/flight-plans", headers=auth_headers)
        assert response.status_code == 401
        assert response.json()["code"] == "SESSION_EXPIRED"
        assert 'hb-session=""' in response.headers["set-cookie"]
        assert test_app.state.session_store.get_session(TEST_SESSION_ID) is None

    async def test_expired_message_inside_soap(self, client, portal, auth_headers):
        portal.answer("GetFlTplListRequest", soap("<ns1:ErrMsg>Invalid user session</ns1:ErrMsg>"))
        response = await client.get("/api/flight-plans/templates", headers=auth_headers)
        assert response.status_code == 401
        assert response.json()["code"] == "SESSION_EXPIRED"


class TestHealth:
    async def test_health(self, client, auth_headers):
        response = await client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["sessions"] == {"pending": 0, "active": 1}
