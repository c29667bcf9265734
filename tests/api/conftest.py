"""Shared fixtures for API tests.

The app is wired to a fake Homebriefing portal served through
``httpx.MockTransport``, so requests go through the real handshake, SOAP
client and transport code.
"""

from __future__ import annotations

import re

import httpx
import pytest

from fplweb.api.app import app, wire_services
from fplweb.persistence.session_store import SessionStore

TEST_SESSION_ID = "api-test-session"

_OPERATION = re.compile(r"<soapenv:Body><mob:(\w+)>")

LOGIN_PAGE = '<html><script>AWLoginDataHandler.setToken("init-token");</script></html>'
LANDING_PAGE = '<html><script>new AppController("fresh-token", "user-session", {});</script></html>'

PLAN = {
    "arcid": "OKABC",
    "fl_rules": "V",
    "fl_type": "G",
    "arc_type": "C172",
    "wake_turbulence_cat": "L",
    "equipment": "SDFGY/S",
    "adep": "LKPR",
    "eobdt": "2026-06-15 08:30",
    "fl_speed": "N0105",
    "fl_level": "VFR",
    "fl_route": "DCT",
    "ades": "LKTB",
    "total_eet": 75,
}


def soap(body: str) -> str:
    return (
        '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/"'
        ' xmlns:ns1="http://mobiltech.sk/"><SOAP-ENV:Body><ns1:Response>'
        f"{body}"
        "</ns1:Response></SOAP-ENV:Body></SOAP-ENV:Envelope>"
    )


class FakePortal:
    """Portal double: login pages plus canned SOAP answers per operation."""

    def __init__(self):
        self.login_body = "<Response><IsError>0</IsError><LoginOK>1</LoginOK></Response>"
        self.soap_responses: dict[str, httpx.Response] = {}
        self.soap_requests: dict[str, str] = {}

    def answer(self, operation: str, body: str, status_code: int = 200) -> None:
        self.soap_responses[operation] = httpx.Response(status_code, text=body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        method = request.url.params.get("method")
        if path.endswith("/login.php"):
            return httpx.Response(
                200,
                headers=[("Set-Cookie", "__Host-IxoWeb-NL=portal-1; Path=/; Secure")],
                text=LOGIN_PAGE,
            )
        if method == "captchaGenerate":
            return httpx.Response(200, headers={"Content-Type": "image/png"}, content=b"\x89PNG")
        if method == "loginExt":
            return httpx.Response(200, text=self.login_body)
        if path.endswith("/index.php"):
            return httpx.Response(200, text=LANDING_PAGE)
        if path.endswith("/ibafProvider.php"):
            content = request.content.decode()
            operation = _OPERATION.search(content).group(1)
            self.soap_requests[operation] = content
            response = self.soap_responses.get(operation)
            if response is None:
                return httpx.Response(500, text=f"no answer for {operation}")
            return httpx.Response(response.status_code, text=response.text)
        return httpx.Response(404)


@pytest.fixture
def portal():
    return FakePortal()


@pytest.fixture
async def test_app(portal):
    """The FastAPI app with a fresh session store and the fake portal."""
    app.state.session_store = SessionStore()
    async with httpx.AsyncClient(transport=httpx.MockTransport(portal)) as http_client:
        wire_services(app, http_client)
        yield app


@pytest.fixture
async def client(test_app):
    """httpx AsyncClient wired to the test app."""
    transport = httpx.ASGITransport(app=test_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def auth_headers(test_app):
    """An active session and the cookie header that selects it."""
    test_app.state.session_store.activate_session(
        TEST_SESSION_ID, "__Host-IxoWeb-NL=portal-1", "fresh-token", "user-session"
    )
    return {"Cookie": f"hb-session={TEST_SESSION_ID}"}
