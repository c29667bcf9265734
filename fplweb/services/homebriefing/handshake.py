"""Three-step browser login against the Homebriefing portal.

The portal offers no API for authentication, so the login page is driven
the way a browser drives it:

1. ``init_login``: GET ``login.php`` for the session cookie and anti-forgery token
   (embedded in a ``AWLoginDataHandler.setToken("...")`` call).
2. ``get_captcha``: GET the captcha image with the pending cookies.
3. ``submit_login``: POST the credentials, then GET ``index.php`` to read
   the fresh token and the user session from ``new AppController(...)``,
   because the login response itself carries neither.

Steps are strictly sequential: each one needs the cookies and token of the
previous one. Nothing here is retried automatically except plain page
fetches; the captcha answer is single-use, so the login POST never is.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import httpx

from fplweb.services.homebriefing.cookies import cookies_from_response, merge_cookies
from fplweb.services.homebriefing.errors import (
    InitError,
    InvalidCredentialsError,
    LoginRedirectError,
    SessionExtractionError,
    TransportError,
)
from fplweb.services.homebriefing.transport import PortalTransport

logger = logging.getLogger(__name__)

LOGIN_PAGE = "login.php"
CAPTCHA_PATH = "dataHandler.php?method=captchaGenerate"
LOGIN_SUBMIT_PATH = "dataHandler.php?method=loginExt"
LANDING_PAGE = "index.php"

SESSION_COOKIE = "__Host-IxoWeb-NL"
MAX_LANDING_REDIRECTS = 1

_TOKEN_CALL = re.compile(r'AWLoginDataHandler\.setToken\("([^"]+)"\)')
_APP_CONTROLLER = re.compile(r'new\s+AppController\s*\(\s*"([^"]+)"\s*,\s*"([^"]+)"')
_LOGIN_ERROR_MARKERS = ("<IsError>1</IsError>", "<LoginOK>0</LoginOK>")


@dataclass
class LoginInit:
    """Output of step 1, stored as a pending login."""

    cookies: str
    token: str


@dataclass
class CaptchaImage:
    content: bytes
    content_type: str = "image/png"


@dataclass
class LoginSuccess:
    """Credentials of an authenticated portal session."""

    cookies: str
    token: str
    user_session: str


class LoginHandshake:
    """Drives the portal login page on behalf of one user at a time."""

    def __init__(self, transport: PortalTransport):
        self._transport = transport

    # ------------------------------------------------------------------
    # Step 1
    # ------------------------------------------------------------------

    async def init_login(self) -> LoginInit:
        response = await self._transport.send(
            "GET",
            LOGIN_PAGE,
            retry=True,
            follow_redirects=False,
            headers=self._transport.headers(),
        )
        observed = cookies_from_response(response)
        if SESSION_COOKIE not in observed:
            raise InitError(f"Login page did not set the {SESSION_COOKIE} cookie")

        match = _TOKEN_CALL.search(response.text)
        if not match:
            raise InitError("Login page did not contain a token")

        logger.info("Login initialised, cookies: %s", ", ".join(observed))
        return LoginInit(cookies=merge_cookies("", observed), token=match.group(1))

    # ------------------------------------------------------------------
    # Step 2
    # ------------------------------------------------------------------

    async def get_captcha(self, cookies: str) -> CaptchaImage:
        response = await self._transport.send(
            "GET",
            CAPTCHA_PATH,
            retry=True,
            headers=self._transport.headers(cookies),
        )
        return CaptchaImage(
            content=response.content,
            content_type=response.headers.get("content-type", "image/png"),
        )

    # ------------------------------------------------------------------
    # Step 3
    # ------------------------------------------------------------------

    async def submit_login(
        self,
        cookies: str,
        token: str,
        username: str,
        password: str,
        captcha: str,
    ) -> LoginSuccess:
        settings = self._transport.settings
        response = await self._transport.send(
            "POST",
            LOGIN_SUBMIT_PATH,
            headers=self._transport.headers(
                cookies,
                **{"X-AisWeb-Token": token, "Origin": settings.origin},
            ),
            data={
                "userName": username,
                "password": password,
                "lang": settings.lang,
                "captcha": captcha,
            },
        )
        if not response.is_success:
            raise TransportError(f"Login request failed with HTTP {response.status_code}")

        cookies = merge_cookies(cookies, cookies_from_response(response))
        if any(marker in response.text for marker in _LOGIN_ERROR_MARKERS):
            raise InvalidCredentialsError("Invalid credentials or captcha")

        cookies, page = await self._fetch_landing_page(cookies)

        match = _APP_CONTROLLER.search(page)
        if not match:
            logger.warning("Landing page without session data (first 500 chars): %s", page[:500])
            raise SessionExtractionError("Failed to extract session data after login")

        logger.info("Login succeeded")
        return LoginSuccess(cookies=cookies, token=match.group(1), user_session=match.group(2))

    async def _fetch_landing_page(self, cookies: str) -> tuple[str, str]:
        """GET the authenticated landing page, following a redirect by hand.

        Each hop is requested with the cookies merged so far; cookies set on
        a redirect response are needed by the next request.
        """
        url = self._transport.url(LANDING_PAGE)
        for _ in range(MAX_LANDING_REDIRECTS + 1):
            response = await self._transport.send(
                "GET",
                url,
                retry=True,
                follow_redirects=False,
                headers=self._transport.headers(cookies),
            )
            cookies = merge_cookies(cookies, cookies_from_response(response))
            logger.debug("Landing page %s returned HTTP %d", url, response.status_code)

            if not response.is_redirect:
                return cookies, response.text

            location = response.headers.get("location", "")
            if LOGIN_PAGE in location:
                raise LoginRedirectError("Login failed - redirected back to login")
            url = str(httpx.URL(url).join(location))

        raise SessionExtractionError("Too many redirects after login")
