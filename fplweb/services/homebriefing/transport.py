"""HTTP plumbing shared by the login handshake and the SOAP client."""

from __future__ import annotations

import logging
from http.cookiejar import CookieJar, DefaultCookiePolicy

import httpx

from fplweb.services.homebriefing.errors import TransportError
from fplweb.settings import PortalSettings

logger = logging.getLogger(__name__)


class PortalTransport:
    """Async HTTP access to the portal with an explicit timeout.

    Idempotent reads may be retried ``settings.read_retries`` times on
    network errors and 5xx responses. Writes are sent exactly once.
    """

    def __init__(
        self,
        settings: PortalSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._settings = settings or PortalSettings.from_env()
        self._client = http_client or httpx.AsyncClient(
            timeout=self._settings.timeout_seconds
        )
        # Cookies belong to one user's login chain and travel as explicit
        # ``Cookie`` headers; the shared client must never store or replay any.
        self._client.cookies = CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))

    @property
    def settings(self) -> PortalSettings:
        return self._settings

    def url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._settings.base_url}/{path.lstrip('/')}"

    def headers(self, cookies: str | None = None, **extra: str) -> dict[str, str]:
        headers = {"User-Agent": self._settings.user_agent}
        if cookies:
            headers["Cookie"] = cookies
        headers.update(extra)
        return headers

    async def send(
        self,
        method: str,
        path: str,
        *,
        retry: bool = False,
        follow_redirects: bool = True,
        **kwargs,
    ) -> httpx.Response:
        """Send one request, raising ``TransportError`` on failure."""
        url = self.url(path)
        attempts = 1 + (self._settings.read_retries if retry else 0)

        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.request(
                    method,
                    url,
                    follow_redirects=follow_redirects,
                    timeout=self._settings.timeout_seconds,
                    **kwargs,
                )
            except httpx.HTTPError as exc:
                if attempt < attempts:
                    logger.warning(
                        "%s %s failed (%s), retrying (%d/%d)",
                        method, path, exc, attempt, attempts - 1,
                    )
                    continue
                raise TransportError(f"{method} {path} failed: {exc}") from exc

            if response.status_code >= 500:
                if attempt < attempts:
                    logger.warning(
                        "%s %s returned HTTP %d, retrying (%d/%d)",
                        method, path, response.status_code, attempt, attempts - 1,
                    )
                    continue
                raise TransportError(
                    f"{method} {path} returned HTTP {response.status_code}"
                )
            return response

        raise TransportError(f"{method} {path} failed")  # pragma: no cover
