"""Cookie bookkeeping for the portal's login chain.

The portal hands out cookies across redirects that must be replayed verbatim,
so cookies are tracked as a plain ``name=value; name=value`` header string
that is carried from request to request and merged after every response.
"""

from __future__ import annotations

import re

import httpx

# A comma only separates two cookies when a ``name=`` follows it; commas in
# ``Expires=Wed, 21 Oct 2026 07:28:00 GMT`` do not.
_COOKIE_SPLIT = re.compile(r",(?=\s*[^;,=\s]+=)")
_COOKIE_PAIR = re.compile(r"^\s*([^=;\s]+)=([^;]*)")


def parse_set_cookie(header: str) -> dict[str, str]:
    """Parse a raw (possibly comma-combined) ``Set-Cookie`` value."""
    cookies: dict[str, str] = {}
    for part in _COOKIE_SPLIT.split(header or ""):
        match = _COOKIE_PAIR.match(part)
        if match and match.group(2).strip():
            cookies[match.group(1)] = match.group(2).strip()
    return cookies


def cookies_from_response(response: httpx.Response) -> dict[str, str]:
    """Collect every cookie set by a response, later headers winning."""
    cookies: dict[str, str] = {}
    for header in response.headers.get_list("set-cookie"):
        cookies.update(parse_set_cookie(header))
    return cookies


def parse_cookie_header(header: str) -> dict[str, str]:
    """Parse a ``Cookie`` request header value."""
    cookies: dict[str, str] = {}
    for part in (header or "").split(";"):
        name, sep, value = part.strip().partition("=")
        if name and sep and value:
            cookies[name] = value
    return cookies


def serialize_cookies(cookies: dict[str, str]) -> str:
    return "; ".join(f"{name}={value}" for name, value in cookies.items())


def merge_cookies(existing: str, new_cookies: dict[str, str]) -> str:
    """Merge newly observed cookies into a cookie header string.

    Every name from either side survives exactly once; the new value wins.
    """
    merged = parse_cookie_header(existing)
    merged.update(new_cookies)
    return serialize_cookies(merged)
