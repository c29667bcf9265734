"""Lenient reader for the portal's SOAP responses.

The portal is inconsistent about namespace prefixes (``<ns1:IsError>`` in one
response, ``<IsError>`` in the next) and about tag case, and an expired
session is answered with an HTML page instead of a SOAP envelope. Lookups
therefore match on the local name, case-insensitively, and return the first
match in document order.

Bodies are parsed with ElementTree; when a body is not well-formed XML the
same lookups are answered by a regex scan over the text.
"""

from __future__ import annotations

import html
import logging
import re
import xml.etree.ElementTree as ET

logger = logging.getLogger(__name__)

# Heuristic markers of an expired portal session. The portal has no error
# code for it, so the wording is matched; bump the version when editing.
EXPIRY_PATTERNS_VERSION = 1
SESSION_EXPIRY_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"session.*expired", re.IGNORECASE),
    re.compile(r"invalid.*session", re.IGNORECASE),
    re.compile(r"not.*logged.*in", re.IGNORECASE),
    re.compile(r"login.*required", re.IGNORECASE),
    re.compile(r"authentication.*failed", re.IGNORECASE),
    re.compile(r"unauthorized", re.IGNORECASE),
)
_HTML_MARKERS = ("<!doctype html", "<html")
_LEADING_INT = re.compile(r"[+-]?\d+")


def is_html(body: str) -> bool:
    lowered = body.lower()
    return any(marker in lowered for marker in _HTML_MARKERS)


def is_session_expired(body: str) -> bool:
    """True if the body looks like an expired-session answer."""
    if any(pattern.search(body) for pattern in SESSION_EXPIRY_PATTERNS):
        return True
    return is_html(body)


def _local_name(tag: str) -> str:
    """Strip namespace URI and lowercase an ElementTree tag."""
    if "}" in tag:
        tag = tag.split("}", 1)[1]
    return tag.lower()


def _element_pattern(tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(
        rf"<(?:[\w.-]+:)?{name}(?:\s[^>]*)?(?:/>|>(.*?)</(?:[\w.-]+:)?{name}\s*>)",
        re.IGNORECASE | re.DOTALL,
    )


class XmlReader:
    """Field lookups over one XML document or one wrapper section of it."""

    def __init__(self, body: str | None = None):
        self._text = body or ""
        self._element: ET.Element | None = None
        if body:
            try:
                self._element = ET.fromstring(body)
            except ET.ParseError as exc:
                logger.debug("Response is not well-formed XML (%s), using regex reader", exc)

    @classmethod
    def _of(cls, element: ET.Element | None = None, text: str = "") -> XmlReader:
        reader = cls.__new__(cls)
        reader._element = element
        reader._text = text
        return reader

    @property
    def well_formed(self) -> bool:
        return self._element is not None

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _iter(self, tag: str):
        wanted = tag.lower()
        for element in self._element.iter():
            if _local_name(element.tag) == wanted:
                yield element

    def has(self, tag: str) -> bool:
        if self._element is not None:
            return next(self._iter(tag), None) is not None
        return _element_pattern(tag).search(self._text) is not None

    def text(self, tag: str) -> str | None:
        """Text of the first ``tag`` element, or None when absent."""
        if self._element is not None:
            element = next(self._iter(tag), None)
            return None if element is None else "".join(element.itertext())
        match = _element_pattern(tag).search(self._text)
        if match is None:
            return None
        return html.unescape(match.group(1) or "")

    def texts(self, tag: str) -> list[str]:
        """Text of every ``tag`` element, in document order."""
        if self._element is not None:
            return ["".join(e.itertext()) for e in self._iter(tag)]
        return [
            html.unescape(m.group(1) or "")
            for m in _element_pattern(tag).finditer(self._text)
        ]

    def sections(self, tag: str) -> list[XmlReader]:
        """One reader per repeated wrapper element (``FPLsArray``, ...)."""
        if self._element is not None:
            return [XmlReader._of(element=e) for e in self._iter(tag)]
        return [
            XmlReader._of(text=m.group(1) or "")
            for m in _element_pattern(tag).finditer(self._text)
        ]

    def section(self, tag: str) -> XmlReader | None:
        found = self.sections(tag)
        return found[0] if found else None

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------

    def string(self, tag: str, default: str = "") -> str:
        value = self.text(tag)
        return default if value is None else value

    def optional(self, tag: str) -> str | None:
        """Text of ``tag``, with empty values reported as None."""
        value = self.text(tag)
        return value or None

    def integer(self, tag: str) -> int:
        """Leading integer of the element text (``"12abc"`` is 12), else 0."""
        match = _LEADING_INT.match((self.text(tag) or "").strip())
        return int(match.group()) if match else 0

    def flag(self, tag: str, true_value: str = "1") -> bool:
        return (self.text(tag) or "").strip().lower() == true_value
