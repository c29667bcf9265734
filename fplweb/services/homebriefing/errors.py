"""Homebriefing integration exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fplweb.contracts.flight_plan import FieldError


class HomebriefingError(Exception):
    """Base exception for all Homebriefing integration errors."""


class TransportError(HomebriefingError):
    """The HTTP call to the portal failed (network error, timeout, 5xx)."""


class SessionExpiredError(HomebriefingError):
    """The remote session is no longer valid; the user must log in again."""

    def __init__(self, message: str = "Homebriefing session expired"):
        super().__init__(message)


# ============ Login handshake ============

class AuthHandshakeError(HomebriefingError):
    """Base exception for the three-step login handshake."""

    code = "LOGIN_FAILED"


class InitError(AuthHandshakeError):
    """The login page did not yield the session cookie or the token."""

    code = "LOGIN_INIT_FAILED"


class InvalidCredentialsError(AuthHandshakeError):
    """The portal rejected the username, password or captcha answer."""

    code = "INVALID_CREDENTIALS"


class LoginRedirectError(AuthHandshakeError):
    """The landing page redirected back to the login page."""

    code = "LOGIN_REDIRECT"


class SessionExtractionError(AuthHandshakeError):
    """The landing page did not contain the token and user session."""

    code = "SESSION_EXTRACTION_FAILED"


# ============ Remote operations ============

class RemoteOperationError(HomebriefingError):
    """A SOAP operation reported failure."""

    def __init__(
        self,
        message: str,
        field_errors: list[FieldError] | None = None,
        error_messages: list[str] | None = None,
        raw_response: str | None = None,
    ):
        self.field_errors = field_errors or []
        self.error_messages = error_messages or []
        self.raw_response = raw_response
        super().__init__(message)
