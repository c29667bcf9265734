"""Base shape of every result returned by a Homebriefing SOAP operation."""

from pydantic import BaseModel, Field

from fplweb.services.homebriefing.errors import RemoteOperationError, SessionExpiredError


class PortalResult(BaseModel):
    """Common flags of a remote operation result.

    Three outcomes are distinguishable:
    - success: ``is_error`` is false
    - failure with detail: ``is_error`` is true, ``session_expired`` false
    - re-authentication required: ``session_expired`` is true
    """

    is_error: bool = False
    session_expired: bool = False
    raw_response: str | None = Field(
        default=None,
        description="Raw portal body, kept when the failure has no usable detail",
    )

    @property
    def failed(self) -> bool:
        return self.is_error or self.session_expired

    def error_summary(self) -> str:
        return "Homebriefing operation failed"

    def raise_for_error(self) -> None:
        """Raise ``SessionExpiredError`` or ``RemoteOperationError`` on failure."""
        if self.session_expired:
            raise SessionExpiredError()
        if self.failed:
            raise RemoteOperationError(
                self.error_summary(),
                field_errors=getattr(self, "field_errors", None),
                error_messages=getattr(self, "error_messages", None),
                raw_response=self.raw_response,
            )
