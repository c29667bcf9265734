"""Flight plans, flight messages and their remote operation results.

Flight plans are **owned by the portal**: fplweb never stores them, it only
reads them through ``GetFPLListRequest`` / ``GetFPLArchiveRequest`` and writes
them through ``SendFplToCaroRequest``.
"""

from pydantic import BaseModel, Field, computed_field

from fplweb.contracts.enums import (
    FlightPlanAction,
    FlightRules,
    FlightType,
    OrderType,
    StatusCategory,
    WakeTurbulence,
)
from fplweb.contracts.result import PortalResult
from fplweb.services.homebriefing import actions as fpl_actions


class FlightPlan(BaseModel):
    """A filed flight plan as listed by the portal."""

    fl_id: int
    arcid: str = Field(default="", description="Aircraft identification (Field 7)")
    fl_rules: str = ""
    fl_type: str = ""
    arc_type: str = ""
    wake_turbulence_cat: str = ""
    equipment: str = ""
    adep: str = ""
    ades: str = ""
    ad_altn1: str | None = None
    eobdt: str = Field(default="", description="Off-block date/time")
    fl_speed: str = ""
    fl_level: str = ""
    fl_route: str = ""
    total_eet: int = Field(default=0, description="Total EET in minutes")
    fl_other: str | None = Field(default=None, description="Field 18")
    fl_suplementary: str | None = Field(default=None, description="Field 19")
    fl_status_code: int = 0
    fl_status_str: str = ""
    fl_can_do: int = Field(default=0, description="Action bitmask")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def allowed_actions(self) -> list[FlightPlanAction]:
        permitted = fpl_actions.allowed_actions(self.fl_can_do, self.fl_status_code)
        return [a for a in FlightPlanAction if a in permitted]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status_category(self) -> StatusCategory:
        return fpl_actions.status_category(self.fl_status_code, self.fl_can_do)


class FlightPlanFilters(BaseModel):
    """Query filters shared by the current and archived flight plan lists."""

    arcid: str = ""
    adep: str = ""
    ades: str = ""
    fl_rules: str = Field(default="X", description="V, I, Y, Z or X for all")
    own_fls_only: bool = False
    page_number: int = Field(default=0, ge=0)
    page_items: int = Field(default=25, ge=1, le=200)
    order_column: str = "COL_EOBDT"
    order_type: OrderType = OrderType.DESC
    num_hours_after_eta: int = Field(default=3, ge=0)


class FlightPlanListResult(PortalResult):
    fpls_count: int = 0
    total_pages: int = 0
    current_page: int = 0
    flight_plans: list[FlightPlan] = Field(default_factory=list)


class FlightMessage(BaseModel):
    """An ATS message (FPL, DLA, CNL, ACK, ...) exchanged for a flight plan."""

    fl_msg_id: int
    is_income: bool = Field(default=False, description="True for incoming messages")
    msg_time: str = ""
    msg_type: str = ""
    status_code: int = 0
    status_desc: str = ""
    sender_id: int = 0
    sender_name: str = ""
    msg_txt: str = ""
    to_aftn_addr: list[str] | None = None
    aftn_sender: str | None = None
    aftn_send_time: str | None = None


class FlightMessagesResult(PortalResult):
    msg_count: int = 0
    messages: list[FlightMessage] = Field(default_factory=list)


class FlightPlanForm(BaseModel):
    """Flight plan as submitted for validation or filing (Fields 7 to 19)."""

    arcid: str = Field(..., min_length=1, max_length=7)
    fl_rules: FlightRules
    fl_type: FlightType
    arc_num: str | None = None
    arc_type: str = Field(..., min_length=1)
    wake_turbulence_cat: WakeTurbulence
    equipment: str
    adep: str
    eobdt: str = Field(..., description='Off-block date/time "YYYY-MM-DD HH:mm"')
    fl_speed: str
    fl_level: str
    fl_route: str
    ades: str
    total_eet: int = Field(..., ge=0, description="Total EET in minutes")
    ad_altn1: str | None = None
    ad_altn2: str | None = None
    fl_other: str | None = None
    fl_suplementary: str | None = None
    pilot_tel: str | None = None


class FieldError(BaseModel):
    """A validation error attached to a flight plan field code (e.g. ``F7``)."""

    field: str
    message: str


class ValidationResult(PortalResult):
    fpl_is_ok: bool = False
    error_messages: list[str] | None = None
    field_errors: list[FieldError] | None = None

    @property
    def failed(self) -> bool:
        return self.is_error or self.session_expired or not self.fpl_is_ok

    def error_summary(self) -> str:
        return "Flight plan validation failed"


class SubmitResult(PortalResult):
    fpl_is_sent: bool = False
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        return self.is_error or self.session_expired or not self.fpl_is_sent

    def error_summary(self) -> str:
        return self.error_message or "Flight plan was not sent"

    @property
    def error_messages(self) -> list[str] | None:
        return [self.error_message] if self.error_message else None


class ActionResult(PortalResult):
    """Outcome of a DLA or CNL message."""

    success: bool = False
    msg_sent: bool = False
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        return self.is_error or self.session_expired or not self.success

    def error_summary(self) -> str:
        return self.error_message or "Message was not sent"

    @property
    def error_messages(self) -> list[str] | None:
        return [self.error_message] if self.error_message else None
