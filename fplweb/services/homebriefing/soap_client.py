"""SOAP client for the portal's flight plan operations.

Each operation posts one envelope (see ``envelopes``) to ``ibafProvider.php``
and turns the answer into a typed result. Parsing never raises on portal
content: an expired session or an unreadable body becomes a result with
``session_expired`` or ``is_error`` set, and the caller decides what to do
(``result.raise_for_error()`` turns it into an exception).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TypeVar

from fplweb.contracts.flight_plan import (
    ActionResult,
    FieldError,
    FlightMessage,
    FlightMessagesResult,
    FlightPlan,
    FlightPlanFilters,
    FlightPlanForm,
    FlightPlanListResult,
    SubmitResult,
    ValidationResult,
)
from fplweb.contracts.result import PortalResult
from fplweb.contracts.template import (
    DeleteTemplateResult,
    SaveTemplateRequest,
    SaveTemplateResult,
    TemplateData,
    TemplateListItem,
    TemplateListResult,
    TemplateResult,
)
from fplweb.services.homebriefing import envelopes
from fplweb.services.homebriefing.transport import PortalTransport
from fplweb.services.homebriefing.xml_reader import XmlReader, is_session_expired

logger = logging.getLogger(__name__)

SOAP_ENDPOINT = "ibafProvider.php"

_FIELD_ERROR = re.compile(r"^(F\d+[a-z]?|FAddinfo\w+)\s+(.+)$", re.IGNORECASE | re.DOTALL)
UNKNOWN_SAVE_ERROR = "Unknown error - check server logs for details"

R = TypeVar("R", bound=PortalResult)


@dataclass(frozen=True)
class PortalCredentials:
    """What an authenticated call needs: cookies, anti-forgery token, remote session."""

    cookies: str
    token: str
    user_session: str


# ============ Response parsing ============

def _open(body: str, result_type: type[R]) -> tuple[XmlReader | None, R | None]:
    """Return a reader for a usable SOAP body, or the early result otherwise."""
    if is_session_expired(body):
        logger.info("Portal answered with an expired-session response")
        return None, result_type(is_error=True, session_expired=True)
    reader = XmlReader(body)
    if not reader.has("Envelope"):
        logger.warning("Portal response without SOAP envelope (%d bytes)", len(body))
        return None, result_type(is_error=True, raw_response=body)
    return reader, None


def parse_flight_plan_list(body: str) -> FlightPlanListResult:
    reader, early = _open(body, FlightPlanListResult)
    if early is not None:
        return early

    flight_plans = [
        FlightPlan(
            fl_id=fpl.integer("FlId"),
            arcid=fpl.string("ARCID"),
            fl_rules=fpl.string("FlRules"),
            fl_type=fpl.string("FlType"),
            arc_type=fpl.string("ArcType"),
            wake_turbulence_cat=fpl.string("WakeTurbulenceCat"),
            equipment=fpl.string("Equipment"),
            adep=fpl.string("ADEP"),
            ades=fpl.string("ADES"),
            ad_altn1=fpl.optional("ADAltn1"),
            eobdt=fpl.string("EOBDT"),
            fl_speed=fpl.string("FlSpeed"),
            fl_level=fpl.string("FlLevel"),
            fl_route=fpl.string("FlRoute"),
            total_eet=fpl.integer("TotalEET"),
            fl_other=fpl.optional("FlOther"),
            fl_suplementary=fpl.optional("FlSuplementary"),
            fl_status_code=fpl.integer("FlStatusCode"),
            fl_status_str=fpl.string("FlStatusStr"),
            fl_can_do=fpl.integer("FlCanDo"),
        )
        for fpl in reader.sections("FPLsArray")
    ]
    return FlightPlanListResult(
        is_error=reader.flag("IsError"),
        fpls_count=reader.integer("FPLsCount"),
        total_pages=reader.integer("TotalPages"),
        current_page=reader.integer("CurrentPage"),
        flight_plans=flight_plans,
    )


def parse_flight_messages(body: str) -> FlightMessagesResult:
    reader, early = _open(body, FlightMessagesResult)
    if early is not None:
        return early

    messages = []
    for msg in reader.sections("MsgArray"):
        addresses = [a for a in msg.texts("toAFTNAddr") if a]
        messages.append(
            FlightMessage(
                fl_msg_id=msg.integer("FlMsgId"),
                is_income=msg.flag("IsIncome"),
                msg_time=msg.string("MsgTime"),
                msg_type=msg.string("MsgType"),
                status_code=msg.integer("StatusCode"),
                status_desc=msg.string("StatusDesc"),
                sender_id=msg.integer("SenderId"),
                sender_name=msg.string("SenderName"),
                msg_txt=msg.string("MsgTxt"),
                to_aftn_addr=addresses or None,
                aftn_sender=msg.optional("AftnSender"),
                aftn_send_time=msg.optional("AftnSendTime"),
            )
        )
    return FlightMessagesResult(
        is_error=reader.flag("IsError"),
        msg_count=reader.integer("MsgCount"),
        messages=messages,
    )


def parse_field_error(text: str) -> FieldError:
    """``F7 Invalid Aircraft Identification`` -> field ``F7``; else ``General``."""
    match = _FIELD_ERROR.match(text)
    if match:
        return FieldError(field=match.group(1), message=match.group(2))
    return FieldError(field="General", message=text)


def parse_validation(body: str) -> ValidationResult:
    reader, early = _open(body, ValidationResult)
    if early is not None:
        return early

    fpl_is_ok = reader.flag("FplIsOk")
    field_errors = [parse_field_error(t) for t in reader.texts("FplErrors") if t]
    error_messages = [t for t in reader.texts("ErrMsg") if t]

    if not fpl_is_ok and not field_errors and not error_messages:
        logger.warning("Validation failed without error details, raw response: %s", body)

    return ValidationResult(
        is_error=reader.flag("IsError"),
        fpl_is_ok=fpl_is_ok,
        field_errors=field_errors or None,
        error_messages=error_messages or None,
        raw_response=None if fpl_is_ok else body,
    )


def parse_submit(body: str) -> SubmitResult:
    reader, early = _open(body, SubmitResult)
    if early is not None:
        return early
    return SubmitResult(
        is_error=reader.flag("IsError"),
        fpl_is_sent=reader.flag("FplIsSent"),
        error_message=reader.optional("ErrMsg"),
    )


def parse_template_list(body: str) -> TemplateListResult:
    reader, early = _open(body, TemplateListResult)
    if early is not None:
        return early
    templates = [
        TemplateListItem(tpl_id=tpl.integer("TplId"), tpl_name=tpl.string("TplName"))
        for tpl in reader.sections("FlTplArray")
    ]
    return TemplateListResult(
        is_error=reader.flag("IsError"),
        count=reader.integer("FlTplCount"),
        templates=templates,
    )


def _template_data(values: XmlReader) -> TemplateData:
    return TemplateData(
        tpl_id=values.integer("TplId"),
        tpl_name=values.string("TplName"),
        arcid=values.string("ARCID"),
        fl_rules=values.string("FlRules"),
        fl_type=values.string("FlType"),
        arc_type=values.string("ArcType"),
        wake_turbulence_cat=values.string("WakeTurbulenceCat"),
        equipment_10a=values.string("Equipment_10a"),
        equipment_10b=values.string("Equipment_10b"),
        equipment_10c=values.string("Equipment_10c"),
        adep=values.string("ADEP"),
        eobt=values.string("EOBT"),
        fl_speed_measure=values.string("FlSpeedMeasure"),
        fl_speed_value=values.string("FlSpeedValue").strip(),
        fl_level_measure=values.string("FlLevelMeasure"),
        fl_level_value=values.optional("FlLevelValue"),
        ades=values.optional("ADES"),
        fl_route=values.optional("FlRoute"),
        total_eet=values.integer("TotalEET") or None,
        ad_altn1=values.optional("ADAltn1"),
        ad_altn2=values.optional("ADAltn2"),
        fl_other=values.optional("FlOther"),
        endurance=values.optional("Endurance"),
        persons_on_board=values.optional("PersonsOnBoard"),
        radio=values.optional("Radio"),
        survival=values.optional("Survival"),
        jackets=values.optional("Jackets"),
        dinghies=values.optional("Dinghies"),
        dinghies_number=values.optional("DinghiesNumber"),
        dinghies_capacity=values.optional("DinghiesCapacity"),
        dinghies_cover=values.flag("DinghiesCover", true_value="true"),
        dinghies_colour=values.optional("DinghiesColour"),
        aircraft_colour=values.optional("AircraftColour_A"),
        remarks=values.optional("Remarks_N") or values.optional("Remarks_J"),
        pilot_in_command=values.optional("PilotInCmd_C"),
        pilot_tel=values.optional("PilotTel"),
    )


def parse_template(body: str) -> TemplateResult:
    reader, early = _open(body, TemplateResult)
    if early is not None:
        return early

    is_error = reader.flag("IsError")
    if not reader.flag("FlTplFound"):
        return TemplateResult(is_error=is_error, found=False)
    values = reader.section("FlTplValues")
    if values is None:
        logger.warning("Template marked as found but has no values section")
        return TemplateResult(is_error=is_error, found=False)
    return TemplateResult(is_error=is_error, found=True, template=_template_data(values))


def parse_save_template(body: str) -> SaveTemplateResult:
    reader, early = _open(body, SaveTemplateResult)
    if early is not None:
        return early

    is_error = reader.flag("IsError")
    error_message = reader.optional("ErrMsg")
    if not error_message:
        fault = reader.section("Fault")
        if fault is not None:
            error_message = fault.optional("faultstring") or "SOAP Fault"

    inserted = reader.integer("InsertedTplId")
    success = not is_error and inserted > 0
    if not success and not error_message:
        logger.warning("Template save failed without error details, raw response: %s", body)
        error_message = UNKNOWN_SAVE_ERROR

    return SaveTemplateResult(
        is_error=is_error,
        success=success,
        inserted_tpl_id=inserted or None,
        error_message=error_message,
        raw_response=None if success else body,
    )


def parse_delete_template(body: str) -> DeleteTemplateResult:
    reader, early = _open(body, DeleteTemplateResult)
    if early is not None:
        return early
    is_error = reader.flag("IsError")
    deleted = reader.integer("DeletedTplId")
    return DeleteTemplateResult(
        is_error=is_error,
        success=not is_error and deleted > 0,
        deleted_tpl_id=deleted or None,
        error_message=reader.optional("ErrMsg"),
    )


def parse_action(body: str) -> ActionResult:
    reader, early = _open(body, ActionResult)
    if early is not None:
        return early
    is_error = reader.flag("IsError")
    msg_sent = reader.flag("MsgSent")
    return ActionResult(
        is_error=is_error,
        success=not is_error and msg_sent,
        msg_sent=msg_sent,
        error_message=reader.optional("ErrMsg"),
    )


# ============ Client ============

class HomebriefingClient:
    """Flight plan, template and ATS message operations for one portal.

    Reads (lists, messages, validation, template lookups) may be retried by
    the transport; anything that changes state on the portal is sent once.
    """

    def __init__(self, transport: PortalTransport):
        self._transport = transport

    async def _call(self, creds: PortalCredentials, operation: str, envelope: str, *, retry: bool) -> str:
        settings = self._transport.settings
        headers = self._transport.headers(
            creds.cookies,
            **{
                "Content-Type": 'text/xml; charset="UTF-8"',
                "Accept": "application/xml, text/xml, */*; q=0.01",
                "X-Requested-With": "XMLHttpRequest",
                "X-AisWeb-Token": creds.token,
                "Origin": settings.origin,
            },
        )
        response = await self._transport.send(
            "POST",
            SOAP_ENDPOINT,
            retry=retry,
            headers=headers,
            content=envelope.encode("utf-8"),
        )
        logger.debug("%s returned HTTP %d (%d bytes)", operation, response.status_code, len(response.content))
        return response.text

    # ------------------------------------------------------------------
    # Flight plans
    # ------------------------------------------------------------------

    async def list_current_flight_plans(
        self, creds: PortalCredentials, filters: FlightPlanFilters | None = None
    ) -> FlightPlanListResult:
        envelope = envelopes.flight_plan_list(filters or FlightPlanFilters(), creds.user_session)
        return parse_flight_plan_list(
            await self._call(creds, "GetFPLListRequest", envelope, retry=True)
        )

    async def list_archived_flight_plans(
        self, creds: PortalCredentials, filters: FlightPlanFilters | None = None
    ) -> FlightPlanListResult:
        envelope = envelopes.flight_plan_list(
            filters or FlightPlanFilters(), creds.user_session, archive=True
        )
        return parse_flight_plan_list(
            await self._call(creds, "GetFPLArchiveRequest", envelope, retry=True)
        )

    async def list_messages(self, creds: PortalCredentials, fl_id: int) -> FlightMessagesResult:
        envelope = envelopes.flight_messages(fl_id, creds.user_session)
        return parse_flight_messages(
            await self._call(creds, "GetFlMsgListRequest", envelope, retry=True)
        )

    async def validate_flight_plan(
        self, creds: PortalCredentials, form: FlightPlanForm
    ) -> ValidationResult:
        envelope = envelopes.check_validity(form, creds.user_session)
        return parse_validation(
            await self._call(creds, "CheckFplValidityRequest", envelope, retry=True)
        )

    async def send_flight_plan(self, creds: PortalCredentials, form: FlightPlanForm) -> SubmitResult:
        envelope = envelopes.send_to_caro(form, creds.user_session)
        result = parse_submit(await self._call(creds, "SendFplToCaroRequest", envelope, retry=False))
        logger.info("Flight plan %s for %s sent: %s", form.arcid, form.eobdt, result.fpl_is_sent)
        return result

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def list_templates(self, creds: PortalCredentials) -> TemplateListResult:
        envelope = envelopes.template_list(creds.user_session)
        return parse_template_list(
            await self._call(creds, "GetFlTplListRequest", envelope, retry=True)
        )

    async def get_template(self, creds: PortalCredentials, tpl_id: int) -> TemplateResult:
        envelope = envelopes.template_get(tpl_id, creds.user_session)
        return parse_template(await self._call(creds, "GetFlTplRequest", envelope, retry=True))

    async def save_template(
        self, creds: PortalCredentials, request: SaveTemplateRequest
    ) -> SaveTemplateResult:
        envelope = envelopes.template_save(request, creds.user_session)
        return parse_save_template(
            await self._call(creds, "SaveFlTplRequest", envelope, retry=False)
        )

    async def delete_template(self, creds: PortalCredentials, tpl_id: int) -> DeleteTemplateResult:
        envelope = envelopes.template_delete(tpl_id, creds.user_session)
        return parse_delete_template(
            await self._call(creds, "DeleteFlTplRequest", envelope, retry=False)
        )

    # ------------------------------------------------------------------
    # ATS messages
    # ------------------------------------------------------------------

    async def send_delay(self, creds: PortalCredentials, fl_id: int, new_eobt: str) -> ActionResult:
        envelope = envelopes.delay(fl_id, new_eobt, creds.user_session)
        result = parse_action(await self._call(creds, "SendDLARequest", envelope, retry=False))
        logger.info("DLA for flight plan %d (EOBT %s): %s", fl_id, new_eobt, result.success)
        return result

    async def send_cancel(self, creds: PortalCredentials, fl_id: int) -> ActionResult:
        envelope = envelopes.cancel(fl_id, creds.user_session)
        result = parse_action(await self._call(creds, "SendCNLRequest", envelope, retry=False))
        logger.info("CNL for flight plan %d: %s", fl_id, result.success)
        return result
