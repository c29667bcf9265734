"""SOAP request envelopes for the portal's ``ibafProvider.php`` endpoint.

Every request is a ``soapenv:Envelope`` whose body holds one ``mob:``
request element. Flight plan attributes and template values are nested one
level deeper and travel without a prefix, as the portal's own web client
sends them.
"""

from __future__ import annotations

import re
from enum import Enum
from xml.sax.saxutils import escape

from fplweb.contracts.flight_plan import FlightPlanFilters, FlightPlanForm
from fplweb.contracts.template import SaveTemplateRequest, TemplateField19

SOAPENV_NS = "http://schemas.xmlsoap.org/soap/envelope/"
MOB_NS = "http://mobiltech.sk/"

_XML_DECLARATION = '<?xml version="1.0" encoding="utf-8" ?>'
_QUOTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_SPEED = re.compile(r"^([NKM])(\d+)")
_LEVEL = re.compile(r"^([FAM])(\d+)")

Fields = list[tuple[str, object]]


def escape_xml(value: object) -> str:
    """Render a value as escaped element text (``& < > " '``)."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        value = "true" if value else "false"
    return escape(str(value), _QUOTE_ENTITIES)


def _elements(fields: Fields, prefix: str = "") -> str:
    tag = f"{prefix}:" if prefix else ""
    parts = []
    for name, value in fields:
        if isinstance(value, list):
            inner = _elements(value)
        else:
            inner = escape_xml(value)
        parts.append(f"<{tag}{name}>{inner}</{tag}{name}>")
    return "".join(parts)


def envelope(operation: str, fields: Fields) -> str:
    """Wrap ``mob:<operation>`` with its ``mob:`` children in a SOAP envelope."""
    return (
        f"{_XML_DECLARATION}"
        f'<soapenv:Envelope xmlns:soapenv="{SOAPENV_NS}" xmlns:mob="{MOB_NS}">'
        f"<soapenv:Body><mob:{operation}>{_elements(fields, 'mob')}</mob:{operation}>"
        f"</soapenv:Body></soapenv:Envelope>"
    )


# ============ Flight plan lists and messages ============

def flight_plan_list(filters: FlightPlanFilters, user_session: str, archive: bool = False) -> str:
    fields: Fields = [
        ("UserSession", user_session),
        ("PageNumber", filters.page_number),
        ("PageItems", filters.page_items),
        ("ARCID", filters.arcid),
        ("ADEP", filters.adep),
        ("ADES", filters.ades),
        ("FlRules", filters.fl_rules),
        ("OwnFls", filters.own_fls_only),
        ("OrderColumn", filters.order_column),
        ("OrderType", filters.order_type),
    ]
    if archive:
        return envelope("GetFPLArchiveRequest", fields)
    return envelope(
        "GetFPLListRequest",
        [("NumHoursAfterETA", filters.num_hours_after_eta), *fields],
    )


def flight_messages(fl_id: int, user_session: str) -> str:
    return envelope("GetFlMsgListRequest", [("FlId", fl_id), ("UserSession", user_session)])


# ============ Flight plan validation and filing ============

def _flight_attributes(form: FlightPlanForm) -> Fields:
    return [
        ("ARCID", form.arcid),
        ("FlRules", form.fl_rules),
        ("FlType", form.fl_type),
        ("ArcNum", form.arc_num),
        ("ArcType", form.arc_type),
        ("WakeTurbulenceCat", form.wake_turbulence_cat),
        ("Equipment", form.equipment),
        ("ADEP", form.adep),
        ("EOBDT", form.eobdt),
        ("FlSpeed", form.fl_speed),
        ("FlLevel", form.fl_level),
        ("FlRoute", form.fl_route),
        ("ADES", form.ades),
        ("ADAltn1", form.ad_altn1),
        ("ADAltn2", form.ad_altn2),
        ("TotalEET", form.total_eet),
        ("FlOther", form.fl_other),
        ("FlSuplementary", form.fl_suplementary),
        ("AddInfoPilottel", form.pilot_tel),
    ]


def check_validity(form: FlightPlanForm, user_session: str) -> str:
    return envelope(
        "CheckFplValidityRequest",
        [
            ("FlAttributes", _flight_attributes(form)),
            ("UseNMB2B", 0),
            ("UserSession", user_session),
        ],
    )


def send_to_caro(form: FlightPlanForm, user_session: str) -> str:
    return envelope(
        "SendFplToCaroRequest",
        [
            ("FlAttributes", _flight_attributes(form)),
            ("UseNMB2B", 0),
            ("UserSession", user_session),
        ],
    )


# ============ Templates ============

def split_equipment(equipment: str) -> tuple[str, str]:
    """``SGOVY/S`` -> (``SGOVY``, ``S``)."""
    parts = (equipment or "").split("/")
    return parts[0], parts[1] if len(parts) > 1 else ""


def split_speed(speed: str) -> tuple[str, str]:
    """``N0105`` -> (``N``, ``0105``); knots when unparseable."""
    match = _SPEED.match(speed or "")
    if match:
        return match.group(1), match.group(2)
    return "N", ""


def split_level(level: str) -> tuple[str, str]:
    """``VFR`` -> (``VFR``, ``""``), ``F065`` -> (``F``, ``065``)."""
    if level and level != "VFR":
        match = _LEVEL.match(level)
        if match:
            return match.group(1), match.group(2)
    return "VFR", ""


def template_list(user_session: str) -> str:
    return envelope("GetFlTplListRequest", [("UserSession", user_session)])


def template_get(tpl_id: int, user_session: str) -> str:
    return envelope("GetFlTplRequest", [("UserSession", user_session), ("TplId", tpl_id)])


def template_delete(tpl_id: int, user_session: str) -> str:
    return envelope("DeleteFlTplRequest", [("UserSession", user_session), ("TplId", tpl_id)])


def template_save(request: SaveTemplateRequest, user_session: str) -> str:
    form = request.form_data
    f19 = request.field19 or TemplateField19()
    equipment_10a, equipment_10b = split_equipment(form.equipment)
    speed_measure, speed_value = split_speed(form.fl_speed)
    level_measure, level_value = split_level(form.fl_level)

    values: Fields = [
        ("FlTplId", [("TplName", request.tpl_name), ("TplId", request.tpl_id)]),
        ("ARCID", form.arcid),
        ("FlRules", form.fl_rules),
        ("FlType", form.fl_type),
        ("ArcNum", form.arc_num),
        ("ArcType", form.arc_type),
        ("WakeTurbulenceCat", form.wake_turbulence_cat),
        ("Equipment_10a", equipment_10a),
        ("Equipment_10b", equipment_10b),
        ("Equipment_10c", "N"),
        ("ADEP", form.adep),
        ("EOBT", ""),
        ("FlSpeedMeasure", speed_measure),
        ("FlSpeedValue", speed_value),
        ("FlLevelMeasure", level_measure),
        ("FlLevelValue", level_value),
        ("FlRoute", form.fl_route),
        ("ADES", form.ades),
        ("TotalEET", form.total_eet or 0),
        ("ADAltn1", form.ad_altn1),
        ("ADAltn2", form.ad_altn2),
        ("FlOther", form.fl_other),
        ("Endurance", f19.endurance),
        ("PersonsOnBoard", f19.persons),
        ("Radio", f19.radio),
        ("Survival", f19.survival),
        ("Jackets", f19.jackets),
        ("DinghiesNumber", f19.dinghies_number),
        ("DinghiesCapacity", f19.dinghies_capacity),
        ("DinghiesCover", f19.dinghies_cover),
        ("DinghiesColour", f19.dinghies_colour),
        ("AircraftColour_A", f19.aircraft_colour),
        ("Remarks_N", f19.remarks),
        ("PilotInCmd_C", f19.pilot_in_command),
        ("AddInfoInstruction", ""),
        ("AddInfoPilottel", form.pilot_tel),
        ("AddInfoPilotfax", ""),
        ("AddInfoPilotmail", ""),
        ("AddInfoSendertel", ""),
        ("AddInfoSenderfax", ""),
        ("AddInfoSendermail", ""),
    ]
    return envelope(
        "SaveFlTplRequest",
        [("FlTplValues", values), ("UserSession", user_session)],
    )


# ============ ATS messages ============

def delay(fl_id: int, new_eobt: str, user_session: str) -> str:
    return envelope(
        "SendDLARequest",
        [("FlId", fl_id), ("EobtVal", new_eobt), ("UserSession", user_session)],
    )


def cancel(fl_id: int, user_session: str) -> str:
    return envelope("SendCNLRequest", [("FlId", fl_id), ("UserSession", user_session)])
