"""Flight plan endpoints: listing, messages, validation, filing, DLA and CNL."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field, field_validator

from fplweb.api.deps import ensure_session, get_credentials, get_homebriefing_client
from fplweb.contracts.enums import FlightPlanListType, OrderType
from fplweb.contracts.flight_plan import (
    ActionResult,
    FlightMessagesResult,
    FlightPlanFilters,
    FlightPlanForm,
    FlightPlanListResult,
    SubmitResult,
    ValidationResult,
)
from fplweb.services.homebriefing.soap_client import HomebriefingClient, PortalCredentials

router = APIRouter(prefix="/flight-plans", tags=["flight-plans"])


class DelayRequest(BaseModel):
    new_eobt: str = Field(..., pattern=r"^\d{4}$", description="New EOBT as HHMM")

    @field_validator("new_eobt")
    @classmethod
    def valid_clock_time(cls, v: str) -> str:
        if int(v[:2]) > 23 or int(v[2:]) > 59:
            raise ValueError("EOBT must be a valid HHMM time")
        return v


def flight_plan_filters(
    arcid: str = "",
    adep: str = "",
    ades: str = "",
    fl_rules: str = "X",
    own_fls_only: bool = False,
    page: int = Query(0, ge=0),
    limit: int = Query(25, ge=1, le=200),
    order_column: str = "COL_EOBDT",
    order_type: OrderType = OrderType.DESC,
    num_hours_after_eta: int = Query(3, ge=0),
) -> FlightPlanFilters:
    return FlightPlanFilters(
        arcid=arcid,
        adep=adep,
        ades=ades,
        fl_rules=fl_rules,
        own_fls_only=own_fls_only,
        page_number=page,
        page_items=limit,
        order_column=order_column,
        order_type=order_type,
        num_hours_after_eta=num_hours_after_eta,
    )


@router.get("")
async def list_flight_plans(
    list_type: FlightPlanListType = Query(FlightPlanListType.CURRENT, alias="type"),
    filters: FlightPlanFilters = Depends(flight_plan_filters),
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> FlightPlanListResult:
    if list_type is FlightPlanListType.ARCHIVE:
        result = await client.list_archived_flight_plans(creds, filters)
    else:
        result = await client.list_current_flight_plans(creds, filters)
    result.raise_for_error()
    return result


@router.get("/{fl_id}/messages")
async def list_messages(
    fl_id: int,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> FlightMessagesResult:
    result = await client.list_messages(creds, fl_id)
    result.raise_for_error()
    return result


@router.post("/validate")
async def validate_flight_plan(
    form: FlightPlanForm,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> ValidationResult:
    """Return the portal's verdict; field errors are a normal outcome here."""
    result = await client.validate_flight_plan(creds, form)
    ensure_session(result)
    return result


@router.post("/send")
async def send_flight_plan(
    form: FlightPlanForm,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> SubmitResult:
    result = await client.send_flight_plan(creds, form)
    result.raise_for_error()
    return result


@router.post("/{fl_id}/delay")
async def delay_flight_plan(
    fl_id: int,
    body: DelayRequest,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> ActionResult:
    result = await client.send_delay(creds, fl_id, body.new_eobt)
    result.raise_for_error()
    return result


@router.post("/{fl_id}/cancel")
async def cancel_flight_plan(
    fl_id: int,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> ActionResult:
    result = await client.send_cancel(creds, fl_id)
    result.raise_for_error()
    return result
