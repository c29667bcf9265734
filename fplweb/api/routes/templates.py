"""Flight plan template endpoints (stored on the portal, per account)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from fplweb.api.deps import get_credentials, get_homebriefing_client
from fplweb.contracts.template import (
    DeleteTemplateResult,
    SaveTemplateRequest,
    SaveTemplateResult,
    TemplateListResult,
)
from fplweb.services.fpl_fields import (
    decode_field18,
    decode_field19,
    encode_field19,
    field19_from_template,
    template_field19,
)
from fplweb.services.homebriefing.soap_client import HomebriefingClient, PortalCredentials

router = APIRouter(prefix="/flight-plans/templates", tags=["templates"])


@router.get("")
async def list_templates(
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> TemplateListResult:
    result = await client.list_templates(creds)
    result.raise_for_error()
    return result


@router.post("", status_code=201)
async def save_template(
    request: SaveTemplateRequest,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> SaveTemplateResult:
    """Save (or overwrite, with ``tpl_id``) a template.

    Without explicit ``field19`` columns they are taken from the form's
    Field 19 string.
    """
    if request.field19 is None and request.form_data.fl_suplementary:
        request = request.model_copy(
            update={"field19": template_field19(decode_field19(request.form_data.fl_suplementary))}
        )
    result = await client.save_template(creds, request)
    result.raise_for_error()
    return result


@router.get("/{tpl_id}")
async def get_template(
    tpl_id: int,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> dict:
    result = await client.get_template(creds, tpl_id)
    result.raise_for_error()
    if not result.found or result.template is None:
        raise HTTPException(status_code=404, detail="Template not found")

    template = result.template
    field19 = field19_from_template(template)
    return {
        "template": template.model_dump(),
        "equipment": template.equipment,
        "fl_speed": template.fl_speed,
        "fl_level": template.fl_level,
        "field18": decode_field18(template.fl_other or "").model_dump(),
        "field19": field19.model_dump(),
        "fl_suplementary": encode_field19(field19),
    }


@router.delete("/{tpl_id}")
async def delete_template(
    tpl_id: int,
    creds: PortalCredentials = Depends(get_credentials),
    client: HomebriefingClient = Depends(get_homebriefing_client),
) -> DeleteTemplateResult:
    result = await client.delete_template(creds, tpl_id)
    result.raise_for_error()
    return result
