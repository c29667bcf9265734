"""Field 18 / Field 19 conversion endpoints (no portal access, no session)."""

from __future__ import annotations

from fastapi import APIRouter
from pydantic import BaseModel

from fplweb.contracts.fields import Field18Data, Field19Data
from fplweb.services.fpl_fields import (
    decode_field18,
    decode_field19,
    encode_field18,
    encode_field19,
)

router = APIRouter(prefix="/fields", tags=["fields"])


class FieldText(BaseModel):
    text: str = ""


@router.post("/18/encode")
async def field18_encode(data: Field18Data) -> FieldText:
    return FieldText(text=encode_field18(data))


@router.post("/18/decode")
async def field18_decode(body: FieldText) -> Field18Data:
    return decode_field18(body.text)


@router.post("/19/encode")
async def field19_encode(data: Field19Data) -> FieldText:
    return FieldText(text=encode_field19(data))


@router.post("/19/decode")
async def field19_decode(body: FieldText) -> Field19Data:
    return decode_field19(body.text)
