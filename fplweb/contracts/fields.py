"""Structured ICAO Field 18 (other information) and Field 19 (supplementary information).

Both fields travel to the portal as a single plain string; these models are
the editable form of that string. See ``fplweb.services.fpl_fields`` for the
codec.
"""

from pydantic import BaseModel, Field, field_validator

MAX_PBN_ENTRIES = 8
STAY_INFO_SLOTS = 9


class Field18Data(BaseModel):
    """Field 18 sub-fields.

    ``text_fields`` holds every ``CODE/value`` indicator without a dedicated
    attribute (NAV, DOF, REG, RMK, ... and codes unknown to the editor), in
    insertion order, so decoding and re-encoding is lossless.
    """

    sts: list[str] = Field(default_factory=list, description="STS/ special handling")
    pbn: list[str] = Field(
        default_factory=list,
        max_length=MAX_PBN_ENTRIES,
        description="PBN/ performance based navigation codes, e.g. B2, D2",
    )
    per: str = Field(default="", description="PER/ aircraft performance category")
    eur_protected: bool = Field(default=False, description="EUR/PROTECTED")
    rfp: str = Field(default="", description="RFP/ replacement flight plan, Q1..Q9")
    stay_info: list[str] = Field(
        default_factory=lambda: [""] * STAY_INFO_SLOTS,
        description="STAYINFO1/ .. STAYINFO9/",
    )
    text_fields: dict[str, str] = Field(default_factory=dict)

    @field_validator("stay_info", mode="before")
    @classmethod
    def pad_stay_info(cls, v: list[str] | None) -> list[str]:
        values = list(v or [])[:STAY_INFO_SLOTS]
        return values + [""] * (STAY_INFO_SLOTS - len(values))


class Field19Data(BaseModel):
    """Field 19 sub-fields, booleans grouped as on the ICAO form."""

    endurance: str = Field(default="", description="E/ HHMM")
    persons: str = Field(default="", description="P/ persons on board or TBN")
    # R/ emergency radio
    radio_uhf: bool = False
    radio_vhf: bool = False
    radio_elba: bool = False
    # S/ survival equipment
    survival_polar: bool = False
    survival_desert: bool = False
    survival_maritime: bool = False
    survival_jungle: bool = False
    # J/ life jackets
    jackets_light: bool = False
    jackets_fluores: bool = False
    jackets_uhf: bool = False
    jackets_vhf: bool = False
    # D/ dinghies
    dinghies_enabled: bool = False
    dinghies_number: str = ""
    dinghies_capacity: str = ""
    dinghies_cover: bool = False
    dinghies_colour: str = ""
    aircraft_colour: str = Field(default="", description="A/ colour and markings")
    remarks: str = Field(default="", description="N/ remarks")
    pilot_in_command: str = Field(default="", description="C/ pilot in command")
