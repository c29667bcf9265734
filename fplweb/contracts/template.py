"""Flight plan templates stored on the portal (``FlTpl*`` operations)."""

from pydantic import BaseModel, Field

from fplweb.contracts.flight_plan import FlightPlanForm
from fplweb.contracts.result import PortalResult


class TemplateListItem(BaseModel):
    tpl_id: int
    tpl_name: str = ""


class TemplateListResult(PortalResult):
    count: int = 0
    templates: list[TemplateListItem] = Field(default_factory=list)


class TemplateData(BaseModel):
    """A stored template, in the portal's split-column layout.

    Unlike a submitted flight plan, a template keeps Field 10 as three parts,
    speed and level as measure/value pairs and Field 19 as separate columns.
    """

    tpl_id: int = 0
    tpl_name: str = ""
    arcid: str = ""
    fl_rules: str = ""
    fl_type: str = ""
    arc_type: str = ""
    wake_turbulence_cat: str = ""
    equipment_10a: str = Field(default="", description="COM/NAV equipment")
    equipment_10b: str = Field(default="", description="SSR equipment")
    equipment_10c: str = Field(default="", description="ADS equipment")
    adep: str = ""
    eobt: str = Field(default="", description="HHMM")
    fl_speed_measure: str = Field(default="", description="N knots, K km/h, M mach")
    fl_speed_value: str = ""
    fl_level_measure: str = Field(default="", description="F, A, M or VFR")
    fl_level_value: str | None = None
    ades: str | None = None
    fl_route: str | None = None
    total_eet: int | None = None
    ad_altn1: str | None = None
    ad_altn2: str | None = None
    fl_other: str | None = None
    endurance: str | None = None
    persons_on_board: str | None = None
    radio: str | None = None
    survival: str | None = None
    jackets: str | None = None
    dinghies: str | None = None
    dinghies_number: str | None = None
    dinghies_capacity: str | None = None
    dinghies_cover: bool = False
    dinghies_colour: str | None = None
    aircraft_colour: str | None = None
    remarks: str | None = None
    pilot_in_command: str | None = None
    pilot_tel: str | None = None

    @property
    def equipment(self) -> str:
        """Field 10 as submitted, e.g. ``SGOVY/S``."""
        if self.equipment_10b:
            return f"{self.equipment_10a}/{self.equipment_10b}"
        return self.equipment_10a

    @property
    def fl_speed(self) -> str:
        if self.fl_speed_measure and self.fl_speed_value:
            return self.fl_speed_measure + self.fl_speed_value.zfill(4)
        return ""

    @property
    def fl_level(self) -> str:
        measure = self.fl_level_measure or "VFR"
        if self.fl_level_value and measure != "VFR":
            return measure + self.fl_level_value
        return measure


class TemplateResult(PortalResult):
    found: bool = False
    template: TemplateData | None = None


class TemplateField19(BaseModel):
    """Field 19 columns of a saved template; survival groups as letter sets."""

    radio: str = Field(default="", description="Letters from U, V, E")
    survival: str = Field(default="", description="Letters from P, D, M, J")
    jackets: str = Field(default="", description="Letters from L, F, U, V")
    endurance: str = ""
    persons: str = ""
    dinghies_number: str = ""
    dinghies_capacity: str = ""
    dinghies_cover: bool = False
    dinghies_colour: str = ""
    aircraft_colour: str = ""
    remarks: str = ""
    pilot_in_command: str = ""


class SaveTemplateRequest(BaseModel):
    tpl_name: str = Field(..., min_length=1)
    tpl_id: int | None = Field(default=None, description="Existing ID to overwrite")
    form_data: FlightPlanForm
    field19: TemplateField19 | None = None


class SaveTemplateResult(PortalResult):
    success: bool = False
    inserted_tpl_id: int | None = None
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        return self.is_error or self.session_expired or not self.success

    def error_summary(self) -> str:
        return self.error_message or "Template was not saved"


class DeleteTemplateResult(PortalResult):
    success: bool = False
    deleted_tpl_id: int | None = None
    error_message: str | None = None

    @property
    def failed(self) -> bool:
        return self.is_error or self.session_expired or not self.success

    def error_summary(self) -> str:
        return self.error_message or "Template was not deleted"
