"""fplweb data contracts: Pydantic v2 models exchanged with the portal and the browser.

Data authority
--------------

**Homebriefing portal** (source of truth, never mirrored locally):
- ``FlightPlan`` / ``FlightMessage`` read through the SOAP list operations
- ``TemplateData`` stored per portal account

**Process memory** (see ``fplweb.persistence.session_store``):
- pending logins and authenticated sessions, never written to disk

Calculated (never persisted)
----------------------------
- ``FlightPlan.allowed_actions`` / ``status_category`` from status + bitmask
- ``Field18Data`` / ``Field19Data`` decoded from the plain field strings
"""

from fplweb.contracts.enums import (
    FlightPlanAction,
    FlightPlanListType,
    FlightRules,
    FlightType,
    OrderType,
    StatusCategory,
    WakeTurbulence,
)
from fplweb.contracts.result import PortalResult
from fplweb.contracts.fields import Field18Data, Field19Data
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
from fplweb.contracts.template import (
    DeleteTemplateResult,
    SaveTemplateRequest,
    SaveTemplateResult,
    TemplateData,
    TemplateField19,
    TemplateListItem,
    TemplateListResult,
    TemplateResult,
)

__all__ = [
    # Enums
    "FlightPlanAction",
    "FlightPlanListType",
    "FlightRules",
    "FlightType",
    "OrderType",
    "StatusCategory",
    "WakeTurbulence",
    # Results
    "PortalResult",
    # Fields 18 / 19
    "Field18Data",
    "Field19Data",
    # Flight plans
    "ActionResult",
    "FieldError",
    "FlightMessage",
    "FlightMessagesResult",
    "FlightPlan",
    "FlightPlanFilters",
    "FlightPlanForm",
    "FlightPlanListResult",
    "SubmitResult",
    "ValidationResult",
    # Templates
    "DeleteTemplateResult",
    "SaveTemplateRequest",
    "SaveTemplateResult",
    "TemplateData",
    "TemplateField19",
    "TemplateListItem",
    "TemplateListResult",
    "TemplateResult",
]
