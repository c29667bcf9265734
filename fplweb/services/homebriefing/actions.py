"""Interpretation of the flight plan action bitmask (``FlCanDo``).

The portal reports which state-changing messages it will accept for a plan
as an integer. The same value means different things depending on the plan
status, so the bitmask is only ever read together with the status code.

Observed values:
- 16: only the arrival report is available
- 8 and above (e.g. 12): active plan, every action available
- 4..7: cancelled or closed plan
- 1..3: delay and cancel only (completed or pending departure)
"""

from __future__ import annotations

from fplweb.contracts.enums import FlightPlanAction, StatusCategory

ACCEPTED_STATUS_CODES = frozenset({48, 53})
REJECTED_STATUS_CODES = frozenset({49, 490, 491})
CLOSED_STATUS_CODES = frozenset({4, 7})
PROCESSING_STATUS_CODE = 11

ARRIVAL_ONLY = 16
FULL_ACTIONS_THRESHOLD = 8
CLOSED_BIT = 4

_ALL_ACTIONS = frozenset(FlightPlanAction)
_NO_ACTIONS: frozenset[FlightPlanAction] = frozenset()


def allowed_actions(can_do: int, status_code: int) -> frozenset[FlightPlanAction]:
    """Return the actions the portal permits for a plan."""
    if status_code not in ACCEPTED_STATUS_CODES:
        return _NO_ACTIONS
    if can_do == ARRIVAL_ONLY:
        return frozenset({FlightPlanAction.ARRIVE})
    if can_do >= FULL_ACTIONS_THRESHOLD:
        return _ALL_ACTIONS
    if can_do & CLOSED_BIT:
        return _NO_ACTIONS
    if can_do > 0:
        return frozenset({FlightPlanAction.DELAY, FlightPlanAction.CANCEL})
    return _NO_ACTIONS


def status_category(status_code: int, can_do: int) -> StatusCategory:
    """Classify a plan the way the portal's own dashboard does."""
    accepted = status_code in ACCEPTED_STATUS_CODES
    if accepted and can_do == CLOSED_BIT:
        return StatusCategory.CANCELLED
    if status_code in REJECTED_STATUS_CODES:
        return StatusCategory.REJECTED
    if accepted and can_do >= FULL_ACTIONS_THRESHOLD:
        return StatusCategory.ACTIVE
    if accepted and can_do == 1:
        return StatusCategory.COMPLETED
    if status_code == PROCESSING_STATUS_CODE:
        return StatusCategory.PROCESSING
    if status_code in CLOSED_STATUS_CODES:
        return StatusCategory.CANCELLED
    return StatusCategory.OTHER
