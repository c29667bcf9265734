"""Enumerations shared across all fplweb contracts."""

from enum import Enum


class FlightRules(str, Enum):
    """ICAO Field 8a flight rules."""
    VFR = "V"
    IFR = "I"
    IFR_THEN_VFR = "Y"
    VFR_THEN_IFR = "Z"


class FlightType(str, Enum):
    """ICAO Field 8b type of flight."""
    SCHEDULED = "S"
    NON_SCHEDULED = "N"
    GENERAL = "G"
    MILITARY = "M"
    OTHER = "X"


class WakeTurbulence(str, Enum):
    """ICAO Field 9c wake turbulence category."""
    LIGHT = "L"
    MEDIUM = "M"
    HEAVY = "H"
    SUPER = "J"


class FlightPlanListType(str, Enum):
    CURRENT = "current"
    ARCHIVE = "archive"


class OrderType(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class FlightPlanAction(str, Enum):
    """State-changing operations the portal may permit on a flight plan."""
    DELAY = "delay"
    CANCEL = "cancel"
    CHANGE = "change"
    DEPART = "depart"
    ARRIVE = "arrive"


class StatusCategory(str, Enum):
    """Coarse flight plan state derived from status code and action bitmask."""
    ACTIVE = "active"
    CANCELLED = "cancelled"
    REJECTED = "rejected"
    COMPLETED = "completed"
    PROCESSING = "processing"
    OTHER = "other"
