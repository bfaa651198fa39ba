"""Domain Types — rich types that replace bare carrier/endpoint strings across the codebase.

Invariants:
    - Carrier codes are the internal codes (CMCG, HMM, ZIM, MAERSK), never public filter ids
    - Every adapter call site names its EndpointType explicitly
    - DUMMY_VESSEL_IMO is the only placeholder IMO a mapper may emit
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (DCSA codes are plain strings)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ServiceCode = NewType("ServiceCode", str)       # 1–11 chars
VesselIMO = NewType("VesselIMO", str)           # 7 digits
UNLocode = NewType("UNLocode", str)             # 2 letters + 3 alphanumerics


# ─── Constants ───────────────────────────────────────────────────

DUMMY_VESSEL_IMO = VesselIMO("0000000")
UNKNOWN = "UNKNOWN"
MAX_SERVICE_CODE_LENGTH = 11


# ─── Enums ───────────────────────────────────────────────────────

class CarrierCode(str, Enum):
    """Internal carrier codes — keys of the adapter registry."""
    CMA_CGM = "CMCG"
    HMM = "HMM"
    ZIM = "ZIM"
    MAERSK = "MAERSK"


class EndpointType(str, Enum):
    """Logical endpoint a request targets — selects base path and credential."""
    SCHEDULE = "schedule"
    PORT_SCHEDULE = "portSchedule"
    PTP_SCHEDULE = "ptpSchedule"
    POINT_TO_POINT = "pointToPoint"
    PROFORMA = "proforma"
    VOYAGE = "voyage"
    ROUTE = "route"
    TRACKING = "tracking"


class AuthType(str, Enum):
    """Credential mechanism declared in carrier config."""
    OAUTH2 = "oauth2"
    API_KEY = "apikey"


class ApiStandard(str, Enum):
    """Payload convention of a carrier endpoint."""
    DCSA = "DCSA"
    PROPRIETARY = "PROPRIETARY"


class EventTypeCode(str, Enum):
    """Schedule timestamp event — arrival or departure."""
    ARRI = "ARRI"
    DEPA = "DEPA"


class EventClassifierCode(str, Enum):
    """Actual, estimated or planned. EST is the default when a vendor is silent."""
    ACT = "ACT"
    EST = "EST"
    PLN = "PLN"


class TrackingEventType(str, Enum):
    """Discriminator of the tracking event union."""
    SHIPMENT = "SHIPMENT"
    TRANSPORT = "TRANSPORT"
    EQUIPMENT = "EQUIPMENT"


class EmptyIndicatorCode(str, Enum):
    EMPTY = "EMPTY"
    LADEN = "LADEN"


class SealType(str, Enum):
    KLP = "KLP"
    BLT = "BLT"
    WIR = "WIR"


class CutOffCode(str, Enum):
    """Cutoff kinds emitted by the proprietary mappers."""
    DOCUMENTATION = "DCO"
    VGM = "VCO"
    FULL_CONTAINER = "FCO"


class ScheduleApi(str, Enum):
    """Sub-API a carrier router can select — logged on every routing decision."""
    COMMERCIAL_SCHEDULE = "commercial_schedule"
    ROUTE = "route"
    PROFORMA = "proforma"
    VOYAGE = "voyage"
    VESSEL_SCHEDULE = "vessel_schedule"
    PORT_SCHEDULE = "port_schedule"
    POINT_TO_POINT = "point_to_point"
