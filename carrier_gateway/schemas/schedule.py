"""Canonical Schedule Model — carrier-neutral vessel schedule records (DCSA shape).

Invariants:
    - carrierServiceCode is 1–11 chars; carrierImportVoyageNumber is always present
    - A TransportCall carries at least one Timestamp
    - Every event and cutoff date/time is ISO-8601 with an offset (normalized on construction)
    - isDummyVessel is true iff no vessel identity was resolved
    - Models are frozen: mappers build plain lists, then construct records once

Design Decisions:
    - snake_case attributes, DCSA camelCase on the wire via alias_generator + explicit
      aliases for the acronym fields (UNLocationCode, vesselIMONumber, ...)
    - extra="allow": DCSA passthrough payloads keep fields the gateway does not model
    - ProformaService is a separate record: it describes a service, it schedules nothing
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from carrier_gateway.core.domain_types import (
    EventTypeCode, EventClassifierCode, MAX_SERVICE_CODE_LENGTH,
)
from carrier_gateway.core.normalize_datetime import normalize_iso_datetime


def _iso_date_time(value: str) -> str:
    return normalize_iso_datetime(value)


# Vendor date/time normalized on construction; unparsable -> MalformedTimestamp
IsoDateTime = Annotated[str, Field(min_length=1), AfterValidator(_iso_date_time)]


class CanonicalModel(BaseModel):
    """Shared config for every canonical record."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    def to_wire(self) -> dict[str, Any]:
        """Serialize with DCSA field names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ─── Building Blocks ────────────────────────────────────────────

class Timestamp(CanonicalModel):
    event_type_code: EventTypeCode
    event_classifier_code: EventClassifierCode = EventClassifierCode.EST
    event_date_time: IsoDateTime


class CutOffTime(CanonicalModel):
    cut_off_date_time_code: str = Field(min_length=1)
    cut_off_date_time: IsoDateTime


class Location(CanonicalModel):
    location_name: str | None = None
    un_location_code: str | None = Field(default=None, alias="UNLocationCode")
    facility_smdg_code: str | None = Field(default=None, alias="facilitySMDGCode")
    address: dict[str, Any] | None = None


class Vessel(CanonicalModel):
    vessel_imo_number: str | None = Field(default=None, alias="vesselIMONumber")
    name: str | None = None
    flag: str | None = None
    call_sign: str | None = None
    mmsi_number: str | None = Field(default=None, alias="MMSINumber")
    operator_carrier_code: str | None = None
    operator_carrier_code_list_provider: str | None = None


# ─── Schedule Records ───────────────────────────────────────────

class TransportCall(CanonicalModel):
    """One port call of a vessel on a voyage."""
    transport_call_reference: str | None = None
    port_visit_reference: str | None = None
    carrier_import_voyage_number: str = Field(min_length=1)
    carrier_export_voyage_number: str | None = None
    universal_import_voyage_reference: str | None = None
    universal_export_voyage_reference: str | None = None
    location: Location | None = None
    timestamps: list[Timestamp] = Field(min_length=1)
    cut_off_times: list[CutOffTime] | None = None


class VesselSchedule(CanonicalModel):
    is_dummy_vessel: bool = False
    vessel: Vessel | None = None
    transport_calls: list[TransportCall] = Field(default_factory=list)


class ServiceSchedule(CanonicalModel):
    """A carrier service with the vessels sailing it."""
    carrier_service_code: str = Field(min_length=1, max_length=MAX_SERVICE_CODE_LENGTH)
    carrier_service_name: str | None = None
    universal_service_reference: str | None = None
    vessel_schedules: list[VesselSchedule] = Field(default_factory=list)
    point_to_point_routes: list[dict[str, Any]] | None = None


# ─── Proforma ───────────────────────────────────────────────────

class ProformaService(CanonicalModel):
    """Static description of a carrier service (CMA CGM proforma)."""
    carrier_service_code: str = Field(min_length=1)
    carrier_service_name: str | None = None
    universal_service_references: list[str] | None = None
    line: dict[str, Any] | None = None
    carriers: list[dict[str, Any]] | None = None
    service_type: str | None = None
    active: bool | None = None
    frequency: Any = None
    departure_day: str | None = None
    rotation_duration: Any = None
    rotation_type: dict[str, Any] | None = None
    applicability_period: dict[str, Any] | None = None


class FleetVessel(CanonicalModel):
    code: str | None = None
    name: str | None = None
    vessel_imo_number: str | None = Field(default=None, alias="vesselIMONumber")
    smdg_liner_code: str | None = Field(default=None, alias="SMDGLinerCode")


class ProformaCall(CanonicalModel):
    port: dict[str, Any] | None = None
    terminal: dict[str, Any] | None = None
    bound: str | None = None
    transit_time: Any = None


ScheduleRecord = ServiceSchedule | ProformaService
