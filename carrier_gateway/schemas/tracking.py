"""Canonical Tracking Model — DCSA track-and-trace events as a discriminated union.

Invariants:
    - eventType alone decides the event shape (SHIPMENT / TRANSPORT / EQUIPMENT)
    - Every event carries eventCreatedDateTime and eventDateTime, normalized to ISO-8601 with an offset
    - emptyIndicatorCode is EMPTY or LADEN; seal types are KLP/BLT/WIR

Design Decisions:
    - Literal discriminator + TypeAdapter: one validation entry point for passthrough
      payloads and hand-built HMM events alike
"""

from typing import Annotated, Any, Literal, Union

from pydantic import Field, TypeAdapter

from carrier_gateway.core.domain_types import (
    EventClassifierCode, EmptyIndicatorCode, SealType,
)
from carrier_gateway.schemas.schedule import CanonicalModel, IsoDateTime, Vessel


# ─── Building Blocks ────────────────────────────────────────────

class Reference(CanonicalModel):
    reference_type: str
    reference_value: str


class DocumentReference(CanonicalModel):
    document_reference_type: str
    document_reference_value: str


class Seal(CanonicalModel):
    seal_number: str
    seal_type: SealType | None = None
    seal_source: str | None = None


class TrackingTransportCall(CanonicalModel):
    """Transport call as embedded in tracking events."""
    transport_call_id: str = Field(alias="transportCallID")
    carrier_service_code: str | None = None
    carrier_voyage_number: str | None = None
    export_voyage_number: str | None = None
    import_voyage_number: str | None = None
    transport_call_sequence_number: int | None = None
    un_location_code: str | None = Field(default=None, alias="UNLocationCode")
    facility_code: str | None = None
    facility_code_list_provider: str | None = None
    facility_type_code: str | None = None
    other_facility: str | None = None
    mode_of_transport: str | None = None
    location: dict[str, Any] | None = None
    vessel: Vessel | None = None


# ─── Events ─────────────────────────────────────────────────────

class TrackingEventBase(CanonicalModel):
    event_id: str | None = Field(default=None, alias="eventID")
    event_created_date_time: IsoDateTime
    event_classifier_code: EventClassifierCode = EventClassifierCode.EST
    event_date_time: IsoDateTime


class ShipmentEvent(TrackingEventBase):
    event_type: Literal["SHIPMENT"] = "SHIPMENT"
    shipment_event_type_code: str
    document_id: str | None = Field(default=None, alias="documentID")
    document_type_code: str | None = None
    shipment_id: str | None = Field(default=None, alias="shipmentID")
    reason: str | None = None
    references: list[Reference] | None = None


class TransportEvent(TrackingEventBase):
    event_type: Literal["TRANSPORT"] = "TRANSPORT"
    transport_event_type_code: str
    transport_call: TrackingTransportCall | None = None
    delay_reason_code: str | None = None
    change_remark: str | None = None
    document_references: list[DocumentReference] | None = None
    references: list[Reference] | None = None


class EquipmentEvent(TrackingEventBase):
    event_type: Literal["EQUIPMENT"] = "EQUIPMENT"
    equipment_event_type_code: str
    equipment_reference: str | None = None
    iso_equipment_code: str | None = Field(default=None, alias="ISOEquipmentCode")
    empty_indicator_code: EmptyIndicatorCode | None = None
    event_location: dict[str, Any] | None = None
    transport_call: TrackingTransportCall | None = None
    document_references: list[DocumentReference] | None = None
    references: list[Reference] | None = None
    seals: list[Seal] | None = None


TrackingEvent = Annotated[
    Union[ShipmentEvent, TransportEvent, EquipmentEvent],
    Field(discriminator="event_type"),
]

tracking_events_adapter = TypeAdapter(list[TrackingEvent])
