"""HMM Tracking Mapper — shipment/transport/equipment arrays to canonical TrackingEvents.

Invariants:
    - Output order: all shipment events, then transport, then equipment (vendor order within each)
    - eventCreatedDateTime and eventDateTime fall back to each other; when both are
      missing the payload is rejected (MalformedVendorPayload), never stamped with now()
    - A transport call given only by ID resolves against the top-level transportCall list
    - A synthesized transportCallID is derived from the event, never from the clock

Design Decisions:
    - Vendor defaults kept (RECE, BKG, ARRI, GTIN, LADEN, WIR, EST) so DCSA-required
      codes are always populated
"""

from carrier_gateway.core.domain_types import EventClassifierCode, TrackingEventType
from carrier_gateway.core.errors import MalformedVendorPayload
from carrier_gateway.core.map_common import join_reference
from carrier_gateway.schemas.schedule import Vessel
from carrier_gateway.schemas.tracking import (
    DocumentReference, EquipmentEvent, Reference, Seal, ShipmentEvent,
    TrackingTransportCall, TransportEvent,
)

CARRIER = "HMM"


def _event_times(event: dict, kind: str) -> tuple[str, str]:
    created = event.get("eventCreatedDateTime")
    happened = event.get("eventDateTime")
    if not created and not happened:
        raise MalformedVendorPayload(
            f"HMM {kind} event {event.get('eventID') or '?'} has no event date/time",
            CARRIER,
        )
    return created or happened, happened or created


def _classifier(event: dict) -> EventClassifierCode:
    code = (event.get("eventClassifierCode") or "").upper()
    return EventClassifierCode(code) if code in EventClassifierCode.__members__ \
        else EventClassifierCode.EST


def _references(raw: list[dict] | None) -> list[Reference] | None:
    if raw is None:
        return None
    return [
        Reference(
            reference_type=r.get("referenceType") or "FF",
            reference_value=r.get("referenceValue") or "",
        )
        for r in raw
    ]


def _document_references(raw: list[dict] | None) -> list[DocumentReference] | None:
    if raw is None:
        return None
    return [
        DocumentReference(
            document_reference_type=r.get("documentReferenceType") or "BKG",
            document_reference_value=r.get("documentReferenceValue") or "",
        )
        for r in raw
    ]


def map_hmm_transport_call(raw: dict, fallback_id: str) -> TrackingTransportCall:
    un_location = raw.get("UNLocationCode") or raw.get("location")
    vessel = raw.get("vessel")
    return TrackingTransportCall(
        transport_call_id=raw.get("transportCallID") or fallback_id,
        carrier_service_code=raw.get("carrierServiceCode"),
        export_voyage_number=raw.get("exportVoyageNumber"),
        import_voyage_number=raw.get("importVoyageNumber"),
        transport_call_sequence_number=raw.get("transportCallSequenceNumber"),
        un_location_code=un_location,
        facility_code=raw.get("facilityCode"),
        facility_code_list_provider="SMDG" if raw.get("facilityCode") else None,
        facility_type_code=raw.get("facilityTypeCode"),
        other_facility=raw.get("otherFacility"),
        mode_of_transport=(raw.get("modeOfTransport") or "VESSEL").upper(),
        location={"UNLocationCode": un_location} if un_location else None,
        vessel=Vessel(
            vessel_imo_number=vessel.get("vesselIMONumber") or None,
            name=vessel.get("vesselName"),
            flag=vessel.get("vesselFlag"),
            call_sign=vessel.get("vesselCallSignNumber"),
            operator_carrier_code=vessel.get("vesselOperatorCarrierCode"),
        ) if vessel else None,
    )


def _resolve_transport_call(
    event: dict, known: dict[str, TrackingTransportCall], fallback_id: str,
) -> TrackingTransportCall:
    raw = event.get("transportCall") or {}
    call_id = raw.get("transportCallID")
    if call_id in known and set(raw) <= {"transportCallID"}:
        return known[call_id]
    if raw:
        return map_hmm_transport_call(raw, fallback_id)
    return TrackingTransportCall(transport_call_id=fallback_id, mode_of_transport="VESSEL")


def map_hmm_tracking(payload: dict) -> list:
    known = {}
    for raw in payload.get("transportCall") or []:
        if raw.get("transportCallID"):
            known[raw["transportCallID"]] = map_hmm_transport_call(raw, raw["transportCallID"])

    events = []
    for event in payload.get("shipmentEvent") or []:
        created, happened = _event_times(event, "shipment")
        events.append(ShipmentEvent(
            event_id=event.get("eventID"),
            event_created_date_time=created,
            event_date_time=happened,
            event_classifier_code=_classifier(event),
            shipment_event_type_code=event.get("shipmentEventTypeCode") or "RECE",
            document_id=event.get("documentId") or "",
            document_type_code=event.get("documentTypeCode") or "BKG",
            shipment_id=event.get("shipmentID"),
            reason=event.get("reason"),
            references=_references(event.get("references")),
        ))

    for index, event in enumerate(payload.get("transportEvent") or [], start=1):
        created, happened = _event_times(event, "transport")
        fallback_id = event.get("eventID") or join_reference(
            CARRIER, TrackingEventType.TRANSPORT.value, index,
        )
        events.append(TransportEvent(
            event_id=event.get("eventID"),
            event_created_date_time=created,
            event_date_time=happened,
            event_classifier_code=_classifier(event),
            transport_event_type_code=event.get("transportEventTypeCode") or "ARRI",
            transport_call=_resolve_transport_call(event, known, fallback_id),
            delay_reason_code=event.get("delayReasonCode"),
            change_remark=event.get("changeRemark"),
            document_references=_document_references(event.get("documentReferences")),
            references=_references(event.get("references")),
        ))

    default_iso_code = (payload.get("equipment") or {}).get("ISOEquipmentCode")
    for index, event in enumerate(payload.get("equipmentEvent") or [], start=1):
        created, happened = _event_times(event, "equipment")
        fallback_id = event.get("eventID") or join_reference(
            CARRIER, TrackingEventType.EQUIPMENT.value, index,
        )
        location = event.get("eventLocation")
        events.append(EquipmentEvent(
            event_id=event.get("eventID"),
            event_created_date_time=created,
            event_date_time=happened,
            event_classifier_code=_classifier(event),
            equipment_event_type_code=event.get("equipmentEventTypeCode") or "GTIN",
            equipment_reference=event.get("equipmentReference"),
            iso_equipment_code=event.get("ISOEquipmentCode") or default_iso_code,
            empty_indicator_code=(event.get("emptyIndicatorCode") or "LADEN").upper(),
            event_location={"UNLocationCode": location} if location else None,
            transport_call=_resolve_transport_call(event, known, fallback_id),
            document_references=_document_references(event.get("documentReferences")),
            references=_references(event.get("references")),
            seals=[
                Seal(
                    seal_number=s.get("sealNumber") or "",
                    seal_type=s.get("sealType") or "WIR",
                    seal_source=s.get("sealSource"),
                )
                for s in event["seals"]
            ] if event.get("seals") is not None else None,
        ))
    return events
