"""CMA CGM Mappers — Route, Voyage, Commercial Calls and Proforma payloads to canonical records.

Invariants:
    - Route/Voyage group by service code, then by vessel IMO (calls: IMO + voyage code)
    - Route details without a service code are skipped
    - Calls without any berth/unberth (or departure/arrival) time are skipped
    - Call cutoffs map portCutoff->FCO, vgmCutoff->VCO, shippingInstructionCutoff->DCO

Design Decisions:
    - Proforma output is ProformaService, not ServiceSchedule: the vendor returns
      service descriptions with no vessel calls, and a ServiceSchedule must carry calls
"""

from carrier_gateway.core.domain_types import (
    CutOffCode, DUMMY_VESSEL_IMO, EventTypeCode, UNKNOWN,
)
from carrier_gateway.core.map_common import (
    ServiceGroup, build_services, facility_smdg_code, join_reference,
    location_code, service_group, timestamp,
)
from carrier_gateway.schemas.schedule import (
    CutOffTime, FleetVessel, Location, ProformaCall, ProformaService,
    ServiceSchedule, TransportCall,
)

CALL_CUTOFFS = (
    ("portCutoff", CutOffCode.FULL_CONTAINER),
    ("vgmCutoff", CutOffCode.VGM),
    ("shippingInstructionCutoff", CutOffCode.DOCUMENTATION),
)


def _utc(value: dict | None) -> str | None:
    return (value or {}).get("utc")


def _call_cutoffs(call: dict) -> list[CutOffTime] | None:
    cutoffs = [
        CutOffTime(cut_off_date_time_code=code, cut_off_date_time=_utc(call[key]))
        for key, code in CALL_CUTOFFS
        if _utc(call.get(key))
    ]
    return cutoffs or None


def _berth_call(call: dict, voyage_code: str) -> TransportCall | None:
    """One commercial call (voyage detail or /commercialCalls item)."""
    stamps = []
    if _utc(call.get("berthDate")):
        stamps.append(timestamp(EventTypeCode.ARRI, _utc(call["berthDate"])))
    if _utc(call.get("unberthDate")):
        stamps.append(timestamp(EventTypeCode.DEPA, _utc(call["unberthDate"])))
    if not stamps:
        return None
    location = call.get("location") or {}
    return TransportCall(
        transport_call_reference=call.get("id"),
        carrier_import_voyage_number=voyage_code,
        carrier_export_voyage_number=voyage_code,
        location=Location(
            un_location_code=location_code(location),
            location_name=location.get("name"),
            facility_smdg_code=facility_smdg_code(location),
        ),
        timestamps=stamps,
        cut_off_times=_call_cutoffs(call),
    )


# ─── Route ──────────────────────────────────────────────────────

def map_cma_cgm_routings(routings: list[dict]) -> list[ServiceSchedule]:
    groups: dict[str, ServiceGroup] = {}
    for routing in routings:
        solution_no = routing.get("solutionNo")
        for detail in routing.get("routingDetails") or []:
            transportation = detail.get("transportation") or {}
            voyage = transportation.get("voyage") or {}
            code = (voyage.get("service") or {}).get("code")
            if not code:
                continue

            vehicule = transportation.get("vehicule") or {}
            imo = vehicule.get("reference") or DUMMY_VESSEL_IMO
            name = vehicule.get("vehiculeName")
            point_from = detail.get("pointFrom") or {}
            point_to = detail.get("pointTo") or {}
            departure = point_from.get("departureDateGmt")
            arrival = point_to.get("arrivalDateGmt")
            if not name and not departure and not arrival:
                continue

            vessel = service_group(groups, code, code).vessel(
                imo, imo, name, dummy=imo == DUMMY_VESSEL_IMO or not name,
            )
            stamps = []
            if departure:
                stamps.append(timestamp(EventTypeCode.DEPA, departure))
            if arrival:
                stamps.append(timestamp(EventTypeCode.ARRI, arrival))
            if not stamps:
                continue

            from_location = point_from.get("location") or {}
            to_location = point_to.get("location") or {}
            voyage_ref = voyage.get("voyageReference") or UNKNOWN
            vessel.calls.append(TransportCall(
                transport_call_reference=point_from.get("callId") or join_reference(
                    "route", solution_no,
                    from_location.get("internalCode"), to_location.get("internalCode"),
                ),
                carrier_import_voyage_number=voyage_ref,
                carrier_export_voyage_number=voyage_ref,
                location=Location(
                    un_location_code=location_code(from_location),
                    location_name=from_location.get("name"),
                ),
                timestamps=stamps,
            ))
    return build_services(groups)


# ─── Voyage / Commercial Calls ──────────────────────────────────

def map_cma_cgm_voyages(voyages: list[dict]) -> list[ServiceSchedule]:
    """Commercial voyages: full call lists, or a start-location summary."""
    groups: dict[str, ServiceGroup] = {}
    for voyage in voyages:
        service = voyage.get("service") or {}
        group = service_group(groups, service.get("code"), service.get("name"))
        vessel_info = voyage.get("vessel") or {}
        imo = vessel_info.get("imo") or DUMMY_VESSEL_IMO
        voyage_code = voyage.get("code") or UNKNOWN
        calls = voyage.get("calls") or []

        if calls:
            vessel = group.vessel(imo, imo, vessel_info.get("name"))
            for call in calls:
                mapped = _berth_call(call, voyage_code)
                if mapped:
                    vessel.calls.append(mapped)
        elif voyage.get("startLocation") and _utc(voyage.get("startDate")):
            start = voyage["startLocation"]
            vessel = group.vessel(imo, imo, vessel_info.get("name"))
            vessel.calls.append(TransportCall(
                transport_call_reference=join_reference(
                    "voyage", voyage_code, start.get("internalCode"),
                ),
                carrier_import_voyage_number=voyage_code,
                carrier_export_voyage_number=voyage_code,
                location=Location(
                    un_location_code=location_code(start),
                    location_name=start.get("name"),
                    facility_smdg_code=facility_smdg_code(start),
                ),
                timestamps=[timestamp(EventTypeCode.DEPA, _utc(voyage["startDate"]))],
            ))
    return build_services(groups)


def map_cma_cgm_calls(calls: list[dict]) -> list[ServiceSchedule]:
    """Port/vessel calls; one vessel schedule per IMO + voyage code."""
    groups: dict[str, ServiceGroup] = {}
    for call in calls:
        service = call.get("service") or {}
        group = service_group(groups, service.get("code"), service.get("name"))
        vessel_info = call.get("vessel") or {}
        voyage_code = call.get("voyageCode") or UNKNOWN
        imo = vessel_info.get("imo") or DUMMY_VESSEL_IMO
        vessel = group.vessel(
            f"{imo}-{voyage_code}", imo, vessel_info.get("name"),
        )
        mapped = _berth_call(call, voyage_code)
        if mapped:
            vessel.calls.append(mapped)
    return build_services(groups)


# ─── Proforma ───────────────────────────────────────────────────

def map_cma_cgm_proforma(services: list[dict]) -> list[ProformaService]:
    return [
        ProformaService(
            carrier_service_code=s.get("code") or UNKNOWN,
            carrier_service_name=s.get("name"),
            universal_service_references=s.get("universalServiceReferences"),
            line=s.get("line"),
            carriers=s.get("carriers"),
            service_type=s.get("serviceType"),
            active=s.get("active"),
            frequency=s.get("frequency"),
            departure_day=s.get("departureDay"),
            rotation_duration=s.get("rotationDuration"),
            rotation_type=s.get("rotationType"),
            applicability_period=s.get("applicabilityPeriod"),
        )
        for s in services
    ]


def map_cma_cgm_fleet(vessels: list[dict]) -> list[FleetVessel]:
    return [
        FleetVessel(
            code=v.get("code"),
            name=v.get("name"),
            vessel_imo_number=v.get("imo"),
            smdg_liner_code=v.get("smdgLinerCode"),
        )
        for v in vessels
    ]


def map_cma_cgm_proforma_calls(calls: list[dict]) -> list[ProformaCall]:
    return [
        ProformaCall(
            port=c.get("port"),
            terminal=c.get("terminal"),
            bound=c.get("bound"),
            transit_time=c.get("transitTime"),
        )
        for c in calls
    ]
