"""Maersk Mappers — Port Schedule and Point-to-Point payloads to ServiceSchedule.

Invariants:
    - Port schedules group by servicePartners[0] service code, then by vessel IMO
    - Point-to-point keeps only VESSEL/BARGE legs; RAIL/TRUCK legs are skipped entirely
    - A route's pointToPointRoutes metadata rides on the service of its first
      VESSEL/BARGE leg, de-duplicated by solutionNumber
    - Missing service code on a leg -> UNKNOWN (fits the 11-char service code limit)
"""

from typing import Any

from carrier_gateway.core.domain_types import DUMMY_VESSEL_IMO, EventTypeCode, UNKNOWN
from carrier_gateway.core.map_common import (
    ServiceGroup, build_services, join_reference, service_code, service_group, timestamp,
)
from carrier_gateway.schemas.schedule import (
    CutOffTime, Location, ServiceSchedule, Timestamp, TransportCall,
)

VESSEL_MODES = ("VESSEL", "BARGE")
_VESSEL_FIELDS = (
    ("flag", "flag"),
    ("callSign", "call_sign"),
    ("MMSINumber", "mmsi_number"),
    ("operatorCarrierCode", "operator_carrier_code"),
    ("operatorCarrierCodeListProvider", "operator_carrier_code_list_provider"),
)
_ROUTE_METADATA = (
    "placeOfReceipt", "placeOfDelivery", "receiptTypeAtOrigin",
    "deliveryTypeAtDestination", "cutOffTimes", "solutionNumber",
    "routingReference", "transitTime",
)


def _vessel_fields(vessel: dict) -> dict[str, Any]:
    return {attr: vessel[key] for key, attr in _VESSEL_FIELDS if vessel.get(key)}


def _cutoffs(raw: list[dict] | None) -> list[CutOffTime] | None:
    if not raw:
        return None
    return [CutOffTime.model_validate(c) for c in raw]


# ─── Port Schedule ──────────────────────────────────────────────

def map_maersk_port_schedules(port_schedules: list[dict]) -> list[ServiceSchedule]:
    groups: dict[str, ServiceGroup] = {}
    for port_schedule in port_schedules:
        location = port_schedule.get("location") or {}
        for schedule in port_schedule.get("vesselSchedules") or []:
            partners = schedule.get("servicePartners") or []
            if not partners:
                continue
            partner = partners[0]
            group = service_group(
                groups, partner.get("carrierServiceCode"), partner.get("carrierServiceName"),
                universal_reference=schedule.get("universalServiceReference"),
            )
            vessel_info = schedule.get("vessel") or {}
            imo = vessel_info.get("vesselIMONumber") or DUMMY_VESSEL_IMO
            vessel = group.vessel(
                imo, imo, vessel_info.get("name"),
                dummy=bool(schedule.get("isDummyVessel")) or imo == DUMMY_VESSEL_IMO,
                **_vessel_fields(vessel_info),
            )
            stamps = [Timestamp.model_validate(t) for t in schedule.get("timestamps") or []]
            if not stamps:
                continue
            export_voyage = partner.get("carrierExportVoyageNumber")
            vessel.calls.append(TransportCall(
                transport_call_reference=join_reference(
                    "port", location.get("UNLocationCode"), export_voyage,
                ),
                carrier_import_voyage_number=partner.get("carrierImportVoyageNumber")
                or export_voyage or UNKNOWN,
                carrier_export_voyage_number=export_voyage,
                universal_import_voyage_reference=schedule.get("universalImportVoyageReference"),
                universal_export_voyage_reference=schedule.get("universalExportVoyageReference"),
                location=Location(
                    un_location_code=location.get("UNLocationCode"),
                    location_name=location.get("locationName"),
                    facility_smdg_code=location.get("facilitySMDGCode"),
                ),
                timestamps=stamps,
                cut_off_times=_cutoffs(schedule.get("cutOffTimes")),
            ))
    return build_services(groups)


# ─── Point-to-Point ─────────────────────────────────────────────

def _first_partner(transport: dict) -> dict:
    partners = transport.get("servicePartners") or []
    return partners[0] if partners else {}


def _route_service_code(legs: list[dict]) -> str:
    for leg in legs:
        transport = leg.get("transport") or {}
        if transport.get("modeOfTransport") in VESSEL_MODES:
            code = _first_partner(transport).get("carrierServiceCode")
            if code:
                return service_code(code)
    return UNKNOWN


def _leg_location(leg: dict) -> Location:
    departure = (leg.get("departure") or {}).get("location") or {}
    arrival = (leg.get("arrival") or {}).get("location") or {}

    def smdg(loc: dict) -> str | None:
        facility = loc.get("facility") or {}
        if facility.get("facilityCodeListProvider") == "SMDG":
            return facility.get("facilityCode")
        return None

    return Location(
        un_location_code=departure.get("UNLocationCode") or arrival.get("UNLocationCode"),
        location_name=departure.get("locationName") or arrival.get("locationName"),
        address=departure.get("address") or arrival.get("address"),
        facility_smdg_code=smdg(departure) or smdg(arrival),
    )


def map_maersk_point_to_point(routes: list[dict]) -> list[ServiceSchedule]:
    groups: dict[str, ServiceGroup] = {}
    for route in routes:
        legs = route.get("legs") or []
        if not legs:
            continue
        cutoffs = _cutoffs(route.get("cutOffTimes"))

        for leg in legs:
            transport = leg.get("transport") or {}
            if transport.get("modeOfTransport") not in VESSEL_MODES:
                continue
            vessel_info = transport.get("vessel") or transport.get("barge")
            if not vessel_info:
                continue

            partner = _first_partner(transport)
            group = service_group(
                groups, partner.get("carrierServiceCode"),
                partner.get("carrierServiceName") or "Unknown Service",
                universal_reference=transport.get("universalServiceReference"),
            )
            imo = vessel_info.get("vesselIMONumber") or DUMMY_VESSEL_IMO
            vessel = group.vessel(
                imo, imo, vessel_info.get("name"), **_vessel_fields(vessel_info),
            )

            stamps = []
            departure_time = (leg.get("departure") or {}).get("dateTime")
            arrival_time = (leg.get("arrival") or {}).get("dateTime")
            if departure_time:
                stamps.append(timestamp(EventTypeCode.DEPA, departure_time))
            if arrival_time:
                stamps.append(timestamp(EventTypeCode.ARRI, arrival_time))
            if not stamps:
                continue

            vessel.calls.append(TransportCall(
                transport_call_reference=transport.get("transportCallReference")
                or join_reference(
                    "ptp", route.get("solutionNumber") or "unknown", leg.get("sequenceNumber"),
                ),
                port_visit_reference=transport.get("portVisitReference"),
                carrier_import_voyage_number=partner.get("carrierImportVoyageNumber") or UNKNOWN,
                carrier_export_voyage_number=partner.get("carrierExportVoyageNumber") or UNKNOWN,
                universal_import_voyage_reference=transport.get("universalImportVoyageReference"),
                universal_export_voyage_reference=transport.get("universalExportVoyageReference"),
                location=_leg_location(leg),
                timestamps=stamps,
                cut_off_times=cutoffs,
            ))

        route_group = groups.get(_route_service_code(legs))
        if route_group is not None:
            known = route_group.extra.setdefault("point_to_point_routes", [])
            if all(r.get("solutionNumber") != route.get("solutionNumber") for r in known):
                known.append({k: route[k] for k in _ROUTE_METADATA if k in route})
    return build_services(groups)
