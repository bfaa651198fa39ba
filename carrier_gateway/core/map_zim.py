"""ZIM Mapper — point-to-point routes to ServiceSchedule.

Invariants:
    - Routes group by the first leg's `line`, then by vessel (name + Lloyd's/vessel code)
    - Legs are ordered by legOrder; a leg with neither arrival nor departure is skipped
    - Cutoffs: docClosingDate->DCO, containerClosingDate->FCO, vgmClosingDate->VCO
    - A route without a line gets a lane code of origin+destination (<= 11 chars)
    - Lloyd's code is the IMO; a named vessel without one keeps the placeholder IMO
      and is flagged isDummyVessel
"""

from carrier_gateway.core.domain_types import CutOffCode, EventTypeCode, UNKNOWN
from carrier_gateway.core.map_common import (
    ServiceGroup, build_services, join_reference, service_group, timestamp,
)
from carrier_gateway.schemas.schedule import (
    CutOffTime, Location, ServiceSchedule, TransportCall,
)

LEG_CUTOFFS = (
    ("docClosingDate", CutOffCode.DOCUMENTATION),
    ("containerClosingDate", CutOffCode.FULL_CONTAINER),
    ("vgmClosingDate", CutOffCode.VGM),
)


def route_service_code(route: dict) -> str:
    legs = route.get("routeLegs") or []
    if legs and legs[0].get("line"):
        return legs[0]["line"]
    origin = (route.get("departurePort") or "")[:5]
    destination = (route.get("arrivalPort") or "")[:5]
    return f"{origin}{destination}" if origin and destination else UNKNOWN


def _leg_call(leg: dict) -> TransportCall | None:
    stamps = []
    if leg.get("arrivalDate"):
        stamps.append(timestamp(EventTypeCode.ARRI, leg["arrivalDate"]))
    if leg.get("departureDate"):
        stamps.append(timestamp(EventTypeCode.DEPA, leg["departureDate"]))
    if not stamps:
        return None
    cutoffs = [
        CutOffTime(cut_off_date_time_code=code, cut_off_date_time=leg[key])
        for key, code in LEG_CUTOFFS
        if leg.get(key)
    ]
    voyage = leg.get("voyage") or leg.get("consortSailingNumber") or UNKNOWN
    return TransportCall(
        transport_call_reference=join_reference(
            "ZIM", leg.get("departurePort"), leg.get("arrivalPort"),
            leg.get("voyage") or leg.get("consortSailingNumber"),
            leg.get("lloydsCode") or leg.get("vesselCode"),
        ),
        carrier_import_voyage_number=voyage,
        carrier_export_voyage_number=voyage,
        location=Location(
            un_location_code=leg.get("arrivalPort") or leg.get("departurePort"),
            location_name=leg.get("arrivalPortName") or leg.get("departurePortName"),
        ),
        timestamps=stamps,
        cut_off_times=cutoffs or None,
    )


def map_zim_point_to_point(payload: dict) -> list[ServiceSchedule]:
    routes = ((payload or {}).get("response") or {}).get("routes") or []
    groups: dict[str, ServiceGroup] = {}
    for route in routes:
        legs = route.get("routeLegs") or []
        if not legs:
            continue
        group = service_group(groups, route_service_code(route))
        for leg in sorted(legs, key=lambda l: l.get("legOrder") or 0):
            name = leg.get("vesselName")
            key = f"{name or UNKNOWN}-{leg.get('lloydsCode') or leg.get('vesselCode') or ''}"
            if name and name != UNKNOWN:
                vessel = group.vessel(
                    key, leg.get("lloydsCode"), name, dummy=not leg.get("lloydsCode"),
                    **({"call_sign": leg["callSign"]} if leg.get("callSign") else {}),
                )
            else:
                vessel = group.vessel(key, None, None, dummy=True)
            call = _leg_call(leg)
            if call:
                vessel.calls.append(call)
    return build_services(groups)
