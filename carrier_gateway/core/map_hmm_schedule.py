"""HMM Schedule Mappers — vessel/port schedule and point-to-point payloads to ServiceSchedule.

Invariants:
    - Vessel/port items group by vvdCode (one ServiceSchedule each), then by vessel name
    - Calls within a vessel are ordered by arrival date, else departure date
    - ARRI/DEPA emitted only when both the date and time halves are present
    - HMM exposes no IMO: named vessels carry the placeholder IMO and are NOT dummies;
      a missing name means no vessel at all (isDummyVessel=True)
    - References: HMM-{vvd}-{port}-{seq} and HMM-PTP-{routeMapNo}-{port}-{leg}

Design Decisions:
    - Service code falls back to the alphabetic vvd prefix when the caller gives none
    - PTP voyage defaults to UNKNOWN (canonical voyage numbers are never empty)
"""

import re

from carrier_gateway.core.domain_types import (
    DUMMY_VESSEL_IMO, EventClassifierCode, EventTypeCode, UNKNOWN,
)
from carrier_gateway.core.map_common import (
    ServiceGroup, join_reference, keep_populated_services, service_code, timestamp,
)
from carrier_gateway.core.normalize_datetime import (
    combine_hmm_datetime, normalize_iso_datetime,
)
from carrier_gateway.schemas.schedule import Location, ServiceSchedule, TransportCall

_CLASSIFIERS = {
    "A": EventClassifierCode.ACT,
    "ACTUAL": EventClassifierCode.ACT,
    "E": EventClassifierCode.EST,
    "ESTIMATED": EventClassifierCode.EST,
    "L": EventClassifierCode.PLN,
    "LONG-TERM": EventClassifierCode.PLN,
    "PLANNED": EventClassifierCode.PLN,
}


def classify_status(status_code: str | None) -> EventClassifierCode:
    """HMM status letter -> DCSA classifier; anything unknown is EST."""
    if not status_code:
        return EventClassifierCode.EST
    return _CLASSIFIERS.get(status_code.upper(), EventClassifierCode.EST)


def service_code_from_vvd(vvd_code: str) -> str:
    match = re.match(r"^([A-Z]+)", vvd_code)
    if match:
        return service_code(match.group(1))
    return service_code(vvd_code)


def _result_items(payload: dict | None) -> list[dict]:
    items = (payload or {}).get("resultData")
    return items if isinstance(items, list) else []


def _sort_key(item: dict) -> str:
    return (
        (item.get("arrival") or {}).get("arrivalDate")
        or (item.get("departure") or {}).get("departureDate")
        or ""
    )


def _item_timestamps(item: dict) -> list:
    stamps = []
    arrival = item.get("arrival") or {}
    if arrival.get("arrivalDate") and arrival.get("arrivalTime"):
        stamps.append(timestamp(
            EventTypeCode.ARRI,
            combine_hmm_datetime(arrival["arrivalDate"], arrival["arrivalTime"]),
            classify_status(arrival.get("arrivalStatusCode")),
        ))
    departure = item.get("departure") or {}
    if departure.get("departureDate") and departure.get("departureTime"):
        stamps.append(timestamp(
            EventTypeCode.DEPA,
            combine_hmm_datetime(departure["departureDate"], departure["departureTime"]),
            classify_status(departure.get("departureStatusCode")),
        ))
    return stamps


# ─── Vessel / Port Schedule ─────────────────────────────────────

def map_hmm_schedule(
    payload: dict, carrier_service_code: str | None = None,
) -> list[ServiceSchedule]:
    by_voyage: dict[str, list[dict]] = {}
    for item in _result_items(payload):
        by_voyage.setdefault(item.get("vvdCode") or UNKNOWN, []).append(item)

    services = []
    for vvd_code, items in by_voyage.items():
        code = service_code(carrier_service_code) if carrier_service_code \
            else service_code_from_vvd(vvd_code)
        group = ServiceGroup(code=code, name=code)

        by_vessel: dict[str, list[dict]] = {}
        for item in items:
            by_vessel.setdefault(item.get("vesselName") or UNKNOWN, []).append(item)

        for vessel_name, vessel_items in by_vessel.items():
            if vessel_name == UNKNOWN:
                vessel = group.vessel(vessel_name, None, None, dummy=True)
            else:
                vessel = group.vessel(
                    vessel_name, DUMMY_VESSEL_IMO, vessel_name, dummy=False,
                )
            for item in sorted(vessel_items, key=_sort_key):
                stamps = _item_timestamps(item)
                if not stamps:
                    continue
                vessel.calls.append(TransportCall(
                    transport_call_reference=join_reference(
                        "HMM", vvd_code, item.get("portCode"), len(vessel.calls) + 1,
                    ),
                    carrier_import_voyage_number=vvd_code,
                    carrier_export_voyage_number=vvd_code,
                    location=Location(
                        un_location_code=item.get("portCode"),
                        location_name=item.get("portName"),
                        facility_smdg_code=item.get("tmnlCode"),
                    ),
                    timestamps=stamps,
                ))
        services.append(group.build())
    return keep_populated_services(services)


# ─── Point-to-Point ─────────────────────────────────────────────

def _voyage_of(vessels: list[dict], position: int) -> str:
    """Voyage of the position-th (1-based) vessel leg."""
    if not vessels or position < 1 or position > len(vessels):
        return UNKNOWN
    vessel = vessels[position - 1]
    return vessel.get("voyageNumber") or vessel.get("vesselCode") or UNKNOWN


def _ptp_call(
    item: dict, port_key: str, leg: str, voyage: str, stamps: list,
    name_key: str, terminal_key: str,
) -> TransportCall:
    return TransportCall(
        transport_call_reference=join_reference(
            "HMM-PTP", item.get("globaRouteMapNo"), item.get(port_key), leg,
        ),
        carrier_import_voyage_number=voyage,
        carrier_export_voyage_number=voyage,
        location=Location(
            un_location_code=item.get(port_key),
            location_name=item.get(name_key),
            facility_smdg_code=item.get(terminal_key),
        ),
        timestamps=stamps,
    )


def map_hmm_point_to_point(payload: dict) -> list[ServiceSchedule]:
    """One ServiceSchedule per route: loading, transshipment, discharge calls."""
    services = []
    for item in _result_items(payload):
        vessels = item.get("vessel") or []
        calls: list[TransportCall] = []

        if item.get("loadingPortCode") and item.get("departureDate"):
            calls.append(_ptp_call(
                item, "loadingPortCode", "LOADING", _voyage_of(vessels, 1),
                [timestamp(EventTypeCode.DEPA, normalize_iso_datetime(item["departureDate"], "HMM"))],
                "loadingPortName", "loadingTerminalCode",
            ))

        transship = item.get("transshipPortCode")
        if transship and transship not in (item.get("loadingPortCode"), item.get("dischargePortCode")):
            transship_name = item.get("transshipPortName") or ""
            leg = next(
                (v for v in vessels if transship_name in (v.get("dischargePort") or "")),
                {},
            )
            stamps = []
            if leg.get("vesselArrivalDate"):
                stamps.append(timestamp(
                    EventTypeCode.ARRI, normalize_iso_datetime(leg["vesselArrivalDate"], "HMM"),
                ))
            if leg.get("vesselDepartureDate"):
                stamps.append(timestamp(
                    EventTypeCode.DEPA, normalize_iso_datetime(leg["vesselDepartureDate"], "HMM"),
                ))
            if stamps:
                calls.append(_ptp_call(
                    item, "transshipPortCode", "TRANSSHIP", _voyage_of(vessels, 2),
                    stamps, "transshipPortName", "transshipTerminalCode",
                ))

        if item.get("dischargePortCode") and item.get("arrivalDate"):
            calls.append(_ptp_call(
                item, "dischargePortCode", "DISCHARGE", _voyage_of(vessels, len(vessels) or 1),
                [timestamp(EventTypeCode.ARRI, normalize_iso_datetime(item["arrivalDate"], "HMM"))],
                "dischargePortName", "dischargeTerminalCode",
            ))

        operator = item.get("vesselOperatorName")
        code = service_code(
            (vessels[0].get("vesselLoop") if vessels else None) or operator,
        )
        names = ", ".join(v["vesselName"] for v in vessels if v.get("vesselName"))
        group = ServiceGroup(code=code, name=operator or code)
        if names:
            vessel = group.vessel(names, DUMMY_VESSEL_IMO, names, dummy=False)
        else:
            vessel = group.vessel(UNKNOWN, None, None, dummy=True)
        vessel.calls.extend(calls)
        services.append(group.build())
    return keep_populated_services(services)
