"""DCSA Passthrough — validate already-canonical vendor payloads into canonical models.

Invariants:
    - Passthrough output obeys the same rules as mapped output (no empty services)
    - Envelope shapes are unwrapped: bare list, {data: [...]}, {events: [...]}, single object
    - Transport calls without timestamps are dropped before validation
"""

from typing import Any

from carrier_gateway.core.map_common import keep_populated_services
from carrier_gateway.schemas.schedule import ServiceSchedule
from carrier_gateway.schemas.tracking import tracking_events_adapter


def unwrap_list(payload: Any, *keys: str) -> list:
    """Return the record list from whichever envelope the vendor used."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in keys:
            if isinstance(payload.get(key), list):
                return payload[key]
        return [payload]
    return []


def _without_untimed_calls(service: dict) -> dict:
    schedules = []
    for schedule in service.get("vesselSchedules") or []:
        calls = [c for c in schedule.get("transportCalls") or [] if c.get("timestamps")]
        schedules.append({**schedule, "transportCalls": calls})
    return {**service, "vesselSchedules": schedules}


def map_dcsa_schedules(payload: Any) -> list[ServiceSchedule]:
    services = [
        ServiceSchedule.model_validate(_without_untimed_calls(s))
        for s in unwrap_list(payload, "data")
    ]
    return keep_populated_services(services)


def map_dcsa_events(payload: Any, *keys: str) -> list:
    return tracking_events_adapter.validate_python(unwrap_list(payload, *keys))
