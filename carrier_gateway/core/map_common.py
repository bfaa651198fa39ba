"""Mapper Building Blocks — shared grouping, placeholder and filtering rules.

Invariants:
    - A ServiceSchedule leaves a mapper only if some VesselSchedule has a TransportCall
    - Service codes never exceed 11 chars; a missing code becomes UNKNOWN
    - Missing IMO -> DUMMY_VESSEL_IMO with isDummyVessel=True, unless the vendor
      identifies vessels by name only (HMM, ZIM) and passes its own dummy rule
    - Synthesized references are joined from stable vendor fields (no clock, no randomness)

Design Decisions:
    - Mappers accumulate ServiceGroup/VesselGroup in insertion-ordered dicts, then
      freeze into canonical models once (ServiceGroup.build); order = first appearance
"""

from dataclasses import dataclass, field
from typing import Any

from carrier_gateway.core.domain_types import (
    DUMMY_VESSEL_IMO, MAX_SERVICE_CODE_LENGTH, UNKNOWN,
    EventClassifierCode, EventTypeCode,
)
from carrier_gateway.schemas.schedule import (
    ServiceSchedule, Timestamp, TransportCall, Vessel, VesselSchedule,
)


def service_code(raw: str | None) -> str:
    """Clamp a vendor service code to the canonical 1–11 chars."""
    code = (raw or "").strip()
    return code[:MAX_SERVICE_CODE_LENGTH] if code else UNKNOWN


def join_reference(*parts: Any) -> str:
    """'HMM', 'V1', '', 'KRPUS' -> 'HMM-V1-KRPUS'."""
    return "-".join(str(p) for p in parts if p not in (None, ""))


def timestamp(code: EventTypeCode, when: str, classifier=EventClassifierCode.EST) -> Timestamp:
    return Timestamp(
        event_type_code=code, event_classifier_code=classifier, event_date_time=when,
    )


def location_code(location: dict | None) -> str | None:
    """UN/Locode codification if present, else the vendor internal code."""
    if not location:
        return None
    for codification in location.get("locationCodifications") or []:
        if codification.get("codificationType") == "UN/Locode":
            return codification.get("codification")
    return location.get("internalCode")


def facility_smdg_code(location: dict | None) -> str | None:
    facility = (location or {}).get("facility") or {}
    for codification in facility.get("facilityCodifications") or []:
        if codification.get("codificationType") == "SMDG":
            return codification.get("codification")
    return None


def keep_populated_services(services: list[ServiceSchedule]) -> list[ServiceSchedule]:
    """Drop empty vessel schedules, then services left with none."""
    kept = []
    for service in services:
        populated = [vs for vs in service.vessel_schedules if vs.transport_calls]
        if not populated:
            continue
        if len(populated) != len(service.vessel_schedules):
            service = service.model_copy(update={"vessel_schedules": populated})
        kept.append(service)
    return kept


# ─── Grouping Accumulators ──────────────────────────────────────

@dataclass
class VesselGroup:
    imo: str | None
    name: str | None
    vessel_fields: dict[str, Any] = field(default_factory=dict)
    calls: list[TransportCall] = field(default_factory=list)
    dummy: bool | None = None

    @property
    def is_dummy(self) -> bool:
        """Explicit vendor rule if given, else "no IMO"."""
        if self.dummy is not None:
            return self.dummy
        return not self.imo or self.imo == DUMMY_VESSEL_IMO

    def build(self) -> VesselSchedule:
        vessel = None
        if self.imo or self.name:
            vessel = Vessel(
                vessel_imo_number=self.imo or DUMMY_VESSEL_IMO,
                name=self.name or UNKNOWN,
                **self.vessel_fields,
            )
        return VesselSchedule(
            is_dummy_vessel=self.is_dummy, vessel=vessel, transport_calls=self.calls,
        )


@dataclass
class ServiceGroup:
    code: str
    name: str | None = None
    universal_reference: str | None = None
    vessels: dict[str, VesselGroup] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def vessel(
        self, key: str, imo: str | None, name: str | None,
        dummy: bool | None = None, **fields,
    ) -> VesselGroup:
        """Find-or-create the vessel group for key (first appearance wins)."""
        if key not in self.vessels:
            self.vessels[key] = VesselGroup(
                imo=imo, name=name, vessel_fields=fields, dummy=dummy,
            )
        return self.vessels[key]

    def build(self) -> ServiceSchedule:
        return ServiceSchedule(
            carrier_service_code=self.code,
            carrier_service_name=self.name or self.code,
            universal_service_reference=self.universal_reference,
            vessel_schedules=[v.build() for v in self.vessels.values()],
            **self.extra,
        )


def build_services(groups: dict[str, ServiceGroup]) -> list[ServiceSchedule]:
    return keep_populated_services([g.build() for g in groups.values()])


def service_group(
    groups: dict[str, ServiceGroup], raw_code: str | None, name: str | None = None, **kwargs,
) -> ServiceGroup:
    code = service_code(raw_code)
    if code not in groups:
        groups[code] = ServiceGroup(code=code, name=name, **kwargs)
    return groups[code]
