"""Per-Carrier Parameter Models — the slice of a ScheduleQuery each carrier understands.

Invariants:
    - Built once per request at the router boundary from ScheduleQuery.to_params()
    - Unknown fields are dropped (extra="ignore"): an adapter never sees another carrier's fields
    - Field names match ScheduleQuery so projection is a plain model_validate

Design Decisions:
    - Mixins for the DCSA common block instead of one loose bag shared by all carriers
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CarrierParams(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore", frozen=True,
    )

    def wire(self, *fields: str) -> dict:
        """Vendor query-string dict (camelCase) of the named fields that are set."""
        return self.model_dump(by_alias=True, exclude_none=True, include=set(fields))


class DcsaScheduleFields(_CarrierParams):
    """DCSA commercial schedule filters, shared by CMA CGM and Maersk."""
    vessel_imo_number: str | None = Field(default=None, alias="vesselIMONumber")
    vessel_name: str | None = None
    carrier_service_code: str | None = None
    universal_service_reference: str | None = None
    carrier_voyage_number: str | None = None
    universal_voyage_reference: str | None = None
    un_location_code: str | None = Field(default=None, alias="UNLocationCode")
    facility_smdg_code: str | None = Field(default=None, alias="facilitySMDGCode")
    vessel_operator_carrier_code: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    limit: int | None = None
    cursor: str | None = None


class CmaCgmScheduleParams(DcsaScheduleFields):
    # route
    place_of_loading: str | None = None
    place_of_discharge: str | None = None
    un_locode_place_of_loading: str | None = None
    un_locode_place_of_discharge: str | None = None
    shipping_company: str | None = None
    departure_date: str | None = None
    arrival_date: str | None = None
    search_range: int | None = None
    pol_vessel_imo: str | None = Field(default=None, alias="polVesselIMO")
    pol_service_code: str | None = None
    max_ts: int | None = None
    number_of_teu: int | None = Field(default=None, alias="numberOfTEU")
    specific_routings: list[str] | None = None
    use_routing_statistics: bool | None = None
    # voyage
    voyage_code: str | None = None
    vessel_imo: str | None = Field(default=None, alias="vesselIMO")
    from_date: str | None = Field(default=None, alias="from")
    to_date: str | None = Field(default=None, alias="to")
    port_code: list[str] | None = None
    country_code: list[str] | None = None
    shipcomp: list[str] | None = None
    search_type: str | None = None
    sort: str | None = None
    # proforma
    service_code: str | None = None
    line_code: str | None = None
    zone_from_code: str | None = None
    zone_to_code: str | None = None
    port: str | None = None
    terminal: str | None = None

    @property
    def loading_place(self) -> str | None:
        return self.place_of_loading or self.un_locode_place_of_loading

    @property
    def discharge_place(self) -> str | None:
        return self.place_of_discharge or self.un_locode_place_of_discharge

    @property
    def any_service_code(self) -> str | None:
        return self.service_code or self.carrier_service_code

    @property
    def any_voyage_code(self) -> str | None:
        return self.voyage_code or self.carrier_voyage_number

    @property
    def any_vessel_imo(self) -> str | None:
        return self.vessel_imo or self.vessel_imo_number

    @property
    def range_from(self) -> str | None:
        return self.from_date or self.start_date

    @property
    def range_to(self) -> str | None:
        return self.to_date or self.end_date


class HmmScheduleParams(_CarrierParams):
    carrier_voyage_number: str | None = None
    carrier_service_code: str | None = None
    un_location_code: str | None = Field(default=None, alias="UNLocationCode")
    start_date: str | None = None
    end_date: str | None = None
    vessel_operator_carrier_code: str | None = None
    from_location_code: str | None = None
    to_location_code: str | None = None
    period_date: str | None = None
    week_term: str | None = None
    receive_term_code: str | None = None
    delivery_term_code: str | None = None
    web_sort: str | None = None
    web_priority: str | None = None


class MaerskScheduleParams(DcsaScheduleFields):
    date: str | None = None
    place_of_receipt: str | None = None
    place_of_delivery: str | None = None
    departure_start_date: str | None = None
    departure_end_date: str | None = None
    arrival_start_date: str | None = None
    arrival_end_date: str | None = None
    max_transhipment: int | None = None
    receipt_type_at_origin: str | None = None
    delivery_type_at_destination: str | None = None
    cargo_type: str | None = None
    iso_equipment_code: str | None = Field(default=None, alias="ISOEquipmentCode")
    stuffing_weight: int | None = None
    stuffing_volume: int | None = None

    @property
    def has_cargo(self) -> bool:
        return any((
            self.cargo_type, self.iso_equipment_code,
            self.stuffing_weight, self.stuffing_volume,
        ))


class ZimScheduleParams(_CarrierParams):
    origin_code: str | None = None
    dest_code: str | None = None
    place_of_receipt: str | None = None
    place_of_delivery: str | None = None
    start_date: str | None = None
    end_date: str | None = None

    @property
    def origin(self) -> str | None:
        return self.origin_code or self.place_of_receipt

    @property
    def destination(self) -> str | None:
        return self.dest_code or self.place_of_delivery
