"""Query Schemas — the flat schedule/tracking parameter bags accepted at the HTTP boundary.

Invariants:
    - vesselIMONumber is exactly 7 digits; UNLocationCode is 2 letters + 3 alphanumerics
    - startDate <= endDate when both are given; limit is 1–1000
    - A tracking query names at least one booking/document/equipment/transport-call reference
    - Field aliases are the public query-string names (DCSA camelCase)

Design Decisions:
    - One flat model per query kind, bound with Annotated[..., Query()]: carrier routers
      project it into per-carrier parameter models (schemas/carrier_params.py)
    - `carrier` lives on the model: FastAPI treats a lone BaseModel as the whole query
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from carrier_gateway.core.normalize_datetime import parse_iso_date

IMO_PATTERN = r"^\d{7}$"
UN_LOCATION_PATTERN = r"^[A-Z]{2}[A-Z0-9]{3}$"


class _QueryModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )

    def to_params(self) -> dict:
        """Only the fields the caller actually set, keyed by python name."""
        return self.model_dump(exclude_none=True, exclude={"carrier"})


def _upper_location(v: str | None) -> str | None:
    return v.upper() if isinstance(v, str) else v


def _check_iso(v: str | None, field_name: str) -> str | None:
    if v is None:
        return v
    if parse_iso_date(v) is None:
        raise ValueError(
            f"{field_name} must be in ISO 8601 format "
            "(YYYY-MM-DD or YYYY-MM-DDTHH:mm:ssZ)"
        )
    return v


def _split_codes(v):
    """Accept repeated params and comma-separated values alike."""
    if v is None:
        return v
    items = v if isinstance(v, list) else [v]
    codes = []
    for item in items:
        codes.extend(part.strip().upper() for part in str(item).split(","))
    return [c for c in codes if c]


# ─── Schedule Query ─────────────────────────────────────────────

class ScheduleQuery(_QueryModel):
    """Every schedule parameter any carrier understands."""

    carrier: str = "all"

    # DCSA common
    vessel_imo_number: str | None = Field(
        default=None, alias="vesselIMONumber", pattern=IMO_PATTERN,
    )
    vessel_name: str | None = None
    carrier_service_code: str | None = None
    universal_service_reference: str | None = None
    carrier_voyage_number: str | None = None
    universal_voyage_reference: str | None = None
    un_location_code: str | None = Field(
        default=None, alias="UNLocationCode", pattern=UN_LOCATION_PATTERN,
    )
    facility_smdg_code: str | None = Field(default=None, alias="facilitySMDGCode")
    vessel_operator_carrier_code: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    cursor: str | None = None

    # HMM point-to-point
    from_location_code: str | None = None
    to_location_code: str | None = None
    period_date: str | None = None
    week_term: str | None = None
    receive_term_code: str | None = None
    delivery_term_code: str | None = None
    web_sort: str | None = None
    web_priority: str | None = None

    # CMA CGM route
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

    # CMA CGM voyage
    voyage_code: str | None = None
    vessel_imo: str | None = Field(default=None, alias="vesselIMO")
    from_date: str | None = Field(default=None, alias="from")
    to_date: str | None = Field(default=None, alias="to")
    port_code: list[str] | None = None
    country_code: list[str] | None = None
    shipcomp: list[str] | None = None
    search_type: str | None = None
    sort: str | None = None

    # CMA CGM proforma
    service_code: str | None = None
    line_code: str | None = None
    zone_from_code: str | None = None
    zone_to_code: str | None = None
    port: str | None = None
    terminal: str | None = None

    # Maersk point-to-point / port schedule
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
    date: str | None = None

    # ZIM point-to-point
    origin_code: str | None = None
    dest_code: str | None = None

    @field_validator("un_location_code", mode="before")
    @classmethod
    def uppercase_location(cls, v):
        return _upper_location(v)

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_iso_dates(cls, v, info):
        return _check_iso(v, to_camel(info.field_name))

    @model_validator(mode="after")
    def validate_date_range(self) -> "ScheduleQuery":
        if self.start_date and self.end_date:
            if parse_iso_date(self.start_date) > parse_iso_date(self.end_date):
                raise ValueError("startDate must be before or equal to endDate")
        return self


# ─── Tracking Query ─────────────────────────────────────────────

class TrackingQuery(_QueryModel):
    """DCSA track-and-trace filters plus the carrier selector."""

    carrier: str = "all"

    event_type: list[str] | None = None
    shipment_event_type_code: list[str] | None = None
    transport_event_type_code: list[str] | None = None
    equipment_event_type_code: list[str] | None = None
    document_type_code: list[str] | None = None

    carrier_booking_reference: str | None = None
    transport_document_reference: str | None = None
    equipment_reference: str | None = None
    transport_call_id: str | None = Field(default=None, alias="transportCallID")

    vessel_imo_number: str | None = Field(
        default=None, alias="vesselIMONumber", pattern=IMO_PATTERN,
    )
    export_voyage_number: str | None = None
    carrier_service_code: str | None = None
    un_location_code: str | None = Field(
        default=None, alias="UNLocationCode", pattern=UN_LOCATION_PATTERN,
    )
    event_created_date_time: str | None = None
    event_date_time: str | None = None
    behalf_of: str | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    cursor: str | None = None

    @field_validator(
        "event_type", "shipment_event_type_code", "transport_event_type_code",
        "equipment_event_type_code", "document_type_code", mode="before",
    )
    @classmethod
    def split_code_lists(cls, v):
        return _split_codes(v)

    @field_validator("un_location_code", mode="before")
    @classmethod
    def uppercase_location(cls, v):
        return _upper_location(v)

    @field_validator("event_created_date_time", "event_date_time")
    @classmethod
    def validate_iso_datetimes(cls, v, info):
        return _check_iso(v, to_camel(info.field_name))

    @model_validator(mode="after")
    def require_reference(self) -> "TrackingQuery":
        if not (
            self.carrier_booking_reference
            or self.transport_document_reference
            or self.equipment_reference
            or self.transport_call_id
        ):
            raise ValueError(
                "At least one of the following must be provided: "
                "carrierBookingReference, transportDocumentReference, "
                "equipmentReference, or transportCallID"
            )
        return self

    @property
    def primary_reference(self) -> str | None:
        """Document, then equipment, then booking reference."""
        return (
            self.transport_document_reference
            or self.equipment_reference
            or self.carrier_booking_reference
        )
