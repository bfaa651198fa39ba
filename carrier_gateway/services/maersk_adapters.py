"""Maersk Sub-API Adapters — Vessel Schedule, Port Schedule, Point-to-Point, Tracking.

Invariants:
    - Every request carries API-Version (major version of the configured API)
    - Vessel Schedule: startDate/endDate must lie in [today-90d, today+180d]
      (date granularity) -> else OutOfRangeDate, before any I/O
    - Port Schedule date: date -> startDate -> today
    - Point-to-Point sends Carrier-Extensions-Version: 1 when any cargo field is set
    - Tracking list filters are comma-joined; {events: [...]} is unwrapped
"""

from collections.abc import Callable
from datetime import date

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.map_dcsa import map_dcsa_events, map_dcsa_schedules, unwrap_list
from carrier_gateway.core.map_maersk import map_maersk_point_to_point, map_maersk_port_schedules
from carrier_gateway.core.normalize_datetime import check_date_window
from carrier_gateway.infrastructure.transport_client import TransportClient
from carrier_gateway.schemas.carrier_config import CarrierConfig
from carrier_gateway.schemas.carrier_params import MaerskScheduleParams
from carrier_gateway.schemas.schedule import ServiceSchedule
from carrier_gateway.schemas.schedule_query import TrackingQuery
from carrier_gateway.schemas.tracking import TrackingEvent
from carrier_gateway.services.adapter_base import (
    DCSA_SCHEDULE_FIELDS, SubApiAdapter, require_tracking_reference, tracking_params,
)

PAST_WINDOW_DAYS = 90
FUTURE_WINDOW_DAYS = 180

TRACKING_FILTERS = (
    "event_type", "shipment_event_type_code", "transport_event_type_code",
    "equipment_event_type_code", "document_type_code",
    "carrier_booking_reference", "transport_document_reference", "equipment_reference",
    "vessel_imo_number", "export_voyage_number", "carrier_service_code",
    "un_location_code", "event_created_date_time", "limit", "cursor",
)


class MaerskVesselScheduleAdapter(SubApiAdapter):
    endpoint_type = EndpointType.SCHEDULE
    label = "Schedule"

    def __init__(
        self,
        config: CarrierConfig,
        transport: TransportClient,
        today: Callable[[], date] = date.today,
    ):
        super().__init__(config, transport)
        self.today = today

    async def get_schedules(self, params: MaerskScheduleParams) -> list[ServiceSchedule]:
        today = self.today()
        for parameter, value in (("startDate", params.start_date), ("endDate", params.end_date)):
            if value:
                check_date_window(
                    parameter, value, PAST_WINDOW_DAYS, FUTURE_WINDOW_DAYS, today=today,
                )
        payload = await self.fetch(
            params=params.wire(*DCSA_SCHEDULE_FIELDS), headers=self.version_header(),
        )
        return self.map(map_dcsa_schedules, payload)


class MaerskPortScheduleAdapter(SubApiAdapter):
    endpoint_type = EndpointType.PORT_SCHEDULE
    label = "Port Schedule"

    def __init__(
        self,
        config: CarrierConfig,
        transport: TransportClient,
        today: Callable[[], date] = date.today,
    ):
        super().__init__(config, transport)
        self.today = today

    async def get_schedules(self, params: MaerskScheduleParams) -> list[ServiceSchedule]:
        location = self.require(params.un_location_code, "UNLocationCode")
        payload = await self.fetch(
            params={
                "UNLocationCode": location,
                "date": params.date or params.start_date or self.today().isoformat(),
                "limit": params.limit,
                "cursor": params.cursor,
            },
            headers=self.version_header(),
        )
        return self.map(map_maersk_port_schedules, unwrap_list(payload))


class MaerskPointToPointAdapter(SubApiAdapter):
    endpoint_type = EndpointType.POINT_TO_POINT
    label = "Point-to-Point"

    async def get_schedules(self, params: MaerskScheduleParams) -> list[ServiceSchedule]:
        receipt = self.require(params.place_of_receipt, "placeOfReceipt", "UNLocationCode")
        delivery = self.require(params.place_of_delivery, "placeOfDelivery", "UNLocationCode")
        headers = self.version_header()
        if params.has_cargo:
            headers["Carrier-Extensions-Version"] = "1"
        payload = await self.fetch(
            params={
                "placeOfReceipt": receipt,
                "placeOfDelivery": delivery,
                "departureStartDate": params.departure_start_date or params.start_date,
                "departureEndDate": params.departure_end_date,
                "arrivalStartDate": params.arrival_start_date,
                "arrivalEndDate": params.arrival_end_date,
                "maxTranshipment": params.max_transhipment,
                "receiptTypeAtOrigin": params.receipt_type_at_origin or "CY",
                "deliveryTypeAtDestination": params.delivery_type_at_destination or "CY",
                "cargoType": params.cargo_type,
                "ISOEquipmentCode": params.iso_equipment_code,
                "stuffingWeight": params.stuffing_weight,
                "stuffingVolume": params.stuffing_volume,
            },
            headers=headers,
        )
        return self.map(map_maersk_point_to_point, unwrap_list(payload))


class MaerskTrackingAdapter(SubApiAdapter):
    endpoint_type = EndpointType.TRACKING
    label = "Tracking"

    async def get_events(self, query: TrackingQuery) -> list[TrackingEvent]:
        require_tracking_reference(self, query)
        payload = await self.fetch(
            params=tracking_params(query, TRACKING_FILTERS),
            headers=self.version_header(),
        )
        return self.map(map_dcsa_events, payload, "events")
