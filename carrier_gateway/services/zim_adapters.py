"""ZIM Sub-API Adapters — Point-to-Point schedule and Tracking.

Invariants:
    - Point-to-point needs origin (originCode, else placeOfReceipt) AND destination
      (destCode, else placeOfDelivery); either missing is a hard
      MissingRequiredParameter, never a fallback
    - sortByDepartureOrArrival is always "Departure"
    - Tracking list filters are comma-joined
"""

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.map_dcsa import map_dcsa_events
from carrier_gateway.core.map_zim import map_zim_point_to_point
from carrier_gateway.schemas.carrier_params import ZimScheduleParams
from carrier_gateway.schemas.schedule import ServiceSchedule
from carrier_gateway.schemas.schedule_query import TrackingQuery
from carrier_gateway.schemas.tracking import TrackingEvent
from carrier_gateway.services.adapter_base import (
    SubApiAdapter, require_tracking_reference, tracking_params,
)

TRACKING_FILTERS = (
    "event_type", "transport_event_type_code", "equipment_event_type_code",
    "carrier_booking_reference", "transport_document_reference", "equipment_reference",
    "vessel_imo_number", "export_voyage_number", "carrier_service_code",
    "un_location_code", "event_created_date_time", "limit", "cursor",
)


class ZimPointToPointAdapter(SubApiAdapter):
    endpoint_type = EndpointType.SCHEDULE
    label = "Schedule"

    async def get_schedules(self, params: ZimScheduleParams) -> list[ServiceSchedule]:
        origin = self.require(params.origin, "originCode", "UNLocationCode of origin")
        destination = self.require(params.destination, "destCode", "UNLocationCode of destination")
        payload = await self.fetch(params={
            "originCode": origin,
            "destCode": destination,
            "fromDate": params.start_date,
            "toDate": params.end_date,
            "sortByDepartureOrArrival": "Departure",
        })
        return self.map(map_zim_point_to_point, payload or {})


class ZimTrackingAdapter(SubApiAdapter):
    endpoint_type = EndpointType.TRACKING
    label = "Tracking"

    async def get_events(self, query: TrackingQuery) -> list[TrackingEvent]:
        require_tracking_reference(self, query)
        payload = await self.fetch(params=tracking_params(query, TRACKING_FILTERS))
        return self.map(map_dcsa_events, payload, "events", "data")
