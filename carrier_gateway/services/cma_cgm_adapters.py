"""CMA CGM Sub-API Adapters — Commercial Schedule, Route, Proforma, Voyage, Tracking.

Invariants:
    - Commercial Schedule is DCSA: params pass through, API-Version header sent
    - Route/Proforma/Voyage list endpoints are ranged ("range: 0-49")
    - Voyage picks its endpoint in fixed order: voyage code > vessel IMO without
      dates > port/country calls > date range; none of these -> MissingRequiredParameter
    - Tracking uses /{reference} when a document/equipment/booking reference is given

Design Decisions:
    - One class per sub-API, same module: they share params type and config
"""

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.errors import ErrorContext, MissingRequiredParameter
from carrier_gateway.core.map_cma_cgm import (
    map_cma_cgm_calls, map_cma_cgm_fleet, map_cma_cgm_proforma,
    map_cma_cgm_proforma_calls, map_cma_cgm_routings, map_cma_cgm_voyages,
)
from carrier_gateway.core.map_dcsa import map_dcsa_events, map_dcsa_schedules, unwrap_list
from carrier_gateway.schemas.carrier_params import CmaCgmScheduleParams
from carrier_gateway.schemas.schedule import (
    FleetVessel, ProformaCall, ProformaService, ServiceSchedule,
)
from carrier_gateway.schemas.schedule_query import TrackingQuery
from carrier_gateway.schemas.tracking import TrackingEvent
from carrier_gateway.services.adapter_base import (
    DCSA_SCHEDULE_FIELDS, RANGE_HEADER, SubApiAdapter, path_segment, tracking_params,
)

ROUTE_FIELDS = (
    "place_of_loading", "un_locode_place_of_loading", "place_of_discharge",
    "un_locode_place_of_discharge", "shipping_company", "departure_date",
    "arrival_date", "search_range", "pol_vessel_imo", "pol_service_code",
    "max_ts", "number_of_teu", "specific_routings", "use_routing_statistics",
)
TRACKING_FILTERS = (
    "event_type", "shipment_event_type_code", "transport_event_type_code",
    "equipment_event_type_code", "document_type_code", "carrier_booking_reference",
    "transport_document_reference", "equipment_reference", "transport_call_id",
    "vessel_imo_number", "export_voyage_number", "carrier_service_code",
    "un_location_code", "event_created_date_time", "event_date_time",
    "behalf_of", "limit", "cursor",
)


class CmaCgmCommercialScheduleAdapter(SubApiAdapter):
    endpoint_type = EndpointType.SCHEDULE
    label = "Commercial Schedule"

    async def get_schedules(self, params: CmaCgmScheduleParams) -> list[ServiceSchedule]:
        payload = await self.fetch(
            params=params.wire(*DCSA_SCHEDULE_FIELDS), headers=self.version_header(),
        )
        return self.map(map_dcsa_schedules, payload)


class CmaCgmRouteAdapter(SubApiAdapter):
    endpoint_type = EndpointType.ROUTE
    label = "Route"

    async def get_schedules(self, params: CmaCgmScheduleParams) -> list[ServiceSchedule]:
        self.require(params.loading_place, "placeOfLoading", "or unLocodePlaceOfLoading")
        self.require(params.discharge_place, "placeOfDischarge", "or unLocodePlaceOfDischarge")
        payload = await self.fetch(
            "/routings", params=params.wire(*ROUTE_FIELDS), headers=RANGE_HEADER,
        )
        return self.map(map_cma_cgm_routings, unwrap_list(payload))


class CmaCgmProformaAdapter(SubApiAdapter):
    endpoint_type = EndpointType.PROFORMA
    label = "Proforma"

    async def get_schedules(self, params: CmaCgmScheduleParams) -> list[ProformaService]:
        service_code = params.any_service_code
        if service_code:
            payload = await self.fetch(f"/services/{path_segment(service_code)}")
        elif params.line_code:
            # line lookup validates the code; its services come from the search
            await self.fetch(f"/lines/{path_segment(params.line_code)}")
            payload = await self.fetch(
                "/services", params={"lineCode": params.line_code}, headers=RANGE_HEADER,
            )
        elif params.zone_from_code and params.zone_to_code:
            payload = await self.fetch(
                f"/zones/{path_segment(params.zone_from_code)}"
                f"/zones/{path_segment(params.zone_to_code)}/services",
                headers=RANGE_HEADER,
            )
        else:
            payload = await self.fetch(
                "/services",
                params={
                    "port": params.port,
                    "terminal": params.terminal,
                    "vesselIMO": params.vessel_imo,
                },
                headers=RANGE_HEADER,
            )
        return self.map(map_cma_cgm_proforma, unwrap_list(payload))

    async def get_service_fleet(self, service_code: str) -> list[FleetVessel]:
        payload = await self.fetch(
            f"/services/{path_segment(service_code)}/fleet", headers=RANGE_HEADER,
        )
        return self.map(map_cma_cgm_fleet, unwrap_list(payload))

    async def get_service_proforma_calls(self, service_code: str) -> list[ProformaCall]:
        payload = await self.fetch(
            f"/services/{path_segment(service_code)}/proformacalls", headers=RANGE_HEADER,
        )
        return self.map(map_cma_cgm_proforma_calls, unwrap_list(payload))


class CmaCgmVoyageAdapter(SubApiAdapter):
    endpoint_type = EndpointType.VOYAGE
    label = "Voyage"

    async def get_schedules(self, params: CmaCgmScheduleParams) -> list[ServiceSchedule]:
        voyage_code = params.any_voyage_code
        vessel_imo = params.any_vessel_imo
        date_from, date_to = params.range_from, params.range_to

        if voyage_code:
            payload = await self.fetch(f"/commercialVoyages/{path_segment(voyage_code)}")
            return self.map(map_cma_cgm_voyages, unwrap_list(payload))

        if vessel_imo and not date_from and not date_to:
            payload = await self.fetch(
                f"/vessels/{path_segment(vessel_imo)}/schedule",
                params={"shipcomp": params.shipcomp},
            )
            return self.map(map_cma_cgm_calls, unwrap_list(payload))

        if params.port_code or params.country_code:
            payload = await self.fetch(
                "/commercialCalls",
                params={
                    "from": date_from,
                    "to": date_to,
                    "portCode": params.port_code,
                    "countryCode": params.country_code,
                    "vesselIMO": vessel_imo,
                    "serviceCode": params.service_code,
                    "voyageCode": params.voyage_code,
                },
                headers=RANGE_HEADER,
            )
            return self.map(map_cma_cgm_calls, unwrap_list(payload))

        if date_from and date_to:
            payload = await self.fetch(
                "/commercialVoyages",
                params={
                    "from": date_from,
                    "to": date_to,
                    "searchType": params.search_type,
                    "serviceCode": params.service_code,
                    "lineCode": params.line_code,
                    "shipcomp": params.shipcomp,
                    "sort": params.sort,
                },
                headers=RANGE_HEADER,
            )
            return self.map(map_cma_cgm_voyages, unwrap_list(payload))

        raise MissingRequiredParameter(
            "CMA CGM Voyage API requires voyageCode, vesselIMO, "
            "from/to dates, or portCode/countryCode parameter",
            "voyageCode",
            ErrorContext(carrier=self.carrier, endpoint_type=self.endpoint_type.value),
        )


class CmaCgmTrackingAdapter(SubApiAdapter):
    endpoint_type = EndpointType.TRACKING
    label = "Tracking"

    async def get_events(self, query: TrackingQuery) -> list[TrackingEvent]:
        reference = query.primary_reference
        if reference:
            payload = await self.fetch(
                f"/{path_segment(reference)}",
                params={"behalfOf": query.behalf_of, "limit": query.limit, "cursor": query.cursor},
            )
        else:
            payload = await self.fetch(
                params=tracking_params(query, TRACKING_FILTERS, join_lists=False),
            )
        return self.map(map_dcsa_events, payload, "data", "events")
