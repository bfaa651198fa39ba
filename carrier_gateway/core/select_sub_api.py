"""Sub-API Selection — which vendor endpoint answers a schedule query, per carrier.

Invariants:
    - Fixed priority order per carrier; the first satisfied trigger wins, never recency
    - CMA CGM: Route > Proforma > Voyage > Commercial Schedule
    - HMM: Vessel (voyage number) > Point-to-Point > Port > Vessel fallback
    - Maersk: Point-to-Point > Port Schedule > Vessel Schedule
    - ZIM has a single point-to-point sub-API (no selection)

Design Decisions:
    - Pure functions returning ScheduleApi: routers log the decision and dispatch,
      so selection is testable without any HTTP fakes
    - HMM falls back to the vessel schedule even when it cannot succeed; the vessel
      adapter then reports the missing voyage number
"""

from carrier_gateway.core.domain_types import ScheduleApi
from carrier_gateway.schemas.carrier_params import (
    CmaCgmScheduleParams, HmmScheduleParams, MaerskScheduleParams,
)


def select_cma_cgm_api(p: CmaCgmScheduleParams) -> ScheduleApi:
    if p.loading_place and p.discharge_place:
        return ScheduleApi.ROUTE
    if p.any_service_code or p.line_code or (p.zone_from_code and p.zone_to_code):
        return ScheduleApi.PROFORMA
    if (
        p.any_voyage_code
        or p.any_vessel_imo
        or (p.range_from and p.range_to)
        or p.port_code
        or p.country_code
    ):
        return ScheduleApi.VOYAGE
    return ScheduleApi.COMMERCIAL_SCHEDULE


def select_hmm_api(p: HmmScheduleParams) -> ScheduleApi:
    if p.carrier_voyage_number:
        return ScheduleApi.VESSEL_SCHEDULE
    if p.from_location_code and p.to_location_code and p.period_date:
        return ScheduleApi.POINT_TO_POINT
    if p.un_location_code and p.start_date and p.end_date:
        return ScheduleApi.PORT_SCHEDULE
    return ScheduleApi.VESSEL_SCHEDULE


def select_maersk_api(p: MaerskScheduleParams) -> ScheduleApi:
    if p.place_of_receipt and p.place_of_delivery:
        return ScheduleApi.POINT_TO_POINT
    if (
        p.un_location_code
        and (p.date or p.start_date)
        and not (p.vessel_imo_number or p.carrier_voyage_number or p.carrier_service_code)
    ):
        return ScheduleApi.PORT_SCHEDULE
    return ScheduleApi.VESSEL_SCHEDULE
