"""Schedule Routes — fan-out schedule search plus CMA CGM service lookups.

Invariants:
    - Query parameters validate into ScheduleQuery before any carrier is called
    - carrier resolves to codes first: unknown id -> 400, unavailable carrier -> 503
    - Partial carrier failure still returns 200 with errors[] in the envelope

Design Decisions:
    - Thin handlers: resolution in core/carrier_filter.py, orchestration in
      services/fan_out.py (ADR: ExMA impureim sandwich)
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from carrier_gateway.api.dependencies import get_aggregator, get_registry
from carrier_gateway.core.carrier_filter import resolve_carrier_codes
from carrier_gateway.core.domain_types import CarrierCode
from carrier_gateway.schemas.responses import (
    CarrierDataResponse, ResponseMeta, ServiceDetailResponse,
)
from carrier_gateway.schemas.schedule_query import ScheduleQuery
from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.fan_out import FanOutAggregator, FanOutResult

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/schedules", tags=["schedules"])


def build_envelope(result: FanOutResult) -> CarrierDataResponse:
    """Shared by the schedule and tracking routes."""
    return CarrierDataResponse(
        data=result.data,
        meta=ResponseMeta.model_validate(result.meta),
        errors=result.errors or None,
    )


@router.get("", response_model=CarrierDataResponse, response_model_exclude_none=True)
async def get_schedules(
    query: Annotated[ScheduleQuery, Query()],
    registry: Annotated[AdapterRegistry, Depends(get_registry)],
    aggregator: Annotated[FanOutAggregator, Depends(get_aggregator)],
):
    """Search vessel schedules across one or all carriers."""
    codes = resolve_carrier_codes(query.carrier, registry.available_codes())
    logger.info(f"Schedule search for {', '.join(codes)}", extra={"path": "/api/v1/schedules"})
    return build_envelope(await aggregator.schedules(query, codes))


@router.get("/cma-cgm/services/{service_code}/fleet", response_model=ServiceDetailResponse)
async def get_cma_cgm_service_fleet(
    service_code: str,
    registry: Annotated[AdapterRegistry, Depends(get_registry)],
):
    """Vessels deployed on a CMA CGM service."""
    router_ = registry.get(CarrierCode.CMA_CGM.value)
    fleet = await router_.get_service_fleet(service_code)
    return ServiceDetailResponse(
        data=[vessel.to_wire() for vessel in fleet],
        carrier=router_.code,
        service_code=service_code,
    )


@router.get("/cma-cgm/services/{service_code}/proformacalls",
            response_model=ServiceDetailResponse)
async def get_cma_cgm_proforma_calls(
    service_code: str,
    registry: Annotated[AdapterRegistry, Depends(get_registry)],
):
    """Proforma port rotation of a CMA CGM service."""
    router_ = registry.get(CarrierCode.CMA_CGM.value)
    calls = await router_.get_service_proforma_calls(service_code)
    return ServiceDetailResponse(
        data=[call.to_wire() for call in calls],
        carrier=router_.code,
        service_code=service_code,
    )
