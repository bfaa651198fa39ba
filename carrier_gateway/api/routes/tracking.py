"""Tracking Routes — DCSA track-and-trace events across one or all carriers.

Invariants:
    - A tracking query without any reference is rejected with 400 before fan-out
    - Events are tagged with carrier and carrierName like schedule records
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from carrier_gateway.api.dependencies import get_aggregator, get_registry
from carrier_gateway.api.routes.schedules import build_envelope
from carrier_gateway.core.carrier_filter import resolve_carrier_codes
from carrier_gateway.schemas.responses import CarrierDataResponse
from carrier_gateway.schemas.schedule_query import TrackingQuery
from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.fan_out import FanOutAggregator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tracking", tags=["tracking"])


@router.get("", response_model=CarrierDataResponse, response_model_exclude_none=True)
async def get_tracking_events(
    query: Annotated[TrackingQuery, Query()],
    registry: Annotated[AdapterRegistry, Depends(get_registry)],
    aggregator: Annotated[FanOutAggregator, Depends(get_aggregator)],
):
    """Track shipment, transport and equipment events."""
    codes = resolve_carrier_codes(query.carrier, registry.available_codes())
    logger.info(
        f"Tracking search for {', '.join(codes)} (reference {query.primary_reference})",
        extra={"path": "/api/v1/tracking"},
    )
    return build_envelope(await aggregator.tracking(query, codes))
