"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 unless at least one carrier router is available

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from the
      load balancer (ADR: production readiness)
    - Readiness never calls a vendor: it reflects local configuration only
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from carrier_gateway.api.dependencies import get_registry
from carrier_gateway.config import get_settings
from carrier_gateway.services.adapter_registry import AdapterRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": get_settings().service_name,
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(registry: Annotated[AdapterRegistry, Depends(get_registry)]):
    """Readiness probe — at least one carrier must be routable."""
    carriers = registry.available_codes()
    if not carriers:
        logger.warning("Readiness check failed: no carrier routers available")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "no_carriers_available",
            },
        )
    return {"status": "ready", "checks": {"carriers": carriers}}
