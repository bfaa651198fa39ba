"""API Dependencies — hand the lifespan-owned services to route handlers.

Invariants:
    - Routes never construct registries or clients; they read app.state
"""

from fastapi import Request

from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.fan_out import FanOutAggregator


def get_registry(request: Request) -> AdapterRegistry:
    return request.app.state.registry


def get_aggregator(request: Request) -> FanOutAggregator:
    return request.app.state.aggregator
