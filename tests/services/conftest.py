"""Service test fixtures — FastAPI test client over fake carrier vendors.

Invariants:
    - Every test gets a fresh registry built from tests/fakes.CONFIGS
    - app.state is set by hand: ASGITransport does not run the lifespan
    - vendor_routes lets a test answer per (host, path) without touching a network

Design Decisions:
    - Real app object (routes, error handlers) with swapped services, so route
      tests exercise the same wiring as production
"""

import pytest
from httpx import ASGITransport, AsyncClient

from carrier_gateway.main import app
from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.fan_out import FanOutAggregator
from tests.fakes import CONFIGS, TOKEN_URL, json_response, make_config, token_response


@pytest.fixture
def vendor_routes():
    """(host, path) -> JSON payload; unmatched requests answer 404."""
    return {}


@pytest.fixture
def carrier_configs():
    return {code: make_config(code) for code in CONFIGS}


@pytest.fixture
async def gateway_vendor(make_transport, vendor_routes, carrier_configs):
    def handler(request):
        if str(request.url) == TOKEN_URL:
            return token_response()
        key = (request.url.host, request.url.path)
        if key in vendor_routes:
            return json_response(vendor_routes[key])
        return json_response({"message": "not found"}, 404)

    transport, vendor = make_transport(handler)
    registry = AdapterRegistry(transport, lambda: carrier_configs)
    registry.refresh()
    return registry, vendor


@pytest.fixture
async def client(gateway_vendor):
    """FastAPI test client with registry and aggregator swapped in."""
    registry, _ = gateway_vendor
    original = dict(app.state._state)
    app.state.registry = registry
    app.state.aggregator = FanOutAggregator(registry)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.state._state.clear()
    app.state._state.update(original)
