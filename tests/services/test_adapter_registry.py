"""Adapter Registry — routers built from carrier configs, alias-aware lookup."""

import pytest

from carrier_gateway.core.errors import CarrierNotAvailableError
from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.carrier_routers import CmaCgmRouter, MaerskRouter
from tests.fakes import CONFIGS, json_response, make_config


@pytest.fixture
def registry(make_transport):
    transport, _ = make_transport(lambda r: json_response([]))
    configs = {code: make_config(code) for code in CONFIGS}
    configs["ACME"] = make_config("ZIM", code="ACME", name="Acme Lines")
    return AdapterRegistry(transport, lambda: configs)


async def test_refresh_registers_known_carriers_only(registry):
    assert sorted(registry.refresh()) == ["CMCG", "HMM", "MAERSK", "ZIM"]
    assert not registry.is_available("ACME")


@pytest.mark.parametrize("alias", ["cmcg", "CMA CGM", "cma-cgm", "CMA_CGM", " CMACGM "])
async def test_cma_cgm_aliases(registry, alias):
    registry.refresh()
    assert isinstance(registry.get(alias), CmaCgmRouter)


async def test_maersk_aliases(registry):
    registry.refresh()
    assert isinstance(registry.get("Maersk Line"), MaerskRouter)
    assert registry.is_available("MAEU")


async def test_unknown_carrier_not_available(registry):
    registry.refresh()
    with pytest.raises(CarrierNotAvailableError) as exc:
        registry.get("msc")
    assert exc.value.http_status == 503
    assert exc.value.carrier == "MSC"


async def test_reset_drops_every_router(registry):
    registry.refresh()
    registry.reset()
    assert registry.available_codes() == []
    with pytest.raises(CarrierNotAvailableError):
        registry.get("HMM")
