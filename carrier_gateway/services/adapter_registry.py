"""Adapter Registry — carrier code -> router, built from the loaded carrier configs.

Invariants:
    - Only enabled carriers with a known router class are registered
    - Lookups are case-insensitive and accept common aliases ("CMA CGM", "MAERSK LINE")
    - A code without a router -> CarrierNotAvailableError (503)
    - refresh() rebuilds from the config directory; reset() drops every router

Design Decisions:
    - Instance owned by the app lifespan, not a process singleton: tests build
      their own registry over fake configs
    - A configured carrier with no router class is logged and skipped
"""

import logging
from collections.abc import Callable

from carrier_gateway.core.errors import CarrierNotAvailableError
from carrier_gateway.infrastructure.transport_client import TransportClient
from carrier_gateway.schemas.carrier_config import CarrierConfig
from carrier_gateway.services.carrier_routers import ROUTER_CLASSES, CarrierRouterBase

logger = logging.getLogger(__name__)

CARRIER_ALIASES = {
    "CMA CGM": "CMCG",
    "CMA-CGM": "CMCG",
    "CMA_CGM": "CMCG",
    "CMACGM": "CMCG",
    "MAERSK LINE": "MAERSK",
    "MAEU": "MAERSK",
}


class AdapterRegistry:
    """Holds one router per available carrier."""

    def __init__(
        self,
        transport: TransportClient,
        load_configs: Callable[[], dict[str, CarrierConfig]],
    ):
        self.transport = transport
        self.load_configs = load_configs
        self._routers: dict[str, CarrierRouterBase] = {}

    def refresh(self) -> list[str]:
        """Rebuild routers from the carrier configs; returns available codes."""
        routers: dict[str, CarrierRouterBase] = {}
        for code, config in self.load_configs().items():
            router_class = ROUTER_CLASSES.get(code.upper())
            if router_class is None:
                logger.warning(
                    f"No router for configured carrier {code}", extra={"carrier": code},
                )
                continue
            routers[router_class.code] = router_class(config, self.transport)
        self._routers = routers
        logger.info(
            f"Carrier routers available: {', '.join(routers) or 'none'}",
        )
        return self.available_codes()

    def reset(self) -> None:
        self._routers = {}

    @staticmethod
    def normalize(carrier: str) -> str:
        key = carrier.strip().upper()
        return CARRIER_ALIASES.get(key, key)

    def get(self, carrier: str) -> CarrierRouterBase:
        code = self.normalize(carrier)
        router = self._routers.get(code)
        if router is None:
            raise CarrierNotAvailableError(code)
        return router

    def is_available(self, carrier: str) -> bool:
        return self.normalize(carrier) in self._routers

    def available_codes(self) -> list[str]:
        return list(self._routers)
