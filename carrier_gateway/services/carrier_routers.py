"""Carrier Routers — per-carrier dispatch from a flat query to one sub-API adapter.

Invariants:
    - The flat ScheduleQuery is projected into the carrier's parameter model first;
      adapters never see fields of other carriers
    - Selection is the pure function in core/select_sub_api.py; the router only
      logs the decision and delegates
    - Every adapter is explicit in ADAPTERS (no getattr magic, no auto-discovery)

Design Decisions:
    - Explicit dict over getattr: every ScheduleApi -> adapter mapping visible in one place
      (ADR: ExMA no convention-over-config)
"""

import logging
from typing import ClassVar

from pydantic import BaseModel

from carrier_gateway.core.domain_types import CarrierCode, ScheduleApi
from carrier_gateway.core.select_sub_api import (
    select_cma_cgm_api, select_hmm_api, select_maersk_api,
)
from carrier_gateway.infrastructure.transport_client import TransportClient
from carrier_gateway.schemas.carrier_config import CarrierConfig
from carrier_gateway.schemas.carrier_params import (
    CmaCgmScheduleParams, HmmScheduleParams, MaerskScheduleParams, ZimScheduleParams,
)
from carrier_gateway.schemas.schedule import FleetVessel, ProformaCall, ScheduleRecord
from carrier_gateway.schemas.schedule_query import ScheduleQuery, TrackingQuery
from carrier_gateway.schemas.tracking import TrackingEvent
from carrier_gateway.services import (
    cma_cgm_adapters as cma, hmm_adapters as hmm, maersk_adapters as maersk,
    zim_adapters as zim,
)

logger = logging.getLogger(__name__)


class CarrierRouterBase:
    """Shared projection, logging and tracking delegation."""

    code: ClassVar[str]
    name: ClassVar[str]
    params_model: ClassVar[type[BaseModel]]
    ADAPTERS: ClassVar[dict[ScheduleApi, type]]
    TRACKING: ClassVar[type]

    def __init__(self, config: CarrierConfig, transport: TransportClient):
        self.config = config
        self.adapters = {api: cls(config, transport) for api, cls in self.ADAPTERS.items()}
        self.tracking = self.TRACKING(config, transport)

    def project(self, query: ScheduleQuery):
        return self.params_model.model_validate(query.to_params())

    def select(self, params) -> ScheduleApi:
        raise NotImplementedError

    async def get_schedules(self, query: ScheduleQuery) -> list[ScheduleRecord]:
        params = self.project(query)
        api = self.select(params)
        adapter = self.adapters[api]
        logger.info(
            f"{self.name}: using {adapter.label} API",
            extra={
                "carrier": self.code,
                "sub_api": api.value,
                "endpoint_type": adapter.endpoint_type.value,
            },
        )
        return await adapter.get_schedules(params)

    async def get_tracking_events(self, query: TrackingQuery) -> list[TrackingEvent]:
        return await self.tracking.get_events(query)


class CmaCgmRouter(CarrierRouterBase):
    code = CarrierCode.CMA_CGM.value
    name = "CMA CGM"
    params_model = CmaCgmScheduleParams
    ADAPTERS = {
        ScheduleApi.ROUTE: cma.CmaCgmRouteAdapter,
        ScheduleApi.PROFORMA: cma.CmaCgmProformaAdapter,
        ScheduleApi.VOYAGE: cma.CmaCgmVoyageAdapter,
        ScheduleApi.COMMERCIAL_SCHEDULE: cma.CmaCgmCommercialScheduleAdapter,
    }
    TRACKING = cma.CmaCgmTrackingAdapter

    def select(self, params: CmaCgmScheduleParams) -> ScheduleApi:
        return select_cma_cgm_api(params)

    async def get_service_fleet(self, service_code: str) -> list[FleetVessel]:
        return await self.adapters[ScheduleApi.PROFORMA].get_service_fleet(service_code)

    async def get_service_proforma_calls(self, service_code: str) -> list[ProformaCall]:
        return await self.adapters[ScheduleApi.PROFORMA].get_service_proforma_calls(service_code)


class HmmRouter(CarrierRouterBase):
    code = CarrierCode.HMM.value
    name = "HMM"
    params_model = HmmScheduleParams
    ADAPTERS = {
        ScheduleApi.VESSEL_SCHEDULE: hmm.HmmVesselScheduleAdapter,
        ScheduleApi.POINT_TO_POINT: hmm.HmmPointToPointAdapter,
        ScheduleApi.PORT_SCHEDULE: hmm.HmmPortScheduleAdapter,
    }
    TRACKING = hmm.HmmTrackingAdapter

    def select(self, params: HmmScheduleParams) -> ScheduleApi:
        return select_hmm_api(params)


class MaerskRouter(CarrierRouterBase):
    code = CarrierCode.MAERSK.value
    name = "Maersk"
    params_model = MaerskScheduleParams
    ADAPTERS = {
        ScheduleApi.POINT_TO_POINT: maersk.MaerskPointToPointAdapter,
        ScheduleApi.PORT_SCHEDULE: maersk.MaerskPortScheduleAdapter,
        ScheduleApi.VESSEL_SCHEDULE: maersk.MaerskVesselScheduleAdapter,
    }
    TRACKING = maersk.MaerskTrackingAdapter

    def select(self, params: MaerskScheduleParams) -> ScheduleApi:
        return select_maersk_api(params)


class ZimRouter(CarrierRouterBase):
    code = CarrierCode.ZIM.value
    name = "ZIM"
    params_model = ZimScheduleParams
    ADAPTERS = {ScheduleApi.POINT_TO_POINT: zim.ZimPointToPointAdapter}
    TRACKING = zim.ZimTrackingAdapter

    def select(self, params: ZimScheduleParams) -> ScheduleApi:
        return ScheduleApi.POINT_TO_POINT


ROUTER_CLASSES: dict[str, type[CarrierRouterBase]] = {
    CmaCgmRouter.code: CmaCgmRouter,
    HmmRouter.code: HmmRouter,
    MaerskRouter.code: MaerskRouter,
    ZimRouter.code: ZimRouter,
}
