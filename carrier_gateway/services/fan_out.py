"""Fan-Out Aggregator — queries several carriers concurrently and merges the results.

Invariants:
    - Every requested carrier runs concurrently; one failure never cancels a sibling
    - Each record is tagged with carrier (code) and carrierName
    - A carrier failure becomes {carrier, error} in FanOutResult.errors
    - Zero successful carriers -> AllCarriersFailedError (503) with every per-carrier error

Design Decisions:
    - Per-carrier wrapper catches the error inside the task, so gather() never sees
      an exception and sibling results stay intact (ADR: partial success over fail-fast)
    - Unexpected (non-gateway) exceptions are logged with a traceback and still
      reported as that carrier's failure
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from carrier_gateway.core.carrier_protocols import CarrierRouter, RouterLookup
from carrier_gateway.core.errors import AllCarriersFailedError, CarrierGatewayError
from carrier_gateway.schemas.schedule import CanonicalModel
from carrier_gateway.schemas.schedule_query import ScheduleQuery, TrackingQuery

logger = logging.getLogger(__name__)

RouterCall = Callable[[CarrierRouter], Awaitable[list[CanonicalModel]]]


@dataclass
class CarrierOutcome:
    """Result of one carrier's call: records on success, error message otherwise."""
    carrier: str
    records: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class FanOutResult:
    data: list[dict[str, Any]]
    carriers_queried: int
    carriers_succeeded: int
    errors: list[dict[str, str]]

    @property
    def meta(self) -> dict[str, int]:
        return {
            "total": len(self.data),
            "carriersQueried": self.carriers_queried,
            "carriersSucceeded": self.carriers_succeeded,
            "carriersFailed": len(self.errors),
        }


def tag_record(record: CanonicalModel, router: CarrierRouter) -> dict[str, Any]:
    """Wire form of a canonical record plus the carrier it came from."""
    return {**record.to_wire(), "carrier": router.code, "carrierName": router.name}


class FanOutAggregator:
    """Runs one router call per carrier and merges the outcomes."""

    def __init__(self, registry: RouterLookup):
        self.registry = registry

    async def schedules(self, query: ScheduleQuery, codes: list[str]) -> FanOutResult:
        return await self._fan_out(codes, "schedules", lambda r: r.get_schedules(query))

    async def tracking(self, query: TrackingQuery, codes: list[str]) -> FanOutResult:
        return await self._fan_out(codes, "tracking", lambda r: r.get_tracking_events(query))

    async def _fan_out(self, codes: list[str], operation: str, call: RouterCall) -> FanOutResult:
        outcomes = await asyncio.gather(*(self._run_one(code, operation, call) for code in codes))

        data = [record for o in outcomes for record in o.records]
        errors = [{"carrier": o.carrier, "error": o.error} for o in outcomes if not o.succeeded]
        succeeded = len(outcomes) - len(errors)

        if errors:
            logger.warning(
                f"Fan-out {operation}: {len(errors)}/{len(outcomes)} carriers failed",
                extra={"carriers_failed": [e["carrier"] for e in errors]},
            )
        if succeeded == 0:
            raise AllCarriersFailedError(errors)

        return FanOutResult(
            data=data,
            carriers_queried=len(outcomes),
            carriers_succeeded=succeeded,
            errors=errors,
        )

    async def _run_one(self, code: str, operation: str, call: RouterCall) -> CarrierOutcome:
        try:
            router = self.registry.get(code)
            records = await call(router)
        except CarrierGatewayError as e:
            logger.warning(
                f"{code} {operation} failed: {e.message}",
                extra={"carrier": code, "error_code": e.code},
            )
            return CarrierOutcome(carrier=code, error=e.message)
        except Exception as e:
            logger.error(
                f"{code} {operation} raised unexpectedly: {e}",
                extra={"carrier": code},
                exc_info=True,
            )
            return CarrierOutcome(carrier=code, error=str(e) or type(e).__name__)
        return CarrierOutcome(
            carrier=code, records=[tag_record(r, router) for r in records],
        )
