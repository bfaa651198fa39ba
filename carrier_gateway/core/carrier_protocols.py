"""Boundary Protocols — contracts between the fan-out/API layer and carrier routers.

Invariants:
    - The aggregator and API depend on these Protocols, never on a concrete carrier
    - Every router exposes code + display name; both tag fan-out results

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: implementations do vendor IO; mappers stay pure and sync
"""

from typing import Protocol

from carrier_gateway.schemas.schedule import ScheduleRecord
from carrier_gateway.schemas.schedule_query import ScheduleQuery, TrackingQuery
from carrier_gateway.schemas.tracking import TrackingEvent


class CarrierRouter(Protocol):
    """One carrier's entry point: picks the sub-API for each query."""
    code: str
    name: str

    async def get_schedules(self, query: ScheduleQuery) -> list[ScheduleRecord]: ...
    async def get_tracking_events(self, query: TrackingQuery) -> list[TrackingEvent]: ...


class RouterLookup(Protocol):
    """Contract for the adapter registry as seen by the aggregator."""
    def get(self, carrier: str) -> CarrierRouter: ...
    def available_codes(self) -> list[str]: ...
