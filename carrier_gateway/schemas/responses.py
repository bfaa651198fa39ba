"""Response Envelope — the JSON body every successful data endpoint returns.

Invariants:
    - success is true whenever at least one carrier answered
    - meta counts always satisfy carriersSucceeded + carriersFailed == carriersQueried
    - errors is omitted when no carrier failed
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _EnvelopeModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResponseMeta(_EnvelopeModel):
    total: int
    carriers_queried: int
    carriers_succeeded: int
    carriers_failed: int


class CarrierFailure(BaseModel):
    carrier: str
    error: str


class CarrierDataResponse(_EnvelopeModel):
    success: bool = True
    data: list[dict[str, Any]]
    meta: ResponseMeta
    errors: list[CarrierFailure] | None = None


class ServiceDetailResponse(_EnvelopeModel):
    """Single-carrier lookups (CMA CGM fleet / proforma calls)."""
    success: bool = True
    data: list[dict[str, Any]]
    carrier: str
    service_code: str
