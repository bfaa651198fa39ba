"""Sub-API Adapter Base — shared plumbing for every vendor endpoint adapter.

Invariants:
    - An adapter is bound to exactly one (carrier, EndpointType)
    - Required parameters are checked before any I/O (MissingRequiredParameter)
    - A missing endpoint in the carrier config -> CarrierConfigurationError
    - Mapper failures surface as MalformedVendorPayload, never a raw ValidationError
    - An unparsable vendor date/time surfaces as MalformedTimestamp tagged with the carrier

Design Decisions:
    - Small base class (fetch/require/map) instead of a deep hierarchy: each
      concrete adapter reads as "check params, build request, map payload"
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, TypeVar
from urllib.parse import quote

from pydantic import ValidationError

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.errors import (
    CarrierConfigurationError, ErrorContext, MalformedTimestamp, MalformedVendorPayload,
    MissingRequiredParameter,
)
from carrier_gateway.infrastructure.transport_client import ErrorDetail, TransportClient
from carrier_gateway.schemas.carrier_config import ApiEndpointConfig, CarrierConfig
from carrier_gateway.schemas.schedule_query import TrackingQuery

logger = logging.getLogger(__name__)

T = TypeVar("T")

RANGE_HEADER = {"range": "0-49"}


def path_segment(value: str) -> str:
    return quote(str(value), safe="")


class SubApiAdapter:
    """One vendor endpoint: request building + payload mapping."""

    endpoint_type: ClassVar[EndpointType]
    label: ClassVar[str]

    def __init__(self, config: CarrierConfig, transport: TransportClient):
        self.config = config
        self.transport = transport

    @property
    def carrier(self) -> str:
        return self.config.code.upper()

    @property
    def api(self) -> ApiEndpointConfig:
        api = self.config.api(self.endpoint_type)
        if api is None:
            raise CarrierConfigurationError(
                f"{self.label} API endpoint not configured for {self.config.name}",
                self.carrier,
                ErrorContext(endpoint_type=self.endpoint_type.value),
            )
        return api

    def version_header(self) -> dict[str, str]:
        major = self.api.major_version
        return {"API-Version": major} if major else {}

    def require(self, value: Any, parameter: str, hint: str | None = None) -> Any:
        if value in (None, "", []):
            raise MissingRequiredParameter(
                f"{self.config.name} {self.label} API requires {parameter}"
                + (f" ({hint})" if hint else "")
                + " parameter",
                parameter,
                ErrorContext(carrier=self.carrier, endpoint_type=self.endpoint_type.value),
            )
        return value

    async def fetch(
        self,
        suffix: str = "",
        *,
        method: str | None = None,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        error_detail: ErrorDetail | None = None,
    ) -> Any:
        api = self.api
        return await self.transport.request(
            self.config,
            self.endpoint_type,
            method or api.method,
            f"{api.endpoint}{suffix}",
            label=self.label,
            params=params,
            json=json,
            headers=headers,
            error_detail=error_detail,
        )

    def map(self, mapper: Callable[..., T], payload: Any, *args: Any) -> T:
        try:
            return mapper(payload, *args)
        except MalformedTimestamp as e:
            e.context.carrier = e.context.carrier or self.carrier
            e.context.endpoint_type = self.endpoint_type.value
            logger.error(
                f"{self.carrier} {self.label} payload has an unparsable date/time: {e.value!r}",
                extra={"carrier": self.carrier, "endpoint_type": self.endpoint_type.value},
            )
            raise
        except ValidationError as e:
            logger.error(
                f"{self.carrier} {self.label} payload failed validation: {e.error_count()} errors",
                extra={"carrier": self.carrier, "endpoint_type": self.endpoint_type.value},
            )
            raise MalformedVendorPayload(
                f"{self.carrier} {self.label} API returned an unexpected payload: "
                f"{e.errors()[0]['msg']}",
                self.carrier,
                ErrorContext(carrier=self.carrier, endpoint_type=self.endpoint_type.value),
            ) from e
        except (AttributeError, TypeError, KeyError) as e:
            raise MalformedVendorPayload(
                f"{self.carrier} {self.label} API returned an unexpected payload shape",
                self.carrier,
                ErrorContext(carrier=self.carrier, endpoint_type=self.endpoint_type.value),
            ) from e


# ─── DCSA Query Helpers ─────────────────────────────────────────

DCSA_SCHEDULE_FIELDS = (
    "vessel_imo_number", "vessel_name", "carrier_service_code",
    "universal_service_reference", "carrier_voyage_number",
    "universal_voyage_reference", "un_location_code", "facility_smdg_code",
    "vessel_operator_carrier_code", "start_date", "end_date", "limit", "cursor",
)


def tracking_params(
    query: TrackingQuery, fields: tuple[str, ...], join_lists: bool = True,
) -> dict[str, Any]:
    """DCSA tracking query string; list filters comma-joined unless join_lists=False."""
    params = query.model_dump(by_alias=True, exclude_none=True, include=set(fields))
    if join_lists:
        for key, values in list(params.items()):
            if isinstance(values, list):
                params[key] = ",".join(values)
    return params


def require_tracking_reference(adapter: SubApiAdapter, query: TrackingQuery) -> None:
    if not (
        query.carrier_booking_reference
        or query.transport_document_reference
        or query.equipment_reference
    ):
        raise MissingRequiredParameter(
            f"{adapter.config.name} Tracking API requires at least one of: "
            "carrierBookingReference, transportDocumentReference, equipmentReference",
            "carrierBookingReference",
            ErrorContext(carrier=adapter.carrier, endpoint_type=adapter.endpoint_type.value),
        )
