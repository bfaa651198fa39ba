"""Transport Client — authenticated JSON requests to carrier APIs over httpx.

Invariants:
    - Every request carries the auth headers for (carrier, endpoint type) and
      Content-Type/Accept: application/json
    - Timeout per request = carrier features.requestTimeout (ms), default 30000
    - 401 on an OAuth2 carrier: invalidate the cached token, re-auth, retry ONCE
    - Timeouts and connection failures -> VendorUnavailableError (504)
    - Non-2xx, or an HTML body where JSON was expected -> VendorHttpError (502)
    - Auth header values are masked in logs

Design Decisions:
    - One shared httpx.AsyncClient injected by the app lifespan (connection pooling)
    - No other retries: the single auth retry is the only one
    - error_detail hook lets a vendor render its own error envelope into the message
"""

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from carrier_gateway.core.domain_types import AuthType, EndpointType
from carrier_gateway.core.errors import (
    ErrorContext, MalformedVendorPayload, VendorHttpError, VendorUnavailableError,
)
from carrier_gateway.infrastructure.credential_manager import CredentialManager
from carrier_gateway.infrastructure.observability import mask_secret
from carrier_gateway.schemas.carrier_config import CarrierConfig

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}
_HTML_MARKERS = ("<!doctype", "<html")

ErrorDetail = Callable[[Any], str | None]


def looks_like_html(response: httpx.Response) -> bool:
    if "text/html" in response.headers.get("content-type", ""):
        return True
    head = response.text[:512].lstrip().lower()
    return head.startswith(_HTML_MARKERS) or "<html" in head


def _clean_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not params:
        return None
    return {k: v for k, v in params.items() if v is not None and v != []}


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text[:500]


class TransportClient:
    """Sends one vendor request; returns the decoded JSON payload."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        credentials: CredentialManager,
        default_timeout_ms: int = 30_000,
    ):
        self.http_client = http_client
        self.credentials = credentials
        self.default_timeout_ms = default_timeout_ms

    def timeout_ms(self, config: CarrierConfig) -> int:
        return config.features.request_timeout or self.default_timeout_ms

    async def request(
        self,
        config: CarrierConfig,
        endpoint_type: EndpointType,
        method: str,
        path: str,
        *,
        label: str,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        error_detail: ErrorDetail | None = None,
    ) -> Any:
        code = config.code.upper()
        url = f"{config.base_url.rstrip('/')}{path}"
        response = await self._send(
            config, endpoint_type, method, url, label, params, json, headers, attempt=1,
        )
        if response.status_code == 401 and config.auth.type == AuthType.OAUTH2:
            logger.warning(
                f"{code} rejected token, refreshing and retrying once",
                extra={"carrier": code, "endpoint_type": endpoint_type.value, "attempt": 2},
            )
            self.credentials.invalidate(code)
            response = await self._send(
                config, endpoint_type, method, url, label, params, json, headers, attempt=2,
            )
        return self._decode(response, code, endpoint_type, label, error_detail)

    async def _send(
        self,
        config: CarrierConfig,
        endpoint_type: EndpointType,
        method: str,
        url: str,
        label: str,
        params: Mapping[str, Any] | None,
        json: Any,
        headers: Mapping[str, str] | None,
        attempt: int,
    ) -> httpx.Response:
        code = config.code.upper()
        auth = await self.credentials.auth_headers(config, endpoint_type)
        timeout_ms = self.timeout_ms(config)
        logger.info(
            f"HTTP Request: {method} {url}",
            extra={
                "carrier": code,
                "endpoint_type": endpoint_type.value,
                "attempt": attempt,
                "auth_headers": {k: mask_secret(v) for k, v in auth.items()},
            },
        )
        started = time.perf_counter()
        try:
            response = await self.http_client.request(
                method,
                url,
                params=_clean_params(params),
                json=json,
                headers={**JSON_HEADERS, **(headers or {}), **auth},
                timeout=timeout_ms / 1000,
            )
        except httpx.TimeoutException as e:
            raise VendorUnavailableError(
                code, label, f"timed out after {timeout_ms}ms",
                ErrorContext(carrier=code, endpoint_type=endpoint_type.value),
            ) from e
        except httpx.TransportError as e:
            raise VendorUnavailableError(
                code, label, str(e) or type(e).__name__,
                ErrorContext(carrier=code, endpoint_type=endpoint_type.value),
            ) from e
        logger.info(
            f"HTTP Response: {response.status_code} {url}",
            extra={
                "carrier": code,
                "endpoint_type": endpoint_type.value,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000),
            },
        )
        return response

    def _decode(
        self,
        response: httpx.Response,
        code: str,
        endpoint_type: EndpointType,
        label: str,
        error_detail: ErrorDetail | None,
    ) -> Any:
        context = ErrorContext(carrier=code, endpoint_type=endpoint_type.value)
        if response.is_error:
            body = _body(response)
            raise VendorHttpError(
                code, label, response.status_code, response.reason_phrase, body,
                detail=error_detail(body) if error_detail else None, context=context,
            )
        if looks_like_html(response):
            logger.error(
                f"{code} {label} returned HTML instead of JSON",
                extra={"carrier": code, "status_code": response.status_code},
            )
            raise VendorHttpError(
                code, label, response.status_code, response.reason_phrase,
                response.text[:200], detail="received HTML instead of JSON",
                context=context,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedVendorPayload(
                f"{code} {label} API returned a non-JSON body", code, context,
            ) from e
