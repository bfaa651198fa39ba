"""Error Hierarchy — typed, categorized exceptions for every gateway failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Caller-correctable errors (400-level) are raised before any vendor I/O
    - Vendor failures (502/504) always name the carrier they came from
    - to_response() produces the REST envelope; no credentials ever appear in it

Design Decisions:
    - Single hierarchy with CarrierGatewayError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: carrier/endpoint context without coupling to logging framework
    - AllCarriersFailedError carries the per-carrier list so the 503 body is self-describing
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    EXTERNAL_API = "external_api"
    MALFORMED_PAYLOAD = "malformed_payload"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    carrier: str | None = None
    endpoint_type: str | None = None
    parameter: str | None = None
    debug_info: dict[str, Any] | None = None


class CarrierGatewayError(Exception):
    """Base exception for all gateway errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "carrier": self.context.carrier,
                    "endpoint_type": self.context.endpoint_type,
                    "parameter": self.context.parameter,
                },
            }
        }


# ─── Request Errors (400-level) ─────────────────────────────────

class MissingRequiredParameter(CarrierGatewayError):
    """A sub-API was selected but a parameter it needs is absent."""
    def __init__(self, message: str, parameter: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.parameter = parameter
        super().__init__(
            message, "MISSING_REQUIRED_PARAMETER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.parameter = parameter


class OutOfRangeDate(CarrierGatewayError):
    """Date falls outside the window a carrier accepts."""
    def __init__(
        self,
        parameter: str,
        value: str,
        earliest: str,
        latest: str,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.parameter = parameter
        super().__init__(
            f"{parameter} '{value}' is outside the accepted range "
            f"{earliest} to {latest}",
            "OUT_OF_RANGE_DATE", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.parameter = parameter
        self.value = value


class InvalidCarrierError(CarrierGatewayError):
    """Carrier filter names an unknown carrier."""
    def __init__(self, carrier: str, valid: list[str], context: ErrorContext | None = None):
        super().__init__(
            f"Carrier must be one of: {', '.join(valid)}",
            "INVALID_CARRIER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.carrier = carrier


class NoCarriersAvailableError(CarrierGatewayError):
    """Carrier filter resolved to an empty set."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No carriers available", "NO_CARRIERS_AVAILABLE",
            ErrorCategory.VALIDATION, ErrorSeverity.ERROR, context, 400,
        )


# ─── Carrier Errors (500-level) ─────────────────────────────────

class CarrierNotAvailableError(CarrierGatewayError):
    """Carrier is known but has no router (disabled or misconfigured)."""
    def __init__(self, carrier: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.carrier = carrier
        super().__init__(
            f"Carrier {carrier} is not available",
            "CARRIER_NOT_AVAILABLE", ErrorCategory.UNAVAILABLE,
            ErrorSeverity.ERROR, ctx, 503,
        )
        self.carrier = carrier


class CarrierConfigurationError(CarrierGatewayError):
    """Carrier config is missing something an adapter needs."""
    def __init__(self, message: str, carrier: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.carrier = carrier
        super().__init__(
            message, "CARRIER_CONFIGURATION_ERROR", ErrorCategory.CONFIGURATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )


class AuthenticationError(CarrierGatewayError):
    """Credentials could not be resolved or the token grant failed."""
    def __init__(
        self,
        message: str,
        carrier: str,
        tried: list[str] | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.carrier = carrier
        super().__init__(
            message, "AUTHENTICATION_ERROR", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.CRITICAL, ctx, 502,
        )
        self.tried = tried or []


class VendorHttpError(CarrierGatewayError):
    """Carrier API answered with a failure status or failure result code."""
    def __init__(
        self,
        carrier: str,
        label: str,
        status_code: int | None,
        status_text: str,
        body: Any = None,
        detail: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.carrier = carrier
        prefix = f"{carrier} {label} API error"
        if detail:
            message = f"{prefix}: {detail}"
        else:
            message = f"{prefix}: {status_code} {status_text}".rstrip()
        super().__init__(
            message, "VENDOR_HTTP_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )
        self.carrier = carrier
        self.label = label
        self.status_code = status_code
        self.status_text = status_text
        self.body = body


class VendorUnavailableError(CarrierGatewayError):
    """Carrier API timed out or could not be reached."""
    def __init__(self, carrier: str, label: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.carrier = carrier
        super().__init__(
            f"{carrier} {label} API unavailable: {reason}",
            "VENDOR_UNAVAILABLE", ErrorCategory.TIMEOUT,
            ErrorSeverity.ERROR, ctx, 504,
        )
        self.carrier = carrier


class MalformedVendorPayload(CarrierGatewayError):
    """Vendor payload cannot be mapped to the canonical model."""
    def __init__(self, message: str, carrier: str | None = None, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.carrier = ctx.carrier or carrier
        super().__init__(
            message, "MALFORMED_VENDOR_PAYLOAD", ErrorCategory.MALFORMED_PAYLOAD,
            ErrorSeverity.ERROR, ctx, 502,
        )


class MalformedTimestamp(MalformedVendorPayload):
    """Vendor date/time value cannot be normalized to ISO-8601."""
    def __init__(self, value: str, carrier: str | None = None, context: ErrorContext | None = None):
        super().__init__(f"Invalid date/time value: {value!r}", carrier, context)
        self.code = "MALFORMED_TIMESTAMP"
        self.value = value


class AllCarriersFailedError(CarrierGatewayError):
    """Every queried carrier failed during fan-out."""
    def __init__(self, errors: list[dict[str, str]], context: ErrorContext | None = None):
        super().__init__(
            "All carriers failed", "ALL_CARRIERS_FAILED",
            ErrorCategory.UNAVAILABLE, ErrorSeverity.ERROR, context, 503,
        )
        self.errors = errors

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["errors"] = self.errors
        return response
