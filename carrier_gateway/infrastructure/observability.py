"""Structured Logging — JSON formatter and setup for production observability.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Gateway extras (carrier, endpoint_type, sub_api, status_code, ...) surfaced when present
    - Secrets never reach a log line unmasked (mask_secret at every call site)
    - Repeated setup_logging calls leave exactly one gateway handler on the root logger

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - setup_logging called from the lifespan; each app instance runs it again, so the
      previous gateway handler is swapped out rather than stacked
    - httpx/httpcore held at WARNING: the transport client logs every vendor call
      itself, with masked auth headers and duration
"""

import logging
import json
from datetime import datetime, timezone

# Every key passed via extra= somewhere in the gateway
_EXTRA_FIELDS = (
    "carrier", "endpoint_type", "sub_api", "status_code", "duration_ms",
    "error_code", "attempt", "path", "carriers_failed", "auth_headers",
)
_QUIET_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging in production."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update({
            key: record.__dict__[key] for key in _EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        # default=str: an extra that is not JSON-native is logged as its str()
        return json.dumps(log, ensure_ascii=False, default=str)


class _GatewayHandler(logging.StreamHandler):
    pass


def setup_logging(level: str = "INFO", fmt: str = "json"):
    """Configure logging for the application."""
    for existing in [h for h in logging.root.handlers if isinstance(h, _GatewayHandler)]:
        logging.root.removeHandler(existing)
    handler = _GatewayHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(carrier)s] - %(message)s",
            defaults={"carrier": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_secret(value: str | None) -> str:
    """'Bearer abcdefghijk' -> 'Bearer a...'; None -> 'missing'."""
    if not value:
        return "missing"
    return f"{value[:8]}..."
