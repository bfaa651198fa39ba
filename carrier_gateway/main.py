"""Carrier Gateway API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map CarrierGatewayError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - One httpx.AsyncClient per process, opened and closed by the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Services live on app.state, not in module globals: tests swap them per app
"""

import logging
from contextlib import asynccontextmanager
from functools import partial

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from carrier_gateway.api.error_handlers import register_error_handlers
from carrier_gateway.api.routes import health, schedules, tracking
from carrier_gateway.config import Settings, get_settings
from carrier_gateway.infrastructure.carrier_config_loader import load_carrier_configs
from carrier_gateway.infrastructure.credential_manager import CredentialManager
from carrier_gateway.infrastructure.observability import setup_logging
from carrier_gateway.infrastructure.transport_client import TransportClient
from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.fan_out import FanOutAggregator

logger = logging.getLogger(__name__)


def build_services(app: FastAPI, settings: Settings, http_client: httpx.AsyncClient) -> None:
    """Wire credentials -> transport -> registry -> aggregator onto app.state."""
    credentials = CredentialManager(
        http_client, refresh_buffer_seconds=settings.token_refresh_buffer_seconds,
    )
    transport = TransportClient(
        http_client, credentials, default_timeout_ms=settings.default_request_timeout_ms,
    )
    registry = AdapterRegistry(
        transport, partial(load_carrier_configs, settings.carrier_config_dir),
    )
    registry.refresh()
    app.state.credentials = credentials
    app.state.registry = registry
    app.state.aggregator = FanOutAggregator(registry)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    async with httpx.AsyncClient() as http_client:
        build_services(app, settings, http_client)
        logger.info(
            f"Carrier Gateway API started ({len(app.state.registry.available_codes())} carriers)",
        )
        yield
        logger.info("Carrier Gateway API shutting down")


app = FastAPI(
    title="Carrier Gateway API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Routes — explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(schedules.router)
app.include_router(tracking.router)
