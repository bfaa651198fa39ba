"""Credential Manager — OAuth2 token cache and API-key resolution per carrier.

Invariants:
    - OAuth2 tokens are cached under "{CODE}_oauth2" and reused until 5 minutes
      (refresh_buffer_seconds) before expiry
    - Refresh is single-flight: one asyncio.Lock per cache key, re-checked after
      acquiring, so N concurrent callers with an expired token cause one token POST
    - API-key order: primaryKeys[ep] -> secondaryKeys[ep] -> apiKeys[ep] -> {CODE}_API_KEY
    - Header name: headerNames[ep] -> headerName -> "KeyId"
    - Secrets are read from an injected mapping (default os.environ) and never logged

Design Decisions:
    - Instance state instead of process-wide class state: tests and the app
      lifespan each own their cache (reset() for forced re-auth)
    - Token grant goes through the shared httpx.AsyncClient; a response without
      expires_in is treated as already expiring (refreshed on the next call)
"""

import asyncio
import logging
import os
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

import httpx

from carrier_gateway.core.domain_types import AuthType, EndpointType
from carrier_gateway.core.errors import (
    AuthenticationError, CarrierConfigurationError, ErrorContext,
)
from carrier_gateway.schemas.carrier_config import CarrierConfig

logger = logging.getLogger(__name__)

DEFAULT_API_KEY_HEADER = "KeyId"


@dataclass(frozen=True)
class CachedToken:
    token: str
    token_type: str
    expires_at: float

    @property
    def header_value(self) -> str:
        return f"{self.token_type} {self.token}"


class CredentialManager:
    """Resolves the auth headers a carrier request needs."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        env: Mapping[str, str] | None = None,
        refresh_buffer_seconds: int = 300,
        clock: Callable[[], float] = time.time,
    ):
        self.http_client = http_client
        self.env = os.environ if env is None else env
        self.refresh_buffer_seconds = refresh_buffer_seconds
        self.clock = clock
        self._tokens: dict[str, CachedToken] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def auth_headers(
        self, config: CarrierConfig, endpoint_type: EndpointType,
    ) -> dict[str, str]:
        if config.auth.type == AuthType.OAUTH2:
            token = await self._oauth2_token(config)
            headers = {"Authorization": token.header_value}
            extra_key = self._supplementary_api_key(config, endpoint_type)
            if extra_key:
                headers[config.auth.header_name] = extra_key
            return headers
        header = (
            config.auth.header_names.get(endpoint_type)
            or config.auth.header_name
            or DEFAULT_API_KEY_HEADER
        )
        return {header: self.api_key(config, endpoint_type)}

    # ─── API Keys ───────────────────────────────────────────────

    def api_key(self, config: CarrierConfig, endpoint_type: EndpointType) -> str:
        code = config.code.upper()
        tried = [
            name for name in (
                config.auth.primary_keys.get(endpoint_type),
                config.auth.secondary_keys.get(endpoint_type),
                config.auth.api_keys.get(endpoint_type),
                f"{code}_API_KEY",
            )
            if name
        ]
        for name in tried:
            value = self.env.get(name)
            if value:
                return value
        raise AuthenticationError(
            f"API key not found for carrier {code}, endpoint {endpoint_type.value}. "
            f"Set one of: {', '.join(tried)}",
            code, tried=tried,
            context=ErrorContext(carrier=code, endpoint_type=endpoint_type.value),
        )

    def _supplementary_api_key(
        self, config: CarrierConfig, endpoint_type: EndpointType,
    ) -> str | None:
        """Some OAuth2 carriers (Maersk) also want a Consumer-Key header."""
        auth = config.auth
        if not (auth.header_name and auth.api_keys):
            return None
        name = (
            auth.api_keys.get(endpoint_type)
            or auth.api_keys.get(EndpointType.SCHEDULE)
            or auth.api_keys.get(EndpointType.TRACKING)
        )
        return self.env.get(name) if name else None

    # ─── OAuth2 ─────────────────────────────────────────────────

    @staticmethod
    def cache_key(carrier_code: str) -> str:
        return f"{carrier_code.upper()}_oauth2"

    def _fresh(self, key: str) -> CachedToken | None:
        cached = self._tokens.get(key)
        if cached and cached.expires_at > self.clock() + self.refresh_buffer_seconds:
            return cached
        return None

    async def _oauth2_token(self, config: CarrierConfig) -> CachedToken:
        key = self.cache_key(config.code)
        cached = self._fresh(key)
        if cached:
            return cached
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            cached = self._fresh(key)
            if cached:
                return cached
            token = await self._request_token(config)
            self._tokens[key] = token
            return token

    def _client_credentials(self, code: str) -> tuple[str, str]:
        client_id = self.env.get(f"{code}_CLIENT_ID") or self.env.get(f"{code}_CONSUMER_KEY")
        client_secret = (
            self.env.get(f"{code}_CLIENT_SECRET") or self.env.get(f"{code}_SECRET_KEY")
        )
        if not client_id or not client_secret:
            tried = [
                f"{code}_CLIENT_ID", f"{code}_CONSUMER_KEY",
                f"{code}_CLIENT_SECRET", f"{code}_SECRET_KEY",
            ]
            raise AuthenticationError(
                f"OAuth2 credentials not found for carrier {code}. "
                f"Set {code}_CLIENT_ID and {code}_CLIENT_SECRET "
                f"(or {code}_CONSUMER_KEY and {code}_SECRET_KEY)",
                code, tried=tried,
            )
        return client_id, client_secret

    async def _request_token(self, config: CarrierConfig) -> CachedToken:
        code = config.code.upper()
        if not config.auth.token_url:
            raise CarrierConfigurationError(
                f"OAuth2 token URL not configured for carrier {code}", code,
            )
        client_id, client_secret = self._client_credentials(code)
        form = {
            "grant_type": "client_credentials",
            "client_id": client_id,
            "client_secret": client_secret,
            "scope": " ".join(config.auth.scopes),
        }
        try:
            response = await self.http_client.post(config.auth.token_url, data=form)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise AuthenticationError(
                f"Failed to obtain OAuth2 token for {code}: "
                f"{e.response.status_code} {e.response.reason_phrase}",
                code,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise AuthenticationError(
                f"Failed to obtain OAuth2 token for {code}: {e}", code,
            ) from e

        if not isinstance(data, dict) or not data.get("access_token"):
            raise AuthenticationError(
                f"OAuth2 token response for {code} has no access_token", code,
            )
        logger.info(
            f"OAuth2 token issued for {code}", extra={"carrier": code},
        )
        return CachedToken(
            token=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            expires_at=self.clock() + float(data.get("expires_in") or 0),
        )

    # ─── Cache Control ──────────────────────────────────────────

    def invalidate(self, carrier_code: str) -> None:
        self._tokens.pop(self.cache_key(carrier_code), None)

    def reset(self) -> None:
        self._tokens.clear()
        self._locks.clear()
