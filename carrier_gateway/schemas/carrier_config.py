"""Carrier Configuration — validated shape of config/carriers/*.json.

Invariants:
    - name, code and baseUrl are required; everything else has a safe default
    - auth.type decides which credential fields are consulted
    - Per-endpoint maps (headerNames, apiKeys, primaryKeys, secondaryKeys) hold
      environment variable NAMES, never secret values

Design Decisions:
    - JSON keys stay camelCase (shared format with ops tooling); attributes are snake_case
    - extra="ignore": unknown keys in a file never break startup
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from carrier_gateway.core.domain_types import ApiStandard, AuthType, EndpointType


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )


class ApiEndpointConfig(_ConfigModel):
    endpoint: str
    version: str | None = None
    standard: ApiStandard = ApiStandard.PROPRIETARY
    method: str = "GET"
    supports_pagination: bool = False

    @property
    def major_version(self) -> str | None:
        """Major component of version, as sent in API-Version headers."""
        if not self.version:
            return None
        return self.version.split(".")[0]


class AuthConfig(_ConfigModel):
    type: AuthType
    token_url: str | None = None
    scopes: list[str] = Field(default_factory=list)
    header_name: str | None = None
    header_names: dict[EndpointType, str] = Field(default_factory=dict)
    api_keys: dict[EndpointType, str] = Field(default_factory=dict)
    primary_keys: dict[EndpointType, str] = Field(default_factory=dict)
    secondary_keys: dict[EndpointType, str] = Field(default_factory=dict)


class FeaturesConfig(_ConfigModel):
    supports_pagination: bool = False
    max_limit: int | None = None
    default_limit: int | None = None
    request_timeout: int | None = None  # milliseconds


class CarrierConfig(_ConfigModel):
    """One carrier's endpoints, credentials and feature flags."""
    name: str = Field(min_length=1)
    code: str = Field(min_length=1)
    base_url: str = Field(min_length=1)
    apis: dict[EndpointType, ApiEndpointConfig] = Field(default_factory=dict)
    auth: AuthConfig
    features: FeaturesConfig = Field(default_factory=FeaturesConfig)
    enabled: bool = True

    def api(self, endpoint_type: EndpointType) -> ApiEndpointConfig | None:
        return self.apis.get(endpoint_type)
