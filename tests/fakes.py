"""Test Fakes — carrier configs, credentials and a recording vendor for MockTransport.

Invariants:
    - No test ever reaches a real carrier: every client runs on httpx.MockTransport
    - Credentials come from TEST_ENV, never from the process environment

Design Decisions:
    - Configs are plain dicts in the same camelCase shape as config/carriers/*.json,
      so tests also exercise CarrierConfig validation
"""

import json

import httpx

from carrier_gateway.schemas.carrier_config import CarrierConfig

TOKEN_URL = "https://auth.maersk.test/oauth/token"

CONFIGS = {
    "CMCG": {
        "name": "CMA CGM",
        "code": "CMCG",
        "baseUrl": "https://cma.test",
        "apis": {
            "schedule": {"endpoint": "/schedules", "version": "2.0.0", "standard": "DCSA"},
            "route": {"endpoint": "/routing"},
            "proforma": {"endpoint": "/proforma"},
            "voyage": {"endpoint": "/voyages"},
            "tracking": {"endpoint": "/events", "standard": "DCSA"},
        },
        "auth": {"type": "apikey", "headerName": "KeyId"},
    },
    "HMM": {
        "name": "HMM",
        "code": "HMM",
        "baseUrl": "https://hmm.test",
        "apis": {
            "schedule": {"endpoint": "/vessel", "method": "POST"},
            "portSchedule": {"endpoint": "/port", "method": "POST"},
            "ptpSchedule": {"endpoint": "/ptp", "method": "POST"},
            "tracking": {"endpoint": "/tracking"},
        },
        "auth": {"type": "apikey", "headerName": "x-Gateway-APIKey"},
    },
    "MAERSK": {
        "name": "Maersk",
        "code": "MAERSK",
        "baseUrl": "https://maersk.test",
        "apis": {
            "schedule": {"endpoint": "/vessel-schedules", "version": "3.0.0", "standard": "DCSA"},
            "portSchedule": {"endpoint": "/port-calls", "version": "1.0.0"},
            "pointToPoint": {"endpoint": "/ocean-products", "version": "1.0.0"},
            "tracking": {"endpoint": "/events", "version": "2.2.0", "standard": "DCSA"},
        },
        "auth": {
            "type": "oauth2",
            "tokenUrl": TOKEN_URL,
            "headerName": "Consumer-Key",
            "apiKeys": {"schedule": "MAERSK_CONSUMER_KEY"},
        },
    },
    "ZIM": {
        "name": "ZIM",
        "code": "ZIM",
        "baseUrl": "https://zim.test",
        "apis": {
            "schedule": {"endpoint": "/point-to-point"},
            "tracking": {"endpoint": "/events", "standard": "DCSA"},
        },
        "auth": {
            "type": "apikey",
            "headerName": "Ocp-Apim-Subscription-Key",
            "primaryKeys": {"schedule": "ZIM_SCHEDULE_PRIMARY_KEY"},
            "secondaryKeys": {"schedule": "ZIM_SCHEDULE_SECONDARY_KEY"},
        },
    },
}

TEST_ENV = {
    "CMCG_API_KEY": "cma-test-key",
    "HMM_API_KEY": "hmm-test-key",
    "MAERSK_CLIENT_ID": "maersk-client",
    "MAERSK_CLIENT_SECRET": "maersk-secret",
    "MAERSK_CONSUMER_KEY": "maersk-consumer",
    "ZIM_API_KEY": "zim-default-key",
    "ZIM_SCHEDULE_PRIMARY_KEY": "zim-primary-key",
}


def make_config(carrier: str, **overrides) -> CarrierConfig:
    return CarrierConfig.model_validate({**CONFIGS[carrier], **overrides})


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


def token_response(token: str = "token-1", expires_in: int = 3600) -> httpx.Response:
    return httpx.Response(
        200, json={"access_token": token, "token_type": "Bearer", "expires_in": expires_in},
    )


class FakeVendor:
    """MockTransport handler that records every request it answers."""

    def __init__(self, handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content) if request.content else None
