"""Root conftest — fake vendor transport shared by every test package."""

import httpx
import pytest

from carrier_gateway.infrastructure.credential_manager import CredentialManager
from carrier_gateway.infrastructure.transport_client import TransportClient
from tests.fakes import TEST_ENV, FakeVendor


@pytest.fixture
async def make_transport():
    """factory(handler, env=None, clock=None) -> (TransportClient, FakeVendor)."""
    clients: list[httpx.AsyncClient] = []

    def factory(handler, env=None, clock=None):
        vendor = FakeVendor(handler)
        client = httpx.AsyncClient(transport=httpx.MockTransport(vendor))
        clients.append(client)
        kwargs = {"clock": clock} if clock else {}
        credentials = CredentialManager(
            client, env=TEST_ENV if env is None else env, **kwargs,
        )
        return TransportClient(client, credentials), vendor

    yield factory
    for client in clients:
        await client.aclose()
