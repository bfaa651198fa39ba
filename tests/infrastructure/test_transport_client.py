"""Transport Client — vendor request building and response/error mapping.

Tests cover:
    - URL = baseUrl + path, auth + JSON headers merged, None params dropped
    - 401 on an OAuth2 carrier: exactly one refresh and one retry
    - Error statuses -> VendorHttpError; timeouts/connect errors -> VendorUnavailableError
    - HTML instead of JSON detected; empty body -> None; non-JSON -> MalformedVendorPayload
"""

import httpx
import pytest

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.errors import (
    MalformedVendorPayload, VendorHttpError, VendorUnavailableError,
)
from tests.fakes import TOKEN_URL, json_response, make_config, token_response


async def test_request_builds_url_headers_and_params(make_transport):
    transport, vendor = make_transport(lambda r: json_response({"ok": True}))
    payload = await transport.request(
        make_config("ZIM"), EndpointType.SCHEDULE, "GET", "/point-to-point",
        label="Schedule", params={"originCode": "ILHFA", "toDate": None, "list": []},
        headers={"API-Version": "2"},
    )
    assert payload == {"ok": True}
    [request] = vendor.requests
    assert str(request.url) == "https://zim.test/point-to-point?originCode=ILHFA"
    assert request.headers["Ocp-Apim-Subscription-Key"] == "zim-primary-key"
    assert request.headers["API-Version"] == "2"
    assert request.headers["Accept"] == "application/json"


async def test_401_on_oauth2_refreshes_and_retries_once(make_transport):
    tokens = iter(["stale", "fresh"])

    def handler(request):
        if str(request.url) == TOKEN_URL:
            return token_response(next(tokens))
        if request.headers["Authorization"] == "Bearer stale":
            return httpx.Response(401)
        return json_response([])

    transport, vendor = make_transport(handler)
    payload = await transport.request(
        make_config("MAERSK"), EndpointType.SCHEDULE, "GET", "/vessel-schedules", label="Schedule",
    )
    assert payload == []
    assert len(vendor.to("/oauth/token")) == 2
    assert len(vendor.to("/vessel-schedules")) == 2


async def test_second_401_is_not_retried_again(make_transport):
    def handler(request):
        if str(request.url) == TOKEN_URL:
            return token_response()
        return httpx.Response(401, json={"message": "nope"})

    transport, vendor = make_transport(handler)
    with pytest.raises(VendorHttpError) as exc:
        await transport.request(
            make_config("MAERSK"), EndpointType.SCHEDULE, "GET", "/vessel-schedules",
            label="Schedule",
        )
    assert exc.value.status_code == 401
    assert len(vendor.to("/vessel-schedules")) == 2


async def test_401_on_api_key_carrier_is_not_retried(make_transport):
    transport, vendor = make_transport(lambda r: httpx.Response(401))
    with pytest.raises(VendorHttpError):
        await transport.request(
            make_config("ZIM"), EndpointType.SCHEDULE, "GET", "/point-to-point", label="Schedule",
        )
    assert len(vendor.requests) == 1


async def test_error_status_uses_vendor_detail(make_transport):
    transport, _ = make_transport(lambda r: json_response({"reason": "bad"}, 400))
    with pytest.raises(VendorHttpError) as exc:
        await transport.request(
            make_config("HMM"), EndpointType.SCHEDULE, "POST", "/vessel", label="Schedule",
            error_detail=lambda body: f"rejected: {body['reason']}",
        )
    assert exc.value.message == "HMM Schedule API error: rejected: bad"
    assert exc.value.http_status == 502
    assert exc.value.body == {"reason": "bad"}


async def test_timeout_becomes_vendor_unavailable(make_transport):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    transport, _ = make_transport(handler)
    config = make_config("ZIM", features={"requestTimeout": 5000})
    with pytest.raises(VendorUnavailableError, match="timed out after 5000ms") as exc:
        await transport.request(
            config, EndpointType.SCHEDULE, "GET", "/point-to-point", label="Schedule",
        )
    assert exc.value.http_status == 504


async def test_connect_error_becomes_vendor_unavailable(make_transport):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    transport, _ = make_transport(handler)
    with pytest.raises(VendorUnavailableError, match="refused"):
        await transport.request(
            make_config("ZIM"), EndpointType.SCHEDULE, "GET", "/point-to-point", label="Schedule",
        )


async def test_html_body_detected(make_transport):
    html = httpx.Response(200, text="<!DOCTYPE html><html>login</html>",
                          headers={"content-type": "text/html"})
    transport, _ = make_transport(lambda r: html)
    with pytest.raises(VendorHttpError, match="HTML instead of JSON"):
        await transport.request(
            make_config("ZIM"), EndpointType.SCHEDULE, "GET", "/point-to-point", label="Schedule",
        )


async def test_empty_body_is_none_and_garbage_is_malformed(make_transport):
    transport, _ = make_transport(lambda r: httpx.Response(204))
    assert await transport.request(
        make_config("ZIM"), EndpointType.SCHEDULE, "GET", "/point-to-point", label="Schedule",
    ) is None

    transport, _ = make_transport(lambda r: httpx.Response(200, text="not json"))
    with pytest.raises(MalformedVendorPayload):
        await transport.request(
            make_config("ZIM"), EndpointType.SCHEDULE, "GET", "/point-to-point", label="Schedule",
        )
