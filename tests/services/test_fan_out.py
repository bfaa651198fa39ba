"""Fan-Out Aggregator — concurrent carrier calls with partial-failure envelopes.

Tests cover:
    - Records tagged with carrier and carrierName
    - One failing carrier never hides a sibling's results
    - Three carriers answering a voyage query while ZIM fails -> 3 succeeded, 1 failed
    - All carriers failing -> AllCarriersFailedError with every per-carrier error
    - Unexpected exceptions are reported as that carrier's failure
"""

import pytest

from carrier_gateway.core.errors import AllCarriersFailedError
from carrier_gateway.schemas.schedule_query import ScheduleQuery, TrackingQuery
from carrier_gateway.services.adapter_registry import AdapterRegistry
from carrier_gateway.services.fan_out import FanOutAggregator
from tests.fakes import CONFIGS, TOKEN_URL, json_response, make_config, token_response

DCSA_SERVICE = {
    "carrierServiceCode": "AE7",
    "vesselSchedules": [{
        "vessel": {"vesselIMONumber": "9321483", "name": "MAERSK ESSEN"},
        "transportCalls": [{
            "carrierImportVoyageNumber": "402W",
            "timestamps": [{"eventTypeCode": "ARRI", "eventDateTime": "2024-06-10T08:00:00Z"}],
        }],
    }],
}

HMM_VESSEL = {
    "resultCode": "Success",
    "resultData": [{
        "vvdCode": "FP1V001E", "vesselName": "HMM OSLO", "portCode": "KRPUS",
        "arrival": {"arrivalDate": "20240610", "arrivalTime": "0800"},
    }],
}

CMA_VOYAGE = {
    "code": "FP1V001E",
    "service": {"code": "FAL1"},
    "vessel": {"imo": "9454436", "name": "CMA CGM MARCO POLO"},
    "calls": [{"location": {"internalCode": "FRLEH"}, "berthDate": {"utc": "2024-06-12T06:00:00Z"}}],
}


def vendor_handler(request):
    if str(request.url) == TOKEN_URL:
        return token_response()
    if request.url.path == "/events":
        return json_response({"events": []})
    if request.url.host == "hmm.test" and request.url.path == "/vessel":
        return json_response(HMM_VESSEL)
    if request.url.path.startswith("/voyages/commercialVoyages/"):
        return json_response(CMA_VOYAGE)
    if request.url.host in ("cma.test", "maersk.test"):
        return json_response([DCSA_SERVICE])
    return json_response({}, 500)


@pytest.fixture
def aggregator(make_transport):
    transport, _ = make_transport(vendor_handler)
    registry = AdapterRegistry(transport, lambda: {code: make_config(code) for code in CONFIGS})
    registry.refresh()
    return FanOutAggregator(registry)


async def test_partial_failure_keeps_successful_carriers(aggregator):
    # HMM lacks a voyage number, ZIM lacks origin and destination
    result = await aggregator.schedules(ScheduleQuery(), ["CMCG", "HMM", "MAERSK", "ZIM"])
    assert result.meta == {
        "total": 2, "carriersQueried": 4, "carriersSucceeded": 2, "carriersFailed": 2,
    }
    assert {(r["carrier"], r["carrierName"]) for r in result.data} == {
        ("CMCG", "CMA CGM"), ("MAERSK", "Maersk"),
    }
    assert [e["carrier"] for e in result.errors] == ["HMM", "ZIM"]
    assert "destCode" not in result.errors[1]["error"]
    assert "originCode" in result.errors[1]["error"]


async def test_zim_missing_destination_is_one_failure(aggregator):
    result = await aggregator.schedules(ScheduleQuery(origin_code="ILHFA"), ["CMCG", "ZIM"])
    assert result.meta["carriersFailed"] == 1
    assert "destCode" in result.errors[0]["error"]
    assert result.data[0]["carrierServiceCode"] == "AE7"


async def test_all_carriers_failed(aggregator):
    with pytest.raises(AllCarriersFailedError) as exc:
        await aggregator.schedules(ScheduleQuery(), ["HMM", "ZIM"])
    assert exc.value.http_status == 503
    body = exc.value.to_response()["error"]
    assert [e["carrier"] for e in body["errors"]] == ["HMM", "ZIM"]


async def test_unavailable_code_counts_as_failure(aggregator):
    result = await aggregator.schedules(ScheduleQuery(), ["CMCG", "MSC"])
    assert result.errors == [{"carrier": "MSC", "error": "Carrier MSC is not available"}]


async def test_tracking_fan_out(aggregator):
    query = TrackingQuery(equipment_reference="MSKU1234567")
    result = await aggregator.tracking(query, ["MAERSK", "ZIM"])
    assert result.meta["carriersSucceeded"] == 2
    assert result.data == []


class _ExplodingRouter:
    code = "BOOM"
    name = "Boom Lines"

    async def get_schedules(self, query):
        raise RuntimeError("socket closed")


class _StubRegistry:
    def __init__(self, *routers):
        self.routers = {r.code: r for r in routers}

    def get(self, carrier):
        return self.routers[carrier]

    def available_codes(self):
        return list(self.routers)


async def test_unexpected_exception_reported_per_carrier(aggregator):
    good = aggregator.registry.get("CMCG")
    stub = FanOutAggregator(_StubRegistry(_ExplodingRouter(), good))
    result = await stub.schedules(ScheduleQuery(), ["BOOM", "CMCG"])
    assert result.errors == [{"carrier": "BOOM", "error": "socket closed"}]
    assert result.meta["carriersSucceeded"] == 1


async def test_three_carriers_succeed_while_zim_fails(aggregator):
    query = ScheduleQuery(carrier_voyage_number="FP1V001E")
    result = await aggregator.schedules(query, ["CMCG", "HMM", "MAERSK", "ZIM"])
    assert result.meta == {
        "total": 3, "carriersQueried": 4, "carriersSucceeded": 3, "carriersFailed": 1,
    }
    assert [r["carrier"] for r in result.data] == ["CMCG", "HMM", "MAERSK"]
    assert result.data[1]["vesselSchedules"][0]["transportCalls"][0]["timestamps"][0][
        "eventDateTime"
    ] == "2024-06-10T08:00:00Z"
    assert [e["carrier"] for e in result.errors] == ["ZIM"]
