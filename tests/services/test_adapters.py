"""Sub-API Adapters — request shape per vendor endpoint and pre-I/O validation.

Tests cover:
    - Missing required parameters raise before any request is sent
    - HMM: POST body == query string, YYYYMMDD dates, resultCode failures
    - Maersk: API-Version header, date window, cargo extension header
    - CMA CGM: ranged route/proforma requests, voyage endpoint precedence, tracking by reference
    - ZIM: origin/destination fallbacks, comma-joined tracking filters
    - Payloads that fail canonical validation -> MalformedVendorPayload
    - Unparsable vendor dates -> MalformedTimestamp tagged with the carrier
"""

from datetime import date, timedelta

import pytest

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.errors import (
    CarrierConfigurationError, MalformedTimestamp, MalformedVendorPayload, MissingRequiredParameter,
    OutOfRangeDate, VendorHttpError,
)
from carrier_gateway.schemas.carrier_params import (
    CmaCgmScheduleParams, HmmScheduleParams, MaerskScheduleParams, ZimScheduleParams,
)
from carrier_gateway.schemas.schedule_query import TrackingQuery
from carrier_gateway.services import (
    cma_cgm_adapters as cma, hmm_adapters as hmm, maersk_adapters as maersk,
    zim_adapters as zim,
)
from tests.fakes import TOKEN_URL, FakeVendor, json_response, make_config, token_response

TODAY = date(2024, 6, 1)

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


def _maersk_handler(payload):
    def handler(request):
        if str(request.url) == TOKEN_URL:
            return token_response()
        return json_response(payload)
    return handler


# ─── HMM ────────────────────────────────────────────────────────

async def test_hmm_vessel_schedule_posts_vvd_code(make_transport):
    transport, vendor = make_transport(lambda r: json_response({
        "resultCode": "Success",
        "resultData": [{
            "vvdCode": "FP1V001E", "vesselName": "HMM OSLO", "portCode": "KRPUS",
            "arrival": {"arrivalDate": "20210817", "arrivalTime": "2100"},
        }],
    }))
    adapter = hmm.HmmVesselScheduleAdapter(make_config("HMM"), transport)
    [service] = await adapter.get_schedules(HmmScheduleParams(carrier_voyage_number="FP1V001E"))
    [request] = vendor.requests
    assert request.method == "POST"
    assert request.url.params["vvdCode"] == "FP1V001E"
    assert FakeVendor.body(request) == {"vvdCode": "FP1V001E"}
    assert request.headers["x-Gateway-APIKey"] == "hmm-test-key"
    assert service.vessel_schedules[0].transport_calls[0].timestamps[0].event_date_time == (
        "2021-08-17T21:00:00Z"
    )


async def test_hmm_missing_voyage_mentions_vvd_code(make_transport):
    transport, vendor = make_transport(lambda r: json_response({}))
    adapter = hmm.HmmVesselScheduleAdapter(make_config("HMM"), transport)
    with pytest.raises(MissingRequiredParameter, match="vvdCode") as exc:
        await adapter.get_schedules(HmmScheduleParams())
    assert exc.value.parameter == "carrierVoyageNumber"
    assert vendor.requests == []


async def test_hmm_failure_result_code_on_200(make_transport):
    transport, _ = make_transport(lambda r: json_response({
        "resultCode": "Fail", "resultMessage": "No data found",
    }))
    adapter = hmm.HmmVesselScheduleAdapter(make_config("HMM"), transport)
    with pytest.raises(VendorHttpError, match="Fail - No data found"):
        await adapter.get_schedules(HmmScheduleParams(carrier_voyage_number="X"))


async def test_hmm_error_body_rendered(make_transport):
    transport, _ = make_transport(lambda r: json_response({
        "errors": {"reason": "Invalid", "message": "vvdCode format"},
        "statusCode": 400, "statusCodeText": "Bad Request",
    }, 400))
    adapter = hmm.HmmVesselScheduleAdapter(make_config("HMM"), transport)
    with pytest.raises(VendorHttpError, match="400 Bad Request - Invalid: vvdCode format"):
        await adapter.get_schedules(HmmScheduleParams(carrier_voyage_number="X"))


async def test_hmm_port_schedule_sends_compact_dates(make_transport):
    transport, vendor = make_transport(lambda r: json_response({"resultCode": "Success"}))
    adapter = hmm.HmmPortScheduleAdapter(make_config("HMM"), transport)
    result = await adapter.get_schedules(HmmScheduleParams(
        un_location_code="KRPUS", start_date="2024-01-01", end_date="2024-01-31T00:00:00Z",
    ))
    assert result == []
    assert FakeVendor.body(vendor.requests[0]) == {
        "portCode": "KRPUS", "durationFrom": "20240101", "durationTo": "20240131",
    }


async def test_hmm_ptp_applies_defaults(make_transport):
    transport, vendor = make_transport(lambda r: json_response({"resultCode": "Success"}))
    adapter = hmm.HmmPointToPointAdapter(make_config("HMM"), transport)
    await adapter.get_schedules(HmmScheduleParams(
        from_location_code="KRPUS", to_location_code="USLAX", period_date="2024-01-15",
    ))
    body = FakeVendor.body(vendor.requests[0])
    assert vendor.requests[0].url.path == "/ptp"
    assert body["periodDate"] == "20240115"
    assert (body["weekTerm"], body["receiveTermCode"], body["deliveryTermCode"]) == ("2", "CY", "CY")
    assert (body["webSort"], body["webPriority"]) == ("D", "A")


async def test_hmm_tracking_needs_booking_and_equipment(make_transport):
    transport, vendor = make_transport(lambda r: json_response({}))
    adapter = hmm.HmmTrackingAdapter(make_config("HMM"), transport)
    query = TrackingQuery(carrier_booking_reference="BKG1")
    with pytest.raises(MissingRequiredParameter, match="equipmentReference"):
        await adapter.get_events(query)
    assert vendor.requests == []


# ─── Maersk ─────────────────────────────────────────────────────

async def test_maersk_vessel_schedule_rejects_91_days_back(make_transport):
    transport, vendor = make_transport(_maersk_handler([DCSA_SERVICE]))
    adapter = maersk.MaerskVesselScheduleAdapter(
        make_config("MAERSK"), transport, today=lambda: TODAY,
    )
    params = MaerskScheduleParams(start_date=(TODAY - timedelta(days=91)).isoformat())
    with pytest.raises(OutOfRangeDate):
        await adapter.get_schedules(params)
    assert vendor.requests == []


async def test_maersk_vessel_schedule_accepts_89_days_back(make_transport):
    transport, vendor = make_transport(_maersk_handler([DCSA_SERVICE]))
    adapter = maersk.MaerskVesselScheduleAdapter(
        make_config("MAERSK"), transport, today=lambda: TODAY,
    )
    start = (TODAY - timedelta(days=89)).isoformat()
    [service] = await adapter.get_schedules(MaerskScheduleParams(
        start_date=start, vessel_imo_number="9321483",
    ))
    assert service.carrier_service_code == "AE7"
    [request] = vendor.to("/vessel-schedules")
    assert request.headers["API-Version"] == "3"
    assert request.headers["Consumer-Key"] == "maersk-consumer"
    assert request.url.params["startDate"] == start
    assert request.url.params["vesselIMONumber"] == "9321483"


async def test_maersk_port_schedule_defaults_date_to_today(make_transport):
    transport, vendor = make_transport(_maersk_handler([]))
    adapter = maersk.MaerskPortScheduleAdapter(
        make_config("MAERSK"), transport, today=lambda: TODAY,
    )
    assert await adapter.get_schedules(MaerskScheduleParams(un_location_code="DKAAR")) == []
    [request] = vendor.to("/port-calls")
    assert request.url.params["date"] == "2024-06-01"


async def test_maersk_ptp_cargo_fields_add_extension_header(make_transport):
    transport, vendor = make_transport(_maersk_handler([]))
    adapter = maersk.MaerskPointToPointAdapter(make_config("MAERSK"), transport)
    await adapter.get_schedules(MaerskScheduleParams(
        place_of_receipt="CNSHA", place_of_delivery="NLRTM", cargo_type="DRY",
    ))
    [request] = vendor.to("/ocean-products")
    assert request.headers["Carrier-Extensions-Version"] == "1"
    assert request.url.params["receiptTypeAtOrigin"] == "CY"

    await adapter.get_schedules(MaerskScheduleParams(place_of_receipt="CNSHA", place_of_delivery="NLRTM"))
    assert "Carrier-Extensions-Version" not in vendor.to("/ocean-products")[1].headers


async def test_maersk_tracking_comma_joins_filters(make_transport):
    transport, vendor = make_transport(_maersk_handler({"events": []}))
    adapter = maersk.MaerskTrackingAdapter(make_config("MAERSK"), transport)
    query = TrackingQuery(
        equipment_reference="MSKU1234567", event_type=["EQUIPMENT", "TRANSPORT"],
    )
    assert await adapter.get_events(query) == []
    [request] = vendor.to("/events")
    assert request.url.params["eventType"] == "EQUIPMENT,TRANSPORT"
    assert request.url.params["equipmentReference"] == "MSKU1234567"


# ─── CMA CGM ────────────────────────────────────────────────────

async def test_cma_route_request_is_ranged(make_transport):
    transport, vendor = make_transport(lambda r: json_response([]))
    adapter = cma.CmaCgmRouteAdapter(make_config("CMCG"), transport)
    await adapter.get_schedules(CmaCgmScheduleParams(
        place_of_loading="FRLEH", place_of_discharge="SGSIN", number_of_teu=2,
    ))
    [request] = vendor.requests
    assert request.url.path == "/routing/routings"
    assert request.headers["range"] == "0-49"
    assert request.headers["KeyId"] == "cma-test-key"
    assert request.url.params["numberOfTEU"] == "2"


async def test_cma_proforma_by_line_validates_line_then_searches(make_transport):
    transport, vendor = make_transport(lambda r: json_response([{"code": "FAL1"}]))
    adapter = cma.CmaCgmProformaAdapter(make_config("CMCG"), transport)
    [service] = await adapter.get_schedules(CmaCgmScheduleParams(line_code="FAL"))
    assert [r.url.path for r in vendor.requests] == ["/proforma/lines/FAL", "/proforma/services"]
    assert vendor.requests[1].url.params["lineCode"] == "FAL"
    assert service.carrier_service_code == "FAL1"


async def test_cma_proforma_by_service_code(make_transport):
    transport, vendor = make_transport(lambda r: json_response({"code": "FAL1", "name": "FAL 1"}))
    adapter = cma.CmaCgmProformaAdapter(make_config("CMCG"), transport)
    [service] = await adapter.get_schedules(CmaCgmScheduleParams(carrier_service_code="FAL1"))
    assert vendor.requests[0].url.path == "/proforma/services/FAL1"
    assert service.carrier_service_name == "FAL 1"


async def test_cma_voyage_precedence_vessel_without_dates(make_transport):
    transport, vendor = make_transport(lambda r: json_response([]))
    adapter = cma.CmaCgmVoyageAdapter(make_config("CMCG"), transport)
    await adapter.get_schedules(CmaCgmScheduleParams(vessel_imo="9454436", shipcomp=["0001"]))
    assert vendor.requests[0].url.path == "/voyages/vessels/9454436/schedule"
    assert vendor.requests[0].url.params["shipcomp"] == "0001"


async def test_cma_voyage_without_any_selector(make_transport):
    transport, vendor = make_transport(lambda r: json_response([]))
    adapter = cma.CmaCgmVoyageAdapter(make_config("CMCG"), transport)
    with pytest.raises(MissingRequiredParameter) as exc:
        await adapter.get_schedules(CmaCgmScheduleParams(start_date="2024-01-01"))
    assert exc.value.parameter == "voyageCode"
    assert vendor.requests == []


async def test_cma_tracking_by_reference(make_transport):
    transport, vendor = make_transport(lambda r: json_response({"data": []}))
    adapter = cma.CmaCgmTrackingAdapter(make_config("CMCG"), transport)
    await adapter.get_events(TrackingQuery(transport_document_reference="BL 1", limit=10))
    [request] = vendor.requests
    assert request.url.raw_path.startswith(b"/events/BL%201")
    assert request.url.params["limit"] == "10"


async def test_cma_schedule_invalid_payload_is_malformed(make_transport):
    transport, _ = make_transport(lambda r: json_response([{"vesselSchedules": []}]))
    adapter = cma.CmaCgmCommercialScheduleAdapter(make_config("CMCG"), transport)
    with pytest.raises(MalformedVendorPayload) as exc:
        await adapter.get_schedules(CmaCgmScheduleParams())
    assert exc.value.context.carrier == "CMCG"


async def test_unconfigured_endpoint_is_configuration_error(make_transport):
    transport, _ = make_transport(lambda r: json_response([]))
    config = make_config("CMCG", apis={})
    adapter = cma.CmaCgmCommercialScheduleAdapter(config, transport)
    with pytest.raises(CarrierConfigurationError):
        await adapter.get_schedules(CmaCgmScheduleParams())
    assert adapter.endpoint_type == EndpointType.SCHEDULE


# ─── ZIM ────────────────────────────────────────────────────────

async def test_zim_requires_destination(make_transport):
    transport, vendor = make_transport(lambda r: json_response({}))
    adapter = zim.ZimPointToPointAdapter(make_config("ZIM"), transport)
    with pytest.raises(MissingRequiredParameter, match="destCode"):
        await adapter.get_schedules(ZimScheduleParams(origin_code="ILHFA"))
    assert vendor.requests == []


async def test_zim_origin_falls_back_to_place_of_receipt(make_transport):
    transport, vendor = make_transport(lambda r: json_response({"response": {"routes": []}}))
    adapter = zim.ZimPointToPointAdapter(make_config("ZIM"), transport)
    await adapter.get_schedules(ZimScheduleParams(
        place_of_receipt="ILHFA", dest_code="USNYC", start_date="2024-03-01",
    ))
    params = vendor.requests[0].url.params
    assert params["originCode"] == "ILHFA"
    assert params["fromDate"] == "2024-03-01"
    assert params["sortByDepartureOrArrival"] == "Departure"


async def test_zim_unparsable_leg_date_is_tagged_with_carrier(make_transport):
    transport, _ = make_transport(lambda r: json_response({"response": {"routes": [{
        "routeLegs": [{
            "line": "ZCA", "vesselName": "ZIM SAN DIEGO", "lloydsCode": "9471185",
            "voyage": "17/E", "arrivalPort": "USNYC",
            "arrivalDate": "2024-06-10T08:00:00", "departureDate": "garbage",
        }],
    }]}}))
    adapter = zim.ZimPointToPointAdapter(make_config("ZIM"), transport)
    with pytest.raises(MalformedTimestamp) as exc:
        await adapter.get_schedules(ZimScheduleParams(origin_code="ILHFA", dest_code="USNYC"))
    assert exc.value.value == "garbage"
    assert exc.value.context.carrier == "ZIM"
    assert exc.value.code == "MALFORMED_TIMESTAMP"
