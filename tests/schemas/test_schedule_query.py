"""Query Schemas — boundary validation of schedule and tracking parameters.

Tests cover:
    - IMO / UN/LOCODE shape checks, UN/LOCODE upper-casing
    - startDate <= endDate, ISO-8601 only, limit 1..1000
    - Tracking needs at least one reference; code lists accept CSV and repeats
    - to_params() keeps only fields the caller set
"""

import pytest
from pydantic import ValidationError

from carrier_gateway.schemas.carrier_params import CmaCgmScheduleParams, ZimScheduleParams
from carrier_gateway.schemas.schedule_query import ScheduleQuery, TrackingQuery


def test_query_accepts_public_camel_case_names():
    query = ScheduleQuery.model_validate({
        "vesselIMONumber": "9321483", "UNLocationCode": "nlrtm", "startDate": "2024-01-01",
    })
    assert query.vessel_imo_number == "9321483"
    assert query.un_location_code == "NLRTM"
    assert query.carrier == "all"


@pytest.mark.parametrize("fields", [
    {"vesselIMONumber": "932148"},
    {"UNLocationCode": "NL1"},
    {"startDate": "01/02/2024"},
    {"limit": 0},
    {"limit": 1001},
    {"startDate": "2024-02-01", "endDate": "2024-01-01"},
])
def test_invalid_schedule_queries_rejected(fields):
    with pytest.raises(ValidationError):
        ScheduleQuery.model_validate(fields)


def test_equal_start_and_end_dates_allowed():
    ScheduleQuery.model_validate({"startDate": "2024-01-01", "endDate": "2024-01-01T00:00:00Z"})


def test_to_params_drops_unset_fields_and_carrier():
    query = ScheduleQuery.model_validate({"carrier": "zim", "originCode": "ILHFA"})
    assert query.to_params() == {"origin_code": "ILHFA"}


def test_projection_into_carrier_params():
    query = ScheduleQuery.model_validate({
        "placeOfReceipt": "ILHFA", "placeOfDelivery": "USNYC", "from": "2024-01-01",
    })
    zim = ZimScheduleParams.model_validate(query.to_params())
    assert zim.origin == "ILHFA"
    assert zim.destination == "USNYC"
    cma = CmaCgmScheduleParams.model_validate(query.to_params())
    assert cma.range_from == "2024-01-01"
    assert cma.wire("from_date") == {"from": "2024-01-01"}


def test_tracking_requires_a_reference():
    with pytest.raises(ValidationError, match="carrierBookingReference"):
        TrackingQuery.model_validate({"eventType": "EQUIPMENT"})
    TrackingQuery.model_validate({"transportCallID": "TC1"})


def test_tracking_code_lists_accept_csv_and_repeats():
    query = TrackingQuery.model_validate({
        "equipmentReference": "MSKU1234567",
        "eventType": ["equipment,transport", "SHIPMENT"],
    })
    assert query.event_type == ["EQUIPMENT", "TRANSPORT", "SHIPMENT"]


def test_primary_reference_order():
    query = TrackingQuery.model_validate({
        "carrierBookingReference": "BKG1", "equipmentReference": "EQ1",
    })
    assert query.primary_reference == "EQ1"
    query = TrackingQuery.model_validate({
        "carrierBookingReference": "BKG1", "transportDocumentReference": "BL1",
    })
    assert query.primary_reference == "BL1"
