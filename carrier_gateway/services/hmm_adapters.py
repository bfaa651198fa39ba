"""HMM Sub-API Adapters — Vessel, Port and Point-to-Point schedules, Tracking.

Invariants:
    - Schedule sub-APIs are POST with the same fields in JSON body AND query string
    - Dates go out as YYYYMMDD
    - resultCode other than "Success" -> VendorHttpError, even on HTTP 200
    - Error bodies {errors: {reason, message}, statusCode, statusCodeText} are
      rendered into the error message
    - Tracking requires BOTH carrierBookingReference and equipmentReference
"""

from typing import Any

from carrier_gateway.core.domain_types import EndpointType
from carrier_gateway.core.errors import ErrorContext, VendorHttpError
from carrier_gateway.core.map_hmm_schedule import map_hmm_point_to_point, map_hmm_schedule
from carrier_gateway.core.map_hmm_tracking import map_hmm_tracking
from carrier_gateway.core.normalize_datetime import hmm_compact_date
from carrier_gateway.schemas.carrier_params import HmmScheduleParams
from carrier_gateway.schemas.schedule import ServiceSchedule
from carrier_gateway.schemas.schedule_query import TrackingQuery
from carrier_gateway.schemas.tracking import TrackingEvent
from carrier_gateway.services.adapter_base import SubApiAdapter

SUCCESS = "Success"


def describe_hmm_error(body: Any) -> str | None:
    """'{errors:{reason,message}, statusCode, statusCodeText}' -> one line."""
    if not isinstance(body, dict) or not isinstance(body.get("errors"), dict):
        return None
    errors = body["errors"]
    status = " ".join(
        str(part) for part in (body.get("statusCode"), body.get("statusCodeText")) if part
    )
    reason = f"{errors.get('reason') or 'Unknown error'}: {errors.get('message') or ''}".rstrip()
    return f"{status} - {reason}" if status else reason


class _HmmScheduleAdapter(SubApiAdapter):
    """POST body == query string; checks resultCode."""

    async def post(self, fields: dict[str, Any]) -> dict:
        payload = await self.fetch(
            method="POST", params=fields, json=fields, error_detail=describe_hmm_error,
        )
        payload = payload or {}
        result_code = payload.get("resultCode")
        if result_code and result_code != SUCCESS:
            raise VendorHttpError(
                self.carrier, self.label, None, result_code, payload,
                detail=f"{result_code} - {payload.get('resultMessage') or 'Unknown error'}",
                context=ErrorContext(carrier=self.carrier, endpoint_type=self.endpoint_type.value),
            )
        return payload


class HmmVesselScheduleAdapter(_HmmScheduleAdapter):
    endpoint_type = EndpointType.SCHEDULE
    label = "Schedule"

    async def get_schedules(self, params: HmmScheduleParams) -> list[ServiceSchedule]:
        vvd_code = self.require(params.carrier_voyage_number, "carrierVoyageNumber", "vvdCode")
        payload = await self.post({"vvdCode": vvd_code})
        return self.map(map_hmm_schedule, payload, params.carrier_service_code)


class HmmPortScheduleAdapter(_HmmScheduleAdapter):
    endpoint_type = EndpointType.PORT_SCHEDULE
    label = "Port Schedule"

    async def get_schedules(self, params: HmmScheduleParams) -> list[ServiceSchedule]:
        port_code = self.require(params.un_location_code, "UNLocationCode", "portCode")
        start = self.require(params.start_date, "startDate", "durationFrom")
        end = self.require(params.end_date, "endDate", "durationTo")
        fields = {
            "portCode": port_code,
            "durationFrom": hmm_compact_date(start),
            "durationTo": hmm_compact_date(end),
        }
        if params.vessel_operator_carrier_code:
            # 1 = including feeder vessels, 2 = mother vessels only
            fields["optionVessel"] = params.vessel_operator_carrier_code
        payload = await self.post(fields)
        return self.map(map_hmm_schedule, payload, params.carrier_service_code)


class HmmPointToPointAdapter(_HmmScheduleAdapter):
    endpoint_type = EndpointType.PTP_SCHEDULE
    label = "PTP Schedule"

    async def get_schedules(self, params: HmmScheduleParams) -> list[ServiceSchedule]:
        from_location = self.require(
            params.from_location_code or params.un_location_code, "fromLocationCode",
        )
        to_location = self.require(params.to_location_code, "toLocationCode")
        period = self.require(params.period_date or params.start_date, "periodDate")
        payload = await self.post({
            "fromLocationCode": from_location,
            "receiveTermCode": params.receive_term_code or "CY",
            "toLocationCode": to_location,
            "deliveryTermCode": params.delivery_term_code or "CY",
            "periodDate": hmm_compact_date(period),
            "weekTerm": params.week_term or "2",
            "webSort": params.web_sort or "D",
            "webPriority": params.web_priority or "A",
        })
        return self.map(map_hmm_point_to_point, payload)


class HmmTrackingAdapter(SubApiAdapter):
    endpoint_type = EndpointType.TRACKING
    label = "Tracking"

    async def get_events(self, query: TrackingQuery) -> list[TrackingEvent]:
        booking = self.require(query.carrier_booking_reference, "carrierBookingReference")
        equipment = self.require(query.equipment_reference, "equipmentReference")
        payload = await self.fetch(
            params={"carrierBookingReference": booking, "equipmentReference": equipment},
            error_detail=describe_hmm_error,
        )
        return self.map(map_hmm_tracking, payload or {})
