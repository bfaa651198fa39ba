"""Carrier Filter — public carrier ids to carrier codes.

Invariants:
    - Ids are case-insensitive; "all" expands to every available carrier
    - Unknown id -> InvalidCarrierError (400), before any fan-out
    - Known id whose carrier has no router -> CarrierNotAvailableError (503)
    - Empty result -> NoCarriersAvailableError (400)
"""

from collections.abc import Collection

from carrier_gateway.core.domain_types import CarrierCode
from carrier_gateway.core.errors import (
    CarrierNotAvailableError, InvalidCarrierError, NoCarriersAvailableError,
)

ALL_CARRIERS = "all"
CARRIER_IDS: dict[str, CarrierCode] = {
    "cma-cgm": CarrierCode.CMA_CGM,
    "hmm": CarrierCode.HMM,
    "zim": CarrierCode.ZIM,
    "maersk": CarrierCode.MAERSK,
}
SUPPORTED_CARRIER_IDS = [*CARRIER_IDS, ALL_CARRIERS]


def resolve_carrier_codes(carrier_id: str | None, available: Collection[str]) -> list[str]:
    """'all' -> available codes; 'hmm' -> ['HMM'] if HMM is available."""
    normalized = (carrier_id or ALL_CARRIERS).strip().lower()
    if normalized == ALL_CARRIERS:
        codes = list(available)
    elif normalized in CARRIER_IDS:
        code = CARRIER_IDS[normalized].value
        if code not in available:
            raise CarrierNotAvailableError(code)
        codes = [code]
    else:
        raise InvalidCarrierError(carrier_id, SUPPORTED_CARRIER_IDS)
    if not codes:
        raise NoCarriersAvailableError()
    return codes
