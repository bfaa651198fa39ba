"""Date/Time Normalization — vendor date formats to ISO-8601 with offset.

Invariants:
    - HMM YYYYMMDD + HHMM becomes YYYY-MM-DDTHH:MM:00Z (UTC, no timezone inference)
    - A parsable ISO datetime passes through; 'Z' is appended only when no offset is present
    - Unparsable values raise MalformedTimestamp — a timestamp is never fabricated
    - Date-window checks compare at date granularity against an injectable "today"

Design Decisions:
    - Pure functions over a helper class: every mapper imports only what it uses
"""

import re
from datetime import date, datetime, timedelta, timezone

from carrier_gateway.core.errors import MalformedTimestamp, OutOfRangeDate

_OFFSET_SUFFIX = re.compile(r"(Z|[+-]\d{2}:?\d{2})$")


def parse_iso_date(value: str) -> datetime | None:
    """Parse YYYY-MM-DD or a full ISO datetime; None when unparsable.

    Naive results are taken as UTC so any two parsed values compare safely.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (ValueError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def combine_hmm_datetime(date_part: str, time_part: str, carrier: str = "HMM") -> str:
    """HMM '20210817' + '2100' -> '2021-08-17T21:00:00Z'."""
    if (
        len(date_part) != 8 or len(time_part) != 4
        or not date_part.isdigit() or not time_part.isdigit()
    ):
        raise MalformedTimestamp(f"{date_part} {time_part}", carrier)
    year, month, day = date_part[0:4], date_part[4:6], date_part[6:8]
    hour, minute = time_part[0:2], time_part[2:4]
    try:
        datetime(int(year), int(month), int(day), int(hour), int(minute))
    except ValueError as e:
        raise MalformedTimestamp(f"{date_part} {time_part}", carrier) from e
    return f"{year}-{month}-{day}T{hour}:{minute}:00Z"


def normalize_iso_datetime(value: str, carrier: str | None = None) -> str:
    """Normalize any vendor date/time string to ISO-8601 with an offset."""
    if not value or not value.strip():
        raise MalformedTimestamp(str(value), carrier)
    text = value.strip()
    if "T" in text:
        if parse_iso_date(text) is None:
            raise MalformedTimestamp(text, carrier)
        return text if _OFFSET_SUFFIX.search(text) else f"{text}Z"
    if text.isdigit() and len(text) == 12:
        return combine_hmm_datetime(text[:8], text[8:], carrier or "HMM")
    if text.isdigit() and len(text) == 8:
        return combine_hmm_datetime(text, "0000", carrier or "HMM")
    parsed = parse_iso_date(text)
    if parsed is None:
        raise MalformedTimestamp(text, carrier)
    return parsed.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def hmm_compact_date(value: str) -> str:
    """'2024-01-15T00:00:00Z' -> '20240115' (HMM request format)."""
    return re.sub(r"[-T:]", "", value)[:8]


# ─── Date Windows ───────────────────────────────────────────────

def check_date_window(
    parameter: str,
    value: str,
    past_days: int,
    future_days: int,
    today: date | None = None,
) -> None:
    """Raise OutOfRangeDate unless value lies in [today-past, today+future]."""
    today = today or date.today()
    earliest = today - timedelta(days=past_days)
    latest = today + timedelta(days=future_days)
    parsed = parse_iso_date(value)
    if parsed is None or not (earliest <= parsed.date() <= latest):
        raise OutOfRangeDate(
            parameter, value, earliest.isoformat(), latest.isoformat(),
        )
