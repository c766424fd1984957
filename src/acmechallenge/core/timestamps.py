"""ACME timestamp parsing and formatting (RFC 3339).

ACME servers send timestamps such as ``2024-01-01T00:00:00Z`` or
``2024-01-01T00:00:00.123456789+02:00``.  Fractions longer than
microsecond precision are truncated, and a missing offset is read as
UTC.  All parsed values are timezone-aware and normalised to UTC.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, timezone

from acmechallenge.errors import AcmeProtocolError

_TIMESTAMP_RE = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"[Tt ](?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:[.,](?P<fraction>\d+))?"
    r"(?P<zone>[Zz]|[+-]\d{2}:?\d{2})?$",
)

_MICROSECOND_DIGITS = 6


def _parse_zone(zone: str | None) -> timezone:
    if zone is None or zone in ("Z", "z"):
        return UTC
    sign = -1 if zone[0] == "-" else 1
    digits = zone[1:].replace(":", "")
    offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * offset)


def parse_timestamp(value: str) -> datetime:
    """Parse an ACME timestamp string into an aware UTC ``datetime``.

    Raises
    ------
    AcmeProtocolError
        If *value* is not a string in the expected format.

    """
    if not isinstance(value, str):
        msg = f"Invalid timestamp: {value!r}"
        raise AcmeProtocolError(msg)

    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        msg = f"Invalid timestamp: {value!r}"
        raise AcmeProtocolError(msg)

    fraction = match.group("fraction") or "0"
    microsecond = int(fraction[:_MICROSECOND_DIGITS].ljust(_MICROSECOND_DIGITS, "0"))

    try:
        parsed = datetime(
            int(match.group("year")),
            int(match.group("month")),
            int(match.group("day")),
            int(match.group("hour")),
            int(match.group("minute")),
            int(match.group("second")),
            microsecond,
            tzinfo=_parse_zone(match.group("zone")),
        )
    except ValueError as exc:
        msg = f"Invalid timestamp: {value!r}"
        raise AcmeProtocolError(msg) from exc

    return parsed.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    """Format *value* as an RFC 3339 UTC timestamp with a ``Z`` suffix.

    Naive datetimes are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    value = value.astimezone(UTC)
    if value.microsecond:
        return value.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")
