"""Numeric and time conversion helpers for header values.

Each parser takes the semantic field name so failures can say which field
was wrong; the vendor is threaded through for the same reason.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import TYPE_CHECKING

from .constants import U64_MAX
from .errors import MalformedInteger, MalformedTimestamp

if TYPE_CHECKING:  # pragma: no cover
    from .vendors import Vendor

_FRACTIONAL_RE = re.compile(r"^(\d+)(?:\.(\d+))?$")
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h|d)")
_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0, "d": 86400.0}


def _is_digits(value: str) -> bool:
    # str.isdigit alone accepts superscripts and other unicode digits
    return value.isascii() and value.isdigit()


def parse_count(field: str, value: str, *, vendor: Vendor | None = None) -> int:
    """Parse a count header as an unsigned 64-bit integer."""
    raw = value.strip()
    if not _is_digits(raw):
        raise MalformedInteger(field, value, vendor=vendor)
    count = int(raw)
    if count > U64_MAX:
        raise MalformedInteger(field, value, vendor=vendor)
    return count


def parse_seconds(
    field: str,
    value: str,
    *,
    fractional: bool = False,
    vendor: Vendor | None = None,
) -> int:
    """Parse a relative seconds count, truncating fractions when allowed."""
    raw = value.strip()
    match = _FRACTIONAL_RE.match(raw)
    if match is None or (match.group(2) is not None and not fractional):
        raise MalformedTimestamp(field, value, vendor=vendor)
    seconds = int(match.group(1))
    if seconds > U64_MAX:
        raise MalformedTimestamp(field, value, vendor=vendor)
    return seconds


def from_unix_timestamp(
    field: str, seconds: int, raw: str, *, vendor: Vendor | None = None
) -> datetime:
    """Construct an aware UTC instant from Unix epoch seconds."""
    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise MalformedTimestamp(field, raw, vendor=vendor) from e


def parse_unix_timestamp(
    field: str,
    value: str,
    *,
    fractional: bool = False,
    vendor: Vendor | None = None,
) -> datetime:
    """Parse Unix epoch seconds into an aware UTC instant.

    Sub-second precision is only accepted when ``fractional`` is set and is
    truncated toward zero.
    """
    seconds = parse_seconds(field, value, fractional=fractional, vendor=vendor)
    return from_unix_timestamp(field, seconds, value, vendor=vendor)


def parse_http_date(
    field: str, value: str, *, vendor: Vendor | None = None
) -> datetime:
    """Parse an RFC 7231 HTTP-date (IMF-fixdate and obsolete forms)."""
    raw = value.strip()
    if not raw or _FRACTIONAL_RE.match(raw):
        raise MalformedTimestamp(field, value, vendor=vendor)
    try:
        parsed = parsedate_to_datetime(raw)
    except (TypeError, ValueError, IndexError) as e:
        raise MalformedTimestamp(field, value, vendor=vendor) from e
    if parsed is None:  # pragma: no cover - older interpreters return None
        raise MalformedTimestamp(field, value, vendor=vendor)
    return _as_utc(parsed)


def parse_iso8601(field: str, value: str, *, vendor: Vendor | None = None) -> datetime:
    """Parse an ISO 8601 date-time; naive values are taken as UTC."""
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as e:
        raise MalformedTimestamp(field, value, vendor=vendor) from e
    return _as_utc(parsed)


def is_http_date(value: str) -> bool:
    """Return True when the value parses as an HTTP-date."""
    try:
        parse_http_date("reset", value)
    except MalformedTimestamp:
        return False
    return True


def parse_duration_string(value: str | None) -> float | None:
    """Parse Go-style duration strings such as ``1m30s`` or ``500ms``.

    Returns the duration in seconds, or None when the whole string is not a
    sequence of ``<number><unit>`` parts.
    """
    if not value:
        return None
    raw = value.replace(" ", "").lower()
    if not raw:
        return None
    parts = _DURATION_PART_RE.findall(raw)
    if not parts or "".join(num + unit for num, unit in parts) != raw:
        return None
    return sum(float(num) * _DURATION_UNITS[unit] for num, unit in parts)


def seconds_from(delta: timedelta) -> int:
    """Whole seconds in a timedelta, truncated toward zero."""
    return int(delta.total_seconds())


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
