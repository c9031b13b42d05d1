"""Reset time representation and the reset reconciliation rule.

A reset is either relative (seconds from now) or absolute (an instant). The
tag is kept so callers can tell a clock value, which is subject to skew
between client and server, from an offset, which is not.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import TYPE_CHECKING

from . import convert
from .constants import TIMESTAMP_THRESHOLD
from .errors import MalformedTimestamp

if TYPE_CHECKING:  # pragma: no cover
    from .vendors import Vendor


class ResetKind(Enum):
    """How a vendor encodes its reset header."""

    # Number of seconds until the limit is lifted
    SECONDS = "seconds"
    # Unix timestamp when the limit is lifted
    TIMESTAMP = "timestamp"
    # RFC 7231 IMF-fixdate (HTTP-date)
    IMF_FIXDATE = "imf_fixdate"
    # ISO 8601 date-time
    ISO8601 = "iso8601"
    # Unknown encoding, decided from the value's shape
    AUTO = "auto"


LATEST_INSTANT = datetime.max.replace(tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current instant, timezone aware in UTC."""
    return datetime.now(timezone.utc)


class ResetTime:
    """Base of the two reset variants, :class:`ResetSeconds` and :class:`ResetDateTime`."""

    __slots__ = ()

    @property
    def is_absolute(self) -> bool:
        raise NotImplementedError

    def instant(self, now: datetime | None = None) -> datetime:
        """Absolute instant of the reset, anchored at ``now`` for relative values."""
        raise NotImplementedError

    def duration(self, now: datetime | None = None) -> timedelta:
        """Time left until the reset; never negative."""
        remaining = self.instant(now) - (now or utc_now())
        return max(remaining, timedelta(0))

    def seconds(self, now: datetime | None = None) -> int:
        """Whole seconds left until the reset; never negative."""
        return convert.seconds_from(self.duration(now))

    @staticmethod
    def parse(
        field: str,
        value: str,
        kind: ResetKind,
        *,
        fractional: bool = False,
        vendor: Vendor | None = None,
    ) -> ResetTime:
        """Parse a reset header value according to ``kind``."""
        if kind is ResetKind.SECONDS:
            return ResetSeconds(
                convert.parse_seconds(field, value, fractional=fractional, vendor=vendor)
            )
        if kind is ResetKind.TIMESTAMP:
            return ResetDateTime(
                convert.parse_unix_timestamp(
                    field, value, fractional=fractional, vendor=vendor
                )
            )
        if kind is ResetKind.IMF_FIXDATE:
            return ResetDateTime(convert.parse_http_date(field, value, vendor=vendor))
        if kind is ResetKind.ISO8601:
            return ResetDateTime(convert.parse_iso8601(field, value, vendor=vendor))
        return _parse_auto(field, value, vendor=vendor)


@dataclass(frozen=True, slots=True)
class ResetSeconds(ResetTime):
    """Number of seconds until the rate limit is lifted."""

    value: int

    @property
    def is_absolute(self) -> bool:
        return False

    def instant(self, now: datetime | None = None) -> datetime:
        try:
            return (now or utc_now()) + timedelta(seconds=self.value)
        except OverflowError:
            # Past the datetime range: the latest representable instant
            return LATEST_INSTANT


@dataclass(frozen=True, slots=True)
class ResetDateTime(ResetTime):
    """Instant at which the rate limit is lifted (timezone aware, UTC)."""

    value: datetime

    @property
    def is_absolute(self) -> bool:
        return True

    def instant(self, now: datetime | None = None) -> datetime:
        return self.value

    @property
    def timestamp(self) -> int:
        return int(self.value.timestamp())


def _parse_auto(field: str, value: str, *, vendor: Vendor | None) -> ResetTime:
    # Numbers: large ones are epoch seconds, small ones are offsets.
    try:
        seconds = convert.parse_seconds(field, value, fractional=True, vendor=vendor)
    except MalformedTimestamp:
        pass
    else:
        if seconds >= TIMESTAMP_THRESHOLD:
            return ResetDateTime(
                convert.from_unix_timestamp(field, seconds, value, vendor=vendor)
            )
        return ResetSeconds(seconds)

    duration = convert.parse_duration_string(value)
    if duration is not None:
        return ResetSeconds(int(duration))

    try:
        return ResetDateTime(convert.parse_http_date(field, value, vendor=vendor))
    except MalformedTimestamp:
        pass
    return ResetDateTime(convert.parse_iso8601(field, value, vendor=vendor))


def parse_retry_after(value: str, *, vendor: Vendor | None = None) -> ResetTime:
    """Parse ``Retry-After``: delay-seconds or an HTTP-date."""
    raw = value.strip()
    if raw.isascii() and raw.isdigit():
        return ResetSeconds(convert.parse_seconds("retry-after", raw, vendor=vendor))
    return ResetDateTime(convert.parse_http_date("retry-after", raw, vendor=vendor))


def resolve_reset(
    vendor_reset: ResetTime | None,
    retry_after: ResetTime | None,
    now: datetime,
) -> ResetTime | None:
    """Pick the reset to honour when a vendor header and Retry-After compete.

    The later of the two instants wins so a client never retries before
    either header allows it. Ties keep the vendor value. The winner is
    returned with its original tag.
    """
    if vendor_reset is None:
        return retry_after
    if retry_after is None:
        return vendor_reset
    if retry_after.instant(now) > vendor_reset.instant(now):
        return retry_after
    return vendor_reset


__all__ = [
    "ResetKind",
    "ResetTime",
    "ResetSeconds",
    "ResetDateTime",
    "parse_retry_after",
    "resolve_reset",
    "utc_now",
    "LATEST_INSTANT",
]
