"""Single entry point: detect the vendor, then extract."""

from __future__ import annotations

import logging
from datetime import datetime

from .errors import ParseError
from .extract import extract
from .header_set import HeaderSet, HeaderSource
from .logs.logger import logger
from .models import RateLimit
from .vendors import Vendor, detect


def parse(headers: HeaderSource | None, *, now: datetime | None = None) -> RateLimit:
    """Parse rate limit information from response headers.

    ``headers`` may be a HeaderSet, a mapping, an iterable of name/value
    pairs (aiohttp's ``resp.headers.items()``) or a raw ``Name: value`` text
    blob. Absence of rate limit headers is not an error; it yields
    ``RateLimit.none()``.

    Raises:
        ParseError: rate limit headers are present but cannot be understood.
    """
    header_set = HeaderSet.coerce(headers)
    vendor = detect(header_set)
    if vendor is not Vendor.UNKNOWN:
        logger.log_event("detect", "vendor", vendor=vendor.value)
    try:
        return extract(vendor, header_set, now=now)
    except ParseError as e:
        logger.log_event(
            "extract",
            "failed",
            level=logging.WARNING,
            vendor=vendor.value,
            field=e.field,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise


def parse_raw(raw: str, *, strict: bool = False, now: datetime | None = None) -> RateLimit:
    """Parse a newline-separated ``Name: value`` header blob."""
    return parse(HeaderSet.from_raw(raw, strict=strict), now=now)


__all__ = ["parse", "parse_raw"]
