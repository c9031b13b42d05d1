"""Centralized parse error hierarchy.

Every failure while interpreting rate limit headers is surfaced as one of
these typed errors. Detection never raises; only extraction does, and only
for headers that are present but cannot be understood.

Classes:
  ParseError                  – Base for all extraction errors.
  MissingRequiredField        – A field the vendor convention mandates is absent.
  MalformedInteger            – A count header is not a non-negative integer.
  MalformedTimestamp          – A reset / retry header holds no usable time.
  UnsupportedVendorAmbiguity  – Several header groups could be the rate limit.
  HeaderFormatError           – Raw header text contained an unusable line.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from ..vendors import Vendor


class ParseError(Exception):
    """Base class for rate limit header parse errors with metadata support.

    Attributes:
        vendor: Vendor convention in use when the error occurred, if known.
        field: Semantic field that failed (``limit``, ``remaining``, ``reset``...).
        raw: Raw header value that failed to parse, if any.
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self,
        message: str,
        *,
        vendor: Vendor | None = None,
        field: str | None = None,
        raw: str | None = None,
        data: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.vendor = vendor
        self.field = field
        self.raw = raw
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class MissingRequiredField(ParseError):
    """Raised when a field the vendor convention mandates is absent."""

    def __init__(self, vendor: Vendor, field: str) -> None:
        super().__init__(
            f"{vendor.value} rate limit headers are missing required field '{field}'",
            vendor=vendor,
            field=field,
        )


class MalformedInteger(ParseError):
    """Raised when a count header is not a non-negative 64-bit integer."""

    def __init__(self, field: str, raw: str, *, vendor: Vendor | None = None) -> None:
        super().__init__(
            f"Cannot parse '{field}' value {raw!r} as a non-negative integer",
            vendor=vendor,
            field=field,
            raw=raw,
        )


class MalformedTimestamp(ParseError):
    """Raised when a reset or retry header holds no recognizable time value."""

    def __init__(self, field: str, raw: str, *, vendor: Vendor | None = None) -> None:
        super().__init__(
            f"Cannot parse '{field}' value {raw!r} as a reset time",
            vendor=vendor,
            field=field,
            raw=raw,
        )


class UnsupportedVendorAmbiguity(ParseError):
    """Raised when best-effort parsing finds several competing header groups.

    Providers such as OpenAI send one ``x-ratelimit-*-<bucket>`` group per
    bucket; without an unsuffixed group there is no single answer.
    """

    def __init__(self, vendor: Vendor, candidates: Sequence[str]) -> None:
        names = ", ".join(candidates)
        super().__init__(
            f"Ambiguous {vendor.value} rate limit headers: candidates {names}",
            vendor=vendor,
            data={"candidates": tuple(candidates)},
        )
        self.candidates = tuple(candidates)


class HeaderFormatError(ValueError):
    """Raised by the raw text shim for a line without a ``:`` separator."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Header line without colon: {line!r}")
        self.line = line


__all__ = [
    "ParseError",
    "MissingRequiredField",
    "MalformedInteger",
    "MalformedTimestamp",
    "UnsupportedVendorAmbiguity",
    "HeaderFormatError",
]
