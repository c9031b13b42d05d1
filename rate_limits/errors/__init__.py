"""Error types raised while interpreting rate limit headers."""

from .internal import (  # noqa: F401
    HeaderFormatError,
    MalformedInteger,
    MalformedTimestamp,
    MissingRequiredField,
    ParseError,
    UnsupportedVendorAmbiguity,
)

__all__ = [
    "ParseError",
    "MissingRequiredField",
    "MalformedInteger",
    "MalformedTimestamp",
    "UnsupportedVendorAmbiguity",
    "HeaderFormatError",
]
