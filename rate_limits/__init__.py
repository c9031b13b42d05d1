"""Rate limit information parsed from HTTP response headers.

Supported conventions: IETF RateLimit draft headers, Retry-After, GitLab,
Github, Twitter, Reddit, Vimeo, Akamai and best-effort ``x-ratelimit-*``.

    >>> from rate_limits import parse
    >>> rate = parse("x-ratelimit-limit: 5000\\nx-ratelimit-remaining: 4987\\n"
    ...              "x-ratelimit-reset: 1350085394")
    >>> rate.limit, rate.remaining
    (5000, 4987)
"""

from .errors import (  # noqa: F401
    HeaderFormatError,
    MalformedInteger,
    MalformedTimestamp,
    MissingRequiredField,
    ParseError,
    UnsupportedVendorAmbiguity,
)
from .extract import extract  # noqa: F401
from .header_set import HeaderSet  # noqa: F401
from .models import Headers, RateLimit, RateLimitKind  # noqa: F401
from .parser import parse, parse_raw  # noqa: F401
from .policy import QuotaPolicy, parse_policy  # noqa: F401
from .reset_time import (  # noqa: F401
    ResetDateTime,
    ResetKind,
    ResetSeconds,
    ResetTime,
    parse_retry_after,
    resolve_reset,
)
from .vendors import Vendor, detect  # noqa: F401

__all__ = [
    "parse",
    "parse_raw",
    "detect",
    "extract",
    "HeaderSet",
    "Headers",
    "RateLimit",
    "RateLimitKind",
    "QuotaPolicy",
    "parse_policy",
    "ResetTime",
    "ResetSeconds",
    "ResetDateTime",
    "ResetKind",
    "parse_retry_after",
    "resolve_reset",
    "Vendor",
    "ParseError",
    "MissingRequiredField",
    "MalformedInteger",
    "MalformedTimestamp",
    "UnsupportedVendorAmbiguity",
    "HeaderFormatError",
]
