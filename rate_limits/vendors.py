"""Vendor conventions and the ordered detection rules.

Vendors use different rate limit header formats, which define how to parse
them. A convention is one ``Vendor`` member plus one ``VendorRule``: a
detection predicate and a fixed mapping of header names to fields. Rules are
tried in order; providers whose headers are a superset of another's must
come first.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from . import constants as c
from .convert import is_http_date
from .header_set import HeaderSet
from .reset_time import ResetKind


class Vendor(Enum):
    """Known vendors of rate limit headers."""

    # IETF draft RateLimit-* headers (draft-polli / draft-ietf-httpapi)
    STANDARD = "standard"
    GITLAB = "gitlab"
    GITHUB = "github"
    TWITTER = "twitter"
    REDDIT = "reddit"
    VIMEO = "vimeo"
    AKAMAI = "akamai"
    # Unrecognized x-ratelimit-* headers, parsed on a best-effort basis
    GENERIC = "generic"
    UNKNOWN = "unknown"

    @property
    def convention(self) -> str:
        """``rfc6585`` for standard-style headers, ``vendor`` for providers."""
        if self in (Vendor.STANDARD, Vendor.GENERIC):
            return "rfc6585"
        if self is Vendor.UNKNOWN:
            return "none"
        return "vendor"


@dataclass(frozen=True, slots=True)
class VendorRule:
    """Detection predicate and field mapping for one vendor."""

    vendor: Vendor
    matches: Callable[[HeaderSet], bool]
    remaining_header: str | None
    limit_header: str | None = None
    used_header: str | None = None
    reset_header: str | None = None
    reset_kind: ResetKind = ResetKind.AUTO
    # Vendor documents sub-second reset values
    fractional_reset: bool = False
    window: timedelta | None = None
    requires_reset: bool = True


def _has(*names: str) -> Callable[[HeaderSet], bool]:
    return lambda headers: all(name in headers for name in names)


def _is_gitlab(headers: HeaderSet) -> bool:
    return c.GITLAB_OBSERVED_HEADER in headers and c.STANDARD_REMAINING_HEADER in headers


def _is_standard(headers: HeaderSet) -> bool:
    return any(
        name in headers
        for name in (
            c.STANDARD_REMAINING_HEADER,
            c.STANDARD_LIMIT_HEADER,
            c.STRUCTURED_HEADER,
        )
    )


def _is_reddit(headers: HeaderSet) -> bool:
    return (
        c.X_USED_HEADER in headers
        and c.X_REMAINING_HEADER in headers
        and c.X_LIMIT_HEADER not in headers
    )


def _is_github(headers: HeaderSet) -> bool:
    return c.X_LIMIT_HEADER in headers and (
        c.X_RESOURCE_HEADER in headers or c.X_USED_HEADER in headers
    )


def _is_vimeo(headers: HeaderSet) -> bool:
    reset = headers.get(c.X_RESET_HEADER)
    return c.X_REMAINING_HEADER in headers and reset is not None and is_http_date(reset)


def _is_generic(headers: HeaderSet) -> bool:
    return bool(headers.with_prefix(*c.GENERIC_PREFIXES))


# Detection order matters: first match wins.
RULES: tuple[VendorRule, ...] = (
    # GitLab: RateLimit-Limit / -Observed / -Remaining / -Reset (Unix time)
    VendorRule(
        vendor=Vendor.GITLAB,
        matches=_is_gitlab,
        limit_header=c.STANDARD_LIMIT_HEADER,
        used_header=c.GITLAB_OBSERVED_HEADER,
        remaining_header=c.STANDARD_REMAINING_HEADER,
        reset_header=c.STANDARD_RESET_HEADER,
        reset_kind=ResetKind.TIMESTAMP,
        window=c.GITLAB_WINDOW,
    ),
    # https://datatracker.ietf.org/doc/html/draft-polli-ratelimit-headers-00
    # RateLimit-Reset is delta seconds; the structured RateLimit field of the
    # later httpapi drafts is handled in extract.
    VendorRule(
        vendor=Vendor.STANDARD,
        matches=_is_standard,
        limit_header=c.STANDARD_LIMIT_HEADER,
        remaining_header=c.STANDARD_REMAINING_HEADER,
        reset_header=c.STANDARD_RESET_HEADER,
        reset_kind=ResetKind.SECONDS,
    ),
    # Twitter: reset is UTC epoch seconds, 15 minute windows
    VendorRule(
        vendor=Vendor.TWITTER,
        matches=_has(c.TWITTER_REMAINING_HEADER),
        limit_header=c.TWITTER_LIMIT_HEADER,
        remaining_header=c.TWITTER_REMAINING_HEADER,
        reset_header=c.TWITTER_RESET_HEADER,
        reset_kind=ResetKind.TIMESTAMP,
        window=c.TWITTER_WINDOW,
    ),
    # Akamai: X-RateLimit-Next is an ISO 8601 date
    VendorRule(
        vendor=Vendor.AKAMAI,
        matches=_has(c.X_NEXT_HEADER, c.X_REMAINING_HEADER),
        limit_header=c.X_LIMIT_HEADER,
        remaining_header=c.X_REMAINING_HEADER,
        reset_header=c.X_NEXT_HEADER,
        reset_kind=ResetKind.ISO8601,
        window=c.AKAMAI_WINDOW,
    ),
    # Reddit: no limit header, limit = used + remaining; reset is
    # approximate seconds to the end of the period
    VendorRule(
        vendor=Vendor.REDDIT,
        matches=_is_reddit,
        used_header=c.X_USED_HEADER,
        remaining_header=c.X_REMAINING_HEADER,
        reset_header=c.X_RESET_HEADER,
        reset_kind=ResetKind.SECONDS,
        fractional_reset=True,
        window=c.REDDIT_WINDOW,
    ),
    # Github: per hour quota, reset in UTC epoch seconds
    VendorRule(
        vendor=Vendor.GITHUB,
        matches=_is_github,
        limit_header=c.X_LIMIT_HEADER,
        used_header=c.X_USED_HEADER,
        remaining_header=c.X_REMAINING_HEADER,
        reset_header=c.X_RESET_HEADER,
        reset_kind=ResetKind.TIMESTAMP,
        window=c.GITHUB_WINDOW,
    ),
    # Vimeo: reset is a date for the start of the next 60 second period
    VendorRule(
        vendor=Vendor.VIMEO,
        matches=_is_vimeo,
        limit_header=c.X_LIMIT_HEADER,
        remaining_header=c.X_REMAINING_HEADER,
        reset_header=c.X_RESET_HEADER,
        reset_kind=ResetKind.IMF_FIXDATE,
        window=c.VIMEO_WINDOW,
    ),
    # Anything else named x-ratelimit-* / x-rate-limit-*; header names are
    # resolved by scanning in extract.
    VendorRule(
        vendor=Vendor.GENERIC,
        matches=_is_generic,
        remaining_header=None,
        reset_kind=ResetKind.AUTO,
        fractional_reset=True,
    ),
)

RULES_BY_VENDOR: dict[Vendor, VendorRule] = {rule.vendor: rule for rule in RULES}


def detect(headers: HeaderSet) -> Vendor:
    """Return the first vendor whose rule matches, or ``Vendor.UNKNOWN``."""
    for rule in RULES:
        if rule.matches(headers):
            return rule.vendor
    return Vendor.UNKNOWN


def rule_for(vendor: Vendor) -> VendorRule | None:
    """Return the rule for ``vendor``; None for ``Vendor.UNKNOWN``."""
    return RULES_BY_VENDOR.get(vendor)


__all__ = ["Vendor", "VendorRule", "RULES", "detect", "rule_for"]
