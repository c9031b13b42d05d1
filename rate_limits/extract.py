"""Field extraction and reset resolution.

Given a detected vendor, read that vendor's headers into a ``RateLimit``.
Missing optional fields degrade to None; missing or malformed required
fields raise a ParseError naming the vendor and field.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from . import constants as c
from .convert import parse_count
from .errors import MalformedTimestamp, MissingRequiredField, UnsupportedVendorAmbiguity
from .header_set import HeaderSet, HeaderSource
from .logs.logger import logger
from .models import Headers, RateLimit, RateLimitKind
from .policy import (
    QuotaPolicy,
    find_policy,
    parse_policy,
    parse_structured_ratelimit,
    split_inline_limit,
)
from .reset_time import ResetKind, ResetTime, parse_retry_after, resolve_reset, utc_now
from .vendors import Vendor, VendorRule, rule_for

_GENERIC_RE = re.compile(
    r"^x-rate-?limit-(limit|remaining|reset-after|reset|used)(?:-(.+))?$"
)


@dataclass(frozen=True, slots=True)
class _FieldNames:
    """Header names resolved for one extraction."""

    remaining: str | None
    limit: str | None = None
    used: str | None = None
    reset: str | None = None
    reset_kind: ResetKind = ResetKind.AUTO
    fractional_reset: bool = False


def extract(
    vendor: Vendor, headers: HeaderSource, *, now: datetime | None = None
) -> RateLimit:
    """Read ``headers`` according to ``vendor``'s convention.

    Args:
        vendor: Convention returned by :func:`rate_limits.vendors.detect`.
        headers: Header set (anything HeaderSet.coerce accepts).
        now: Reference instant for comparing relative and absolute resets.

    Returns:
        RateLimit: headers, Retry-After only, policy only, or none.

    Raises:
        ParseError: a rate limit header is present but cannot be used.
    """
    headers = HeaderSet.coerce(headers)
    now = now or utc_now()
    policies = _policies(headers)

    rule = rule_for(vendor)
    if rule is None:
        return _without_vendor(headers, policies)

    if (
        vendor is Vendor.STANDARD
        and c.STANDARD_REMAINING_HEADER not in headers
        and c.STRUCTURED_HEADER in headers
    ):
        parsed = _extract_structured(headers, policies, now)
    else:
        names = _generic_names(headers) if vendor is Vendor.GENERIC else _rule_names(rule)
        parsed, inline = _extract_fields(rule, names, headers, policies, now)
        policies = policies or inline

    logger.log_event(
        "extract",
        "headers",
        vendor=vendor.value,
        limit=parsed.limit,
        remaining=parsed.remaining,
        reset=parsed.reset,
        window=parsed.window,
    )
    return RateLimit.from_headers(parsed, policies)


def _policies(headers: HeaderSet) -> tuple[QuotaPolicy, ...]:
    raw = headers.get(c.POLICY_HEADER)
    return parse_policy(raw) if raw else ()


def _without_vendor(
    headers: HeaderSet, policies: tuple[QuotaPolicy, ...]
) -> RateLimit:
    raw = headers.get(c.RETRY_AFTER_HEADER)
    retry_after = parse_retry_after(raw) if raw is not None else None
    if policies:
        logger.log_event("extract", "policy", count=len(policies))
        return RateLimit(
            kind=RateLimitKind.POLICY, policies=policies, retry_after=retry_after
        )
    if retry_after is not None:
        logger.log_event("extract", "retry_after", reset=retry_after)
        return RateLimit(kind=RateLimitKind.RETRY_AFTER, retry_after=retry_after)
    logger.log_event("detect", "none")
    return RateLimit.none()


def _rule_names(rule: VendorRule) -> _FieldNames:
    return _FieldNames(
        remaining=rule.remaining_header,
        limit=rule.limit_header,
        used=rule.used_header,
        reset=rule.reset_header,
        reset_kind=rule.reset_kind,
        fractional_reset=rule.fractional_reset,
    )


def _generic_names(headers: HeaderSet) -> _FieldNames:
    """Resolve best-effort header names from an ``x-ratelimit-*`` scan.

    Headers are grouped by suffix (``x-ratelimit-remaining-tokens`` belongs
    to group ``tokens``). The unsuffixed group wins, then a single suffixed
    group that carries a remaining count.
    """
    groups: dict[str | None, dict[str, str]] = {}
    for name in headers.with_prefix(*c.GENERIC_PREFIXES):
        match = _GENERIC_RE.match(name)
        if match is None:
            continue
        field, suffix = match.groups()
        groups.setdefault(suffix, {}).setdefault(field, name)

    with_remaining = [s for s, g in groups.items() if "remaining" in g]
    if None in groups and ("remaining" in groups[None] or not with_remaining):
        suffix = None
    elif len(with_remaining) == 1:
        suffix = with_remaining[0]
    elif len(with_remaining) > 1:
        candidates = [groups[s]["remaining"] for s in sorted(with_remaining)]  # type: ignore[type-var]
        raise UnsupportedVendorAmbiguity(Vendor.GENERIC, candidates)
    elif len(groups) == 1:
        suffix = next(iter(groups))
    else:
        raise MissingRequiredField(Vendor.GENERIC, "remaining")

    group = groups[suffix]
    if "reset" in group:
        reset, kind = group["reset"], ResetKind.AUTO
    else:
        reset, kind = group.get("reset-after"), ResetKind.SECONDS
    return _FieldNames(
        remaining=group.get("remaining"),
        limit=group.get("limit"),
        used=group.get("used"),
        reset=reset,
        reset_kind=kind,
        fractional_reset=True,
    )


def _extract_fields(
    rule: VendorRule,
    names: _FieldNames,
    headers: HeaderSet,
    policies: tuple[QuotaPolicy, ...],
    now: datetime,
) -> tuple[Headers, tuple[QuotaPolicy, ...]]:
    vendor = rule.vendor

    limit: int | None = None
    inline: tuple[QuotaPolicy, ...] = ()
    limit_raw = headers.get(names.limit) if names.limit else None
    if limit_raw is not None:
        if vendor is Vendor.STANDARD:
            limit_raw, inline = split_inline_limit(limit_raw)
        limit = parse_count("limit", limit_raw, vendor=vendor)

    remaining_raw = headers.get(names.remaining) if names.remaining else None
    if remaining_raw is None:
        raise MissingRequiredField(vendor, "remaining")
    remaining = parse_count("remaining", remaining_raw, vendor=vendor)

    if limit is None:
        # No limit header: derive it from used + remaining where possible.
        used_raw = headers.get(names.used) if names.used else None
        if used_raw is None:
            raise MissingRequiredField(vendor, "limit")
        limit = parse_count("used", used_raw, vendor=vendor) + remaining

    reset = _reset(
        vendor,
        headers.get(names.reset) if names.reset else None,
        names.reset_kind,
        headers,
        now,
        fractional=names.fractional_reset,
        required=rule.requires_reset,
    )

    window = rule.window
    if window is None:
        policy = next((p for p in policies or inline if p.quota == limit), None)
        window = policy.window if policy else None

    return Headers(limit, remaining, reset, window, vendor), inline


def _extract_structured(
    headers: HeaderSet, policies: tuple[QuotaPolicy, ...], now: datetime
) -> Headers:
    """``RateLimit: "name";r=..;t=..`` joined with its ``RateLimit-Policy`` item."""
    statuses = parse_structured_ratelimit(headers[c.STRUCTURED_HEADER])
    if not statuses:
        raise MissingRequiredField(Vendor.STANDARD, "remaining")
    status = statuses[0]
    policy = find_policy(policies, status.name)
    if policy is None:
        raise MissingRequiredField(Vendor.STANDARD, "limit")

    reset = _reset(
        Vendor.STANDARD,
        str(status.reset_seconds) if status.reset_seconds is not None else None,
        ResetKind.SECONDS,
        headers,
        now,
        required=False,
    )
    return Headers(
        limit=policy.quota,
        remaining=status.remaining,
        reset=reset,
        window=policy.window,
        vendor=Vendor.STANDARD,
    )


def _reset(
    vendor: Vendor,
    raw: str | None,
    kind: ResetKind,
    headers: HeaderSet,
    now: datetime,
    *,
    fractional: bool = False,
    required: bool = True,
) -> ResetTime | None:
    """Parse the vendor reset and Retry-After, then keep the later one.

    A malformed value is tolerated only when the other header can stand in
    for it.
    """
    vendor_reset: ResetTime | None = None
    vendor_error: MalformedTimestamp | None = None
    if raw is not None:
        try:
            vendor_reset = ResetTime.parse(
                "reset", raw, kind, fractional=fractional, vendor=vendor
            )
        except MalformedTimestamp as e:
            vendor_error = e

    retry_raw = headers.get(c.RETRY_AFTER_HEADER)
    retry_after: ResetTime | None = None
    retry_error: MalformedTimestamp | None = None
    if retry_raw is not None:
        try:
            retry_after = parse_retry_after(retry_raw, vendor=vendor)
        except MalformedTimestamp as e:
            retry_error = e

    if vendor_error is not None:
        if retry_after is None:
            raise vendor_error
        logger.log_event(
            "reset", "vendor_malformed", level=logging.WARNING, vendor=vendor.value, raw=raw
        )
    if retry_error is not None:
        if vendor_reset is None:
            raise retry_error
        logger.log_event(
            "reset",
            "retry_after_malformed",
            level=logging.WARNING,
            vendor=vendor.value,
            raw=retry_raw,
        )

    resolved = resolve_reset(vendor_reset, retry_after, now)
    if vendor_reset is not None and retry_after is not None:
        action = "retry_after_preferred" if resolved is retry_after else "vendor_preferred"
        logger.log_event(
            "reset",
            action,
            vendor=vendor.value,
            vendor_reset=vendor_reset,
            retry_after=retry_after,
        )
    if resolved is None and required:
        raise MissingRequiredField(vendor, "reset")
    return resolved


__all__ = ["extract"]
