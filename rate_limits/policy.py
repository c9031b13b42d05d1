"""Quota policy parsing for the IETF RateLimit header drafts.

Two syntaxes are in the wild::

    RateLimit-Policy: 100;w=60, 1000;w=3600          (draft-polli)
    RateLimit-Policy: "default";q=100;w=60           (draft-ietf-httpapi)
    RateLimit: "default";r=50;t=30                   (draft-ietf-httpapi)

Only the subset of RFC 8941 structured fields these drafts use is handled:
comma separated items, ``;key=value`` parameters, quoted strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .convert import parse_count
from .errors import MalformedInteger


@dataclass(frozen=True, slots=True)
class QuotaPolicy:
    """A quota description without current usage."""

    quota: int
    name: str | None = None
    window: timedelta | None = None
    quota_unit: str | None = None
    partition_key: str | None = None


@dataclass(frozen=True, slots=True)
class QuotaStatus:
    """One item of the structured ``RateLimit`` field."""

    name: str | None
    remaining: int
    reset_seconds: int | None = None


def _split_outside_quotes(value: str, separator: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    quoted = False
    escaped = False
    for ch in value:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\" and quoted:
            current.append(ch)
            escaped = True
        elif ch == '"':
            quoted = not quoted
            current.append(ch)
        elif ch == separator and not quoted:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return value


def _parse_item(item: str) -> tuple[str, dict[str, str]]:
    """Split one list item into its bare value and lower-cased parameters."""
    parts = _split_outside_quotes(item, ";")
    if not parts:
        return "", {}
    head, *params = parts
    if "=" in head and not head.startswith('"'):
        # Unnamed item: the first token is already a parameter
        head, params = "", [head, *params]
    parsed: dict[str, str] = {}
    for param in params:
        key, _, val = param.partition("=")
        parsed.setdefault(key.strip().lower(), val.strip())
    return head.strip() if head else "", parsed


def _window(field: str, params: dict[str, str]) -> timedelta | None:
    raw = params.get("w", params.get("window"))
    if raw is None:
        return None
    seconds = parse_count(field, raw)
    try:
        return timedelta(seconds=seconds)
    except OverflowError as e:
        raise MalformedInteger(field, raw) from e


def parse_policy(value: str) -> tuple[QuotaPolicy, ...]:
    """Parse a ``RateLimit-Policy`` value into quota policies.

    Raises:
        MalformedInteger: an item carries no usable quota or window.
    """
    policies: list[QuotaPolicy] = []
    for item in _split_outside_quotes(value, ","):
        head, params = _parse_item(item)
        name: str | None = None
        if head.startswith('"'):
            name = _unquote(head)
            quota_raw = params.get("q")
        else:
            quota_raw = head or params.get("q")
        if quota_raw is None:
            raise MalformedInteger("policy", item)
        pk = params.get("pk")
        policies.append(
            QuotaPolicy(
                quota=parse_count("policy", quota_raw),
                name=name,
                window=_window("policy", params),
                quota_unit=_unquote(params["qu"]) if "qu" in params else None,
                partition_key=pk.strip(":") if pk else None,
            )
        )
    return tuple(policies)


def parse_structured_ratelimit(value: str) -> tuple[QuotaStatus, ...]:
    """Parse the structured ``RateLimit`` field into per-policy status items."""
    statuses: list[QuotaStatus] = []
    for item in _split_outside_quotes(value, ","):
        head, params = _parse_item(item)
        remaining = params.get("r")
        if remaining is None:
            raise MalformedInteger("remaining", item)
        reset = params.get("t")
        statuses.append(
            QuotaStatus(
                name=_unquote(head) if head else None,
                remaining=parse_count("remaining", remaining),
                reset_seconds=parse_count("reset", reset) if reset is not None else None,
            )
        )
    return tuple(statuses)


def split_inline_limit(value: str) -> tuple[str, tuple[QuotaPolicy, ...]]:
    """Split draft-polli ``RateLimit-Limit: 100, 100;w=60`` into count and policies."""
    first, _, rest = value.partition(",")
    if not rest.strip():
        return first.strip(), ()
    return first.strip(), parse_policy(rest)


def find_policy(
    policies: tuple[QuotaPolicy, ...], name: str | None
) -> QuotaPolicy | None:
    """Return the policy with ``name``, or the first one for unnamed status."""
    for policy in policies:
        if policy.name == name:
            return policy
    if name is None and policies:
        return policies[0]
    return None


__all__ = [
    "QuotaPolicy",
    "QuotaStatus",
    "parse_policy",
    "parse_structured_ratelimit",
    "split_inline_limit",
    "find_policy",
]
