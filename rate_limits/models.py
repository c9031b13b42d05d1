"""Result types returned by the parser."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from .policy import QuotaPolicy
from .reset_time import ResetTime
from .vendors import Vendor


@dataclass(frozen=True, slots=True)
class Headers:
    """HTTP rate limits as parsed from header values.

    ``remaining`` may exceed ``limit``; values are passed through as stated.
    """

    # The maximum number of requests allowed in the time window
    limit: int
    # The number of requests remaining in the time window
    remaining: int
    # When the quota is restored; None only for conventions without a reset
    reset: ResetTime | None
    # Fixed window documented by the vendor, if any
    window: timedelta | None
    vendor: Vendor


class RateLimitKind(Enum):
    """Which kind of rate limit information a response carried."""

    # Full information under standard-style headers
    RFC6585 = "rfc6585"
    # Full information under a named provider's headers
    VENDOR = "vendor"
    # Only a Retry-After header
    RETRY_AFTER = "retry_after"
    # Only RateLimit-Policy quota descriptions
    POLICY = "policy"
    # No rate limit headers at all
    NONE = "none"


@dataclass(frozen=True, slots=True)
class RateLimit:
    """Rate limit information parsed from one set of response headers.

    Check ``kind`` (or truthiness, which is False only for ``NONE``) before
    reading the payload fields.
    """

    kind: RateLimitKind
    headers: Headers | None = None
    policies: tuple[QuotaPolicy, ...] = ()
    retry_after: ResetTime | None = None

    @classmethod
    def none(cls) -> RateLimit:
        return cls(kind=RateLimitKind.NONE)

    @classmethod
    def from_headers(
        cls, headers: Headers, policies: tuple[QuotaPolicy, ...] = ()
    ) -> RateLimit:
        kind = (
            RateLimitKind.RFC6585
            if headers.vendor.convention == "rfc6585"
            else RateLimitKind.VENDOR
        )
        return cls(kind=kind, headers=headers, policies=policies)

    @property
    def limit(self) -> int | None:
        """Maximum number of requests in the window, when known."""
        return self.headers.limit if self.headers else None

    @property
    def remaining(self) -> int | None:
        """Number of requests left in the current window, when known."""
        return self.headers.remaining if self.headers else None

    @property
    def reset(self) -> ResetTime | None:
        """The resolved reset signal."""
        if self.headers is not None:
            return self.headers.reset
        return self.retry_after

    @property
    def window(self) -> timedelta | None:
        if self.headers is not None:
            return self.headers.window
        if len(self.policies) == 1:
            return self.policies[0].window
        return None

    @property
    def vendor(self) -> Vendor:
        return self.headers.vendor if self.headers else Vendor.UNKNOWN

    def __bool__(self) -> bool:
        return self.kind is not RateLimitKind.NONE


__all__ = ["Headers", "RateLimit", "RateLimitKind"]
