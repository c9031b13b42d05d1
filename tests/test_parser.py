"""End-to-end parsing of sample vendor headers."""

from datetime import datetime, timedelta, timezone

import pytest

from rate_limits import parse, parse_raw
from rate_limits.errors import (
    HeaderFormatError,
    MalformedInteger,
    MalformedTimestamp,
    MissingRequiredField,
    ParseError,
    UnsupportedVendorAmbiguity,
)
from rate_limits.header_set import HeaderSet
from rate_limits.models import RateLimit, RateLimitKind
from rate_limits.policy import QuotaPolicy
from rate_limits.reset_time import ResetDateTime, ResetSeconds
from rate_limits.vendors import Vendor
from tests.fixtures.header_samples import (
    AKAMAI_HEADERS,
    GENERIC_HEADERS,
    GITHUB_HEADERS,
    GITLAB_HEADERS,
    OPENAI_HEADERS,
    REDDIT_HEADERS,
    STANDARD_HEADERS,
    STRUCTURED_HEADERS,
    TWITTER_HEADERS,
    VIMEO_HEADERS,
)


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestVendorSamples:
    """One sample response per supported convention."""

    def test_github(self, now):
        rate = parse_raw(GITHUB_HEADERS, now=now)
        assert rate.kind is RateLimitKind.VENDOR
        assert rate.vendor is Vendor.GITHUB
        assert rate.limit == 5000
        assert rate.remaining == 4987
        assert rate.reset == ResetDateTime(_utc(2012, 10, 12, 23, 43, 14))
        assert rate.window == timedelta(hours=1)

    def test_generic_x_ratelimit(self, now):
        rate = parse_raw(GENERIC_HEADERS, now=now)
        assert rate.kind is RateLimitKind.RFC6585
        assert rate.vendor is Vendor.GENERIC
        assert (rate.limit, rate.remaining) == (5000, 4987)
        assert rate.reset == ResetDateTime(_utc(2012, 10, 12, 23, 43, 14))
        assert rate.window is None

    def test_reddit_derives_limit_from_used(self, now):
        rate = parse_raw(REDDIT_HEADERS, now=now)
        assert rate.vendor is Vendor.REDDIT
        assert rate.limit == 122
        assert rate.remaining == 22
        assert rate.reset == ResetSeconds(30)
        assert rate.window == timedelta(minutes=10)

    def test_reddit_fractional_reset_is_truncated(self, now):
        rate = parse(
            {
                "X-Ratelimit-Used": "1",
                "X-Ratelimit-Remaining": "599",
                "X-Ratelimit-Reset": "299.9",
            },
            now=now,
        )
        assert rate.limit == 600
        assert rate.reset == ResetSeconds(299)

    def test_twitter(self, now):
        rate = parse_raw(TWITTER_HEADERS, now=now)
        assert rate.vendor is Vendor.TWITTER
        assert (rate.limit, rate.remaining) == (900, 899)
        assert rate.reset == ResetDateTime(_utc(2024, 1, 1, 0, 10))
        assert rate.reset.seconds(now) == 600
        assert rate.window == timedelta(minutes=15)

    def test_gitlab(self, now):
        rate = parse_raw(GITLAB_HEADERS, now=now)
        assert rate.vendor is Vendor.GITLAB
        assert rate.kind is RateLimitKind.VENDOR
        assert (rate.limit, rate.remaining) == (60, 0)
        assert rate.reset == ResetDateTime(_utc(2021, 1, 5, 11))
        assert rate.window == timedelta(seconds=60)

    def test_standard(self, now):
        rate = parse_raw(STANDARD_HEADERS, now=now)
        assert rate.kind is RateLimitKind.RFC6585
        assert rate.vendor is Vendor.STANDARD
        assert (rate.limit, rate.remaining) == (100, 42)
        assert rate.reset == ResetSeconds(50)
        assert rate.window is None

    def test_vimeo(self, now):
        rate = parse_raw(VIMEO_HEADERS, now=now)
        assert rate.vendor is Vendor.VIMEO
        assert (rate.limit, rate.remaining) == (100, 99)
        assert rate.reset == ResetDateTime(_utc(1994, 11, 15, 8, 12, 31))
        assert rate.window == timedelta(seconds=60)

    def test_akamai(self, now):
        rate = parse_raw(AKAMAI_HEADERS, now=now)
        assert rate.vendor is Vendor.AKAMAI
        assert (rate.limit, rate.remaining) == (60, 12)
        assert rate.reset == ResetDateTime(_utc(2024, 1, 1, 0, 1))
        assert rate.reset.seconds(now) == 60

    def test_structured_ratelimit_field(self, now):
        rate = parse_raw(STRUCTURED_HEADERS, now=now)
        assert rate.kind is RateLimitKind.RFC6585
        assert rate.vendor is Vendor.STANDARD
        assert (rate.limit, rate.remaining) == (100, 50)
        assert rate.reset == ResetSeconds(30)
        assert rate.window == timedelta(seconds=60)
        assert rate.policies == (
            QuotaPolicy(quota=100, name="default", window=timedelta(seconds=60)),
        )


class TestRetryAfter:
    def test_later_retry_after_overrides_past_vendor_reset(self, now):
        rate = parse_raw(GENERIC_HEADERS + "Retry-After: 120\n", now=now)
        assert rate.reset == ResetSeconds(120)
        assert rate.reset.seconds(now) == 120

    def test_later_vendor_reset_is_kept(self, now):
        rate = parse_raw(TWITTER_HEADERS + "Retry-After: 5\n", now=now)
        assert rate.reset == ResetDateTime(_utc(2024, 1, 1, 0, 10))

    def test_equal_instants_keep_vendor_value(self, now):
        rate = parse_raw(
            STANDARD_HEADERS + "Retry-After: Mon, 01 Jan 2024 00:00:50 GMT\n", now=now
        )
        assert rate.reset == ResetSeconds(50)

    def test_retry_after_only(self, now):
        rate = parse({"Retry-After": "30"}, now=now)
        assert rate.kind is RateLimitKind.RETRY_AFTER
        assert rate.retry_after == ResetSeconds(30)
        assert rate.reset == ResetSeconds(30)
        assert rate.limit is None
        assert rate.remaining is None
        assert rate.vendor is Vendor.UNKNOWN
        assert rate

    def test_retry_after_only_http_date(self, now):
        rate = parse({"Retry-After": "Fri, 31 Dec 1999 23:59:59 GMT"}, now=now)
        assert rate.kind is RateLimitKind.RETRY_AFTER
        assert rate.reset == ResetDateTime(_utc(1999, 12, 31, 23, 59, 59))

    def test_malformed_retry_after_alone_raises(self, now):
        with pytest.raises(MalformedTimestamp) as exc:
            parse({"Retry-After": "soon"}, now=now)
        assert exc.value.field == "retry-after"

    def test_malformed_vendor_reset_falls_back_to_retry_after(self, now, caplog):
        headers = {
            "x-ratelimit-limit": "5000",
            "x-ratelimit-remaining": "0",
            "x-ratelimit-used": "5000",
            "x-ratelimit-reset": "soon",
            "Retry-After": "60",
        }
        rate = parse(headers, now=now)
        assert rate.reset == ResetSeconds(60)
        assert any(
            "Ignoring malformed vendor reset" in r.message for r in caplog.records
        )

    def test_malformed_retry_after_falls_back_to_vendor_reset(self, now):
        rate = parse_raw(STANDARD_HEADERS + "Retry-After: soon\n", now=now)
        assert rate.reset == ResetSeconds(50)

    def test_malformed_vendor_reset_without_retry_after_raises(self, now):
        with pytest.raises(MalformedTimestamp) as exc:
            parse(
                {
                    "x-ratelimit-limit": "5000",
                    "x-ratelimit-remaining": "0",
                    "x-ratelimit-used": "5000",
                    "x-ratelimit-reset": "soon",
                },
                now=now,
            )
        assert exc.value.vendor is Vendor.GITHUB
        assert exc.value.field == "reset"
        assert exc.value.raw == "soon"


class TestPolicyOnly:
    def test_policy_without_counts(self, now):
        rate = parse({"RateLimit-Policy": "100;w=60"}, now=now)
        assert rate.kind is RateLimitKind.POLICY
        assert rate.policies == (QuotaPolicy(quota=100, window=timedelta(seconds=60)),)
        assert rate.window == timedelta(seconds=60)
        assert rate.limit is None
        assert rate.reset is None

    def test_policy_with_retry_after(self, now):
        rate = parse({"RateLimit-Policy": "100;w=60", "Retry-After": "7"}, now=now)
        assert rate.kind is RateLimitKind.POLICY
        assert rate.reset == ResetSeconds(7)

    def test_inline_policy_on_limit_header(self, now):
        rate = parse(
            {
                "RateLimit-Limit": "100, 100;w=60, 1000;w=3600",
                "RateLimit-Remaining": "10",
                "RateLimit-Reset": "5",
            },
            now=now,
        )
        assert rate.limit == 100
        assert rate.window == timedelta(seconds=60)
        assert len(rate.policies) == 2

    def test_policy_header_sets_standard_window(self, now):
        rate = parse_raw(STANDARD_HEADERS + "RateLimit-Policy: 100;w=10\n", now=now)
        assert rate.window == timedelta(seconds=10)


class TestNoRateLimit:
    @pytest.mark.parametrize("headers", [None, {}, "", [], {"Content-Type": "text/html"}])
    def test_none(self, headers, now):
        rate = parse(headers, now=now)
        assert rate == RateLimit.none()
        assert rate.kind is RateLimitKind.NONE
        assert not rate
        assert rate.reset is None


class TestErrors:
    def test_malformed_limit(self, now):
        with pytest.raises(MalformedInteger) as exc:
            parse(
                {
                    "x-ratelimit-limit": "abc",
                    "x-ratelimit-remaining": "1",
                    "x-ratelimit-reset": "10",
                },
                now=now,
            )
        assert exc.value.field == "limit"
        assert exc.value.raw == "abc"
        assert exc.value.vendor is Vendor.GENERIC

    def test_negative_remaining(self, now):
        with pytest.raises(MalformedInteger) as exc:
            parse({"RateLimit-Limit": "10", "RateLimit-Remaining": "-1"}, now=now)
        assert exc.value.field == "remaining"

    def test_missing_remaining(self, now):
        with pytest.raises(MissingRequiredField) as exc:
            parse({"RateLimit-Limit": "10", "RateLimit-Reset": "1"}, now=now)
        assert exc.value.vendor is Vendor.STANDARD
        assert exc.value.field == "remaining"

    def test_missing_limit(self, now):
        with pytest.raises(MissingRequiredField) as exc:
            parse({"RateLimit-Remaining": "10", "RateLimit-Reset": "1"}, now=now)
        assert exc.value.field == "limit"

    def test_missing_reset(self, now):
        with pytest.raises(MissingRequiredField) as exc:
            parse({"x-rate-limit-limit": "10", "x-rate-limit-remaining": "1"}, now=now)
        assert exc.value.vendor is Vendor.TWITTER
        assert exc.value.field == "reset"

    def test_missing_reset_satisfied_by_retry_after(self, now):
        rate = parse(
            {
                "x-rate-limit-limit": "10",
                "x-rate-limit-remaining": "0",
                "Retry-After": "3",
            },
            now=now,
        )
        assert rate.reset == ResetSeconds(3)

    def test_ambiguous_groups(self, now):
        with pytest.raises(UnsupportedVendorAmbiguity) as exc:
            parse_raw(OPENAI_HEADERS, now=now)
        assert exc.value.candidates == (
            "x-ratelimit-remaining-requests",
            "x-ratelimit-remaining-tokens",
        )
        assert exc.value.vendor is Vendor.GENERIC

    def test_failure_is_logged_and_reraised(self, now, caplog):
        with pytest.raises(ParseError):
            parse({"RateLimit-Remaining": "x"}, now=now)
        assert any(
            r.levelname == "WARNING" and "Failed to parse" in r.message
            for r in caplog.records
        )

    def test_unknown_prefix_without_remaining(self, now):
        with pytest.raises(MissingRequiredField) as exc:
            parse({"X-RateLimit-Burst": "5"}, now=now)
        assert exc.value.vendor is Vendor.GENERIC
        assert exc.value.field == "remaining"

    def test_strict_raw_input(self, now):
        with pytest.raises(HeaderFormatError):
            parse_raw("x-ratelimit-limit 10", strict=True, now=now)


class TestBestEffort:
    def test_single_suffixed_group(self, now):
        rate = parse(
            {
                "x-ratelimit-limit-requests": "60",
                "x-ratelimit-remaining-requests": "59",
                "x-ratelimit-reset-requests": "1s",
            },
            now=now,
        )
        assert rate.vendor is Vendor.GENERIC
        assert (rate.limit, rate.remaining) == (60, 59)
        assert rate.reset == ResetSeconds(1)

    def test_unsuffixed_group_wins(self, now):
        rate = parse_raw(GENERIC_HEADERS + OPENAI_HEADERS, now=now)
        assert (rate.limit, rate.remaining) == (5000, 4987)

    def test_reset_after(self, now):
        rate = parse(
            {
                "X-RateLimit-Limit": "10",
                "X-RateLimit-Remaining": "5",
                "X-RateLimit-Reset-After": "2.5",
            },
            now=now,
        )
        assert rate.reset == ResetSeconds(2)

    def test_small_reset_is_seconds(self, now):
        rate = parse(
            {
                "X-RateLimit-Limit": "10",
                "X-RateLimit-Remaining": "5",
                "X-RateLimit-Reset": "30",
            },
            now=now,
        )
        assert rate.reset == ResetSeconds(30)


class TestPassthrough:
    def test_remaining_above_limit_is_kept(self, now):
        rate = parse_raw(
            "RateLimit-Limit: 10\nRateLimit-Remaining: 20\nRateLimit-Reset: 1\n",
            now=now,
        )
        assert (rate.limit, rate.remaining) == (10, 20)

    def test_u64_counts(self, now):
        big = str(2**64 - 1)
        rate = parse(
            {"RateLimit-Limit": big, "RateLimit-Remaining": big, "RateLimit-Reset": "1"},
            now=now,
        )
        assert rate.limit == 2**64 - 1

    def test_accepts_pairs_and_header_set(self, now):
        pairs = [
            ("X-RateLimit-Limit", "10"),
            ("X-RateLimit-Remaining", "5"),
            ("X-RateLimit-Reset", "3"),
        ]
        expected = parse(dict(pairs), now=now)
        assert parse(pairs, now=now) == expected
        assert parse(HeaderSet(pairs), now=now) == expected

    def test_first_duplicate_header_wins(self, now):
        rate = parse(
            [
                ("RateLimit-Limit", "10"),
                ("RateLimit-Limit", "99"),
                ("RateLimit-Remaining", "5"),
                ("RateLimit-Reset", "1"),
            ],
            now=now,
        )
        assert rate.limit == 10


def test_detect_and_extract_are_logged(now, debug_caplog):
    parse_raw(GITHUB_HEADERS, now=now)
    messages = [r.message for r in debug_caplog.records]
    assert any("Detected github" in m for m in messages)
    assert any("4987/5000" in m for m in messages)


def test_no_headers_logged(now, debug_caplog):
    parse({}, now=now)
    assert any("No rate limit headers" in r.message for r in debug_caplog.records)


class TestU64Resets:
    def test_huge_retry_after_beside_vendor_reset(self, now):
        rate = parse_raw(GENERIC_HEADERS + f"Retry-After: {2**64 - 1}\n", now=now)
        assert rate.reset == ResetSeconds(2**64 - 1)

    def test_huge_vendor_reset_beside_retry_after(self, now):
        rate = parse_raw(
            "RateLimit-Limit: 10\nRateLimit-Remaining: 1\n"
            f"RateLimit-Reset: {2**64 - 1}\nRetry-After: 5\n",
            now=now,
        )
        assert rate.reset == ResetSeconds(2**64 - 1)

    def test_reset_above_u64_is_malformed(self, now):
        with pytest.raises(MalformedTimestamp):
            parse_raw(
                "RateLimit-Limit: 10\nRateLimit-Remaining: 1\n"
                f"RateLimit-Reset: {2**64}\n",
                now=now,
            )


class TestMalformedPolicyHeaders:
    @pytest.mark.parametrize("raw", [";", ",;,"])
    def test_policy_header(self, raw, now):
        with pytest.raises(MalformedInteger):
            parse({"RateLimit-Policy": raw}, now=now)

    def test_structured_header(self, now):
        with pytest.raises(MalformedInteger) as exc:
            parse({"RateLimit": ";", "RateLimit-Policy": "10"}, now=now)
        assert exc.value.field == "remaining"
