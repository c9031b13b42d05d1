"""
Constants for rate limit header interpretation

Header names are stored lower-cased; all lookups go through HeaderSet, which
folds case. Windows are the fixed periods each vendor documents.
"""

import os
from datetime import timedelta


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Retrieve a boolean flag from an environment variable.

    Accepts 'true', '1' and 'yes' (case-insensitive) as true. Any other set
    value is false; an unset variable yields the default.

    Args:
        name: The name of the environment variable to read.
        default: The value returned when the variable is not set.

    Returns:
        The parsed flag.
    """
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes")


# Largest value accepted for counts and timestamps (unsigned 64-bit)
U64_MAX = 2**64 - 1

# Best-effort reset disambiguation: integers at or above this are read as
# Unix timestamps (2001-09-09), below it as seconds from now.
TIMESTAMP_THRESHOLD = 1_000_000_000

# Generic headers
RETRY_AFTER_HEADER = "retry-after"
POLICY_HEADER = "ratelimit-policy"
STRUCTURED_HEADER = "ratelimit"

# IETF draft-polli-ratelimit-headers / draft-ietf-httpapi-ratelimit-headers
STANDARD_LIMIT_HEADER = "ratelimit-limit"
STANDARD_REMAINING_HEADER = "ratelimit-remaining"
STANDARD_RESET_HEADER = "ratelimit-reset"
GITLAB_OBSERVED_HEADER = "ratelimit-observed"

# x-ratelimit-* family (Github, Reddit, Vimeo, Akamai and best-effort)
X_LIMIT_HEADER = "x-ratelimit-limit"
X_USED_HEADER = "x-ratelimit-used"
X_REMAINING_HEADER = "x-ratelimit-remaining"
X_RESET_HEADER = "x-ratelimit-reset"
X_RESOURCE_HEADER = "x-ratelimit-resource"
X_NEXT_HEADER = "x-ratelimit-next"

# Twitter
TWITTER_LIMIT_HEADER = "x-rate-limit-limit"
TWITTER_REMAINING_HEADER = "x-rate-limit-remaining"
TWITTER_RESET_HEADER = "x-rate-limit-reset"

# Prefixes that mark a header as rate-limit-ish for best-effort parsing
GENERIC_PREFIXES = ("x-ratelimit-", "x-rate-limit-")

# Documented windows
GITHUB_WINDOW = timedelta(hours=1)
TWITTER_WINDOW = timedelta(minutes=15)
REDDIT_WINDOW = timedelta(minutes=10)
VIMEO_WINDOW = timedelta(seconds=60)
GITLAB_WINDOW = timedelta(seconds=60)
AKAMAI_WINDOW = timedelta(seconds=60)

# Verbose log format (appends key=value context)
DEBUG_ENV = "DEBUG"
