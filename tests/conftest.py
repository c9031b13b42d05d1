import logging
from datetime import datetime

import pytest

from tests.fixtures.header_samples import FIXED_NOW


@pytest.fixture
def now() -> datetime:
    """Fixed reference instant so relative and absolute resets compare stably."""
    return FIXED_NOW


@pytest.fixture(autouse=True)
def _plain_log_format(monkeypatch):
    """Keep log messages in the concise format unless a test opts in."""
    monkeypatch.delenv("DEBUG", raising=False)
    yield


@pytest.fixture
def debug_caplog(caplog):
    caplog.set_level(logging.DEBUG, logger="rate_limits")
    return caplog
