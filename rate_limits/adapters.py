"""aiohttp shim: feed client responses to the parser.

aiohttp exposes response headers as a case-insensitive multidict; its
``items()`` yields every occurrence in arrival order, so HeaderSet keeps the
first value of repeated names.
"""

from __future__ import annotations

from datetime import datetime

import aiohttp
from multidict import CIMultiDictProxy, MultiMapping

from .header_set import HeaderSet
from .models import RateLimit
from .parser import parse


def header_set_from_multidict(headers: MultiMapping[str] | CIMultiDictProxy[str]) -> HeaderSet:
    """Convert an aiohttp/multidict header collection."""
    return HeaderSet(headers.items())


def header_set_from_response(response: aiohttp.ClientResponse) -> HeaderSet:
    """Convert the headers of an aiohttp client response."""
    return header_set_from_multidict(response.headers)


def parse_response(
    response: aiohttp.ClientResponse, *, now: datetime | None = None
) -> RateLimit:
    """Parse rate limit information from an aiohttp client response."""
    return parse(header_set_from_response(response), now=now)


__all__ = ["header_set_from_multidict", "header_set_from_response", "parse_response"]
