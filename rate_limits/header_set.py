"""Case-insensitive header view consumed by the parser.

HeaderSet is the only input type the core understands. It can be built from
a plain mapping, an iterable of ``(name, value)`` pairs (aiohttp's
``CIMultiDictProxy.items()`` and ``http.client.HTTPMessage.items()`` both
qualify) or a raw newline-separated ``Name: value`` text blob.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Union

from .errors import HeaderFormatError

HEADER_SEPARATOR = ":"

HeaderSource = Union["HeaderSet", Mapping[str, str], Iterable[tuple[str, str]], str]


class HeaderSet(Mapping[str, str]):
    """Read-only mapping of lower-cased header names to stripped values.

    When a name occurs more than once only the first value is kept.
    """

    __slots__ = ("_values", "_names")

    def __init__(
        self, headers: Mapping[str, str] | Iterable[tuple[str, str]] | None = None
    ) -> None:
        self._values: dict[str, str] = {}
        self._names: dict[str, str] = {}
        if headers is None:
            return
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in pairs:
            key = str(name).strip().lower()
            if not key or key in self._values:
                continue
            self._values[key] = str(value).strip()
            self._names[key] = str(name).strip()

    @classmethod
    def from_raw(cls, raw: str, *, strict: bool = False) -> HeaderSet:
        """Build a HeaderSet from newline-separated ``Name: value`` lines.

        Lines are split on the first colon so HTTP-date values survive.
        Blank lines are ignored. Lines without a colon are skipped, or
        rejected with HeaderFormatError when ``strict`` is set.
        """
        pairs: list[tuple[str, str]] = []
        for line in raw.splitlines():
            if not line.strip():
                continue
            if HEADER_SEPARATOR not in line:
                if strict:
                    raise HeaderFormatError(line)
                continue
            name, value = line.split(HEADER_SEPARATOR, 1)
            pairs.append((name, value))
        return cls(pairs)

    @classmethod
    def coerce(cls, headers: HeaderSource | None) -> HeaderSet:
        """Return ``headers`` as a HeaderSet, parsing text blobs as raw headers."""
        if isinstance(headers, HeaderSet):
            return headers
        if isinstance(headers, str):
            return cls.from_raw(headers)
        return cls(headers)

    def original_name(self, name: str) -> str | None:
        """Return the header name with the casing it arrived in."""
        return self._names.get(name.lower())

    def with_prefix(self, *prefixes: str) -> list[str]:
        """Lower-cased names starting with any of the given prefixes, sorted."""
        return sorted(k for k in self._values if k.startswith(prefixes))

    def __getitem__(self, name: str) -> str:
        return self._values[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"HeaderSet({self._values!r})"


__all__ = ["HeaderSet", "HeaderSource", "HEADER_SEPARATOR"]
