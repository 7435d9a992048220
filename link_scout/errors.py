# File: link_scout/errors.py
"""link_scout.errors: exception taxonomy shared by the crawler, fetcher and parser.

Only :class:`InvalidSeedError` ever escapes a crawl. Everything else is
handed to the active visitor and ends up in the tool's result object.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "LinkScoutError",
    "InvalidSeedError",
    "FetchError",
    "TooManyRedirectsError",
    "ParseError",
]


class LinkScoutError(Exception):
    """Base class for all LinkScout errors."""


class InvalidSeedError(LinkScoutError, ValueError):
    """The seed URL is unparseable or not an absolute http(s) URL."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"invalid seed URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class FetchError(LinkScoutError):
    """Network failure, timeout or non-2xx response for a single URL."""

    def __init__(
        self,
        url: str,
        reason: str,
        status: Optional[int] = None,
        elapsed: float = 0.0,
    ) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status
        self.elapsed = elapsed


class TooManyRedirectsError(FetchError):
    """A manually followed redirect chain exceeded the hop cap."""

    def __init__(self, url: str, hops: int, elapsed: float = 0.0) -> None:
        super().__init__(url, f"too many redirects (>{hops})", elapsed=elapsed)
        self.hops = hops


class ParseError(LinkScoutError):
    """Malformed HTML that the parser could not make sense of."""
