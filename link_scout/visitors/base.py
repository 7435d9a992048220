# File: link_scout/visitors/base.py
"""link_scout.visitors.base: the strategy interface plugged into the crawl engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Optional

from aiohttp import ClientSession

from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.errors import FetchError

if TYPE_CHECKING:
    from link_scout.config import CrawlConfig
    from link_scout.parser.html_parser import ParsedPage

__all__ = ["Visitor"]


class Visitor:
    """Decides what a tool records for each page and which links to follow.

    The engine calls :meth:`prepare` once before the first fetch,
    :meth:`on_page` for every 2xx response, :meth:`on_error` for every
    failed fetch or non-2xx response, and :meth:`result` once the crawl
    has quiesced. Hooks run concurrently for different pages, so
    subclasses guard their own records with their own lock.
    """

    #: short tool name used by the CLI and reports
    name: str = "crawl"

    async def prepare(self, session: ClientSession, seed: str, config: "CrawlConfig") -> None:
        """Load whatever the visitor needs before crawling (e.g. robots.txt)."""

    async def on_page(self, task: URLTask, page: PageData, parsed: "ParsedPage") -> Iterable[str]:
        """Record facts for a fetched page; return candidate links to follow.

        The engine still applies the same-host, depth, dedup and safety-cap
        rules to whatever is returned here.
        """
        return parsed.internal_urls()

    async def on_error(
        self, task: URLTask, error: FetchError, page: Optional[PageData] = None
    ) -> None:
        """Record a per-URL failure. *page* is set for non-2xx responses."""

    def result(self, outcome: CrawlOutcome) -> Any:
        """Build the tool's result object from the finished crawl."""
        return outcome
