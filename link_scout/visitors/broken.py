# File: link_scout/visitors/broken.py
"""link_scout.visitors.broken: broken-link detection."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.errors import FetchError
from link_scout.parser.html_parser import ParsedPage
from link_scout.visitors.base import Visitor

__all__ = ["BrokenLink", "BrokenLinkResult", "BrokenLinkVisitor"]


@dataclass(frozen=True, slots=True)
class BrokenLink:
    """A link whose target answered with status >= 400 or could not be fetched."""

    source_url: str
    url: str
    status: int = 0
    error: str = ""


@dataclass(slots=True)
class BrokenLinkResult:
    start_url: str
    total_visited: int = 0
    broken_links: List[BrokenLink] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.broken_links


class BrokenLinkVisitor(Visitor):
    """Records every failed fetch against the page that linked to it."""

    name = "check"

    def __init__(self) -> None:
        self._broken: List[BrokenLink] = []
        self._lock = asyncio.Lock()

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        # same-host files are fetched too so a missing /guide.pdf is reported
        return parsed.same_host_urls()

    async def on_error(
        self, task: URLTask, error: FetchError, page: Optional[PageData] = None
    ) -> None:
        status = error.status or 0
        message = "" if status else error.reason
        source = task.source_url
        if not source:
            # the start URL itself is broken
            source = task.url
            message = message or "start URL returned error"
        async with self._lock:
            self._broken.append(BrokenLink(source, task.url, status, message))

    def result(self, outcome: CrawlOutcome) -> BrokenLinkResult:
        return BrokenLinkResult(
            start_url=outcome.seed,
            total_visited=len(outcome.visited),
            broken_links=list(self._broken),
        )
