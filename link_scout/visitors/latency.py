# File: link_scout/visitors/latency.py
"""link_scout.visitors.latency: per-page response time samples."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.errors import FetchError
from link_scout.parser.html_parser import ParsedPage
from link_scout.visitors.base import Visitor

__all__ = ["PageLatency", "LatencyResult", "LatencyVisitor"]


@dataclass(frozen=True, slots=True)
class PageLatency:
    """Time from request start until the body was read, in seconds."""

    url: str
    elapsed: float
    status: int = 0
    size: int = 0
    error: str = ""


@dataclass(slots=True)
class LatencyResult:
    start_url: str
    pages: List[PageLatency] = field(default_factory=list)
    total_time: float = 0.0

    def slowest_first(self) -> List[PageLatency]:
        return sorted(self.pages, key=lambda p: p.elapsed, reverse=True)

    def stats(self) -> Tuple[float, float, float]:
        """(min, max, avg) over samples without a transport error."""
        samples = [p.elapsed for p in self.pages if not p.error]
        if not samples:
            return 0.0, 0.0, 0.0
        return min(samples), max(samples), sum(samples) / len(samples)


class LatencyVisitor(Visitor):
    name = "latency"

    def __init__(self) -> None:
        self._samples: List[PageLatency] = []
        self._lock = asyncio.Lock()

    async def _add(self, sample: PageLatency) -> None:
        async with self._lock:
            self._samples.append(sample)

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        await self._add(PageLatency(task.url, page.elapsed, page.status, page.size))
        return parsed.internal_urls()

    async def on_error(
        self, task: URLTask, error: FetchError, page: Optional[PageData] = None
    ) -> None:
        if page is not None:
            await self._add(PageLatency(task.url, page.elapsed, page.status, page.size))
        else:
            await self._add(PageLatency(task.url, error.elapsed, error=error.reason))

    def result(self, outcome: CrawlOutcome) -> LatencyResult:
        return LatencyResult(
            start_url=outcome.seed,
            pages=list(self._samples),
            total_time=outcome.duration,
        )
