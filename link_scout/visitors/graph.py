# File: link_scout/visitors/graph.py
"""link_scout.visitors.graph: accumulate the internal link graph for PageRank."""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional

from link_scout.config import RankConfig
from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.pagerank.algorithm import PageRankResult, compute_with_result
from link_scout.pagerank.graph import LinkGraph
from link_scout.parser.html_parser import ParsedPage
from link_scout.visitors.base import Visitor

__all__ = ["LinkGraphVisitor"]


class LinkGraphVisitor(Visitor):
    """Adds one edge per (page, internal target) pair and ranks the result."""

    name = "pagerank"

    def __init__(self, rank: Optional[RankConfig] = None) -> None:
        self.rank = rank or RankConfig()
        self.graph = LinkGraph()
        self._lock = asyncio.Lock()

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        targets = [url for url in parsed.internal_urls() if url != task.url]
        async with self._lock:
            self.graph.add_page(task.url)
            for target in targets:
                self.graph.add_link(task.url, target)
        return targets

    def result(self, outcome: CrawlOutcome) -> PageRankResult:
        # the crawl has quiesced, so the graph is frozen from here on
        return compute_with_result(self.graph, self.rank, outcome.seed)
