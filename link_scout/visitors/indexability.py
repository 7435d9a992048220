# File: link_scout/visitors/indexability.py
"""link_scout.visitors.indexability: find links search engines will not index or follow.

Reasons are collected per (source page, target) pair:

* the link carries ``rel="nofollow"``, ``rel="sponsored"`` or ``rel="ugc"``;
* the source page has ``<meta name="robots" content="nofollow">`` (applies
  to every link on it);
* the internal target is disallowed by robots.txt (``User-agent: *``);
* the target page itself is ``noindex`` (meta tag or ``X-Robots-Tag``).
  Target-page reasons are attached once the crawl has finished, because a
  target is usually fetched after the page that links to it.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from aiohttp import ClientSession

from link_scout.config import CrawlConfig
from link_scout.crawler.link_extractor import LinkType
from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.crawler.robots import RobotsTxtRules, load_robots
from link_scout.errors import FetchError
from link_scout.parser.html_parser import ParsedPage
from link_scout.utils import urls_equivalent
from link_scout.visitors.base import Visitor

__all__ = ["NoIndexReason", "NonIndexableLink", "IndexabilityResult", "IndexabilityVisitor"]


class NoIndexReason(enum.Enum):
    NOFOLLOW = "nofollow"
    NOINDEX = "noindex"
    NOINDEX_HEADER = "noindex-header"
    SPONSORED = "sponsored"
    UGC = "ugc"
    CANONICAL_MISMATCH = "canonical-mismatch"
    ROBOTS_TXT = "robots-txt"


@dataclass(slots=True)
class NonIndexableLink:
    url: str
    source_url: str
    reasons: List[NoIndexReason] = field(default_factory=list)
    details: str = ""


@dataclass(slots=True)
class IndexabilityResult:
    start_url: str
    total_pages: int = 0
    total_links: int = 0
    non_indexable: List[NonIndexableLink] = field(default_factory=list)
    pages_with_noindex: List[str] = field(default_factory=list)
    robots_rules: List[str] = field(default_factory=list)
    robots_checked: bool = False

    @property
    def indexable_links(self) -> int:
        return self.total_links - len(self.non_indexable)

    def by_reason(self) -> Dict[NoIndexReason, List[NonIndexableLink]]:
        grouped: Dict[NoIndexReason, List[NonIndexableLink]] = {}
        for link in self.non_indexable:
            for reason in link.reasons:
                grouped.setdefault(reason, []).append(link)
        return grouped


@dataclass(slots=True)
class _PageFacts:
    noindex: bool = False
    noindex_header: bool = False
    canonical: str = ""


class IndexabilityVisitor(Visitor):
    """Records non-indexable links; follows every internal link."""

    name = "index"

    def __init__(self, check_robots: bool = True) -> None:
        self.check_robots = check_robots
        self.robots: Optional[RobotsTxtRules] = None
        # (source, target) -> reasons found on the source page
        self._links: Dict[Tuple[str, str], List[NoIndexReason]] = {}
        self._pages: Dict[str, _PageFacts] = {}
        self._noindex_pages: List[str] = []
        self._lock = asyncio.Lock()

    async def prepare(self, session: ClientSession, seed: str, config: CrawlConfig) -> None:
        if self.check_robots:
            self.robots = await load_robots(session, seed, config.timeout)

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        facts = _PageFacts(parsed.noindex, parsed.noindex_header, parsed.canonical)
        found: List[Tuple[Tuple[str, str], List[NoIndexReason]]] = []
        for link in parsed.links:
            if link.kind not in (LinkType.INTERNAL, LinkType.EXTERNAL, LinkType.FILE):
                continue
            reasons: List[NoIndexReason] = []
            if link.nofollow or parsed.nofollow:
                reasons.append(NoIndexReason.NOFOLLOW)
            if link.sponsored:
                reasons.append(NoIndexReason.SPONSORED)
            if link.ugc:
                reasons.append(NoIndexReason.UGC)
            if link.kind is LinkType.INTERNAL and self.robots and self.robots.is_blocked(link.url):
                reasons.append(NoIndexReason.ROBOTS_TXT)
            found.append(((task.url, link.url), reasons))

        async with self._lock:
            self._pages[task.url] = facts
            if page.final_url != task.url:
                self._pages.setdefault(page.final_url, facts)
            if (facts.noindex or facts.noindex_header) and task.url not in self._noindex_pages:
                self._noindex_pages.append(task.url)
            for key, reasons in found:
                self._links.setdefault(key, reasons)

        return parsed.internal_urls()

    async def on_error(
        self, task: URLTask, error: FetchError, page: Optional[PageData] = None
    ) -> None:
        # an error page can still carry X-Robots-Tag: noindex
        if page is not None and "noindex" in page.header("X-Robots-Tag").lower():
            async with self._lock:
                self._pages[task.url] = _PageFacts(noindex_header=True)
                if task.url not in self._noindex_pages:
                    self._noindex_pages.append(task.url)

    def _target_reasons(self, url: str) -> Tuple[List[NoIndexReason], str]:
        facts = self._pages.get(url)
        if facts is None:
            return [], ""
        reasons: List[NoIndexReason] = []
        details = ""
        if facts.noindex:
            reasons.append(NoIndexReason.NOINDEX)
        if facts.noindex_header:
            reasons.append(NoIndexReason.NOINDEX_HEADER)
        if facts.canonical and not urls_equivalent(facts.canonical, url):
            reasons.append(NoIndexReason.CANONICAL_MISMATCH)
            details = f"canonical: {facts.canonical}"
        return reasons, details

    def result(self, outcome: CrawlOutcome) -> IndexabilityResult:
        non_indexable: List[NonIndexableLink] = []
        for (source, target), reasons in self._links.items():
            target_reasons, details = self._target_reasons(target)
            combined = list(reasons) + [r for r in target_reasons if r not in reasons]
            if combined:
                non_indexable.append(NonIndexableLink(target, source, combined, details))
        return IndexabilityResult(
            start_url=outcome.seed,
            total_pages=len(outcome.visited),
            total_links=len(self._links),
            non_indexable=non_indexable,
            pages_with_noindex=list(self._noindex_pages),
            robots_rules=self.robots.rules() if self.robots else [],
            robots_checked=self.robots is not None,
        )
