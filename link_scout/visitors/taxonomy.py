# File: link_scout/visitors/taxonomy.py
"""link_scout.visitors.taxonomy: classify every href on the site by link type."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from link_scout.crawler.link_extractor import ExtractedLink, LinkType
from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.parser.html_parser import ParsedPage
from link_scout.utils import extract_host
from link_scout.visitors.base import Visitor

__all__ = ["FoundLink", "LinkAnalysisResult", "LinkTaxonomyVisitor", "TYPE_ORDER"]

#: display order of the link categories
TYPE_ORDER = (
    LinkType.INTERNAL,
    LinkType.EXTERNAL,
    LinkType.FILE,
    LinkType.MAILTO,
    LinkType.TEL,
    LinkType.JAVASCRIPT,
    LinkType.ANCHOR,
    LinkType.DATA,
    LinkType.OTHER,
)


@dataclass(frozen=True, slots=True)
class FoundLink:
    """A classified link together with the page it was found on."""

    url: str
    source_url: str
    kind: LinkType
    file_type: str = ""


@dataclass(slots=True)
class LinkAnalysisResult:
    start_url: str
    total_pages: int = 0
    links_by_type: Dict[LinkType, List[FoundLink]] = field(default_factory=dict)

    @property
    def total_links(self) -> int:
        return sum(len(links) for links in self.links_by_type.values())

    def count(self, kind: LinkType) -> int:
        return len(self.links_by_type.get(kind, []))

    def external_by_host(self) -> Dict[str, List[FoundLink]]:
        grouped: Dict[str, List[FoundLink]] = {}
        for link in self.links_by_type.get(LinkType.EXTERNAL, []):
            grouped.setdefault(extract_host(link.url), []).append(link)
        return dict(sorted(grouped.items(), key=lambda item: (-len(item[1]), item[0])))

    def files_by_type(self) -> Dict[str, List[FoundLink]]:
        grouped: Dict[str, List[FoundLink]] = {}
        for link in self.links_by_type.get(LinkType.FILE, []):
            grouped.setdefault(link.file_type, []).append(link)
        return grouped


class LinkTaxonomyVisitor(Visitor):
    """Buckets every discovered href; follows internal page links only."""

    name = "analyze"

    def __init__(self) -> None:
        self._by_type: Dict[LinkType, List[FoundLink]] = {}
        self._lock = asyncio.Lock()

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        found = [self._found(link, task.url) for link in parsed.links]
        async with self._lock:
            for item in found:
                self._by_type.setdefault(item.kind, []).append(item)
        return parsed.internal_urls()

    @staticmethod
    def _found(link: ExtractedLink, source_url: str) -> FoundLink:
        return FoundLink(link.url, source_url, link.kind, link.file_type)

    def result(self, outcome: CrawlOutcome) -> LinkAnalysisResult:
        return LinkAnalysisResult(
            start_url=outcome.seed,
            total_pages=len(outcome.visited),
            links_by_type={kind: list(items) for kind, items in self._by_type.items()},
        )
