# File: link_scout/visitors/meta.py
"""link_scout.visitors.meta: title and meta description audit.

Every HTML page gets one status for its ``<title>`` and one for its
``<meta name="description">``. Statuses are decided in this order:
missing, duplicate (same text on another page), too long, too short, ok.
Duplicates can only be known once the crawl is over, so grading happens
in :meth:`MetaCheckVisitor.result`.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.parser.html_parser import ParsedPage
from link_scout.visitors.base import Visitor

__all__ = [
    "MetaStatus",
    "PageMeta",
    "MetaCheckResult",
    "MetaCheckVisitor",
    "STATUS_ORDER",
    "DESC_MIN_LENGTH",
    "DESC_MAX_LENGTH",
    "TITLE_MIN_LENGTH",
    "TITLE_MAX_LENGTH",
]

#: search snippets cut descriptions after roughly this many characters
DESC_MIN_LENGTH = 70
DESC_MAX_LENGTH = 155
TITLE_MIN_LENGTH = 10
TITLE_MAX_LENGTH = 60


class MetaStatus(enum.Enum):
    OK = "ok"
    TOO_LONG = "too_long"
    TOO_SHORT = "too_short"
    MISSING = "missing"
    DUPLICATE = "duplicate"


STATUS_ORDER = (
    MetaStatus.TOO_LONG,
    MetaStatus.MISSING,
    MetaStatus.DUPLICATE,
    MetaStatus.TOO_SHORT,
    MetaStatus.OK,
)


def grade(text: str, duplicated: bool, min_length: int, max_length: int) -> MetaStatus:
    if not text:
        return MetaStatus.MISSING
    if duplicated:
        return MetaStatus.DUPLICATE
    if len(text) > max_length:
        return MetaStatus.TOO_LONG
    if len(text) < min_length:
        return MetaStatus.TOO_SHORT
    return MetaStatus.OK


@dataclass(frozen=True, slots=True)
class PageMeta:
    url: str
    title: str = ""
    description: str = ""
    title_status: MetaStatus = MetaStatus.OK
    description_status: MetaStatus = MetaStatus.OK

    @property
    def title_length(self) -> int:
        return len(self.title)

    @property
    def description_length(self) -> int:
        return len(self.description)

    @property
    def ok(self) -> bool:
        return self.title_status is MetaStatus.OK and self.description_status is MetaStatus.OK


@dataclass(slots=True)
class MetaCheckResult:
    start_url: str
    total_pages: int = 0
    pages: List[PageMeta] = field(default_factory=list)
    duplicate_titles: Dict[str, List[str]] = field(default_factory=dict)
    duplicate_descriptions: Dict[str, List[str]] = field(default_factory=dict)

    def by_description_status(self) -> Dict[MetaStatus, List[PageMeta]]:
        """Pages grouped by description status; too long first by excess, too short by shortfall."""
        grouped: Dict[MetaStatus, List[PageMeta]] = {}
        for page in self.pages:
            grouped.setdefault(page.description_status, []).append(page)
        if MetaStatus.TOO_LONG in grouped:
            grouped[MetaStatus.TOO_LONG].sort(key=lambda p: p.description_length, reverse=True)
        if MetaStatus.TOO_SHORT in grouped:
            grouped[MetaStatus.TOO_SHORT].sort(key=lambda p: p.description_length)
        return grouped

    def by_title_status(self) -> Dict[MetaStatus, List[PageMeta]]:
        grouped: Dict[MetaStatus, List[PageMeta]] = {}
        for page in self.pages:
            grouped.setdefault(page.title_status, []).append(page)
        return grouped

    def issues(self) -> List[PageMeta]:
        return [page for page in self.pages if not page.ok]


def _duplicates(values: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
    """text -> URLs using it, for texts shared by more than one page."""
    seen: Dict[str, List[str]] = {}
    for url, text in values:
        if text:
            seen.setdefault(text, []).append(url)
    return {text: urls for text, urls in seen.items() if len(urls) > 1}


class MetaCheckVisitor(Visitor):
    """Collects title and description of every HTML page."""

    name = "metacheck"

    def __init__(self) -> None:
        self._seen: List[Tuple[str, str, str]] = []
        self._lock = asyncio.Lock()

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        if page.content is not None:
            async with self._lock:
                self._seen.append((task.url, parsed.title, parsed.meta_description))
        return parsed.internal_urls()

    def result(self, outcome: CrawlOutcome) -> MetaCheckResult:
        seen = sorted(self._seen)
        titles = _duplicates((url, title) for url, title, _ in seen)
        descriptions = _duplicates((url, desc) for url, _, desc in seen)
        shared_titles: Set[str] = set(titles)
        shared_descriptions: Set[str] = set(descriptions)

        pages = [
            PageMeta(
                url=url,
                title=title,
                description=desc,
                title_status=grade(title, title in shared_titles, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH),
                description_status=grade(
                    desc, desc in shared_descriptions, DESC_MIN_LENGTH, DESC_MAX_LENGTH
                ),
            )
            for url, title, desc in seen
        ]
        return MetaCheckResult(
            start_url=outcome.seed,
            total_pages=len(pages),
            pages=pages,
            duplicate_titles=titles,
            duplicate_descriptions=descriptions,
        )
