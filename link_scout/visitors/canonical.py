# File: link_scout/visitors/canonical.py
"""link_scout.visitors.canonical: canonical URL verification.

The fetcher follows redirects by hand, so each record knows both the URL
that was linked and the URL that finally answered. Checks that depend on
another page's canonical (non-canonical links, canonical chains) run once
the crawl has finished and every reachable canonical is known.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple

from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.parser.html_parser import ParsedPage
from link_scout.utils import urls_equivalent
from link_scout.visitors.base import Visitor

__all__ = ["IssueType", "CanonicalIssue", "CanonicalResult", "CanonicalVisitor", "ISSUE_ORDER"]


class IssueType(enum.Enum):
    NON_CANONICAL_LINK = "non-canonical-link"
    MISSING_CANONICAL = "missing-canonical"
    REDIRECT_TO_CANONICAL = "redirect-to-canonical"
    CANONICAL_MISMATCH = "canonical-mismatch"
    CANONICAL_CHAIN = "canonical-chain"


ISSUE_ORDER = (
    IssueType.NON_CANONICAL_LINK,
    IssueType.REDIRECT_TO_CANONICAL,
    IssueType.CANONICAL_MISMATCH,
    IssueType.MISSING_CANONICAL,
    IssueType.CANONICAL_CHAIN,
)


@dataclass(frozen=True, slots=True)
class CanonicalIssue:
    kind: IssueType
    source_url: str
    linked_url: str
    canonical_url: str = ""
    final_url: str = ""


@dataclass(slots=True)
class CanonicalResult:
    start_url: str
    total_pages: int = 0
    total_links: int = 0
    issues: List[CanonicalIssue] = field(default_factory=list)
    pages_without: List[str] = field(default_factory=list)

    def by_type(self) -> Dict[IssueType, List[CanonicalIssue]]:
        grouped: Dict[IssueType, List[CanonicalIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.kind, []).append(issue)
        return grouped


class CanonicalVisitor(Visitor):
    """Compares each page's final URL with its declared canonical."""

    name = "canonical"

    def __init__(self) -> None:
        self._canonicals: Dict[str, str] = {}
        self._canonicals_lock = asyncio.Lock()
        self._issues: List[CanonicalIssue] = []
        self._pages_without: List[str] = []
        self._issues_lock = asyncio.Lock()
        self._checked: Set[Tuple[str, str]] = set()
        self._checked_lock = asyncio.Lock()

    async def on_page(self, task: URLTask, page: PageData, parsed: ParsedPage) -> Iterable[str]:
        final_url = page.final_url
        canonical = parsed.canonical

        if canonical:
            async with self._canonicals_lock:
                self._canonicals[task.url] = canonical
                self._canonicals[final_url] = canonical

        found: List[CanonicalIssue] = []
        if canonical and not urls_equivalent(final_url, canonical):
            found.append(
                CanonicalIssue(
                    IssueType.CANONICAL_MISMATCH, task.source_url, task.url, canonical, final_url
                )
            )
        if task.url != final_url and task.source_url:
            found.append(
                CanonicalIssue(
                    IssueType.REDIRECT_TO_CANONICAL, task.source_url, task.url, canonical, final_url
                )
            )
        async with self._issues_lock:
            if not canonical:
                self._pages_without.append(final_url)
                found.append(CanonicalIssue(IssueType.MISSING_CANONICAL, task.source_url, task.url))
            self._issues.extend(found)

        targets = parsed.internal_urls()
        async with self._checked_lock:
            for target in targets:
                self._checked.add((final_url, target))

        follow = list(targets)
        # crawl the canonical target too so chains can be detected; the engine
        # drops it if it is on another host
        if canonical and canonical not in follow:
            follow.append(canonical)
        return follow

    def _deferred_issues(self) -> List[CanonicalIssue]:
        issues: List[CanonicalIssue] = []
        for source, linked in sorted(self._checked):
            known = self._canonicals.get(linked)
            if known and not urls_equivalent(linked, known):
                issues.append(CanonicalIssue(IssueType.NON_CANONICAL_LINK, source, linked, known))

        reported: Set[str] = set()
        for url, canonical in sorted(self._canonicals.items()):
            if urls_equivalent(url, canonical) or canonical in reported:
                continue
            next_hop = self._canonicals.get(canonical)
            if next_hop and not urls_equivalent(canonical, next_hop):
                reported.add(canonical)
                issues.append(CanonicalIssue(IssueType.CANONICAL_CHAIN, url, canonical, next_hop))
        return issues

    def result(self, outcome: CrawlOutcome) -> CanonicalResult:
        return CanonicalResult(
            start_url=outcome.seed,
            total_pages=len(outcome.visited),
            total_links=len(self._checked),
            issues=list(self._issues) + self._deferred_issues(),
            pages_without=list(self._pages_without),
        )
