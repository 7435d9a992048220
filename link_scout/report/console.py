# File: link_scout/report/console.py
"""link_scout.report.console: colorized terminal summaries built with click."""

from __future__ import annotations

from typing import Any, Dict, List

import click

from link_scout.crawler.link_extractor import LinkType
from link_scout.pagerank.algorithm import PageRankResult
from link_scout.visitors.broken import BrokenLinkResult
from link_scout.visitors.canonical import ISSUE_ORDER, CanonicalResult, IssueType
from link_scout.visitors.indexability import IndexabilityResult, NoIndexReason
from link_scout.visitors.latency import LatencyResult
from link_scout.visitors.meta import DESC_MAX_LENGTH, STATUS_ORDER, MetaCheckResult, MetaStatus
from link_scout.visitors.taxonomy import TYPE_ORDER, LinkAnalysisResult

__all__ = [
    "render_console",
    "LINK_TYPE_LABELS",
    "REASON_LABELS",
    "ISSUE_LABELS",
    "META_STATUS_LABELS",
]

LINK_TYPE_LABELS: Dict[LinkType, str] = {
    LinkType.INTERNAL: "Internal",
    LinkType.EXTERNAL: "External",
    LinkType.FILE: "Files",
    LinkType.MAILTO: "Email (mailto:)",
    LinkType.TEL: "Phone (tel:)",
    LinkType.JAVASCRIPT: "JavaScript",
    LinkType.ANCHOR: "Anchors",
    LinkType.DATA: "Data URIs",
    LinkType.OTHER: "Other",
}

REASON_LABELS: Dict[NoIndexReason, str] = {
    NoIndexReason.NOFOLLOW: "rel=nofollow",
    NoIndexReason.NOINDEX: "meta noindex",
    NoIndexReason.NOINDEX_HEADER: "X-Robots-Tag noindex",
    NoIndexReason.SPONSORED: "rel=sponsored",
    NoIndexReason.UGC: "rel=ugc",
    NoIndexReason.CANONICAL_MISMATCH: "canonical points elsewhere",
    NoIndexReason.ROBOTS_TXT: "blocked by robots.txt",
}

ISSUE_LABELS: Dict[IssueType, str] = {
    IssueType.NON_CANONICAL_LINK: "Links to non-canonical URLs",
    IssueType.REDIRECT_TO_CANONICAL: "Links that redirect",
    IssueType.CANONICAL_MISMATCH: "Canonical differs from page URL",
    IssueType.MISSING_CANONICAL: "Pages without canonical",
    IssueType.CANONICAL_CHAIN: "Canonical chains",
}

META_STATUS_LABELS: Dict[MetaStatus, str] = {
    MetaStatus.OK: "OK",
    MetaStatus.TOO_LONG: "Too long",
    MetaStatus.TOO_SHORT: "Too short",
    MetaStatus.MISSING: "Missing",
    MetaStatus.DUPLICATE: "Duplicate",
}

META_STATUS_COLORS: Dict[MetaStatus, str] = {
    MetaStatus.OK: "green",
    MetaStatus.TOO_LONG: "red",
    MetaStatus.TOO_SHORT: "yellow",
    MetaStatus.MISSING: "red",
    MetaStatus.DUPLICATE: "magenta",
}


def _heading(text: str) -> None:
    click.echo(click.style(text, bold=True))


def _limited(items: List[Any], limit: int) -> List[Any]:
    return items if limit <= 0 else items[:limit]


def _broken(result: BrokenLinkResult, limit: int) -> None:
    _heading(f"Broken links on {result.start_url}")
    click.echo(f"Pages checked: {result.total_visited}")
    if result.ok:
        click.secho("No broken links found.", fg="green")
        return
    click.secho(f"Broken links: {len(result.broken_links)}", fg="red")
    for link in _limited(result.broken_links, limit):
        detail = str(link.status) if link.status else link.error
        click.echo(f"  [{click.style(detail, fg='red')}] {link.url}")
        click.echo(f"      found on {link.source_url}")


def _taxonomy(result: LinkAnalysisResult, limit: int) -> None:
    _heading(f"Link analysis for {result.start_url}")
    click.echo(f"Pages crawled: {result.total_pages}, links found: {result.total_links}")
    for kind in TYPE_ORDER:
        count = result.count(kind)
        if count:
            click.echo(f"  {LINK_TYPE_LABELS[kind]:<18} {count}")
    hosts = result.external_by_host()
    if hosts:
        _heading("External hosts")
        for host, links in _limited(list(hosts.items()), limit):
            click.echo(f"  {host:<40} {len(links)}")
    files = result.files_by_type()
    if files:
        _heading("Files by type")
        for file_type, links in sorted(files.items()):
            click.echo(f"  {file_type:<10} {len(links)}")


def _indexability(result: IndexabilityResult, limit: int) -> None:
    _heading(f"Indexability of {result.start_url}")
    click.echo(f"Pages crawled: {result.total_pages}, links checked: {result.total_links}")
    click.secho(f"Indexable links: {result.indexable_links}", fg="green")
    color = "yellow" if result.non_indexable else "green"
    click.secho(f"Non-indexable links: {len(result.non_indexable)}", fg=color)
    if result.robots_checked:
        click.echo(f"robots.txt rules for *: {len(result.robots_rules)}")
    grouped = result.by_reason()
    for reason in NoIndexReason:
        links = grouped.get(reason)
        if not links:
            continue
        _heading(f"{REASON_LABELS[reason]} ({len(links)})")
        for link in _limited(links, limit):
            click.echo(f"  {link.url}  <- {link.source_url}")
    if result.pages_with_noindex:
        _heading("Pages marked noindex")
        for url in _limited(result.pages_with_noindex, limit):
            click.echo(f"  {url}")


def _canonical(result: CanonicalResult, limit: int) -> None:
    _heading(f"Canonical check for {result.start_url}")
    click.echo(f"Pages crawled: {result.total_pages}, links checked: {result.total_links}")
    if not result.issues:
        click.secho("No canonical issues found.", fg="green")
        return
    grouped = result.by_type()
    for kind in ISSUE_ORDER:
        issues = grouped.get(kind)
        if not issues:
            continue
        click.secho(f"{ISSUE_LABELS[kind]} ({len(issues)})", fg="yellow", bold=True)
        for issue in _limited(issues, limit):
            target = issue.canonical_url or issue.final_url
            line = f"  {issue.linked_url}"
            if target:
                line += f" -> {target}"
            click.echo(line)


def _latency(result: LatencyResult, limit: int) -> None:
    _heading(f"Response times for {result.start_url}")
    low, high, avg = result.stats()
    click.echo(f"Pages: {len(result.pages)} in {result.total_time:.2f} s")
    click.echo(f"min {low * 1000:.0f} ms, max {high * 1000:.0f} ms, avg {avg * 1000:.0f} ms")
    for page in _limited(result.slowest_first(), limit):
        if page.error:
            click.echo(f"  {click.style('ERR', fg='red')} {page.url} ({page.error})")
            continue
        color = "red" if page.elapsed >= 1.0 else "yellow" if page.elapsed >= 0.5 else "green"
        click.echo(f"  {click.style(f'{page.elapsed * 1000:7.0f} ms', fg=color)} {page.url}")


def _meta_pages(title: str, pages: List[Any], limit: int, attr: str, color: str) -> None:
    if not pages:
        return
    click.secho(f"{title} ({len(pages)})", fg=color, bold=True)
    for page in _limited(pages, limit):
        text = getattr(page, attr)
        click.echo(f"  [{len(text)} chars] {page.url}")
        if text:
            shown = text if len(text) <= 80 else text[:77] + "..."
            click.echo(click.style(f'    "{shown}"', dim=True))


def _meta(result: MetaCheckResult, limit: int) -> None:
    _heading(f"Titles and meta descriptions on {result.start_url}")
    click.echo(f"Pages analyzed: {result.total_pages}")
    descriptions = result.by_description_status()
    titles = result.by_title_status()
    click.echo(f"{'':<12}{'description':>12}{'title':>8}")
    for status in STATUS_ORDER:
        label = click.style(f"{META_STATUS_LABELS[status]:<12}", fg=META_STATUS_COLORS[status])
        click.echo(f"{label}{len(descriptions.get(status, [])):>12}{len(titles.get(status, [])):>8}")

    if not result.issues():
        click.secho("All titles and meta descriptions look fine.", fg="green")
        return

    _meta_pages(
        f"Descriptions over {DESC_MAX_LENGTH} characters",
        descriptions.get(MetaStatus.TOO_LONG, []), limit, "description", "red",
    )
    _meta_pages("Missing descriptions", descriptions.get(MetaStatus.MISSING, []), limit,
                "description", "red")
    _meta_pages("Short descriptions", descriptions.get(MetaStatus.TOO_SHORT, []), limit,
                "description", "yellow")
    _meta_pages("Missing titles", titles.get(MetaStatus.MISSING, []), limit, "title", "red")
    _meta_pages("Long titles", titles.get(MetaStatus.TOO_LONG, []), limit, "title", "yellow")
    _meta_pages("Short titles", titles.get(MetaStatus.TOO_SHORT, []), limit, "title", "yellow")

    for label, groups in (
        ("Duplicate descriptions", result.duplicate_descriptions),
        ("Duplicate titles", result.duplicate_titles),
    ):
        if not groups:
            continue
        click.secho(f"{label} ({len(groups)} group(s))", fg="magenta", bold=True)
        for text, urls in _limited(list(groups.items()), limit):
            shown = text if len(text) <= 60 else text[:57] + "..."
            click.echo(f'  "{shown}" used on {len(urls)} pages')
            for url in urls[:3]:
                click.echo(f"    {url}")
            if len(urls) > 3:
                click.echo(f"    ... and {len(urls) - 3} more")


def _pagerank(result: PageRankResult, limit: int) -> None:
    _heading(f"PageRank for {result.start_url}")
    click.echo(
        f"Pages: {result.total_pages}, links: {result.total_links}, "
        f"damping: {result.damping_factor}"
    )
    status = "converged" if result.converged else "did not converge"
    click.secho(
        f"{status} after {result.iterations} iteration(s)",
        fg="green" if result.converged else "yellow",
    )
    high, low, avg, total = result.stats()
    click.echo(f"max {high:.6f}, min {low:.6f}, avg {avg:.6f}, sum {total:.6f}")
    _heading("Top pages")
    for n, score in enumerate(result.top(limit), start=1):
        click.echo(f"  {n:>3}. {score.score:.6f}  in:{score.in_links:<4} {score.url}")
    _heading("Most linked")
    for score in result.top_by_in_links(limit if limit > 0 else len(result.scores)):
        click.echo(f"  {score.in_links:>5}  {score.url}")
    orphans = result.orphans()
    if orphans:
        click.secho(f"Orphan pages ({len(orphans)})", fg="yellow")
        for score in _limited(orphans, limit):
            click.echo(f"  {score.url}")
    dead_ends = result.dead_ends()
    if dead_ends:
        click.secho(f"Dead ends ({len(dead_ends)})", fg="yellow")
        for score in _limited(dead_ends, limit):
            click.echo(f"  {score.url}")


_RENDERERS = {
    BrokenLinkResult: _broken,
    LinkAnalysisResult: _taxonomy,
    IndexabilityResult: _indexability,
    CanonicalResult: _canonical,
    LatencyResult: _latency,
    MetaCheckResult: _meta,
    PageRankResult: _pagerank,
}


def render_console(result: Any, limit: int = 20) -> None:
    """Print a colorized summary of *result*; *limit* <= 0 prints every item."""
    try:
        renderer = _RENDERERS[type(result)]
    except KeyError:
        raise TypeError(f"No report layout for {type(result).__name__}") from None
    renderer(result, limit)
