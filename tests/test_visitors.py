# File: tests/test_visitors.py
# End-to-end tests: each tool's visitor driven by the real crawler against a local site
from __future__ import annotations

import asyncio
from collections import Counter

import pytest
from aiohttp import web

from conftest import html_page, raw_page, redirect
from link_scout.config import CrawlConfig, RankConfig
from link_scout.crawler.crawler import AsyncCrawler
from link_scout.crawler.link_extractor import LinkType
from link_scout.visitors import (
    BrokenLinkVisitor,
    CanonicalVisitor,
    IndexabilityVisitor,
    LatencyVisitor,
    LinkGraphVisitor,
    LinkTaxonomyVisitor,
)
from link_scout.visitors.canonical import IssueType
from link_scout.visitors.indexability import NoIndexReason
from link_scout.visitors.meta import MetaCheckVisitor, MetaStatus


async def run_tool(visitor, seed: str, config: CrawlConfig | None = None):
    config = config or CrawlConfig(concurrency=4, timeout=2.0)
    async with AsyncCrawler(config, visitor) as crawler:
        outcome = await asyncio.wait_for(crawler.crawl(seed), timeout=20.0)
    return visitor.result(outcome)


# --------------------------------------------------------------------------- #
#                                Broken links                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_broken_links(start_site):
    async def server_error(_):
        return web.Response(status=500, text="oops")

    base = await start_site(
        {
            "/": html_page("/ok", "/missing", "/err", "/loop"),
            "/ok": html_page("/missing"),
            "/err": server_error,
            "/loop": redirect("/loop", 302),
        }
    )
    result = await run_tool(BrokenLinkVisitor(), f"{base}/")

    assert not result.ok
    assert result.total_visited == 5
    broken = {link.url[len(base):]: link for link in result.broken_links}
    assert set(broken) == {"/missing", "/err", "/loop"}
    assert broken["/missing"].status == 404
    assert broken["/missing"].source_url in (f"{base}/", f"{base}/ok")
    assert broken["/missing"].error == ""
    assert broken["/err"].status == 500
    assert broken["/loop"].status == 0
    assert "too many redirects" in broken["/loop"].error


@pytest.mark.asyncio()
async def test_broken_same_host_files_are_reported(start_site):
    async def logo(_):
        return web.Response(body=b"\x89PNG", content_type="image/png")

    base = await start_site(
        {
            "/": html_page("/missing.pdf", "/missing-page", "/logo.png", "https://other.example/x.pdf"),
            "/logo.png": logo,
        }
    )
    result = await run_tool(BrokenLinkVisitor(), f"{base}/")

    broken = sorted(link.url[len(base):] for link in result.broken_links)
    assert broken == ["/missing-page", "/missing.pdf"]
    assert all(link.status == 404 for link in result.broken_links)
    assert result.total_visited == 4


@pytest.mark.asyncio()
async def test_broken_start_url(start_site):
    base = await start_site({"/": html_page()})
    result = await run_tool(BrokenLinkVisitor(), f"{base}/gone")

    assert len(result.broken_links) == 1
    link = result.broken_links[0]
    assert link.source_url == link.url == f"{base}/gone"
    assert link.status == 404
    assert link.error == "start URL returned error"


@pytest.mark.asyncio()
async def test_timeout_is_recorded_as_broken(start_site):
    async def slow(_):
        await asyncio.sleep(1.0)
        return web.Response(text="late", content_type="text/html")

    base = await start_site({"/": html_page("/slow"), "/slow": slow})
    result = await run_tool(BrokenLinkVisitor(), f"{base}/", CrawlConfig(timeout=0.3))

    assert [link.url for link in result.broken_links] == [f"{base}/slow"]
    assert result.broken_links[0].error.startswith("timeout")


# --------------------------------------------------------------------------- #
#                               Link taxonomy                                 #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_link_taxonomy(start_site):
    hits: Counter = Counter()

    async def pdf(_):
        hits["pdf"] += 1
        return web.Response(body=b"%PDF", content_type="application/pdf")

    base = await start_site(
        {
            "/": html_page(
                "/a", "https://other.example/x", "https://other.example/y",
                "/doc.pdf", "mailto:hi@site.test", "tel:+100", "#top", "javascript:go()",
            ),
            "/a": html_page("/b"),
            "/b": html_page(),
            "/doc.pdf": pdf,
        }
    )
    result = await run_tool(LinkTaxonomyVisitor(), f"{base}/")

    assert result.total_pages == 3
    assert result.count(LinkType.INTERNAL) == 2
    assert result.count(LinkType.EXTERNAL) == 2
    assert result.count(LinkType.MAILTO) == 1
    assert result.count(LinkType.TEL) == 1
    assert result.count(LinkType.ANCHOR) == 1
    assert result.count(LinkType.JAVASCRIPT) == 1
    assert result.total_links == 9
    assert list(result.external_by_host()) == ["other.example"]
    assert list(result.files_by_type()) == ["pdf"]
    assert hits["pdf"] == 0


# --------------------------------------------------------------------------- #
#                                Indexability                                 #
# --------------------------------------------------------------------------- #


def _indexability_site() -> dict:
    home = (
        '<a href="/a" rel="nofollow">a</a>'
        '<a href="/private/x">p</a>'
        '<a href="/noindex">n</a>'
        '<a href="https://ads.example/" rel="sponsored">ad</a>'
        '<a href="/canon">c</a>'
        '<a href="/header-noindex">h</a>'
        '<a href="/nf">nf</a>'
    )

    async def robots(_):
        return web.Response(text="User-agent: *\nDisallow: /private", content_type="text/plain")

    return {
        "/robots.txt": robots,
        "/": raw_page(home),
        "/a": html_page(),
        "/b": html_page(),
        "/private/x": html_page(),
        "/noindex": raw_page('<meta name="robots" content="noindex">'),
        "/canon": raw_page('<link rel="canonical" href="/a">'),
        "/header-noindex": raw_page("<p>hidden</p>", headers={"X-Robots-Tag": "noindex"}),
        "/nf": raw_page('<meta name="robots" content="nofollow"><a href="/b">b</a>'),
    }


@pytest.mark.asyncio()
async def test_indexability_reasons(start_site):
    base = await start_site(_indexability_site())
    result = await run_tool(IndexabilityVisitor(), f"{base}/")

    reasons = {
        (link.source_url[len(base):], link.url.replace(base, "")): link.reasons
        for link in result.non_indexable
    }
    assert reasons == {
        ("/", "/a"): [NoIndexReason.NOFOLLOW],
        ("/", "/private/x"): [NoIndexReason.ROBOTS_TXT],
        ("/", "/noindex"): [NoIndexReason.NOINDEX],
        ("/", "https://ads.example/"): [NoIndexReason.SPONSORED],
        ("/", "/canon"): [NoIndexReason.CANONICAL_MISMATCH],
        ("/", "/header-noindex"): [NoIndexReason.NOINDEX_HEADER],
        ("/nf", "/b"): [NoIndexReason.NOFOLLOW],
    }
    canon = next(link for link in result.non_indexable if link.url.endswith("/canon"))
    assert canon.details == f"canonical: {base}/a"

    assert result.total_links == 8
    assert result.indexable_links == 1
    assert result.robots_checked
    assert result.robots_rules == ["Disallow: /private"]
    assert sorted(url[len(base):] for url in result.pages_with_noindex) == [
        "/header-noindex",
        "/noindex",
    ]
    assert set(result.by_reason()) == set(NoIndexReason) - {NoIndexReason.UGC}


@pytest.mark.asyncio()
async def test_indexability_without_robots(start_site):
    base = await start_site(_indexability_site())
    result = await run_tool(IndexabilityVisitor(check_robots=False), f"{base}/")

    assert not result.robots_checked
    assert result.robots_rules == []
    assert all(NoIndexReason.ROBOTS_TXT not in link.reasons for link in result.non_indexable)


@pytest.mark.asyncio()
async def test_noindex_header_on_error_page(start_site):
    base = await start_site(
        {
            "/": html_page("/gone"),
            "/gone": raw_page("gone", headers={"X-Robots-Tag": "noindex"}, status=410),
        }
    )
    result = await run_tool(IndexabilityVisitor(check_robots=False), f"{base}/")

    assert [link.reasons for link in result.non_indexable] == [[NoIndexReason.NOINDEX_HEADER]]


# --------------------------------------------------------------------------- #
#                                 Canonical                                   #
# --------------------------------------------------------------------------- #


def canonical_page(target: str, *hrefs: str):
    links = "".join(f'<a href="{h}">{h}</a>' for h in hrefs)
    return raw_page(f'<link rel="canonical" href="{target}">{links}')


@pytest.mark.asyncio()
async def test_canonical_issues(start_site):
    base = await start_site(
        {
            "/": canonical_page("/", "/old", "/dup", "/nocanon", "/chain1"),
            "/old": redirect("/new"),
            "/new": canonical_page("/new"),
            "/dup": canonical_page("/"),
            "/nocanon": html_page(),
            "/chain1": canonical_page("/chain2"),
            "/chain2": canonical_page("/chain3"),
            "/chain3": canonical_page("/chain3"),
        }
    )
    result = await run_tool(CanonicalVisitor(), f"{base}/")

    def paths(kind):
        return {
            (issue.linked_url[len(base):], issue.canonical_url[len(base):])
            for issue in result.by_type().get(kind, [])
        }

    assert paths(IssueType.MISSING_CANONICAL) == {("/nocanon", "")}
    assert paths(IssueType.CANONICAL_MISMATCH) == {
        ("/dup", "/"),
        ("/chain1", "/chain2"),
        ("/chain2", "/chain3"),
    }
    assert paths(IssueType.CANONICAL_CHAIN) == {("/chain2", "/chain3")}
    assert {("/dup", "/"), ("/chain1", "/chain2")} <= paths(IssueType.NON_CANONICAL_LINK)

    redirects = result.by_type()[IssueType.REDIRECT_TO_CANONICAL]
    assert len(redirects) == 1
    assert redirects[0].linked_url == f"{base}/old"
    assert redirects[0].final_url == f"{base}/new"
    assert redirects[0].source_url == f"{base}/"

    assert result.pages_without == [f"{base}/nocanon"]


# --------------------------------------------------------------------------- #
#                                  Latency                                    #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_latency_samples(start_site):
    async def slow(_):
        await asyncio.sleep(0.2)
        return web.Response(text="<p>slow</p>", content_type="text/html")

    base = await start_site({"/": html_page("/slow", "/fast", "/missing"), "/slow": slow,
                             "/fast": html_page()})
    result = await run_tool(LatencyVisitor(), f"{base}/")

    assert len(result.pages) == 4
    assert result.slowest_first()[0].url == f"{base}/slow"
    statuses = {p.url[len(base):]: p.status for p in result.pages}
    assert statuses["/missing"] == 404
    low, high, avg = result.stats()
    assert 0 < low <= avg <= high
    assert high >= 0.2
    assert result.total_time >= high


@pytest.mark.asyncio()
async def test_latency_transport_error(unused_tcp_port):
    result = await run_tool(LatencyVisitor(), f"http://127.0.0.1:{unused_tcp_port}/")

    assert len(result.pages) == 1
    assert result.pages[0].error
    assert result.stats() == (0.0, 0.0, 0.0)


# --------------------------------------------------------------------------- #
#                        Titles and meta descriptions                         #
# --------------------------------------------------------------------------- #


def meta_head(title: str | None, description: str | None) -> str:
    head = f"<title>{title}</title>" if title is not None else ""
    if description is not None:
        head += f'<meta name="description" content="{description}">'
    return head


@pytest.mark.asyncio()
async def test_meta_check_statuses(start_site):
    shared = "s" * 100
    base = await start_site(
        {
            "/": html_page("/a", "/b", "/c", "/d", "/e", head=meta_head("Home page of the site", "r" * 100)),
            "/a": html_page(head=meta_head(None, "too short")),
            "/b": html_page(head=meta_head("Shared title here", shared)),
            "/c": html_page(head=meta_head("Shared title here", shared)),
            "/d": html_page(head=meta_head("t" * 70, "l" * 200)),
            "/e": html_page(head=meta_head("Tiny", None)),
        }
    )
    result = await run_tool(MetaCheckVisitor(), f"{base}/")

    assert result.total_pages == 6
    pages = {p.url[len(base):]: p for p in result.pages}
    assert {path: p.description_status for path, p in pages.items()} == {
        "/": MetaStatus.OK,
        "/a": MetaStatus.TOO_SHORT,
        "/b": MetaStatus.DUPLICATE,
        "/c": MetaStatus.DUPLICATE,
        "/d": MetaStatus.TOO_LONG,
        "/e": MetaStatus.MISSING,
    }
    assert {path: p.title_status for path, p in pages.items()} == {
        "/": MetaStatus.OK,
        "/a": MetaStatus.MISSING,
        "/b": MetaStatus.DUPLICATE,
        "/c": MetaStatus.DUPLICATE,
        "/d": MetaStatus.TOO_LONG,
        "/e": MetaStatus.TOO_SHORT,
    }
    assert result.duplicate_descriptions == {shared: [f"{base}/b", f"{base}/c"]}
    assert list(result.duplicate_titles) == ["Shared title here"]
    assert pages["/d"].description_length == 200
    assert [p.url for p in result.issues()] == [f"{base}/{x}" for x in "abcde"]


@pytest.mark.asyncio()
async def test_meta_check_skips_non_html(start_site):
    async def pdf(_):
        return web.Response(body=b"%PDF", content_type="application/pdf")

    base = await start_site({"/": html_page("/doc", head=meta_head("Home page of the site", "r" * 100)), "/doc": pdf})
    result = await run_tool(MetaCheckVisitor(), f"{base}/")

    assert [p.url for p in result.pages] == [f"{base}/"]
    assert result.issues() == []


# --------------------------------------------------------------------------- #
#                                 PageRank                                    #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_link_graph_and_rank(start_site):
    base = await start_site(
        {
            "/": html_page("/a", "/b", "https://elsewhere.example/"),
            "/a": html_page("/b", "/a", "/b"),
            "/b": html_page("/"),
        }
    )
    visitor = LinkGraphVisitor(RankConfig(damping_factor=0.85))
    result = await run_tool(visitor, f"{base}/")

    assert sorted((s[len(base):], t[len(base):]) for s, t in visitor.graph.edges()) == [
        ("/", "/a"),
        ("/", "/b"),
        ("/a", "/b"),
        ("/b", "/"),
    ]
    assert result.total_pages == 3
    assert result.total_links == 4
    assert result.converged
    assert result.top(1)[0].url == f"{base}/b"
    assert sum(s.score for s in result.scores) == pytest.approx(1.0, abs=1e-6)
    assert result.orphans() == []
    assert result.dead_ends() == []
