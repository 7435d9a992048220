# File: tests/test_link_extractor.py
from __future__ import annotations

from collections import Counter

import pytest

from link_scout.crawler.link_extractor import LinkType, classify_href, extract_links
from link_scout.crawler.models import PageData
from link_scout.parser.html_parser import parse_html

BASE = "https://site.com/"
HOST = "site.com"


def test_mixed_hrefs_are_classified_once_each():
    hrefs = ["#x", "javascript:f()", "mailto:a@b.com", "/page", "https://other.com/p"]
    kinds = Counter(classify_href(h, BASE, HOST).kind for h in hrefs)
    assert kinds == Counter(
        {
            LinkType.ANCHOR: 1,
            LinkType.JAVASCRIPT: 1,
            LinkType.MAILTO: 1,
            LinkType.INTERNAL: 1,
            LinkType.EXTERNAL: 1,
        }
    )


@pytest.mark.parametrize(
    "href,kind,url",
    [
        ("/about#team", LinkType.INTERNAL, "https://site.com/about"),
        ("contact", LinkType.INTERNAL, "https://site.com/contact"),
        ("//cdn.site.com/app", LinkType.EXTERNAL, "https://cdn.site.com/app"),
        ("/files/report.PDF", LinkType.FILE, "https://site.com/files/report.PDF"),
        ("tel:+123", LinkType.TEL, "tel:+123"),
        ("data:text/plain,hi", LinkType.DATA, "data:text/plain,hi"),
        ("JavaScript:void(0)", LinkType.JAVASCRIPT, "JavaScript:void(0)"),
        ("file:///etc/passwd", LinkType.OTHER, "file:///etc/passwd"),
        ("ftp://site.com/a", LinkType.OTHER, "ftp://site.com/a"),
    ],
)
def test_classify_href(href, kind, url):
    link = classify_href(href, BASE, HOST)
    assert link.kind is kind
    assert link.url == url


def test_file_type_is_lowercase_extension():
    link = classify_href("/docs/manual.Docx?dl=1", BASE, HOST)
    assert link.kind is LinkType.FILE
    assert link.file_type == "docx"


@pytest.mark.parametrize("href", ["", "   "])
def test_empty_href_is_skipped(href):
    assert classify_href(href, BASE, HOST) is None


def test_rel_tokens():
    link = classify_href("https://ads.com/", BASE, HOST, rel=["Sponsored", "nofollow"])
    assert link.sponsored and link.nofollow
    assert not link.ugc


def test_extract_links_returns_navigable_only():
    html = (
        '<a href="#top">top</a><a href="/a#frag">a</a><a href="mailto:x@y.z">m</a>'
        '<a href="https://other.com/">o</a><a href="/img/logo.png">logo</a>'
        '<a href="javascript:void(0)">js</a><a>no href</a>'
    )
    assert extract_links(html, BASE) == [
        "https://site.com/a",
        "https://other.com/",
        "https://site.com/img/logo.png",
    ]


def page(html: str, url: str = BASE, headers: dict | None = None) -> PageData:
    body = html.encode("utf-8")
    return PageData(
        url=url,
        final_url=url,
        status=200,
        headers=headers or {"Content-Type": "text/html; charset=utf-8"},
        content=body,
        size=len(body),
    )


def test_parse_html_facts(mock_page_data):
    parsed = parse_html(mock_page_data, "example.com")
    assert parsed.title == "Home"
    assert parsed.canonical == "http://example.com/"
    assert parsed.internal_urls() == ["http://example.com/link1"]
    assert [link.url for link in parsed.links_of(LinkType.EXTERNAL)] == ["http://external.com/"]
    assert not parsed.noindex


def test_parse_html_robots_meta_and_header():
    parsed = parse_html(
        page(
            '<meta name="ROBOTS" content="NoIndex, NoFollow"><a href="/x">x</a>',
            headers={"content-type": "text/html", "x-robots-tag": "noindex"},
        ),
        HOST,
    )
    assert parsed.noindex and parsed.nofollow and parsed.noindex_header


def test_parse_html_honours_base_href():
    parsed = parse_html(page('<base href="https://site.com/blog/"><a href="post">p</a>'), HOST)
    assert parsed.internal_urls() == ["https://site.com/blog/post"]


def test_internal_urls_are_deduplicated_in_order():
    parsed = parse_html(page('<a href="/b">1</a><a href="/a">2</a><a href="/b#x">3</a>'), HOST)
    assert parsed.internal_urls() == ["https://site.com/b", "https://site.com/a"]


def test_same_host_urls_include_local_files():
    parsed = parse_html(
        page('<a href="/a">a</a><a href="/guide.pdf">g</a><a href="https://cdn.test/x.png">x</a>'),
        HOST,
    )
    assert parsed.internal_urls() == ["https://site.com/a"]
    assert parsed.same_host_urls() == ["https://site.com/a", "https://site.com/guide.pdf"]


def test_non_html_page_has_no_links():
    pdf = PageData(url=BASE, final_url=BASE, status=200, headers={"Content-Type": "application/pdf"})
    parsed = parse_html(pdf, HOST)
    assert parsed.links == []
