# === FILE: link_scout/parser/html_parser.py ===
"""HTML fact extraction for LinkScout.

:func:`parse_html` turns a fetched page into a :class:`ParsedPage`, the
structured facts the visitors consume:

* title: document <title> text or ``""`` if absent.
* meta_description: ``<meta name="description">`` content.
* canonical: absolute URL of ``<link rel="canonical">`` or ``""``.
* noindex / nofollow: page-level robots directives from
  ``<meta name="robots">`` and the ``X-Robots-Tag`` response header.
* links: every ``<a href>`` classified by
  :func:`link_scout.crawler.link_extractor.classify_href`.

Malformed markup never stops a crawl: :func:`parse_html` raises
:class:`~link_scout.errors.ParseError` and the engine falls back to
:func:`empty_page`, i.e. "no links extracted".
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_scout.crawler.link_extractor import ExtractedLink, LinkType, links_from_soup
from link_scout.crawler.models import PageData
from link_scout.errors import ParseError
from link_scout.utils import extract_host, is_same_host, strip_fragment

__all__: Sequence[str] = ("ParsedPage", "parse_html", "empty_page")


@dataclass(slots=True)
class ParsedPage:
    """Structured facts extracted from one HTML page."""

    url: str
    title: str = ""
    meta_description: str = ""
    canonical: str = ""
    noindex: bool = False
    nofollow: bool = False
    noindex_header: bool = False
    links: list[ExtractedLink] = field(default_factory=list)
    site_host: str = ""

    # Convenience helpers ---------------------------------------------------
    def links_of(self, kind: LinkType) -> list[ExtractedLink]:
        return [link for link in self.links if link.kind is kind]

    def internal_urls(self) -> list[str]:
        """Internal link targets in document order, duplicates removed."""
        return list(dict.fromkeys(link.url for link in self.links_of(LinkType.INTERNAL)))

    def same_host_urls(self) -> list[str]:
        """Internal pages plus same-host files (``/doc.pdf``, ``/logo.png``)."""
        host = self.site_host or extract_host(self.url)
        return list(
            dict.fromkeys(
                link.url
                for link in self.links
                if link.kind is LinkType.INTERNAL
                or (link.kind is LinkType.FILE and is_same_host(link.url, host))
            )
        )


def empty_page(page: PageData) -> ParsedPage:
    """Facts for a page that is not HTML or could not be parsed."""
    return ParsedPage(url=page.final_url, noindex_header=_header_noindex(page))


def _header_noindex(page: PageData) -> bool:
    return "noindex" in page.header("X-Robots-Tag").lower()


def _charset(page: PageData) -> Optional[str]:
    for part in page.content_type.split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip("\"'")
    return None


def _meta_content(soup: BeautifulSoup, name: str) -> str:
    for tag in soup.find_all("meta"):
        if not isinstance(tag, Tag):
            continue
        meta_name = tag.get("name")
        if isinstance(meta_name, str) and meta_name.strip().lower() == name:
            content = tag.get("content")
            return content.strip() if isinstance(content, str) else ""
    return ""


def _canonical(soup: BeautifulSoup, base_url: str) -> str:
    for tag in soup.find_all("link", href=True):
        if not isinstance(tag, Tag):
            continue
        rel = tag.get("rel") or []
        tokens = rel.split() if isinstance(rel, str) else rel
        if "canonical" in (t.lower() for t in tokens):
            href = tag.get("href")
            if isinstance(href, str) and href.strip():
                return strip_fragment(urljoin(base_url, href.strip()))
    return ""


def _base_href(soup: BeautifulSoup, page_url: str) -> str:
    base = soup.find("base", href=True)
    if isinstance(base, Tag):
        href = base.get("href")
        if isinstance(href, str) and href.strip():
            return urljoin(page_url, href.strip())
    return page_url


def parse_html(page: PageData, site_host: str = "") -> ParsedPage:
    """Parse the HTML body of *page*.

    Parameters
    ----------
    page
        A fetched page; relative links resolve against ``page.final_url``
        (or a ``<base href>`` when the document declares one).
    site_host
        Authority of the crawl seed, used to tell internal links from
        external ones. Defaults to the page's own host.
    """
    if page.content is None:
        return empty_page(page)

    try:
        soup = BeautifulSoup(page.content, "html.parser", from_encoding=_charset(page))
    except (AssertionError, LookupError, ValueError) as exc:
        raise ParseError(f"cannot parse {page.final_url}: {exc}") from exc

    base_url = _base_href(soup, page.final_url)
    host = site_host or extract_host(page.final_url)

    title_tag = soup.find("title")
    title = title_tag.get_text(strip=True) if title_tag else ""

    robots = _meta_content(soup, "robots").lower()

    return ParsedPage(
        url=page.final_url,
        title=title,
        meta_description=_meta_content(soup, "description"),
        canonical=_canonical(soup, base_url),
        noindex="noindex" in robots,
        nofollow="nofollow" in robots,
        noindex_header=_header_noindex(page),
        links=links_from_soup(soup, base_url, host),
        site_host=host,
    )
