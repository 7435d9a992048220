# link_scout/crawler/link_extractor.py
"""
Link extraction and classification for LinkScout.

Every ``<a href>`` is turned into an :class:`ExtractedLink`. Navigable links
(internal, external, file) carry an absolute, fragment-stripped http(s) URL;
the other kinds keep the raw href for reporting.
"""
from __future__ import annotations

import enum
import posixpath
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

from link_scout.utils import strip_fragment

__all__ = [
    "LinkType",
    "ExtractedLink",
    "FILE_EXTENSIONS",
    "classify_href",
    "extract_links",
    "links_from_soup",
]


class LinkType(enum.Enum):
    INTERNAL = "internal"
    EXTERNAL = "external"
    FILE = "file"
    MAILTO = "mailto"
    TEL = "tel"
    JAVASCRIPT = "javascript"
    ANCHOR = "anchor"
    DATA = "data"
    OTHER = "other"

    @property
    def navigable(self) -> bool:
        return self in (LinkType.INTERNAL, LinkType.EXTERNAL, LinkType.FILE)


#: extensions treated as downloadable files rather than pages
FILE_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        "pdf", "doc", "docx", "xls", "xlsx", "ppt", "pptx", "odt", "ods", "odp",
        "zip", "rar", "7z", "tar", "gz",
        "jpg", "jpeg", "png", "gif", "svg", "webp", "ico", "bmp", "tiff",
        "mp3", "wav", "ogg", "flac",
        "mp4", "avi", "mov", "wmv", "webm",
        "txt", "csv", "json", "xml",
        "exe", "dmg", "pkg", "deb", "rpm",
    }
)

_SCHEME_TYPES = (
    ("javascript:", LinkType.JAVASCRIPT),
    ("mailto:", LinkType.MAILTO),
    ("tel:", LinkType.TEL),
    ("data:", LinkType.DATA),
)


@dataclass(frozen=True, slots=True)
class ExtractedLink:
    """A classified anchor.

    ``url`` is the resolved absolute URL for navigable kinds and the raw
    href for everything else. ``rel`` holds the lower-cased rel tokens.
    """

    href: str
    url: str
    kind: LinkType
    rel: FrozenSet[str] = field(default_factory=frozenset)
    file_type: str = ""

    @property
    def nofollow(self) -> bool:
        return "nofollow" in self.rel

    @property
    def sponsored(self) -> bool:
        return "sponsored" in self.rel

    @property
    def ugc(self) -> bool:
        return "ugc" in self.rel


def _file_extension(path: str) -> str:
    ext = posixpath.splitext(path)[1]
    return ext[1:].lower() if ext else ""


def classify_href(
    href: str,
    base_url: str,
    site_host: str,
    rel: Iterable[str] = (),
) -> Optional[ExtractedLink]:
    """Classify one raw href found on a page at *base_url*.

    Returns None for empty hrefs. *site_host* is the crawl's seed authority;
    it decides internal versus external.
    """
    raw = (href or "").strip()
    if not raw:
        return None
    rel_tokens = frozenset(token.lower() for token in rel)
    lowered = raw.lower()

    for prefix, kind in _SCHEME_TYPES:
        if lowered.startswith(prefix):
            return ExtractedLink(raw, raw, kind, rel_tokens)
    if raw.startswith("#"):
        return ExtractedLink(raw, raw, LinkType.ANCHOR, rel_tokens)
    if lowered.startswith("file:"):
        return ExtractedLink(raw, raw, LinkType.OTHER, rel_tokens)

    try:
        resolved = urljoin(base_url, raw)
        parsed = urlparse(resolved)
    except ValueError:
        return ExtractedLink(raw, raw, LinkType.OTHER, rel_tokens)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return ExtractedLink(raw, raw, LinkType.OTHER, rel_tokens)

    absolute = strip_fragment(resolved)
    ext = _file_extension(parsed.path)
    if ext in FILE_EXTENSIONS:
        return ExtractedLink(raw, absolute, LinkType.FILE, rel_tokens, file_type=ext)
    if parsed.netloc == site_host:
        return ExtractedLink(raw, absolute, LinkType.INTERNAL, rel_tokens)
    return ExtractedLink(raw, absolute, LinkType.EXTERNAL, rel_tokens)


def _rel_tokens(tag: Tag) -> List[str]:
    rel = tag.get("rel")
    if rel is None:
        return []
    # bs4 splits multi-valued rel into a list already
    if isinstance(rel, str):
        return rel.split()
    return list(rel)


def links_from_soup(soup: BeautifulSoup, base_url: str, site_host: str) -> List[ExtractedLink]:
    """Classify every ``<a href>`` in an already parsed document."""
    links: List[ExtractedLink] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        link = classify_href(href_val, base_url, site_host, _rel_tokens(tag))
        if link is not None:
            links.append(link)
    return links


def extract_links(content: str | bytes, base_url: str) -> List[str]:
    """
    Return absolute, fragment-stripped http(s) links found in *content*.

    Skips ``javascript:``, ``mailto:``, ``tel:``, ``data:``, ``file:`` and
    bare ``#`` targets. Order follows the document; duplicates are kept.
    """
    soup = BeautifulSoup(content, "html.parser")
    host = urlparse(base_url).netloc
    return [link.url for link in links_from_soup(soup, base_url, host) if link.kind.navigable]
