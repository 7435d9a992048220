# File: link_scout/utils.py
"""link_scout.utils: URL helpers shared by the crawler, the parser and the visitors."""

from __future__ import annotations

from typing import Sequence
from urllib.parse import parse_qsl, urldefrag, urlencode, urlparse, urlunparse

from link_scout.errors import InvalidSeedError
from link_scout.logger import get_logger

__all__: Sequence[str] = (
    "validate_seed",
    "extract_host",
    "is_same_host",
    "strip_fragment",
    "normalize_url",
    "urls_equivalent",
    "is_html",
)

_HTTP_SCHEMES = ("http", "https")
_DEFAULT_PORTS = {"http": ":80", "https": ":443"}

logger = get_logger("utils")


def validate_seed(url: str) -> str:
    """Return *url* stripped of whitespace, or raise InvalidSeedError."""
    candidate = (url or "").strip()
    try:
        parsed = urlparse(candidate)
    except ValueError as exc:
        raise InvalidSeedError(candidate, str(exc)) from exc
    if parsed.scheme.lower() not in _HTTP_SCHEMES:
        raise InvalidSeedError(candidate, "URL must use http or https scheme")
    if not parsed.netloc:
        raise InvalidSeedError(candidate, "URL must be absolute")
    return candidate


def extract_host(url: str) -> str:
    """Return the authority (host[:port]) of *url*, '' when unparseable."""
    try:
        return urlparse(url).netloc
    except ValueError:
        return ""


def is_same_host(url: str, host: str) -> bool:
    """Exact authority match; subdomains and other ports count as foreign."""
    return extract_host(url) == host


def strip_fragment(url: str) -> str:
    return urldefrag(url)[0]


def normalize_url(url: str) -> str:
    """Normalize *url* for equality checks.

    Lower-cases scheme and host, drops default ports and the fragment, and
    sorts query parameters. The path is left untouched.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    default_port = _DEFAULT_PORTS.get(scheme)
    if default_port and netloc.endswith(default_port):
        netloc = netloc[: -len(default_port)]
    query = parsed.query
    if query:
        query = urlencode(sorted(parse_qsl(query, keep_blank_values=True)), doseq=True)
    normalized = urlunparse((scheme, netloc, parsed.path, parsed.params, query, ""))
    logger.debug("Normalized URL: %s -> %s", url, normalized)
    return normalized


def urls_equivalent(first: str, second: str) -> bool:
    """True if two URLs are equal after normalization, ignoring a trailing slash."""
    a, b = normalize_url(first), normalize_url(second)
    if a == b:
        return True
    return a.rstrip("/") == b.rstrip("/")


def is_html(content_type: str) -> bool:
    ctype = (content_type or "").lower()
    return "text/html" in ctype or "application/xhtml+xml" in ctype
