# link_scout/crawler/models.py
"""
Data models for the LinkScout crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

__all__ = ["URLTask", "PageData", "CrawlOutcome"]


@dataclass(frozen=True, slots=True)
class URLTask:
    """One unit of frontier work; consumed exactly once."""

    url: str
    source_url: str = ""
    depth: int = 0


@dataclass(frozen=True, slots=True)
class PageData:
    """Result of fetching one URL (the page record handed to visitors).

    ``url`` is the URL that was requested and ``final_url`` the one that
    answered after redirects. ``content`` is only filled for HTML bodies.
    """

    url: str
    final_url: str
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    content: Optional[bytes] = None
    elapsed: float = 0.0
    size: int = 0
    redirects: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        return self.header("Content-Type")

    def header(self, name: str) -> str:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return ""


@dataclass(slots=True)
class CrawlOutcome:
    """What the engine returns: every URL marked visited, and fetched records."""

    seed: str
    visited: Set[str] = field(default_factory=set)
    records: List[PageData] = field(default_factory=list)
    errors: int = 0
    capped: bool = False
    duration: float = 0.0
