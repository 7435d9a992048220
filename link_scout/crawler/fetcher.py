# link_scout/crawler/fetcher.py
"""
Fetcher module: one GET per call, redirects followed by hand, timed.
"""
from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Dict, List
from urllib.parse import urljoin

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_scout.config import CrawlConfig
from link_scout.crawler.models import PageData
from link_scout.errors import FetchError, TooManyRedirectsError
from link_scout.utils import is_html

if TYPE_CHECKING:
    from multidict import CIMultiDictProxy

__all__ = ["Fetcher"]

_REDIRECT_STATUS = frozenset({301, 302, 303, 307, 308})


def _merged_headers(raw: "CIMultiDictProxy[str]") -> Dict[str, str]:
    """Collapse repeated headers (several ``X-Robots-Tag`` lines) into one value."""
    merged: Dict[str, str] = {}
    seen = set()
    for name in raw.keys():
        key = name.lower()
        if key in seen:
            continue
        seen.add(key)
        merged[name] = ", ".join(raw.getall(name))
    return merged


class Fetcher:
    """Fetches single URLs for the crawl engine.

    Redirects are followed manually so the whole chain is visible to the
    visitors (the canonical checker compares the final URL against the
    page's declared canonical). The chain is capped at
    ``config.max_redirects`` hops.

    Any HTTP response, whatever its status, comes back as :class:`PageData`;
    only transport failures, timeouts and runaway redirect chains raise
    :class:`FetchError`.
    """

    def __init__(self, session: ClientSession, config: CrawlConfig) -> None:
        self.session = session
        self.config = config
        self._timeout = ClientTimeout(total=config.timeout)

    async def fetch(self, url: str) -> PageData:
        start = time.perf_counter()
        current = url
        redirects: List[str] = []
        while True:
            try:
                async with self.session.get(
                    current,
                    allow_redirects=False,
                    timeout=self._timeout,
                    headers={"User-Agent": self.config.user_agent},
                ) as resp:
                    location = resp.headers.get("Location")
                    if resp.status in _REDIRECT_STATUS and location:
                        if len(redirects) >= self.config.max_redirects:
                            raise TooManyRedirectsError(
                                url, self.config.max_redirects, time.perf_counter() - start
                            )
                        redirects.append(current)
                        current = urljoin(current, location)
                        continue
                    body = await resp.read()
                    headers = _merged_headers(resp.headers)
                    content_type = resp.headers.get("Content-Type", "")
                    status = resp.status
            except asyncio.TimeoutError as exc:
                raise FetchError(
                    url, f"timeout after {self.config.timeout:g}s", elapsed=time.perf_counter() - start
                ) from exc
            except (ClientError, ValueError) as exc:
                raise FetchError(
                    url, str(exc) or type(exc).__name__, elapsed=time.perf_counter() - start
                ) from exc

            elapsed = time.perf_counter() - start
            html = is_html(content_type)
            return PageData(
                url=url,
                final_url=current,
                status=status,
                headers=headers,
                content=body if html else None,
                elapsed=elapsed,
                size=len(body),
                redirects=redirects,
            )
