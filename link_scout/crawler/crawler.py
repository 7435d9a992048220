# === FILE: link_scout/crawler/crawler.py ===
from __future__ import annotations

import asyncio
import dataclasses
import time
from typing import Iterable, List, Optional, Set

from aiohttp import ClientSession, ClientTimeout, TCPConnector

from link_scout.config import CrawlConfig
from link_scout.crawler.fetcher import Fetcher
from link_scout.crawler.models import CrawlOutcome, PageData, URLTask
from link_scout.errors import FetchError, ParseError
from link_scout.logger import get_logger
from link_scout.parser.html_parser import ParsedPage, empty_page, parse_html
from link_scout.utils import extract_host, is_same_host, validate_seed
from link_scout.visitors.base import Visitor

__all__ = ("AsyncCrawler", "crawl")


class AsyncCrawler:
    """Bounded-concurrency same-host crawler driven by a :class:`Visitor`.

    A fixed pool of ``config.concurrency`` worker tasks pulls from one
    unbounded frontier queue. Every URL is marked visited and enqueued in
    one step under the visited lock, so no URL is fetched twice. The crawl
    is over when the frontier is empty and no task is in flight; the
    worker that brings the in-flight count back to zero with an empty
    queue sets the completion event.
    """

    def __init__(
        self,
        config: CrawlConfig,
        visitor: Optional[Visitor] = None,
        session: Optional[ClientSession] = None,
    ) -> None:
        self.config = config
        self.visitor = visitor or Visitor()
        self.session = session
        self._owns_session = session is None
        self.logger = get_logger("crawler")

        self._semaphore = asyncio.Semaphore(config.concurrency)
        self._visited: Set[str] = set()
        self._visited_lock = asyncio.Lock()
        self._records: List[PageData] = []
        self._records_lock = asyncio.Lock()
        self._host = ""
        self._in_flight = 0
        self._errors = 0
        self._capped = False
        self._done: Optional[asyncio.Event] = None

    async def __aenter__(self) -> AsyncCrawler:
        if self.session is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                connector=TCPConnector(limit=self.config.concurrency),
                headers={"User-Agent": self.config.user_agent},
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    @property
    def visited(self) -> Set[str]:
        return set(self._visited)

    async def crawl(self, seed: str) -> CrawlOutcome:
        """Crawl from *seed* until quiescence or the safety cap.

        Raises InvalidSeedError before any fetch if *seed* is not an absolute
        http(s) URL. Nothing else propagates: per-page failures go to
        ``visitor.on_error``.
        """
        seed = validate_seed(seed)
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with AsyncCrawler(...)'")

        self._host = extract_host(seed)
        self._visited = {seed}
        self._records = []
        self._in_flight = 0
        self._errors = 0
        self._capped = False
        self._done = asyncio.Event()
        fetcher = Fetcher(self.session, self.config)

        self.logger.info("Crawl started: %s", seed)
        start = time.monotonic()
        await self.visitor.prepare(self.session, seed, self.config)

        queue: asyncio.Queue[URLTask] = asyncio.Queue()
        queue.put_nowait(URLTask(seed))
        workers = [
            asyncio.create_task(self._worker(queue, fetcher), name=f"crawl-worker-{i}")
            for i in range(self.config.concurrency)
        ]
        try:
            await self._done.wait()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)

        duration = time.monotonic() - start
        outcome = CrawlOutcome(
            seed=seed,
            visited=set(self._visited),
            records=list(self._records),
            errors=self._errors,
            capped=self._capped,
            duration=duration,
        )
        self.logger.info(
            "Crawl finished: %d URL(s), %d fetched, %d error(s) in %.2f s%s",
            len(outcome.visited),
            len(outcome.records),
            outcome.errors,
            duration,
            " (safety cap reached)" if outcome.capped else "",
        )
        return outcome

    async def _worker(self, queue: asyncio.Queue[URLTask], fetcher: Fetcher) -> None:
        while True:
            task = await queue.get()
            self._in_flight += 1
            try:
                await self._process(task, queue, fetcher)
            except asyncio.CancelledError:
                raise
            except Exception:
                # a visitor bug must not unwind the whole crawl
                self._errors += 1
                self.logger.exception("Unhandled error while processing %s", task.url)
            finally:
                self._in_flight -= 1
                queue.task_done()
                if self._in_flight == 0 and queue.empty() and self._done is not None:
                    self._done.set()

    async def _process(
        self, task: URLTask, queue: asyncio.Queue[URLTask], fetcher: Fetcher
    ) -> None:
        if self.config.max_depth and task.depth > self.config.max_depth:
            self.logger.debug("Depth %d > %d, dropped %s", task.depth, self.config.max_depth, task.url)
            return

        async with self._semaphore:
            try:
                page = await fetcher.fetch(task.url)
            except FetchError as exc:
                self._errors += 1
                self.logger.debug("%s[ERR] %s - %s", "  " * task.depth, task.url, exc.reason)
                await self.visitor.on_error(task, exc)
                return

        self.logger.debug("%s[%d] %s", "  " * task.depth, page.status, task.url)
        async with self._records_lock:
            self._records.append(dataclasses.replace(page, content=None))

        if not page.ok:
            self._errors += 1
            error = FetchError(task.url, f"HTTP {page.status}", page.status, page.elapsed)
            await self.visitor.on_error(task, error, page)
            return

        follow = await self.visitor.on_page(task, page, self._parse(page))
        await self._enqueue_all(queue, follow, task)

    def _parse(self, page: PageData) -> ParsedPage:
        try:
            return parse_html(page, self._host)
        except ParseError as exc:
            self.logger.warning("Parse failed, no links extracted: %s", exc)
            return empty_page(page)

    async def _enqueue_all(
        self, queue: asyncio.Queue[URLTask], links: Iterable[str], parent: URLTask
    ) -> None:
        depth = parent.depth + 1
        if self.config.max_depth and depth > self.config.max_depth:
            return
        for link in links:
            if not is_same_host(link, self._host):
                continue
            async with self._visited_lock:
                if link in self._visited:
                    continue
                if len(self._visited) >= self.config.max_pages:
                    if not self._capped:
                        self.logger.warning(
                            "Safety cap of %d URLs reached, not expanding further",
                            self.config.max_pages,
                        )
                    self._capped = True
                    return
                self._visited.add(link)
                queue.put_nowait(URLTask(link, parent.url, depth))


async def _crawl(seed: str, config: CrawlConfig, visitor: Optional[Visitor]) -> CrawlOutcome:
    async with AsyncCrawler(config, visitor) as crawler:
        return await crawler.crawl(seed)


def crawl(seed: str, config: CrawlConfig, visitor: Optional[Visitor] = None) -> CrawlOutcome:
    """Synchronous entry point: run one crawl on a fresh event loop."""
    return asyncio.run(_crawl(seed, config, visitor))
