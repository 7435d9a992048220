# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Dict

import pytest
import pytest_asyncio
from aiohttp import web

from link_scout.config import CrawlConfig
from link_scout.crawler.models import PageData

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
StartSite = Callable[[Dict[str, Handler]], Awaitable[str]]


def html_page(*hrefs: str, head: str = "", headers: Dict[str, str] | None = None) -> Handler:
    """Return a handler serving an HTML page that links to *hrefs*."""
    body = "".join(f'<a href="{href}">{href}</a>' for href in hrefs)

    async def handler(_: web.Request) -> web.Response:
        return web.Response(
            text=f"<html><head>{head}</head><body>{body}</body></html>",
            content_type="text/html",
            headers=headers,
        )

    return handler


def raw_page(markup: str, headers: Dict[str, str] | None = None, status: int = 200) -> Handler:
    """Return a handler serving *markup* verbatim as text/html."""

    async def handler(_: web.Request) -> web.Response:
        return web.Response(text=markup, content_type="text/html", headers=headers, status=status)

    return handler


def redirect(location: str, status: int = 301) -> Handler:
    async def handler(_: web.Request) -> web.Response:
        return web.Response(status=status, headers={"Location": location})

    return handler


@pytest_asyncio.fixture
async def start_site(unused_tcp_port_factory) -> AsyncIterator[StartSite]:
    """
    Start aiohttp apps on free ports; yields an async ``start(routes) -> base_url``.
    Every started app is cleaned up after the test.
    """
    runners: list[web.AppRunner] = []

    async def start(routes: Dict[str, Handler]) -> str:
        app = web.Application()
        for path, handler in routes.items():
            app.router.add_get(path, handler)
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    try:
        yield start
    finally:
        for runner in runners:
            await runner.cleanup()


@pytest.fixture()
def crawl_config() -> CrawlConfig:
    """
    Return a small, fast CrawlConfig for crawler tests.
    """
    return CrawlConfig(concurrency=4, timeout=2.0, user_agent="TestAgent/1.0")


@pytest.fixture()
def mock_page_data() -> PageData:
    """
    Provide a simple PageData instance with HTML content.
    """
    html = (
        b'<html><head><title>Home</title>'
        b'<link rel="canonical" href="/"></head>'
        b'<body><a href="/link1">L1</a><a href="http://external.com/">X</a></body></html>'
    )
    return PageData(
        url="http://example.com/",
        final_url="http://example.com/",
        status=200,
        headers={"Content-Type": "text/html; charset=utf-8"},
        content=html,
        size=len(html),
    )
