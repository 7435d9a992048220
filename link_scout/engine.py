# File: link_scout/engine.py
"""link_scout.engine: orchestration layer that runs one tool over one site."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, Optional, Union
from pathlib import Path

from link_scout.config import Settings, load_config
from link_scout.crawler.crawler import AsyncCrawler
from link_scout.errors import InvalidSeedError
from link_scout.logger import logger
from link_scout.visitors import (
    BrokenLinkVisitor,
    CanonicalVisitor,
    IndexabilityVisitor,
    LatencyVisitor,
    LinkGraphVisitor,
    LinkTaxonomyVisitor,
    MetaCheckVisitor,
    Visitor,
)

__all__ = ["Engine", "TOOLS", "run_tool"]

#: tool name -> visitor factory taking the effective settings
TOOLS: Dict[str, Callable[[Settings], Visitor]] = {
    BrokenLinkVisitor.name: lambda s: BrokenLinkVisitor(),
    LinkTaxonomyVisitor.name: lambda s: LinkTaxonomyVisitor(),
    IndexabilityVisitor.name: lambda s: IndexabilityVisitor(check_robots=s.crawl.check_robots),
    CanonicalVisitor.name: lambda s: CanonicalVisitor(),
    LatencyVisitor.name: lambda s: LatencyVisitor(),
    MetaCheckVisitor.name: lambda s: MetaCheckVisitor(),
    LinkGraphVisitor.name: lambda s: LinkGraphVisitor(s.rank),
}


class Engine:
    """Facade for the CLI and tests: pick a visitor, crawl, build the result."""

    @staticmethod
    def load_config(path: Union[str, Path, None]) -> Settings:
        """Load settings from YAML/JSON, or defaults."""
        return load_config(path)

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

    def build_visitor(self, tool: str) -> Visitor:
        try:
            factory = TOOLS[tool]
        except KeyError:
            raise ValueError(f"Unknown tool {tool!r}; expected one of {', '.join(TOOLS)}") from None
        return factory(self.settings)

    async def run_async(self, tool: str, seed: str) -> Any:
        visitor = self.build_visitor(tool)
        async with AsyncCrawler(self.settings.crawl, visitor) as crawler:
            outcome = await crawler.crawl(seed)
        return visitor.result(outcome)

    def run(self, tool: str, seed: str) -> Any:
        """Run *tool* against *seed* on a fresh event loop and return its result."""
        logger.info("Running %s on %s", tool, seed)
        try:
            return asyncio.run(self.run_async(tool, seed))
        except InvalidSeedError:
            raise
        except Exception as exc:
            logger.error("%s failed: %s", tool, exc)
            raise


def run_tool(tool: str, seed: str, settings: Optional[Settings] = None) -> Any:
    """Shortcut for ``Engine(settings).run(tool, seed)``."""
    return Engine(settings).run(tool, seed)
