# link_scout/crawler/robots.py
"""
robots.txt parsing and ``Disallow`` matching for the indexability tool.

Only groups that name ``User-agent: *`` are considered. A rule matches by
path prefix; ``*`` matches any run of characters and a trailing ``$``
anchors the rule to the end of the path. An empty ``Disallow`` allows all.
"""
from __future__ import annotations

import asyncio
import re
from typing import Dict, List, Optional
from urllib.parse import urlparse, urlunparse

from aiohttp import ClientError, ClientSession, ClientTimeout

from link_scout.logger import get_logger

__all__ = ["RobotsTxtRules", "load_robots"]

logger = get_logger("robots")


class RobotsTxtRules:
    """Disallow rules that apply to every crawler (``User-agent: *``)."""

    def __init__(self, text: str = "") -> None:
        self._disallow: List[str] = []
        self._regex_cache: Dict[str, re.Pattern[str]] = {}
        self._parse(text)

    @property
    def disallow(self) -> List[str]:
        return list(self._disallow)

    def rules(self) -> List[str]:
        return [f"Disallow: {rule}" for rule in self._disallow]

    def is_blocked(self, url: str) -> bool:
        """True if the path of *url* matches any Disallow rule."""
        if not self._disallow:
            return False
        try:
            path = urlparse(url).path or "/"
        except ValueError:
            return False
        return any(self._match_path(path, rule) for rule in self._disallow)

    def _parse(self, text: str) -> None:
        agents: List[str] = []
        in_rules = False
        for raw in text.splitlines():
            line = raw.split("#", 1)[0].strip()
            if not line or ":" not in line:
                continue
            key, _, val = line.partition(":")
            key = key.lower().strip()
            val = val.strip()
            if key == "user-agent":
                # a user-agent line after rules opens a new group
                if in_rules:
                    agents = []
                    in_rules = False
                agents.append(val)
            elif key in ("allow", "disallow", "crawl-delay"):
                in_rules = True
                if key == "disallow" and val and "*" in agents:
                    self._disallow.append(val)

    def _match_path(self, path: str, pattern: str) -> bool:
        if pattern not in self._regex_cache:
            anchored = pattern.endswith("$")
            body = pattern[:-1] if anchored else pattern
            esc = re.escape(body).replace(r"\*", ".*")
            self._regex_cache[pattern] = re.compile(f"^{esc}" + ("$" if anchored else ""))
        return bool(self._regex_cache[pattern].match(path))


async def load_robots(
    session: ClientSession, seed: str, timeout: float
) -> Optional[RobotsTxtRules]:
    """Fetch ``/robots.txt`` for the seed's origin.

    A non-200 answer means everything is allowed (empty rules). A network
    failure returns None so callers can report that robots.txt was not
    consulted.
    """
    parsed = urlparse(seed)
    robots_url = urlunparse((parsed.scheme, parsed.netloc, "/robots.txt", "", "", ""))
    try:
        async with session.get(robots_url, timeout=ClientTimeout(total=timeout)) as resp:
            if resp.status != 200:
                logger.debug("robots.txt %s -> HTTP %s", robots_url, resp.status)
                return RobotsTxtRules()
            text = await resp.text(errors="replace")
    except (ClientError, asyncio.TimeoutError) as exc:
        logger.warning("Could not load robots.txt from %s: %s", robots_url, exc)
        return None
    rules = RobotsTxtRules(text)
    logger.info("Loaded %d robots.txt rule(s) from %s", len(rules.disallow), robots_url)
    return rules
