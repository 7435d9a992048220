# File: link_scout/pagerank/graph.py
"""link_scout.pagerank.graph: dense link graph built from crawl edges."""

from __future__ import annotations

from typing import Dict, Iterable, List, Set, Tuple

__all__ = ["LinkGraph"]


class LinkGraph:
    """A directed graph over URLs with dense integer node indices.

    ``pages`` maps URL → index and ``indices`` maps index → URL. Every
    ordered (from, to) pair is recorded at most once; each edge appears
    once in ``out_links[from]`` and once in ``in_links[to]``, and
    ``out_degree[i] == len(out_links[i])`` always holds.

    The graph is not thread- or task-safe by itself: writers serialize
    through the owner's lock, and PageRank reads it only once the crawl
    has quiesced.
    """

    def __init__(self) -> None:
        self.pages: Dict[str, int] = {}
        self.indices: List[str] = []
        self.out_links: List[List[int]] = []
        self.in_links: List[List[int]] = []
        self.out_degree: List[int] = []
        self._edges: Set[Tuple[int, int]] = set()

    @classmethod
    def from_edges(cls, edges: Iterable[Tuple[str, str]]) -> LinkGraph:
        graph = cls()
        for source, target in edges:
            graph.add_link(source, target)
        return graph

    def __len__(self) -> int:
        return len(self.indices)

    def __contains__(self, url: object) -> bool:
        return url in self.pages

    @property
    def size(self) -> int:
        return len(self.indices)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def add_page(self, url: str) -> int:
        """Return the index of *url*, assigning the next one on first sight."""
        idx = self.pages.get(url)
        if idx is not None:
            return idx
        idx = len(self.indices)
        self.pages[url] = idx
        self.indices.append(url)
        self.out_links.append([])
        self.in_links.append([])
        self.out_degree.append(0)
        return idx

    def add_link(self, source: str, target: str) -> None:
        """Record the edge source → target; repeated calls have no effect."""
        from_idx = self.add_page(source)
        to_idx = self.add_page(target)
        if (from_idx, to_idx) in self._edges:
            return
        self._edges.add((from_idx, to_idx))
        self.out_links[from_idx].append(to_idx)
        self.in_links[to_idx].append(from_idx)
        self.out_degree[from_idx] += 1

    def edges(self) -> List[Tuple[str, str]]:
        return [
            (self.indices[src], self.indices[dst])
            for src, targets in enumerate(self.out_links)
            for dst in targets
        ]
