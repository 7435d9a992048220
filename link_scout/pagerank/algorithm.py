# File: link_scout/pagerank/algorithm.py
"""link_scout.pagerank.algorithm: PageRank by power iteration.

Each iteration computes, for every node ``i``::

    new[i] = (1 - d) / n                      # random teleport
           + d * dangling_sum / n             # rank of pages without out-links
           + d * sum(score[j] / out_degree[j] for j in in_links[i])

Dangling mass is spread uniformly instead of leaking away, so the scores
stay a probability distribution (they sum to 1) after every iteration.
Iteration stops once the L1 distance between two successive vectors drops
below the tolerance, or after ``max_iterations``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from link_scout.config import RankConfig
from link_scout.logger import get_logger
from link_scout.pagerank.graph import LinkGraph

__all__ = ["PageScore", "PageRankResult", "compute", "compute_with_result"]

logger = get_logger("pagerank")


@dataclass(frozen=True, slots=True)
class PageScore:
    url: str
    score: float
    in_links: int = 0
    out_links: int = 0


@dataclass(slots=True)
class PageRankResult:
    start_url: str
    total_pages: int = 0
    total_links: int = 0
    iterations: int = 0
    converged: bool = True
    damping_factor: float = 0.85
    scores: List[PageScore] = field(default_factory=list)

    def ranked(self) -> List[PageScore]:
        """Scores sorted highest first; ties keep discovery order."""
        return sorted(self.scores, key=lambda s: s.score, reverse=True)

    def top(self, n: int) -> List[PageScore]:
        ranked = self.ranked()
        return ranked if n <= 0 else ranked[:n]

    def top_by_in_links(self, n: int) -> List[PageScore]:
        return sorted(self.scores, key=lambda s: s.in_links, reverse=True)[:n]

    def orphans(self) -> List[PageScore]:
        """Pages no other page links to."""
        return [s for s in self.ranked() if s.in_links == 0]

    def dead_ends(self) -> List[PageScore]:
        """Pages without outgoing internal links."""
        return [s for s in self.ranked() if s.out_links == 0]

    def stats(self) -> Tuple[float, float, float, float]:
        """(max, min, avg, sum) of the scores."""
        if not self.scores:
            return 0.0, 0.0, 0.0, 0.0
        values = [s.score for s in self.scores]
        total = sum(values)
        return max(values), min(values), total / len(values), total


def compute(
    graph: LinkGraph,
    damping_factor: float = 0.85,
    max_iterations: int = 100,
    tolerance: float = 1e-6,
) -> Tuple[List[float], int, bool]:
    """Run power iteration over a frozen *graph*.

    Returns ``(scores, iterations, converged)`` where ``scores[i]`` belongs
    to ``graph.indices[i]``. An empty graph yields ``([], 0, True)``.
    """
    if not 0 < damping_factor <= 1:
        raise ValueError(f"damping_factor must be in (0, 1], got {damping_factor}")
    if max_iterations <= 0:
        raise ValueError(f"max_iterations must be > 0, got {max_iterations}")

    n = graph.size
    if n == 0:
        return [], 0, True

    d = damping_factor
    teleport = (1.0 - d) / n
    out_degree = graph.out_degree
    in_links = graph.in_links
    dangling = [i for i in range(n) if out_degree[i] == 0]

    scores = [1.0 / n] * n
    new_scores = [0.0] * n
    iterations = 0
    converged = False

    for iteration in range(max_iterations):
        iterations = iteration + 1
        dangling_contribution = d * sum(scores[i] for i in dangling) / n
        base = teleport + dangling_contribution

        for i in range(n):
            new_scores[i] = base + d * sum(scores[j] / out_degree[j] for j in in_links[i])

        diff = sum(abs(new - old) for new, old in zip(new_scores, scores))
        scores, new_scores = new_scores, scores

        if diff < tolerance:
            converged = True
            break

    logger.debug(
        "PageRank over %d page(s): %d iteration(s), converged=%s", n, iterations, converged
    )
    return scores, iterations, converged


def compute_with_result(graph: LinkGraph, config: RankConfig, start_url: str) -> PageRankResult:
    """Run :func:`compute` and wrap the vector into a :class:`PageRankResult`."""
    scores, iterations, converged = compute(
        graph, config.damping_factor, config.max_iterations, config.tolerance
    )
    return PageRankResult(
        start_url=start_url,
        total_pages=graph.size,
        total_links=graph.edge_count,
        iterations=iterations,
        converged=converged,
        damping_factor=config.damping_factor,
        scores=[
            PageScore(
                url=url,
                score=scores[i],
                in_links=len(graph.in_links[i]),
                out_links=len(graph.out_links[i]),
            )
            for i, url in enumerate(graph.indices)
        ],
    )
