"""Link graph and PageRank power iteration."""
from link_scout.pagerank.algorithm import PageRankResult, PageScore, compute, compute_with_result
from link_scout.pagerank.graph import LinkGraph

__all__ = ["LinkGraph", "PageRankResult", "PageScore", "compute", "compute_with_result"]
