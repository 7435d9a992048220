# link_scout/__init__.py
"""
LinkScout package initializer.
Crawls one site and runs link analysis tools (broken links, link types,
indexability, canonicals, latency, PageRank) over it.
"""
__version__ = "0.1.0"
