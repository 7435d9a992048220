"""Per-tool crawl visitors."""
from link_scout.visitors.base import Visitor
from link_scout.visitors.broken import BrokenLinkVisitor
from link_scout.visitors.canonical import CanonicalVisitor
from link_scout.visitors.graph import LinkGraphVisitor
from link_scout.visitors.indexability import IndexabilityVisitor
from link_scout.visitors.latency import LatencyVisitor
from link_scout.visitors.meta import MetaCheckVisitor
from link_scout.visitors.taxonomy import LinkTaxonomyVisitor

__all__ = [
    "Visitor",
    "BrokenLinkVisitor",
    "CanonicalVisitor",
    "IndexabilityVisitor",
    "LatencyVisitor",
    "LinkGraphVisitor",
    "LinkTaxonomyVisitor",
    "MetaCheckVisitor",
]
