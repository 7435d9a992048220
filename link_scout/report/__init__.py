# File: link_scout/report/__init__.py
"""link_scout.report: turn tool results into JSON, CSV, HTML and console output."""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, Callable, Dict

from link_scout.pagerank.algorithm import PageRankResult
from link_scout.visitors.broken import BrokenLinkResult
from link_scout.visitors.canonical import CanonicalResult
from link_scout.visitors.indexability import IndexabilityResult
from link_scout.visitors.latency import LatencyResult
from link_scout.visitors.meta import STATUS_ORDER, MetaCheckResult
from link_scout.visitors.taxonomy import TYPE_ORDER, LinkAnalysisResult


def _jsonable(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {_jsonable(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return sorted(_jsonable(v) for v in value)
    return value


def _broken_summary(result: BrokenLinkResult) -> Dict[str, Any]:
    return {"total_visited": result.total_visited, "broken": len(result.broken_links)}


def _taxonomy_summary(result: LinkAnalysisResult) -> Dict[str, Any]:
    return {
        "total_pages": result.total_pages,
        "total_links": result.total_links,
        "by_type": {kind.value: result.count(kind) for kind in TYPE_ORDER},
    }


def _index_summary(result: IndexabilityResult) -> Dict[str, Any]:
    return {
        "total_pages": result.total_pages,
        "total_links": result.total_links,
        "indexable_links": result.indexable_links,
        "non_indexable_links": len(result.non_indexable),
        "by_reason": {r.value: len(links) for r, links in result.by_reason().items()},
    }


def _canonical_summary(result: CanonicalResult) -> Dict[str, Any]:
    return {
        "total_pages": result.total_pages,
        "total_links": result.total_links,
        "issues": len(result.issues),
        "by_type": {t.value: len(items) for t, items in result.by_type().items()},
    }


def _latency_summary(result: LatencyResult) -> Dict[str, Any]:
    low, high, avg = result.stats()
    return {"pages": len(result.pages), "min": low, "max": high, "avg": avg}


def _meta_summary(result: MetaCheckResult) -> Dict[str, Any]:
    descriptions = result.by_description_status()
    titles = result.by_title_status()
    return {
        "total_pages": result.total_pages,
        "pages_with_issues": len(result.issues()),
        "descriptions": {s.value: len(descriptions.get(s, [])) for s in STATUS_ORDER},
        "titles": {s.value: len(titles.get(s, [])) for s in STATUS_ORDER},
        "duplicate_description_groups": len(result.duplicate_descriptions),
        "duplicate_title_groups": len(result.duplicate_titles),
    }


def _pagerank_summary(result: PageRankResult) -> Dict[str, Any]:
    high, low, avg, total = result.stats()
    return {
        "total_pages": result.total_pages,
        "total_links": result.total_links,
        "iterations": result.iterations,
        "converged": result.converged,
        "max": high,
        "min": low,
        "avg": avg,
        "sum": total,
        "orphans": len(result.orphans()),
        "dead_ends": len(result.dead_ends()),
    }


SUMMARIES: Dict[type, Callable[[Any], Dict[str, Any]]] = {
    BrokenLinkResult: _broken_summary,
    LinkAnalysisResult: _taxonomy_summary,
    IndexabilityResult: _index_summary,
    CanonicalResult: _canonical_summary,
    LatencyResult: _latency_summary,
    MetaCheckResult: _meta_summary,
    PageRankResult: _pagerank_summary,
}


def summarize(result: Any) -> Dict[str, Any]:
    """Headline numbers for *result*; raises TypeError for unknown result types."""
    try:
        return SUMMARIES[type(result)](result)
    except KeyError:
        raise TypeError(f"No report layout for {type(result).__name__}") from None


def to_dict(result: Any) -> Dict[str, Any]:
    """Full JSON-ready dict: every dataclass field plus a ``summary`` block."""
    data = _jsonable(dataclasses.asdict(result))
    data["summary"] = summarize(result)
    return data


from link_scout.report.console import render_console  # noqa: E402
from link_scout.report.csv_report import render_csv  # noqa: E402
from link_scout.report.html_report import render_html  # noqa: E402
from link_scout.report.json_report import render_json  # noqa: E402

__all__ = ["to_dict", "summarize", "render_json", "render_csv", "render_html", "render_console"]
