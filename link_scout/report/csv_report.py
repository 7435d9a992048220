# File: link_scout/report/csv_report.py
"""link_scout.report.csv_report: one CSV row per reported item."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

from link_scout.pagerank.algorithm import PageRankResult
from link_scout.visitors.broken import BrokenLinkResult
from link_scout.visitors.canonical import ISSUE_ORDER, CanonicalResult
from link_scout.visitors.indexability import IndexabilityResult
from link_scout.visitors.latency import LatencyResult
from link_scout.visitors.meta import MetaCheckResult
from link_scout.visitors.taxonomy import TYPE_ORDER, LinkAnalysisResult

__all__ = ["table", "render_csv"]

Row = Sequence[Any]


def table(result: Any) -> Tuple[List[str], List[Row]]:
    """Return ``(header, rows)`` for *result*; shared by the CSV and HTML reports."""
    if isinstance(result, BrokenLinkResult):
        return (
            ["source_url", "url", "status", "error"],
            [(b.source_url, b.url, b.status, b.error) for b in result.broken_links],
        )
    if isinstance(result, LinkAnalysisResult):
        return (
            ["type", "url", "source_url", "file_type"],
            [
                (link.kind.value, link.url, link.source_url, link.file_type)
                for kind in TYPE_ORDER
                for link in result.links_by_type.get(kind, [])
            ],
        )
    if isinstance(result, IndexabilityResult):
        return (
            ["url", "source_url", "reasons", "details"],
            [
                (link.url, link.source_url, ";".join(r.value for r in link.reasons), link.details)
                for link in result.non_indexable
            ],
        )
    if isinstance(result, CanonicalResult):
        grouped = result.by_type()
        return (
            ["type", "source_url", "linked_url", "canonical_url", "final_url"],
            [
                (i.kind.value, i.source_url, i.linked_url, i.canonical_url, i.final_url)
                for kind in ISSUE_ORDER
                for i in grouped.get(kind, [])
            ],
        )
    if isinstance(result, LatencyResult):
        return (
            ["url", "elapsed", "status", "size", "error"],
            [(p.url, f"{p.elapsed:.4f}", p.status, p.size, p.error) for p in result.slowest_first()],
        )
    if isinstance(result, MetaCheckResult):
        return (
            [
                "url", "title_status", "title_length", "description_status",
                "description_length", "title", "description",
            ],
            [
                (p.url, p.title_status.value, p.title_length, p.description_status.value,
                 p.description_length, p.title, p.description)
                for p in result.pages
            ],
        )
    if isinstance(result, PageRankResult):
        return (
            ["rank", "url", "score", "in_links", "out_links"],
            [
                (n, s.url, f"{s.score:.8f}", s.in_links, s.out_links)
                for n, s in enumerate(result.ranked(), start=1)
            ],
        )
    raise TypeError(f"No report layout for {type(result).__name__}")


def render_csv(result: Any, output_path: Union[Path, str]) -> Path:
    """Write *result* as CSV with a header row and return the file path."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    header, rows = table(result)
    with output.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return output
