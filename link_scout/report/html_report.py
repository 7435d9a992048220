# File: link_scout/report/html_report.py
"""link_scout.report.html_report: HTML report generation with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from link_scout.report import summarize
from link_scout.report.csv_report import table

#: templates shipped inside the package
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

_TITLES = {
    "BrokenLinkResult": "Broken links",
    "LinkAnalysisResult": "Link analysis",
    "IndexabilityResult": "Indexability",
    "CanonicalResult": "Canonical URLs",
    "LatencyResult": "Response times",
    "MetaCheckResult": "Titles and meta descriptions",
    "PageRankResult": "PageRank",
}


def render_html(
    result: Any,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Render *result* through ``report.html.j2`` and save it.

    Args:
        result: any tool result object.
        output_path: path of the resulting HTML file.
        template_dir: directory with Jinja2 templates; the bundled one by default.

    Returns:
        Path of the saved HTML file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    env = Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml", "j2"]),
    )
    template = env.get_template("report.html.j2")

    header, rows = table(result)
    context: dict[str, Any] = {
        "title": _TITLES.get(type(result).__name__, type(result).__name__),
        "start_url": result.start_url,
        "summary": summarize(result),
        "header": header,
        "rows": rows,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
