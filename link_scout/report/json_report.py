# link_scout/report/json_report.py

"""
JSON report generation for LinkScout.

Serializes a tool result object to a file.
"""
import json
from pathlib import Path
from typing import Any

from link_scout.report import to_dict


def render_json(result: Any, output_path: Path | str) -> Path:
    """
    Save *result* as JSON at *output_path*.

    :param result: any tool result (BrokenLinkResult, PageRankResult, ...)
    :param output_path: path of the JSON file
    :return: Path of the saved file

    Example:
    ```python
    from link_scout.report.json_report import render_json
    report_path = render_json(result, 'reports/check.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(to_dict(result), f, ensure_ascii=False, indent=2)

    return output
