"""JSON export — camelCase report envelope."""

from __future__ import annotations

import json

from baseline_lens.report import CompatibilityReport


def export_json(report: CompatibilityReport) -> str:
    """Export the report as indented camelCase JSON."""
    payload = report.model_dump(by_alias=True, mode="json")
    return json.dumps(payload, indent=2, ensure_ascii=False)
