"""Export module — report rendering in JSON, Markdown and JUnit XML."""

from collections.abc import Callable
from pathlib import Path

from baseline_lens.constants import ExportFormat
from baseline_lens.export.feature_table import (
    format_feature_info,
    format_feature_list,
)
from baseline_lens.export.json_export import export_json
from baseline_lens.export.junit import export_junit
from baseline_lens.export.markdown import export_markdown
from baseline_lens.report import CompatibilityReport

__all__ = [
    "export_json",
    "export_junit",
    "export_markdown",
    "export_report",
    "format_feature_info",
    "format_feature_list",
    "write_report",
]

_REPORT_EXPORTERS: dict[str, Callable[[CompatibilityReport], str]] = {
    ExportFormat.JSON: export_json,
    ExportFormat.MARKDOWN: export_markdown,
    ExportFormat.JUNIT: export_junit,
}


def export_report(report: CompatibilityReport, fmt: str = "json") -> str:
    """Dispatch report rendering by format string."""
    exporter = _REPORT_EXPORTERS.get(fmt.lower())
    if exporter is None:
        valid = ", ".join(_REPORT_EXPORTERS)
        msg = f"Unsupported format: {fmt}. Use: {valid}"
        raise ValueError(msg)
    return exporter(report)


def write_report(
    report: CompatibilityReport, output_path: Path | str, fmt: str = "json"
) -> Path:
    """Render ``report`` to ``output_path``, creating parent directories."""
    content = export_report(report, fmt)
    target = Path(output_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    return target
