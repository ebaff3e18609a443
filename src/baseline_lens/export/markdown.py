"""Markdown export — human-readable summary for PR comments and docs."""

from __future__ import annotations

from baseline_lens.constants import MARKDOWN_MAX_LOCATIONS, RiskLevel
from baseline_lens.report import CompatibilityReport

_RISK_MARKERS: dict[RiskLevel, str] = {
    RiskLevel.HIGH: "[HIGH]",
    RiskLevel.MEDIUM: "[MEDIUM]",
    RiskLevel.LOW: "[LOW]",
}


def export_markdown(report: CompatibilityReport) -> str:
    """Export the report as a Markdown document.

    Locations are shown 1-based; at most ``MARKDOWN_MAX_LOCATIONS``
    per feature.
    """
    parts: list[str] = []
    summary = report.summary
    risk = summary.risk_distribution

    parts.append("# Baseline Lens Compatibility Report\n")
    parts.append(f"Generated: {report.generated_at.isoformat()}\n")

    # Summary
    parts.append("## Summary\n")
    parts.append(f"- **Total Files**: {report.total_files}")
    parts.append(f"- **Analyzed Files**: {report.analyzed_files}")
    parts.append(f"- **Total Features**: {summary.total_features}")
    parts.append("")

    parts.append("### Risk Distribution\n")
    parts.append(f"- **High Risk**: {risk.high} features")
    parts.append(f"- **Medium Risk**: {risk.medium} features")
    parts.append(f"- **Low Risk**: {risk.low} features")
    parts.append("")

    if summary.file_type_breakdown:
        parts.append("### File Type Breakdown\n")
        for kind, count in summary.file_type_breakdown.items():
            parts.append(f"- **{kind.upper()}**: {count} features")
        parts.append("")

    # Features
    if report.features:
        parts.append("## Detected Features\n")
        for usage in report.features:
            marker = _RISK_MARKERS[usage.risk_level]
            parts.append(f"### {marker} {usage.name}\n")
            parts.append(f"- **Key**: `{usage.feature_key}`")
            parts.append(f"- **Status**: {usage.baseline_status}")
            parts.append(f"- **Usage Count**: {usage.usage_count}")
            parts.append("")

            if usage.locations:
                parts.append("**Locations:**")
                for loc in usage.locations[:MARKDOWN_MAX_LOCATIONS]:
                    parts.append(f"- `{loc.file_path}:{loc.line + 1}`")
                hidden = len(usage.locations) - MARKDOWN_MAX_LOCATIONS
                if hidden > 0:
                    parts.append(f"- ... and {hidden} more locations")
                parts.append("")

    if report.errors:
        parts.append("## Errors\n")
        for error in report.errors:
            parts.append(f"- `{error.file}`: {error.message}")
        parts.append("")

    if report.recommendations:
        parts.append("## Recommendations\n")
        for item in report.recommendations:
            parts.append(f"- {item}")
        parts.append("")

    return "\n".join(parts)
