"""Assemble a renderable compatibility report from an analysis result."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import Field

from baseline_lens.analysis.aggregator import group_feature_usages
from baseline_lens.analysis.schemas import (
    AnalysisError,
    AnalysisResult,
    CamelModel,
    FeatureUsage,
    RiskDistribution,
)
from baseline_lens.constants import ANALYSIS_RATE_WARNING_PERCENT

NO_ISSUES_MESSAGE = "No significant compatibility issues detected."


class ReportSummary(CamelModel):
    total_features: int = 0
    widely_available: int = 0
    newly_available: int = 0
    limited_availability: int = 0
    risk_distribution: RiskDistribution = Field(
        default_factory=RiskDistribution
    )
    file_type_breakdown: dict[str, int] = Field(
        default_factory=lambda: dict[str, int]()
    )


class CompatibilityReport(CamelModel):
    """Everything a renderer needs; serializes to the camelCase schema."""

    summary: ReportSummary
    features: list[FeatureUsage] = Field(
        default_factory=lambda: list[FeatureUsage]()
    )
    recommendations: list[str] = Field(default_factory=lambda: list[str]())
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    project_path: str = ""
    total_files: int = 0
    analyzed_files: int = 0
    errors: list[AnalysisError] = Field(
        default_factory=lambda: list[AnalysisError]()
    )


def build_report(
    result: AnalysisResult,
    project_path: str = "",
    generated_at: datetime | None = None,
) -> CompatibilityReport:
    summary = ReportSummary(
        total_features=len(result.features),
        widely_available=result.summary.widely_available,
        newly_available=result.summary.newly_available,
        limited_availability=result.summary.limited_availability,
        risk_distribution=result.risk_distribution.model_copy(),
        file_type_breakdown=dict(result.file_type_breakdown),
    )
    return CompatibilityReport(
        summary=summary,
        features=group_feature_usages(result.features),
        recommendations=recommendations(result),
        generated_at=generated_at or datetime.now(UTC),
        project_path=project_path,
        total_files=result.total_files,
        analyzed_files=result.analyzed_files,
        errors=list(result.errors),
    )


def recommendations(result: AnalysisResult) -> list[str]:
    """Short action items derived from the result."""
    risk = result.risk_distribution
    items: list[str] = []

    if risk.high > 0:
        items.append(
            f"{risk.high} high-risk features detected. Consider using "
            "polyfills or alternative implementations."
        )
    if risk.medium > 0:
        items.append(
            f"{risk.medium} newly available features found. Verify "
            "browser support requirements."
        )
    if result.errors:
        items.append(
            f"{len(result.errors)} files had analysis errors. Check file "
            "syntax and encoding."
        )
    if result.total_files > 0:
        rate = result.analyzed_files / result.total_files * 100
        if rate < ANALYSIS_RATE_WARNING_PERCENT:
            items.append(
                f"Only {rate:.1f}% of files were successfully analyzed. "
                "Consider reviewing excluded patterns."
            )

    return items or [NO_ISSUES_MESSAGE]
