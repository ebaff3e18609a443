"""Fold per-file results into an :class:`AnalysisResult`.

Pure functions over already-classified data; nothing here raises on
well-typed input.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from baseline_lens.analysis.schemas import (
    AnalysisError,
    AnalysisResult,
    DetectedFeature,
    FeatureUsage,
    FileAnalysis,
    FileLocation,
    RiskDistribution,
    StatusSummary,
)
from baseline_lens.constants import (
    CI_EXAMPLE_FEATURES,
    RISK_ORDER,
    BaselineStatus,
    RiskLevel,
)


def assemble(
    file_results: Iterable[FileAnalysis], total_files: int
) -> AnalysisResult:
    """Merge file results, keeping discovery order."""
    features: list[DetectedFeature] = []
    errors: list[AnalysisError] = []
    analyzed = 0
    for file_result in file_results:
        if file_result.error is not None:
            errors.append(file_result.error)
            continue
        if file_result.analyzed:
            analyzed += 1
            features.extend(file_result.features)

    status_counts = Counter(f.baseline_status for f in features)
    risk_counts = Counter(f.risk_level for f in features)
    breakdown = Counter(str(f.kind) for f in features)

    return AnalysisResult(
        total_files=total_files,
        analyzed_files=analyzed,
        features=features,
        errors=errors,
        summary=StatusSummary(
            widely_available=status_counts[BaselineStatus.WIDELY_AVAILABLE],
            newly_available=status_counts[BaselineStatus.NEWLY_AVAILABLE],
            limited_availability=status_counts[
                BaselineStatus.LIMITED_AVAILABILITY
            ],
        ),
        risk_distribution=RiskDistribution(
            low=risk_counts[RiskLevel.LOW],
            medium=risk_counts[RiskLevel.MEDIUM],
            high=risk_counts[RiskLevel.HIGH],
        ),
        file_type_breakdown=dict(breakdown),
    )


def group_feature_usages(
    features: Sequence[DetectedFeature],
) -> list[FeatureUsage]:
    """Group by ``(feature_key, kind)``.

    Sorted high risk first, then by usage count descending; ties keep
    first-seen order.
    """
    groups: dict[tuple[str, str], FeatureUsage] = {}
    for feature in features:
        group_key = (feature.feature_key, feature.kind)
        usage = groups.get(group_key)
        if usage is None:
            usage = FeatureUsage(
                feature_key=feature.feature_key,
                name=feature.name,
                kind=feature.kind,
                baseline_status=feature.baseline_status,
                risk_level=feature.risk_level,
            )
            groups[group_key] = usage
        usage.usage_count += 1
        usage.locations.append(
            FileLocation(
                file_path=feature.file_path,
                line=feature.line,
                column=feature.column,
                context=feature.context,
            )
        )

    return sorted(
        groups.values(),
        key=lambda u: (-RISK_ORDER[u.risk_level], -u.usage_count),
    )


# ── Build gating ─────────────────────────────────────────


def should_fail(result: AnalysisResult, fail_on: str) -> bool:
    """Whether ``result`` breaks the ``fail_on`` risk gate."""
    risk = result.risk_distribution
    level = fail_on.lower()
    if level == RiskLevel.HIGH:
        return risk.high > 0
    if level == RiskLevel.MEDIUM:
        return risk.medium > 0 or risk.high > 0
    if level == RiskLevel.LOW:
        return len(result.features) > 0
    return False


def failure_message(result: AnalysisResult, fail_on: str) -> str:
    risk = result.risk_distribution
    level = fail_on.lower()
    if level not in (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW):
        return ""
    parts: list[str] = []
    if risk.high > 0:
        parts.append(f"{risk.high} high-risk features detected")
    if risk.medium > 0:
        parts.append(f"{risk.medium} medium-risk features detected")
    if level == RiskLevel.LOW and risk.low > 0:
        parts.append(f"{risk.low} low-risk features detected")
    return ", ".join(parts)


def ci_messages(result: AnalysisResult, fail_on: str) -> list[str]:
    """Actionable lines for CI logs, with a few high-risk examples."""
    risk = result.risk_distribution
    messages: list[str] = []

    if risk.high > 0:
        messages.append(
            f"{risk.high} high-risk features detected "
            "that may cause compatibility issues"
        )
        limited = [
            f
            for f in result.features
            if f.baseline_status == BaselineStatus.LIMITED_AVAILABILITY
        ]
        for feature in limited[:CI_EXAMPLE_FEATURES]:
            messages.append(
                f"  - {feature.name} ({feature.kind}) "
                "- limited browser support"
            )

    if risk.medium > 0 and fail_on.lower() != RiskLevel.HIGH:
        messages.append(
            f"{risk.medium} newly available features detected"
        )

    if result.errors:
        messages.append(
            f"{len(result.errors)} files could not be analyzed"
        )

    return messages
