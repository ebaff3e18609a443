"""Pydantic models for analysis output.

Every model serializes with camelCase aliases
(``model_dump(by_alias=True)``) to match the report and configuration
file schemas, while Python code uses snake_case attributes.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from baseline_lens.constants import (
    BaselineStatus,
    FeatureKind,
    RiskLevel,
    risk_for_status,
)
from baseline_lens.errors import ErrorKind


@dataclass(frozen=True)
class RawMatch:
    """A candidate token emitted by a detector, before resolution."""

    token: str
    kind: FeatureKind
    line: int  # 0-based
    column: int  # 0-based
    context: str | None = None


class CamelModel(BaseModel):
    """Base model serializing with camelCase field names."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class DetectedFeature(CamelModel):
    """One occurrence of a candidate feature in one file."""

    model_config = {"frozen": True}

    name: str
    kind: FeatureKind
    line: int
    column: int
    file_path: str
    feature_key: str
    baseline_status: BaselineStatus
    context: str | None = None

    @property
    def risk_level(self) -> RiskLevel:
        return risk_for_status(self.baseline_status)


class AnalysisError(CamelModel):
    """A per-file failure recorded in the result."""

    file: str
    message: str
    kind: ErrorKind = ErrorKind.UNKNOWN


class FileAnalysis(CamelModel):
    """Outcome of analyzing a single file."""

    file_path: str
    kind: FeatureKind | None = None
    features: list[DetectedFeature] = Field(
        default_factory=lambda: list[DetectedFeature]()
    )
    error: AnalysisError | None = None
    skipped: bool = False  # empty, unknown extension, or disabled detector

    @property
    def analyzed(self) -> bool:
        return not self.skipped and self.error is None


class StatusSummary(CamelModel):
    """Feature counts per baseline status."""

    widely_available: int = 0
    newly_available: int = 0
    limited_availability: int = 0

    @property
    def total(self) -> int:
        return (
            self.widely_available
            + self.newly_available
            + self.limited_availability
        )


class RiskDistribution(CamelModel):
    """Feature counts per risk level."""

    low: int = 0
    medium: int = 0
    high: int = 0

    @property
    def total(self) -> int:
        return self.low + self.medium + self.high


class AnalysisResult(CamelModel):
    """Aggregate output of one pipeline run."""

    total_files: int = 0
    analyzed_files: int = 0
    features: list[DetectedFeature] = Field(
        default_factory=lambda: list[DetectedFeature]()
    )
    errors: list[AnalysisError] = Field(
        default_factory=lambda: list[AnalysisError]()
    )
    summary: StatusSummary = Field(default_factory=StatusSummary)
    risk_distribution: RiskDistribution = Field(
        default_factory=RiskDistribution
    )
    file_type_breakdown: dict[str, int] = Field(
        default_factory=lambda: dict[str, int]()
    )


class FileLocation(CamelModel):
    """Where a grouped feature was seen."""

    file_path: str
    line: int
    column: int
    context: str | None = None


class FeatureUsage(CamelModel):
    """All occurrences of one feature key of one kind."""

    feature_key: str
    name: str
    kind: FeatureKind
    baseline_status: BaselineStatus
    risk_level: RiskLevel
    usage_count: int = 0
    locations: list[FileLocation] = Field(
        default_factory=lambda: list[FileLocation]()
    )


class FeatureDetails(CamelModel):
    """Display record for a single knowledge-base entry."""

    key: str
    name: str
    description: str = ""
    baseline_status: BaselineStatus
    # web-features label ("high" / "low"), when the entry has one
    baseline: str | None = None
    baseline_date: str | None = None
    mdn_url: str | None = None
    spec_url: str | None = None
    support: dict[str, str | None] = Field(
        default_factory=lambda: dict[str, str | None]()
    )
