"""Shared constants — single source of truth for cross-module values.

StrEnum members are str-compatible, so report payloads and CLI choices
work with the plain string values unchanged.
"""

from __future__ import annotations

from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class BaselineStatus(StrEnum):
    """Cross-browser support tier of a detected feature."""

    WIDELY_AVAILABLE = "widely_available"
    NEWLY_AVAILABLE = "newly_available"
    LIMITED_AVAILABILITY = "limited_availability"


class FeatureKind(StrEnum):
    """Content kind handled by a detector."""

    CSS = "css"
    JAVASCRIPT = "javascript"
    HTML = "html"


class RiskLevel(StrEnum):
    """Report-facing relabeling of :class:`BaselineStatus`."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ExportFormat(StrEnum):
    """Supported report formats."""

    JSON = "json"
    MARKDOWN = "markdown"
    JUNIT = "junit"


class Severity(StrEnum):
    """Severity a baseline status maps to in editor/CI integrations."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    NONE = "none"


# ── Risk Mapping ─────────────────────────────────────────

RISK_BY_STATUS: dict[BaselineStatus, RiskLevel] = {
    BaselineStatus.WIDELY_AVAILABLE: RiskLevel.LOW,
    BaselineStatus.NEWLY_AVAILABLE: RiskLevel.MEDIUM,
    BaselineStatus.LIMITED_AVAILABILITY: RiskLevel.HIGH,
}

RISK_ORDER: dict[RiskLevel, int] = {
    RiskLevel.HIGH: 3,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 1,
}


def risk_for_status(status: str) -> RiskLevel:
    """Map a baseline status to its risk level (unknown → medium)."""
    try:
        return RISK_BY_STATUS[BaselineStatus(status)]
    except ValueError:
        return RiskLevel.MEDIUM


# ── Classification Heuristic ─────────────────────────────

TRACKED_BROWSERS: tuple[str, ...] = ("chrome", "firefox", "safari", "edge")

# First major version counted as "recent" support, per browser.
RECENCY_THRESHOLDS: dict[str, int] = {
    "chrome": 88,
    "firefox": 85,
    "safari": 14,
    "edge": 88,
}

WIDELY_AVAILABLE_MIN_BROWSERS = 4
NEWLY_AVAILABLE_MIN_BROWSERS = 3
NEWLY_AVAILABLE_MAX_RECENT = 2

# ── File Limits ──────────────────────────────────────────

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB
MIN_MAX_FILE_SIZE = 1024
DEFAULT_ANALYSIS_TIMEOUT_MS = 5000
MIN_ANALYSIS_TIMEOUT_MS = 1000
DEFAULT_SUPPORT_THRESHOLD = 90

# ── Reporting ────────────────────────────────────────────

MARKDOWN_MAX_LOCATIONS = 10
CI_EXAMPLE_FEATURES = 3
ANALYSIS_RATE_WARNING_PERCENT = 90.0
JUNIT_SUITE_NAME = "BaselineLens.CompatibilityCheck"
