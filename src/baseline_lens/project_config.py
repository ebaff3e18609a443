"""Per-project analysis options (``.baseline-lens.json``).

The file uses camelCase keys; attributes are snake_case. Values are
loaded permissively and checked by :func:`validate_config`, which
reports every problem at once instead of failing on the first.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic.alias_generators import to_snake

from baseline_lens.analysis.schemas import CamelModel
from baseline_lens.config import DEFAULT_EXCLUDE_PATTERNS, Settings
from baseline_lens.constants import (
    DEFAULT_ANALYSIS_TIMEOUT_MS,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_SUPPORT_THRESHOLD,
    MIN_ANALYSIS_TIMEOUT_MS,
    MIN_MAX_FILE_SIZE,
    BaselineStatus,
    ExportFormat,
    FeatureKind,
    RiskLevel,
    Severity,
)
from baseline_lens.errors import ConfigError

logger = logging.getLogger(__name__)


class EnabledAnalyzers(CamelModel):
    css: bool = True
    javascript: bool = True
    html: bool = True


class StatusMapping(CamelModel):
    """Severity reported for each baseline status."""

    model_config = {"alias_generator": None}

    widely_available: str = Severity.INFO.value
    newly_available: str = Severity.WARNING.value
    limited_availability: str = Severity.ERROR.value


class AnalysisConfig(CamelModel):
    """Options for one analysis run."""

    model_config = {"extra": "ignore"}

    support_threshold: int = DEFAULT_SUPPORT_THRESHOLD
    custom_browser_matrix: list[str] = Field(
        default_factory=lambda: list[str]()
    )
    # Empty means every supported extension
    include_patterns: list[str] = Field(default_factory=lambda: list[str]())
    exclude_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS)
    )
    baseline_status_mapping: StatusMapping = Field(
        default_factory=StatusMapping
    )
    enabled_analyzers: EnabledAnalyzers = Field(
        default_factory=EnabledAnalyzers
    )
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    analysis_timeout: int = DEFAULT_ANALYSIS_TIMEOUT_MS
    fail_on: str = RiskLevel.HIGH.value
    output_format: str = ExportFormat.JSON.value

    def is_enabled(self, kind: FeatureKind) -> bool:
        return bool(getattr(self.enabled_analyzers, kind.value))

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


@dataclass
class ConfigOverrides:
    """Command-line values applied on top of the file."""

    threshold: int | None = None
    fail_on: str | None = None
    output_format: str | None = None
    # Replaces the configured include patterns
    include: list[str] | None = None
    # Appended to the configured exclude patterns
    exclude: list[str] | None = None


@dataclass
class ConfigValidation:
    errors: list[str] = field(default_factory=lambda: list[str]())
    warnings: list[str] = field(default_factory=lambda: list[str]())

    @property
    def is_valid(self) -> bool:
        return not self.errors


# ── Load / save ──────────────────────────────────────────


def load_config(
    path: Path | str | None = None,
    overrides: ConfigOverrides | None = None,
    settings: Settings | None = None,
) -> AnalysisConfig:
    """Load project options, then apply ``overrides``.

    With no ``path``, ``settings.config_file`` is read when it exists
    and defaults are used otherwise. An explicit ``path`` must exist.
    Raises :class:`ConfigError` when the file cannot be used.
    """
    if path is not None:
        config = _read_config_file(Path(path))
    else:
        default_path = (settings or Settings()).config_file
        if default_path.is_file():
            config = _read_config_file(default_path)
        else:
            config = AnalysisConfig()

    if overrides is not None:
        config = apply_overrides(config, overrides)
    return config


def _read_config_file(path: Path) -> AnalysisConfig:
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except PermissionError as exc:
        raise ConfigError(
            f"Permission denied reading configuration: {path}"
        ) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(
            f"Failed to load configuration from {path}: {exc}"
        ) from exc

    if not content.strip():
        raise ConfigError(
            f"Failed to load configuration from {path}: "
            "Configuration file is empty"
        )
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise ConfigError(
            f"Failed to load configuration from {path}: "
            f"Invalid JSON syntax: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise ConfigError(
            f"Failed to load configuration from {path}: "
            "Configuration must be a JSON object"
        )

    try:
        config = AnalysisConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(
            f"Failed to load configuration from {path}: {exc}"
        ) from exc
    logger.info("event=config_loaded path=%s", path)
    return config


def save_config(
    config: AnalysisConfig, path: Path | str = ".baseline-lens.json"
) -> Path:
    """Write ``config`` as camelCase JSON and return the path."""
    target = Path(path)
    target.write_text(
        json.dumps(config.to_json_dict(), indent=2) + "\n", encoding="utf-8"
    )
    return target


def apply_overrides(
    config: AnalysisConfig, overrides: ConfigOverrides
) -> AnalysisConfig:
    update: dict[str, Any] = {}
    if overrides.threshold is not None:
        update["support_threshold"] = overrides.threshold
    if overrides.fail_on:
        update["fail_on"] = overrides.fail_on
    if overrides.output_format:
        update["output_format"] = overrides.output_format
    if overrides.include:
        update["include_patterns"] = list(overrides.include)
    if overrides.exclude:
        update["exclude_patterns"] = [
            *config.exclude_patterns,
            *overrides.exclude,
        ]
    return config.model_copy(update=update)


def merge(config: AnalysisConfig, other: Mapping[str, Any]) -> AnalysisConfig:
    """Return a copy of ``config`` with top-level keys from ``other``.

    Keys may be camelCase or snake_case. Nested objects are replaced,
    not merged.
    """
    data = config.model_dump()
    data.update({to_snake(key): value for key, value in other.items()})
    return AnalysisConfig.model_validate(data)


# ── Generation ───────────────────────────────────────────

# Overlays for ``init-config --preset``, in config-file (camelCase) form
FRAMEWORK_PRESETS: dict[str, dict[str, Any]] = {
    "react": {
        "supportThreshold": 92,
        "includePatterns": [
            "**/*.jsx",
            "**/*.tsx",
            "**/*.css",
            "**/*.module.css",
        ],
        "excludePatterns": ["**/build/**", "**/public/**"],
        "customBrowserMatrix": [
            "chrome >= 88",
            "firefox >= 85",
            "safari >= 14",
            "edge >= 88",
        ],
    },
    "vue": {
        "supportThreshold": 90,
        "includePatterns": ["**/*.vue", "**/*.js", "**/*.ts", "**/*.css"],
        "excludePatterns": ["**/dist/**", "**/public/**"],
        "customBrowserMatrix": [
            "chrome >= 87",
            "firefox >= 84",
            "safari >= 13.1",
            "edge >= 87",
        ],
    },
    "angular": {
        "supportThreshold": 95,
        "includePatterns": ["**/*.ts", "**/*.html", "**/*.scss", "**/*.css"],
        "excludePatterns": [
            "**/dist/**",
            "**/node_modules/**",
            "**/.angular/**",
        ],
        "customBrowserMatrix": [
            "chrome >= 90",
            "firefox >= 88",
            "safari >= 14",
            "edge >= 90",
        ],
    },
    "svelte": {
        "supportThreshold": 88,
        "includePatterns": ["**/*.svelte", "**/*.js", "**/*.ts", "**/*.css"],
        "excludePatterns": ["**/build/**", "**/public/**"],
        "customBrowserMatrix": [
            "chrome >= 85",
            "firefox >= 82",
            "safari >= 13",
            "edge >= 85",
        ],
    },
}

ENVIRONMENTS: tuple[str, ...] = ("development", "staging", "production")


@dataclass
class ProjectInfo:
    """What ``package.json`` and ``tsconfig.json`` say about a project."""

    framework: str | None = None
    has_typescript: bool = False
    has_sass: bool = False


def detect_project(root: Path | str) -> ProjectInfo:
    """Guess the framework and languages of the project at ``root``.

    A missing or unreadable ``package.json`` yields a plain project.
    """
    root = Path(root)
    package_json = root / "package.json"
    data: Any = {}
    if package_json.is_file():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning(
                "event=package_json_unreadable path=%s error=%s",
                package_json,
                exc,
            )

    deps: dict[str, Any] = {}
    if isinstance(data, dict):
        for section in ("dependencies", "devDependencies"):
            value = data.get(section)
            if isinstance(value, dict):
                deps.update(value)

    return ProjectInfo(
        framework=_detect_framework(deps),
        has_typescript=(
            (root / "tsconfig.json").is_file()
            or "typescript" in deps
            or "@types/node" in deps
        ),
        has_sass=any(name in deps for name in ("sass", "node-sass", "scss")),
    )


def _detect_framework(deps: Mapping[str, Any]) -> str | None:
    if "react" in deps or "@types/react" in deps:
        return "react"
    if "vue" in deps or "@vue/cli" in deps:
        return "vue"
    if "@angular/core" in deps:
        return "angular"
    if "svelte" in deps:
        return "svelte"
    return None


def environment_overrides(
    config: AnalysisConfig, env: str
) -> dict[str, Any]:
    """Threshold and gate adjustments for a deployment environment."""
    threshold = config.support_threshold
    if env == "development":
        return {
            "supportThreshold": max(threshold - 10, 70),
            "failOn": RiskLevel.LOW.value,
            "excludePatterns": [
                *config.exclude_patterns,
                "**/test/**",
                "**/*.test.*",
            ],
        }
    if env == "staging":
        return {
            "supportThreshold": max(threshold - 5, 80),
            "failOn": RiskLevel.MEDIUM.value,
        }
    if env == "production":
        return {
            "supportThreshold": min(threshold + 5, 98),
            "failOn": RiskLevel.HIGH.value,
        }
    raise ConfigError(
        f"Unknown environment: {env} (expected one of: "
        f"{', '.join(ENVIRONMENTS)})"
    )


def generate_config(
    info: ProjectInfo, env: str = "development"
) -> AnalysisConfig:
    """Build a starting configuration for a detected project."""
    preset = FRAMEWORK_PRESETS.get(info.framework or "", {})
    config = merge(AnalysisConfig(), preset)

    extra: list[str] = []
    if info.has_typescript:
        extra.extend(["**/*.ts", "**/*.tsx"])
    if info.has_sass:
        extra.extend(["**/*.scss", "**/*.sass"])
    # An empty include list already covers every extension
    if extra and config.include_patterns:
        patterns = list(dict.fromkeys([*config.include_patterns, *extra]))
        config = merge(config, {"includePatterns": patterns})

    config = merge(config, environment_overrides(config, env))
    logger.info(
        "event=config_generated framework=%s env=%s",
        info.framework or "none",
        env,
    )
    return config


def split_patterns(raw: str | None) -> list[str] | None:
    """Split a comma-separated CLI value into trimmed patterns."""
    if not raw:
        return None
    return [p.strip() for p in raw.split(",") if p.strip()]


# ── Validation ───────────────────────────────────────────


def validate_config(config: AnalysisConfig) -> ConfigValidation:
    result = ConfigValidation()

    if not 0 <= config.support_threshold <= 100:
        result.errors.append("supportThreshold must be between 0 and 100")

    if config.max_file_size < MIN_MAX_FILE_SIZE:
        result.errors.append(
            "maxFileSize must be at least 1024 bytes (1KB)"
        )

    if config.analysis_timeout < MIN_ANALYSIS_TIMEOUT_MS:
        result.errors.append(
            "analysisTimeout must be at least 1000ms (1 second)"
        )

    if config.fail_on not in set(RiskLevel):
        result.errors.append("failOn must be one of: high, medium, low")

    if config.output_format not in set(ExportFormat):
        result.errors.append(
            "outputFormat must be one of: json, markdown, junit"
        )

    severities = [s.value for s in Severity]
    for status in BaselineStatus:
        value = getattr(config.baseline_status_mapping, status.value)
        if value not in severities:
            result.errors.append(
                f"baselineStatusMapping.{status.value} must be one of: "
                f"{', '.join(severities)}"
            )

    analyzers = config.enabled_analyzers
    if not (analyzers.css or analyzers.javascript or analyzers.html):
        result.warnings.append(
            "All analyzers are disabled - no analysis will be performed"
        )

    for entry in config.custom_browser_matrix:
        if ">" not in entry and "=" not in entry:
            result.warnings.append(
                f'Browser matrix entry "{entry}" may not be in correct '
                'format (e.g., "chrome >= 90")'
            )

    return result
