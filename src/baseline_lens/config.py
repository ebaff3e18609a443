"""Environment-based configuration and file-type constants."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

from baseline_lens.constants import FeatureKind

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and ``BASELINE_LENS_*`` environment variables."""

    # Logging
    log_level: str = "WARNING"
    debug_mode: bool = False

    # Knowledge base (None = bundled snapshot)
    compat_data_path: Path | None = None
    web_features_path: Path | None = None

    # Project configuration
    config_file: Path = Path(".baseline-lens.json")

    # Discovery
    skip_directories: list[str] = [
        "node_modules",
        "dist",
        "build",
        "coverage",
        ".git",
    ]

    @field_validator("log_level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "BASELINE_LENS_",
        "extra": "ignore",
    }


# File extension → detector kind
EXTENSION_MAP: dict[str, FeatureKind] = {
    # Stylesheets
    ".css": FeatureKind.CSS,
    ".scss": FeatureKind.CSS,
    ".sass": FeatureKind.CSS,
    ".less": FeatureKind.CSS,
    # Scripts
    ".js": FeatureKind.JAVASCRIPT,
    ".jsx": FeatureKind.JAVASCRIPT,
    ".ts": FeatureKind.JAVASCRIPT,
    ".tsx": FeatureKind.JAVASCRIPT,
    ".mjs": FeatureKind.JAVASCRIPT,
    # Markup and component templates
    ".html": FeatureKind.HTML,
    ".htm": FeatureKind.HTML,
    ".vue": FeatureKind.HTML,
    ".svelte": FeatureKind.HTML,
}

# Include globs used when a project configures none
DEFAULT_INCLUDE_PATTERNS: tuple[str, ...] = tuple(
    f"**/*{ext}" for ext in EXTENSION_MAP
)

# Always excluded, in addition to any project excludes
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
    "**/coverage/**",
    "**/.git/**",
)
