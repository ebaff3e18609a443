"""Shared test fixtures — bundled knowledge base, fixture project, facts."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from baseline_lens.config import Settings
from baseline_lens.knowledge import (
    BrowserSupport,
    FeatureSupportFact,
    KnowledgeBase,
    load_knowledge_base,
)
from baseline_lens.project_config import AnalysisConfig

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"
WEB_PROJECT = FIXTURE_DIR / "web_project"


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the developer's environment and cwd."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        log_level="WARNING",
        compat_data_path=None,
        web_features_path=None,
        config_file=tmp_path / "missing.json",
    )


@pytest.fixture
def kb(settings: Settings) -> KnowledgeBase:
    """Fresh knowledge base over the bundled snapshot."""
    return load_knowledge_base(settings)


@pytest.fixture
def web_project() -> Path:
    return WEB_PROJECT


@pytest.fixture
def config() -> AnalysisConfig:
    return AnalysisConfig()


@pytest.fixture
def make_fact() -> Callable[..., FeatureSupportFact]:
    """Build a fact from ``browser=version`` keyword arguments."""

    def _make(key: str = "test.feature", **versions: str | None) -> FeatureSupportFact:
        support = tuple(
            BrowserSupport(browser=browser, version_added=version)
            for browser, version in versions.items()
        )
        return FeatureSupportFact(key=key, source="bcd", support=support)

    return _make
