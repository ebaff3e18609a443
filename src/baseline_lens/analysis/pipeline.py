"""File pipeline: discover, read, detect, resolve, classify, aggregate.

Files are processed one at a time in discovery order. Reads are
offloaded with ``asyncio.to_thread``; scanning is synchronous and
bounded per file by a :class:`Deadline`. A failure in one file is
recorded on that file's result and never stops the run.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeAlias

from baseline_lens.analysis.aggregator import assemble
from baseline_lens.analysis.classifier import BaselineClassifier
from baseline_lens.analysis.detectors import Deadline, get_detector
from baseline_lens.analysis.discovery import discover_files
from baseline_lens.analysis.resolver import FeatureResolver
from baseline_lens.analysis.schemas import (
    AnalysisError,
    AnalysisResult,
    DetectedFeature,
    FileAnalysis,
)
from baseline_lens.config import EXTENSION_MAP, Settings
from baseline_lens.constants import FeatureKind
from baseline_lens.errors import (
    FileAnalysisError,
    FileTooLargeError,
    classify_error,
    describe_error,
)
from baseline_lens.knowledge import KnowledgeBase, load_knowledge_base
from baseline_lens.project_config import AnalysisConfig

logger = logging.getLogger(__name__)

ProgressCallback: TypeAlias = Callable[[int, str], None]


@dataclass
class AnalysisContext:
    """Collaborators shared by every file of one run."""

    config: AnalysisConfig
    knowledge_base: KnowledgeBase
    resolver: FeatureResolver = field(init=False)
    classifier: BaselineClassifier = field(
        default_factory=BaselineClassifier
    )

    def __post_init__(self) -> None:
        self.resolver = FeatureResolver(self.knowledge_base)


# ── Project ──────────────────────────────────────────────


async def analyze_project(
    root: Path | str,
    config: AnalysisConfig | None = None,
    knowledge_base: KnowledgeBase | None = None,
    on_progress: ProgressCallback | None = None,
    *,
    settings: Settings | None = None,
    classifier: BaselineClassifier | None = None,
) -> AnalysisResult:
    """Analyze every matching file under ``root``.

    Raises :class:`~baseline_lens.errors.DiscoveryError` when ``root``
    cannot be enumerated; every other failure is recorded per file.
    """
    cfg = config or AnalysisConfig()
    kb = knowledge_base
    if kb is None:
        kb = await asyncio.to_thread(load_knowledge_base, settings)
    context = AnalysisContext(config=cfg, knowledge_base=kb)
    if classifier is not None:
        context.classifier = classifier

    start = time.monotonic()
    files = await asyncio.to_thread(
        discover_files,
        Path(root),
        cfg.include_patterns,
        cfg.exclude_patterns,
        settings,
    )

    results: list[FileAnalysis] = []
    total = len(files)
    for i, path in enumerate(files):
        results.append(await analyze_file(path, context))
        _report_progress(
            on_progress,
            round((i + 1) / total * 100),
            f"Analyzed {path.name}",
        )

    result = assemble(results, total_files=total)
    logger.info(
        "event=analysis_done root=%s files=%d analyzed=%d features=%d"
        " errors=%d duration_ms=%.0f",
        root,
        result.total_files,
        result.analyzed_files,
        len(result.features),
        len(result.errors),
        (time.monotonic() - start) * 1000,
    )
    return result


def _report_progress(
    callback: ProgressCallback | None, percent: int, message: str
) -> None:
    if callback is None:
        return
    try:
        callback(percent, message)
    except Exception:  # noqa: BLE001
        logger.warning(
            "event=progress_callback_failed percent=%d",
            percent,
            exc_info=True,
        )


# ── File ─────────────────────────────────────────────────


async def analyze_file(path: Path, context: AnalysisContext) -> FileAnalysis:
    """Analyze one file; never raises for per-file problems."""
    display = str(path)
    kind = EXTENSION_MAP.get(path.suffix.lower())
    if kind is None or not context.config.is_enabled(kind):
        logger.debug("event=file_skipped path=%s reason=no_detector", display)
        return FileAnalysis(file_path=display, kind=kind, skipped=True)

    try:
        text = await asyncio.to_thread(
            _read_source, path, context.config.max_file_size
        )
        if text is None:
            logger.debug("event=file_skipped path=%s reason=empty", display)
            return FileAnalysis(file_path=display, kind=kind, skipped=True)
        deadline = Deadline(context.config.analysis_timeout)
        features = scan_text(text, kind, display, context, deadline)
    except Exception as exc:  # noqa: BLE001
        error = AnalysisError(
            file=display,
            message=describe_error(exc, display),
            kind=classify_error(exc),
        )
        logger.warning(
            "event=file_failed path=%s kind=%s error=%s",
            display,
            error.kind.value,
            error.message,
        )
        return FileAnalysis(file_path=display, kind=kind, error=error)

    return FileAnalysis(file_path=display, kind=kind, features=features)


def _read_source(path: Path, max_file_size: int) -> str | None:
    """Return the UTF-8 text of ``path``, or None for an empty file."""
    size = path.stat().st_size
    if size == 0:
        return None
    if size > max_file_size:
        raise FileTooLargeError(size, max_file_size)
    return path.read_bytes().decode("utf-8")


def scan_text(
    text: str,
    kind: FeatureKind,
    file_path: str,
    context: AnalysisContext,
    deadline: Deadline | None = None,
) -> list[DetectedFeature]:
    """Detect, resolve and classify every candidate in ``text``.

    Unexpected detector failures are re-raised as
    :class:`FileAnalysisError` so they are recorded as detector errors.
    """
    features: list[DetectedFeature] = []
    try:
        for match in get_detector(kind).detect(text, deadline):
            key, fact = context.resolver.resolve(
                match.kind, match.token, match.context
            )
            features.append(
                DetectedFeature(
                    name=match.token,
                    kind=match.kind,
                    line=match.line,
                    column=match.column,
                    file_path=file_path,
                    feature_key=key,
                    baseline_status=context.classifier.classify(fact),
                    context=match.context,
                )
            )
        if deadline is not None:
            deadline.check()
    except FileAnalysisError:
        raise
    except Exception as exc:
        raise FileAnalysisError(
            f"Failed to analyze {file_path}: {exc}"
        ) from exc
    return features
