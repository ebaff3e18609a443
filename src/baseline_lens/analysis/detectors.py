"""Pattern-based feature detectors for CSS, JavaScript and HTML.

Detection is regex-driven, not a parse: each detector scans the raw
file text and lazily yields :class:`RawMatch` candidates with 0-based
line and column positions. Detectors hold no per-call state, so one
instance can scan any number of files.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable, Iterator
from typing import Protocol

from baseline_lens.analysis.schemas import RawMatch
from baseline_lens.constants import FeatureKind
from baseline_lens.errors import AnalysisTimeoutError


class Deadline:
    """Wall-clock budget for one file, checked between matches."""

    def __init__(
        self,
        timeout_ms: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.timeout_ms = timeout_ms
        self._clock = clock
        self._expires_at = clock() + timeout_ms / 1000

    @property
    def expired(self) -> bool:
        return self._clock() >= self._expires_at

    def check(self) -> None:
        """Raise :class:`AnalysisTimeoutError` once the budget is spent."""
        if self.expired:
            raise AnalysisTimeoutError(self.timeout_ms)


class _LineTracker:
    """Map increasing string offsets to (line, column) incrementally."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._line = 0
        self._line_start = 0

    def locate(self, index: int) -> tuple[int, int]:
        newlines = self._text.count("\n", self._pos, index)
        if newlines:
            self._line += newlines
            self._line_start = self._text.rfind("\n", self._pos, index) + 1
        self._pos = index
        return self._line, index - self._line_start


class Detector(Protocol):
    kind: FeatureKind

    def detect(
        self, text: str, deadline: Deadline | None = None
    ) -> Iterator[RawMatch]: ...


class PatternDetector:
    """Yield group 1 of every ``pattern`` match not in ``ignored``."""

    kind: FeatureKind
    pattern: re.Pattern[str]
    ignored: frozenset[str] = frozenset()

    def detect(
        self, text: str, deadline: Deadline | None = None
    ) -> Iterator[RawMatch]:
        tracker = _LineTracker(text)
        for match in self.pattern.finditer(text):
            if deadline is not None:
                deadline.check()
            token = self.normalize(match.group(1))
            if token in self.ignored:
                continue
            line, column = tracker.locate(match.start())
            yield RawMatch(
                token=token,
                kind=self.kind,
                line=line,
                column=column,
                context=self.context(text, match),
            )

    def normalize(self, token: str) -> str:
        return token

    def context(self, text: str, match: re.Match[str]) -> str | None:
        return None


# ── CSS ──────────────────────────────────────────────────

_CSS_VALUE_RE = re.compile(r"\s*([a-z-]+)")


class CSSDetector(PatternDetector):
    """Declared property names; the first value keyword is the context."""

    kind = FeatureKind.CSS
    pattern = re.compile(r"([a-z-]+)\s*:")
    ignored = frozenset(
        {"color", "background", "margin", "padding", "width", "height"}
    )

    def context(self, text: str, match: re.Match[str]) -> str | None:
        value = _CSS_VALUE_RE.match(text, match.end())
        return value.group(1) if value else None


# ── JavaScript ───────────────────────────────────────────


class JavaScriptDetector(PatternDetector):
    """Whole-word occurrences of tracked globals and keywords."""

    kind = FeatureKind.JAVASCRIPT
    pattern = re.compile(
        r"\b(fetch|Promise|async|await|const|let"
        r"|Map|Set|WeakMap|WeakSet)\b"
    )


# ── HTML ─────────────────────────────────────────────────


class HTMLDetector(PatternDetector):
    """Opening-tag names, case-insensitive, reported lower-cased."""

    kind = FeatureKind.HTML
    pattern = re.compile(r"<([a-z][a-z0-9-]*)", re.IGNORECASE)
    ignored = frozenset(
        {"div", "span", "p", "a", "img"}
        | {f"h{level}" for level in range(1, 7)}
    )

    def normalize(self, token: str) -> str:
        return token.lower()


DETECTORS: dict[FeatureKind, Detector] = {
    FeatureKind.CSS: CSSDetector(),
    FeatureKind.JAVASCRIPT: JavaScriptDetector(),
    FeatureKind.HTML: HTMLDetector(),
}


def get_detector(kind: FeatureKind) -> Detector:
    """Return the shared detector for ``kind``."""
    return DETECTORS[kind]
