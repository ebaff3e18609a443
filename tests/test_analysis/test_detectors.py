"""Tests for the CSS, JavaScript and HTML pattern detectors."""

from __future__ import annotations

import pytest

from baseline_lens.analysis.detectors import (
    CSSDetector,
    Deadline,
    HTMLDetector,
    JavaScriptDetector,
    get_detector,
)
from baseline_lens.constants import FeatureKind
from baseline_lens.errors import AnalysisTimeoutError


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


# ── CSS ──────────────────────────────────────────────────


class TestCSSDetector:
    def test_deny_listed_properties_ignored(self) -> None:
        matches = list(
            CSSDetector().detect(".x { unknown-grid-prop: 1; color: red; }")
        )
        assert [m.token for m in matches] == ["unknown-grid-prop"]
        assert matches[0].kind is FeatureKind.CSS
        assert (matches[0].line, matches[0].column) == (0, 5)

    def test_all_deny_list_entries(self) -> None:
        text = "color: a; background: b; margin: 0; padding: 0; width: 1; height: 2;"
        assert list(CSSDetector().detect(text)) == []

    def test_value_keyword_context(self) -> None:
        matches = list(CSSDetector().detect("a { display: grid; gap: 1rem; }"))
        by_token = {m.token: m.context for m in matches}
        assert by_token["display"] == "grid"
        assert by_token["gap"] is None

    def test_multiline_positions(self) -> None:
        text = ".a {\n  display: flex;\n\n    position: sticky;\n}"
        matches = list(CSSDetector().detect(text))
        assert [(m.token, m.line, m.column) for m in matches] == [
            ("display", 1, 2),
            ("position", 3, 4),
        ]

    def test_uppercase_property_not_matched(self) -> None:
        assert list(CSSDetector().detect("DISPLAY: grid;")) == []


# ── JavaScript ───────────────────────────────────────────


class TestJavaScriptDetector:
    def test_promise_fetch_const(self) -> None:
        text = "const p = new Promise((res)=>{ fetch('/x').then(res) })"
        matches = list(JavaScriptDetector().detect(text))
        assert [m.token for m in matches] == ["const", "Promise", "fetch"]
        assert matches[0].column == 0
        assert matches[1].column == text.index("Promise")
        assert matches[2].column == text.index("fetch")

    def test_whole_words_only(self) -> None:
        text = "const letter = MapLike; prefetch(); Settings; asyncify();"
        tokens = [m.token for m in JavaScriptDetector().detect(text)]
        assert tokens == ["const"]

    def test_all_tracked_tokens(self) -> None:
        text = "fetch Promise async await const let Map Set WeakMap WeakSet"
        tokens = [m.token for m in JavaScriptDetector().detect(text)]
        assert tokens == text.split()

    def test_line_counting(self) -> None:
        text = "// header\n\nlet a = 1;\n  await x;\n"
        matches = list(JavaScriptDetector().detect(text))
        assert [(m.token, m.line, m.column) for m in matches] == [
            ("let", 2, 0),
            ("await", 3, 2),
        ]


# ── HTML ─────────────────────────────────────────────────


class TestHTMLDetector:
    def test_tags_lowercased_and_filtered(self) -> None:
        text = "<DIV><Dialog open><span></span><H2>x</H2><search></search></Dialog></DIV>"
        tokens = [m.token for m in HTMLDetector().detect(text)]
        assert tokens == ["dialog", "search"]

    def test_closing_tags_and_doctype_ignored(self) -> None:
        text = "<!DOCTYPE html>\n<html></html>"
        matches = list(HTMLDetector().detect(text))
        assert [(m.token, m.line, m.column) for m in matches] == [("html", 1, 0)]

    def test_custom_element(self) -> None:
        tokens = [m.token for m in HTMLDetector().detect("<my-widget-2>")]
        assert tokens == ["my-widget-2"]

    def test_heading_levels_ignored(self) -> None:
        text = "".join(f"<h{i}>" for i in range(1, 7)) + "<p><a><img>"
        assert list(HTMLDetector().detect(text)) == []


# ── Shared behavior ──────────────────────────────────────


def test_detect_is_repeatable() -> None:
    detector = JavaScriptDetector()
    text = "const a = 1;\nlet b = new Map();"
    assert list(detector.detect(text)) == list(detector.detect(text))


def test_detect_is_lazy() -> None:
    gen = JavaScriptDetector().detect("const a; let b;")
    assert next(gen).token == "const"


def test_get_detector_by_kind() -> None:
    assert isinstance(get_detector(FeatureKind.CSS), CSSDetector)
    assert isinstance(get_detector(FeatureKind.JAVASCRIPT), JavaScriptDetector)
    assert isinstance(get_detector(FeatureKind.HTML), HTMLDetector)


class TestDeadline:
    def test_not_expired(self) -> None:
        clock = _FakeClock()
        deadline = Deadline(1000, clock=clock)
        clock.now = 0.5
        assert not deadline.expired
        deadline.check()

    def test_expired_raises(self) -> None:
        clock = _FakeClock()
        deadline = Deadline(1000, clock=clock)
        clock.now = 1.0
        with pytest.raises(AnalysisTimeoutError, match="after 1000ms"):
            deadline.check()

    def test_detector_stops_on_expired_deadline(self) -> None:
        clock = _FakeClock()
        deadline = Deadline(1000, clock=clock)
        gen = JavaScriptDetector().detect("const a; let b; const c;", deadline)
        assert next(gen).token == "const"
        clock.now = 5.0
        with pytest.raises(AnalysisTimeoutError):
            next(gen)
