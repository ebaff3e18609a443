"""Frozen value objects returned by the knowledge base.

A FeatureSupportFact is the single shape both compatibility schemas
(MDN browser-compat-data and web-features) are normalized into.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, TypeAlias

from baseline_lens.constants import TRACKED_BROWSERS

FactSource: TypeAlias = Literal["bcd", "web-features"]

_MAJOR_RE = re.compile(r"(\d+)")


@dataclass(frozen=True)
class BrowserSupport:
    """Support record for one browser.

    ``version_added`` is None when the browser does not ship the
    feature. ``version_removed`` set means support was withdrawn.
    """

    browser: str
    version_added: str | None = None
    version_removed: str | None = None

    @property
    def supported(self) -> bool:
        return self.version_added is not None and self.version_removed is None

    @property
    def major_version(self) -> int | None:
        """Leading integer of ``version_added`` ("≤79" → 79, "true" → None)."""
        if self.version_added is None:
            return None
        m = _MAJOR_RE.search(self.version_added)
        return int(m.group(1)) if m else None


@dataclass(frozen=True)
class FeatureSupportFact:
    """Knowledge-base answer for one resolved identifier."""

    key: str
    source: FactSource
    support: tuple[BrowserSupport, ...] = ()
    name: str | None = None
    description: str = ""
    mdn_url: str | None = None
    spec_url: str | None = None
    # web-features metadata: "high" | "low" | None
    baseline: str | None = None
    baseline_low_date: str | None = None
    baseline_high_date: str | None = None
    deprecated: bool = False
    experimental: bool = False

    def for_browser(self, browser: str) -> BrowserSupport:
        for entry in self.support:
            if entry.browser == browser:
                return entry
        return BrowserSupport(browser=browser)

    @property
    def supported_browsers(self) -> tuple[str, ...]:
        return tuple(
            b for b in TRACKED_BROWSERS if self.for_browser(b).supported
        )

    @property
    def has_support_data(self) -> bool:
        return any(entry.supported for entry in self.support)

