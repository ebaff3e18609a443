"""Three-tier baseline classification of knowledge-base facts.

The tiers are a heuristic approximation of Baseline, derived only
from how many tracked browsers ship a feature and how many of them
shipped it recently (at or after a per-browser major version):

1. supported in at least 4 browsers, none recent  → widely available
2. supported in at least 3 browsers, at most 2 recent → newly available
3. anything else, or no usable data → limited availability

The web-features ``baseline`` label is carried as display metadata
only; classification always uses the heuristic so bcd and
web-features entries are judged the same way.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from baseline_lens.constants import (
    NEWLY_AVAILABLE_MAX_RECENT,
    NEWLY_AVAILABLE_MIN_BROWSERS,
    RECENCY_THRESHOLDS,
    TRACKED_BROWSERS,
    WIDELY_AVAILABLE_MIN_BROWSERS,
    BaselineStatus,
)
from baseline_lens.knowledge import FeatureSupportFact


class BaselineClassifier:
    """Classify support facts; thresholds default to module constants."""

    def __init__(
        self,
        recency_thresholds: Mapping[str, int] | None = None,
        browsers: Sequence[str] = TRACKED_BROWSERS,
        widely_min_browsers: int = WIDELY_AVAILABLE_MIN_BROWSERS,
        newly_min_browsers: int = NEWLY_AVAILABLE_MIN_BROWSERS,
        newly_max_recent: int = NEWLY_AVAILABLE_MAX_RECENT,
    ) -> None:
        self.recency_thresholds = dict(
            RECENCY_THRESHOLDS
            if recency_thresholds is None
            else recency_thresholds
        )
        self.browsers = tuple(browsers)
        self.widely_min_browsers = widely_min_browsers
        self.newly_min_browsers = newly_min_browsers
        self.newly_max_recent = newly_max_recent

    def counts(self, fact: FeatureSupportFact) -> tuple[int, int]:
        """Return ``(supported_count, recent_count)`` for ``fact``."""
        supported = 0
        recent = 0
        for browser in self.browsers:
            entry = fact.for_browser(browser)
            if not entry.supported:
                continue
            supported += 1
            major = entry.major_version
            threshold = self.recency_thresholds.get(browser)
            if major is not None and threshold is not None and major >= threshold:
                recent += 1
        return supported, recent

    def classify(self, fact: FeatureSupportFact | None) -> BaselineStatus:
        if fact is None or not fact.has_support_data:
            return BaselineStatus.LIMITED_AVAILABILITY

        supported, recent = self.counts(fact)
        if supported >= self.widely_min_browsers and recent == 0:
            return BaselineStatus.WIDELY_AVAILABLE
        if (
            supported >= self.newly_min_browsers
            and recent <= self.newly_max_recent
        ):
            return BaselineStatus.NEWLY_AVAILABLE
        return BaselineStatus.LIMITED_AVAILABILITY
