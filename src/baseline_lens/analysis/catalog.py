"""Feature lookup and listing over the knowledge base."""

from __future__ import annotations

import logging

from baseline_lens.analysis.classifier import BaselineClassifier
from baseline_lens.analysis.schemas import FeatureDetails
from baseline_lens.constants import FeatureKind
from baseline_lens.knowledge import FeatureSupportFact, KnowledgeBase

logger = logging.getLogger(__name__)

# Compat-data roots per detector kind
_KIND_PREFIXES: dict[FeatureKind, tuple[str, ...]] = {
    FeatureKind.CSS: ("css.",),
    FeatureKind.JAVASCRIPT: ("javascript.", "api."),
    FeatureKind.HTML: ("html.",),
}

ALL = "all"


def kind_for_key(key: str) -> FeatureKind | None:
    """Detector kind a compat-data key belongs to (None for web-features ids)."""
    for kind, prefixes in _KIND_PREFIXES.items():
        if key.startswith(prefixes):
            return kind
    return None


def describe_feature(
    knowledge_base: KnowledgeBase,
    feature_id: str,
    classifier: BaselineClassifier | None = None,
) -> FeatureDetails | None:
    """Return display details for ``feature_id``, or None if unknown."""
    fact = knowledge_base.resolve(feature_id)
    if fact is None:
        logger.debug("event=feature_not_found id=%s", feature_id)
        return None
    return _details(fact, classifier or BaselineClassifier())


def list_features(
    knowledge_base: KnowledgeBase,
    kind: str = ALL,
    status: str = ALL,
    limit: int | None = None,
    classifier: BaselineClassifier | None = None,
) -> list[FeatureDetails]:
    """List known features sorted by name.

    ``kind`` keeps compat-data keys under that kind's roots; web-features
    ids only appear in the unfiltered listing. ``status`` filters on the
    computed baseline status. A non-positive ``limit`` means no limit.
    """
    clf = classifier or BaselineClassifier()
    wanted_kind = None if kind == ALL else FeatureKind(kind)

    details: list[FeatureDetails] = []
    for key in knowledge_base.iter_keys():
        if wanted_kind is not None and kind_for_key(key) is not wanted_kind:
            continue
        fact = knowledge_base.resolve(key)
        if fact is None:
            continue
        item = _details(fact, clf)
        if status != ALL and item.baseline_status != status:
            continue
        details.append(item)

    details.sort(key=lambda d: (d.name.lower(), d.key))
    if limit is not None and limit > 0:
        details = details[:limit]
    return details


def _details(
    fact: FeatureSupportFact, classifier: BaselineClassifier
) -> FeatureDetails:
    return FeatureDetails(
        key=fact.key,
        name=fact.name or fact.key,
        description=fact.description,
        baseline_status=classifier.classify(fact),
        baseline=fact.baseline,
        baseline_date=fact.baseline_high_date or fact.baseline_low_date,
        mdn_url=fact.mdn_url,
        spec_url=fact.spec_url,
        support={
            s.browser: s.version_added if s.supported else None
            for s in fact.support
        },
    )
