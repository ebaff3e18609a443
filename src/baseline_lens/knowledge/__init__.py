"""Compatibility knowledge base — normalized, cached feature lookups."""

from baseline_lens.knowledge.base import (
    BUNDLED_DATA_PATH,
    KnowledgeBase,
    load_knowledge_base,
)
from baseline_lens.knowledge.schemas import BrowserSupport, FeatureSupportFact

__all__ = [
    "BUNDLED_DATA_PATH",
    "BrowserSupport",
    "FeatureSupportFact",
    "KnowledgeBase",
    "load_knowledge_base",
]
