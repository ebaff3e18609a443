"""Map raw detector tokens to knowledge-base keys.

Each kind has a fixed, ordered candidate list; the first key the
knowledge base knows wins. When none resolves, a best-guess default
key is returned so the usage is still reported.
"""

from __future__ import annotations

import logging
import re

from baseline_lens.constants import FeatureKind
from baseline_lens.knowledge import FeatureSupportFact, KnowledgeBase

logger = logging.getLogger(__name__)

# Language keywords live outside the api/builtins namespaces
JS_KEYWORD_ALIASES: dict[str, str] = {
    "const": "javascript.statements.const",
    "let": "javascript.statements.let",
    "async": "javascript.statements.async_function",
    "await": "javascript.operators.await",
}

_ATTRIBUTE_RE = re.compile(r"\[([^\]]+)\]")


class FeatureResolver:
    """Resolve detector tokens against one :class:`KnowledgeBase`."""

    def __init__(self, knowledge_base: KnowledgeBase) -> None:
        self._kb = knowledge_base

    def resolve_feature_key(
        self,
        kind: FeatureKind,
        token: str,
        context: str | None = None,
    ) -> str:
        key, _ = self.resolve(kind, token, context)
        return key

    def resolve(
        self,
        kind: FeatureKind,
        token: str,
        context: str | None = None,
    ) -> tuple[str, FeatureSupportFact | None]:
        """Return ``(key, fact)``; ``fact`` is None on a miss."""
        for key in self.candidates(kind, token, context):
            fact = self._kb.resolve(key)
            if fact is not None:
                return key, fact

        default = self.default_key(kind, token, context)
        logger.debug(
            "event=resolve_miss kind=%s token=%s default=%s",
            kind,
            token,
            default,
        )
        return default, None

    def candidates(
        self,
        kind: FeatureKind,
        token: str,
        context: str | None = None,
    ) -> list[str]:
        if kind is FeatureKind.CSS:
            return _css_candidates(token, context)
        if kind is FeatureKind.JAVASCRIPT:
            return _js_candidates(token)
        return _html_candidates(token, _attribute(context))

    def default_key(
        self,
        kind: FeatureKind,
        token: str,
        context: str | None = None,
    ) -> str:
        if kind is FeatureKind.CSS:
            return f"css.properties.{token}"
        if kind is FeatureKind.JAVASCRIPT:
            return JS_KEYWORD_ALIASES.get(token, f"api.{token}")
        attribute = _attribute(context)
        if attribute:
            return f"html.elements.{token}.{attribute}"
        return f"html.elements.{token}"


def _css_candidates(prop: str, value: str | None) -> list[str]:
    keys: list[str] = []
    if value:
        keys.append(f"css.properties.{prop}.{value.replace('-', '_')}")
    keys.append(f"css.properties.{prop}")
    return keys


def _js_candidates(name: str) -> list[str]:
    keys: list[str] = []
    alias = JS_KEYWORD_ALIASES.get(name)
    if alias:
        keys.append(alias)
    keys.extend(
        [
            f"api.{name}",
            f"javascript.builtins.{name}",
            f"api.Window.{name}",
            f"api.{name}.{name}",
        ]
    )
    return keys


def _html_candidates(tag: str, attribute: str | None) -> list[str]:
    if not attribute:
        return [f"html.elements.{tag}"]
    return [
        f"html.elements.{tag}.{attribute}",
        f"html.global_attributes.{attribute}",
        f"html.elements.{tag}.{attribute.replace('-', '_')}",
    ]


def _attribute(context: str | None) -> str | None:
    """Extract ``attr`` from an ``element[attr]`` context."""
    if not context:
        return None
    m = _ATTRIBUTE_RE.search(context)
    return m.group(1).strip().lower() if m else None
