"""Read-through adapter over the compatibility knowledge base.

Two independent schemas are supported:

* MDN browser-compat-data: a tree of mappings where a feature node holds
  a ``__compat`` record with per-browser ``support`` statements.
* web-features: a flat mapping of feature ids to records with a
  ``status`` block (``baseline`` label plus a browser → version table).

Both are normalized into :class:`FeatureSupportFact`. Lookups are cached
per exact key for the lifetime of the :class:`KnowledgeBase` instance.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path
from typing import Any, TypeAlias

from baseline_lens.config import Settings
from baseline_lens.constants import TRACKED_BROWSERS
from baseline_lens.errors import KnowledgeBaseError
from baseline_lens.knowledge.schemas import BrowserSupport, FeatureSupportFact

logger = logging.getLogger(__name__)

BUNDLED_DATA_PATH = Path(__file__).resolve().parent / "data" / "compat.json"

COMPAT_KEY = "__compat"

# Top-level compat-data nodes that are not feature namespaces
_NON_FEATURE_ROOTS = frozenset({"__meta", "browsers"})

# Support statements that do not count as shipped, unprefixed support
_QUALIFIED_STATEMENT_KEYS = ("flags", "prefix", "alternative_name")

CompatTree: TypeAlias = Mapping[str, Any]


class KnowledgeBase:
    """Resolve dotted feature keys to support facts."""

    def __init__(
        self,
        compat_data: CompatTree | None = None,
        web_features: Mapping[str, Any] | None = None,
    ) -> None:
        self._compat: CompatTree = compat_data or {}
        self._web_features: Mapping[str, Any] = web_features or {}
        self._cache: dict[str, FeatureSupportFact] = {}

    # ── Lookup ──────────────────────────────────────────

    def resolve(self, key: str) -> FeatureSupportFact | None:
        """Return the fact for ``key`` or None when no data exists.

        Compat-data paths are tried first, then web-features ids.
        Malformed records are treated as missing.
        """
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            fact = self._resolve_compat(key) or self._resolve_web_feature(key)
        except (AttributeError, TypeError, ValueError):
            logger.debug("event=kb_malformed key=%s", key, exc_info=True)
            return None

        if fact is not None:
            self._cache[key] = fact
        return fact

    def has(self, key: str) -> bool:
        return self.resolve(key) is not None

    def clear_cache(self) -> None:
        self._cache.clear()

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def iter_keys(self) -> Iterator[str]:
        """Yield every feature key: compat paths first, then web-features ids."""
        for name, node in sorted(self._compat.items()):
            if name in _NON_FEATURE_ROOTS or not isinstance(node, Mapping):
                continue
            yield from _walk_compat(node, name)
        for feature_id, record in sorted(self._web_features.items()):
            if isinstance(record, Mapping) and isinstance(
                record.get("status"), Mapping
            ):
                yield feature_id

    # ── Compat-data schema ──────────────────────────────

    def _resolve_compat(self, key: str) -> FeatureSupportFact | None:
        node = _descend(self._compat, key.split("."))
        if node is None:
            return None
        compat = node.get(COMPAT_KEY)
        if not isinstance(compat, Mapping):
            return None
        return _fact_from_compat(key, compat)

    # ── web-features schema ─────────────────────────────

    def _resolve_web_feature(self, key: str) -> FeatureSupportFact | None:
        record = self._web_features.get(key)
        if not isinstance(record, Mapping):
            return None
        status = record.get("status")
        if not isinstance(status, Mapping):
            return None
        return _fact_from_web_feature(key, record, status)


def _descend(node: CompatTree, parts: Sequence[str]) -> CompatTree | None:
    """Follow ``parts`` down the tree; None on any missing segment."""
    if not parts:
        return node
    head, rest = parts[0], parts[1:]
    if not head or head == COMPAT_KEY:
        return None
    child = node.get(head)
    if not isinstance(child, Mapping):
        return None
    return _descend(child, rest)


def _walk_compat(node: CompatTree, prefix: str) -> Iterator[str]:
    if isinstance(node.get(COMPAT_KEY), Mapping):
        yield prefix
    for name, child in sorted(node.items()):
        if name == COMPAT_KEY or not isinstance(child, Mapping):
            continue
        yield from _walk_compat(child, f"{prefix}.{name}")


def _fact_from_compat(key: str, compat: Mapping[str, Any]) -> FeatureSupportFact:
    support = compat.get("support")
    entries: list[BrowserSupport] = []
    if isinstance(support, Mapping):
        for browser in TRACKED_BROWSERS:
            statement = _primary_statement(support.get(browser))
            entries.append(_browser_support(browser, statement))

    status = compat.get("status")
    status = status if isinstance(status, Mapping) else {}
    return FeatureSupportFact(
        key=key,
        source="bcd",
        support=tuple(entries),
        description=str(compat.get("description") or ""),
        mdn_url=compat.get("mdn_url"),
        spec_url=_first_url(compat.get("spec_url")),
        deprecated=bool(status.get("deprecated", False)),
        experimental=bool(status.get("experimental", False)),
    )


def _primary_statement(raw: Any) -> Mapping[str, Any] | None:
    """Pick the statement describing shipped, unprefixed support.

    Compat data lists statements newest first; prefixed, aliased and
    flag-gated statements are skipped.
    """
    statements = raw if isinstance(raw, list) else [raw]
    for statement in statements:
        if not isinstance(statement, Mapping):
            continue
        if any(statement.get(k) for k in _QUALIFIED_STATEMENT_KEYS):
            continue
        return statement
    return None


def _browser_support(
    browser: str, statement: Mapping[str, Any] | None
) -> BrowserSupport:
    if statement is None:
        return BrowserSupport(browser=browser)
    added = _normalize_version(statement.get("version_added"))
    removed = _normalize_version(statement.get("version_removed"))
    return BrowserSupport(
        browser=browser, version_added=added, version_removed=removed
    )


def _normalize_version(value: Any) -> str | None:
    """Map raw compat-data version values to a string or None.

    ``false``/``null``/missing and ``"preview"`` (unreleased builds)
    mean no support; ``true`` means supported in an unknown version.
    """
    if value is None or value is False:
        return None
    if value is True:
        return "true"
    text = str(value).strip()
    if not text or text == "preview":
        return None
    return text


def _first_url(value: Any) -> str | None:
    if isinstance(value, list):
        return str(value[0]) if value else None
    return str(value) if value else None


def _fact_from_web_feature(
    key: str, record: Mapping[str, Any], status: Mapping[str, Any]
) -> FeatureSupportFact:
    versions = status.get("support")
    versions = versions if isinstance(versions, Mapping) else {}
    entries = tuple(
        BrowserSupport(
            browser=browser,
            version_added=_normalize_version(versions.get(browser)),
        )
        for browser in TRACKED_BROWSERS
    )
    baseline = status.get("baseline")
    return FeatureSupportFact(
        key=key,
        source="web-features",
        support=entries,
        name=record.get("name"),
        description=str(record.get("description") or ""),
        mdn_url=_first_url(record.get("mdn_url")),
        spec_url=_first_url(record.get("spec")),
        baseline=baseline if isinstance(baseline, str) else None,
        baseline_low_date=status.get("baseline_low_date"),
        baseline_high_date=status.get("baseline_high_date"),
    )


# ── Loading ─────────────────────────────────────────────


def load_knowledge_base(settings: Settings | None = None) -> KnowledgeBase:
    """Build a :class:`KnowledgeBase` for one run.

    Uses the bundled snapshot unless ``settings`` points at a full
    compat-data ``data.json`` and/or a web-features ``data.json``.
    """
    cfg = settings or Settings()
    bundled: dict[str, Any] | None = None

    if cfg.compat_data_path is not None:
        compat = _read_json(cfg.compat_data_path)
    else:
        bundled = _read_json(BUNDLED_DATA_PATH)
        compat = bundled.get("bcd", {})

    if cfg.web_features_path is not None:
        raw = _read_json(cfg.web_features_path)
        # data.json nests ids under "features"; older index.json is flat
        features = raw.get("features")
        web_features = features if isinstance(features, Mapping) else raw
    else:
        if bundled is None:
            bundled = _read_json(BUNDLED_DATA_PATH)
        web_features = bundled.get("web_features", {})

    logger.info(
        "event=kb_loaded compat_roots=%d web_features=%d",
        len(compat),
        len(web_features),
    )
    return KnowledgeBase(compat_data=compat, web_features=web_features)


def _read_json(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        msg = f"Cannot read compatibility data {path}: {exc}"
        raise KnowledgeBaseError(msg) from exc
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in compatibility data {path}: {exc}"
        raise KnowledgeBaseError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Compatibility data must be a JSON object: {path}"
        raise KnowledgeBaseError(msg)
    return data
