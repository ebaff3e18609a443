"""Enumerate candidate source files under a project root."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pathspec

from baseline_lens.config import (
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_INCLUDE_PATTERNS,
    Settings,
)
from baseline_lens.errors import DiscoveryError

logger = logging.getLogger(__name__)


def discover_files(
    root: Path,
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
    settings: Settings | None = None,
) -> list[Path]:
    """Return files under ``root`` matching ``include`` minus ``exclude``.

    * Patterns are gitignore-style globs matched against the path
      relative to ``root`` in POSIX form.
    * An empty ``include`` means every supported extension.
    * The default excludes (``node_modules``, ``dist``, ``build``,
      ``coverage``, ``.git``) always apply.
    * Directories in ``settings.skip_directories`` are not descended.
    * Result is sorted and free of duplicates; paths resolving to the
      same real file are kept once, first in sorted order.

    Raises :class:`DiscoveryError` if ``root`` is missing or not a
    directory.
    """
    cfg = settings or Settings()
    root = Path(root)
    if not root.exists():
        raise DiscoveryError(f"Path does not exist: {root}")
    if not root.is_dir():
        raise DiscoveryError(f"Path is not a directory: {root}")

    include_spec = _build_spec(list(include) or list(DEFAULT_INCLUDE_PATTERNS))
    exclude_spec = _build_spec([*DEFAULT_EXCLUDE_PATTERNS, *exclude])

    try:
        candidates = _walk_files(root, set(cfg.skip_directories))
    except OSError as exc:
        raise DiscoveryError(f"Failed to list {root}: {exc}") from exc

    matched: set[Path] = set()
    for path in candidates:
        rel = path.relative_to(root).as_posix()
        if include_spec.match_file(rel) and not exclude_spec.match_file(rel):
            matched.add(path)

    # a symlink and its target inside the root count once
    files: list[Path] = []
    seen: set[Path] = set()
    for path in sorted(matched):
        real = path.resolve()
        if real in seen:
            continue
        seen.add(real)
        files.append(path)

    logger.info(
        "event=discovery_done root=%s candidates=%d matched=%d",
        root,
        len(candidates),
        len(files),
    )
    return files


def _build_spec(patterns: list[str]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", patterns)


def _walk_files(root: Path, skip_dirs: set[str]) -> list[Path]:
    """List regular files, pruning skipped directories.

    Symlinks that resolve outside the root are ignored, and each real
    directory is visited once.
    """
    resolved_root = root.resolve()
    return _walk_files_inner(root, skip_dirs, resolved_root, {resolved_root})


def _walk_files_inner(
    current: Path,
    skip_dirs: set[str],
    resolved_root: Path,
    visited: set[Path],
) -> list[Path]:
    files: list[Path] = []
    for item in sorted(current.iterdir()):
        if item.is_symlink():
            resolved = item.resolve()
            if not resolved.is_relative_to(resolved_root):
                continue
        if item.is_dir():
            if item.name in skip_dirs:
                continue
            real = item.resolve()
            if real in visited:
                continue
            visited.add(real)
            files.extend(
                _walk_files_inner(item, skip_dirs, resolved_root, visited)
            )
        elif item.is_file():
            files.append(item)
    return files
