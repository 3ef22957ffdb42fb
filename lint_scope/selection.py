from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Iterable

from lint_scope.config import ScopeConfig
from lint_scope.models import LintScope


def _rel(path: Path, root: Path) -> str | None:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return None


def is_excluded(path: Path, root: Path, exclude_patterns: list[str] | None) -> bool:
    if not exclude_patterns:
        return False

    rel = _rel(path, root)
    if rel is None:
        return False
    for pattern in exclude_patterns:
        p = pattern.strip()
        if not p:
            continue
        if fnmatch.fnmatch(rel, p):
            return True
    return False


def has_extension(path: Path, extensions: list[str] | None) -> bool:
    if not extensions:
        return True
    return path.suffix.lower() in extensions


def discover_files(
    root: Path,
    exclude_patterns: list[str] | None = None,
    extensions: list[str] | None = None,
) -> Iterable[Path]:
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue
        if is_excluded(path, root, exclude_patterns):
            continue
        if has_extension(path, extensions):
            yield path


def matched_sentinels(changed: list[Path], root: Path, sentinels: list[str]) -> list[str]:
    """Sentinel entries matched by a changed file, by relative path or basename."""
    hits: list[str] = []
    for sentinel in sentinels:
        s = sentinel.strip().replace("\\", "/")
        if not s:
            continue
        for path in changed:
            rel = _rel(path, root) or path.as_posix()
            if fnmatch.fnmatch(rel, s) or ("/" not in s and fnmatch.fnmatch(path.name, s)):
                hits.append(sentinel)
                break
    return hits


def select_lint_targets(
    root: Path,
    base_ref: str,
    changed: list[Path],
    config: ScopeConfig,
    mode: str = "manual",
    strategy: str | None = None,
    touched: list[Path] | None = None,
) -> LintScope:
    """Pick lint targets from ``changed``.

    ``touched`` is every path the diff reported, deleted ones included, and is
    what sentinels are matched against; it defaults to ``changed``.
    """
    root = Path(root).resolve()
    hits = matched_sentinels(changed if touched is None else touched, root, config.sentinel_files)
    if hits:
        targets = list(discover_files(root, config.exclude_paths, config.extensions))
    else:
        targets = [
            path for path in changed
            if has_extension(path, config.extensions) and not is_excluded(path, root, config.exclude_paths)
        ]

    return LintScope(
        root=str(root),
        base_ref=base_ref,
        mode=mode,
        strategy=strategy,
        changed_files=list(changed),
        targets=targets,
        full_tree=bool(hits),
        sentinels_hit=hits,
    )
