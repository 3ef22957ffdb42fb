"""Work out which revision the current unit of work started from.

Under CI the base branch is handed to us, so the answer is its
remote-tracking ref. On a developer machine nobody tells us, so we look at
the branch's upstream and then walk back through ancestors until a commit
shows up on some other branch.
"""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol
import logging

from lint_scope.config import InvocationMode, ResolverConfig
from lint_scope.git_exec import abbrev_ref, branches_containing, check_revision, ref_exists, symbolic_upstream


LOGGER = logging.getLogger(__name__)

LOCAL_PREFIX = "refs/heads/"


class ResolutionCancelled(RuntimeError):
    pass


class SelectionStrategy(Protocol):
    name: str

    def select(self, candidates: list[str]) -> str | None:
        ...


class NamedPriority:
    """Only accept well-known long-lived branches.

    develop beats master beats the first feature/ branch beats the first
    release/ branch. Throwaway branches sharing a commit are ignored.
    """

    name = "named-priority"

    def select(self, candidates: list[str]) -> str | None:
        for exact in ("refs/heads/develop", "refs/heads/master"):
            if exact in candidates:
                return exact
        for prefix in ("refs/heads/feature/", "refs/heads/release/"):
            for candidate in candidates:
                if candidate.startswith(prefix):
                    return candidate
        return None


class LastSorted:
    """Accept any branch; prefer the one that sorts last ("feature" > "develop")."""

    name = "last-sorted"

    def select(self, candidates: list[str]) -> str | None:
        if not candidates:
            return None
        return sorted(candidates)[-1]


STRATEGIES: dict[str, type] = {
    NamedPriority.name: NamedPriority,
    LastSorted.name: LastSorted,
}


def get_strategy(name: str) -> SelectionStrategy:
    key = (name or "").strip().lower()
    if key not in STRATEGIES:
        raise ValueError(f"Unknown selection strategy '{name}' (expected one of: {', '.join(STRATEGIES)})")
    return STRATEGIES[key]()


def _is_remote_tracking(name: str, remote: str) -> bool:
    return name.startswith(f"{remote}/") or name.startswith(f"refs/remotes/{remote}/")


def _walk_ancestors(
    head: str,
    own_branch: str,
    cwd: Path,
    config: ResolverConfig,
    strategy: SelectionStrategy,
    should_cancel: Callable[[], bool] | None,
) -> str | None:
    own_ref = f"{LOCAL_PREFIX}{own_branch}"
    for depth in range(1, config.max_depth + 1):
        if should_cancel is not None and should_cancel():
            raise ResolutionCancelled(f"Base ref resolution cancelled at {head}~{depth}")

        candidates = [
            ref for ref in branches_containing(f"{head}~{depth}", cwd, timeout=config.timeout_seconds)
            if ref != own_ref
        ]
        if not candidates:
            continue

        chosen = strategy.select(candidates)
        LOGGER.debug("%s~%d on %s -> %s", head, depth, candidates, chosen)
        if chosen:
            return chosen
    return None


def resolve_base_ref(
    config: ResolverConfig,
    cwd: Path,
    head: str = "HEAD",
    strategy: SelectionStrategy | None = None,
    should_cancel: Callable[[], bool] | None = None,
) -> str | None:
    """Resolve the base revision for ``head``, or None when it cannot be found.

    Interactive mode falls back to ``<head>@{upstream}`` after an exhausted
    walk only when the branch actually tracks a remote branch; without any
    upstream the result is None.
    """
    check_revision(head)
    cwd = Path(cwd).resolve()
    strategy = strategy or NamedPriority()

    if config.mode is InvocationMode.AUTOMATED:
        if not config.base_branch:
            LOGGER.debug("automated mode without a base branch")
            return None
        ref = f"refs/remotes/{config.remote}/{config.base_branch}"
        if config.verify_base:
            ref_exists(ref, cwd, fatal=True, timeout=config.timeout_seconds)
        return ref

    upstream = symbolic_upstream(head, cwd, timeout=config.timeout_seconds)
    if upstream and not _is_remote_tracking(upstream, config.remote):
        LOGGER.debug("%s tracks local branch %s", head, upstream)
        return f"{LOCAL_PREFIX}{upstream}"

    own_branch = abbrev_ref(head, cwd, timeout=config.timeout_seconds)
    found = _walk_ancestors(head, own_branch, cwd, config, strategy, should_cancel)
    if found:
        return found

    if upstream:
        LOGGER.debug("no branch found within %d ancestors, using upstream", config.max_depth)
        return f"{head}@{{upstream}}"
    return None


def unresolved_message(config: ResolverConfig) -> str:
    if config.mode is InvocationMode.AUTOMATED:
        return (
            "Could not determine the base branch for this CI run. "
            "Set GITHUB_BASE_REF (or LINT_SCOPE_BASE_BRANCH) to the target branch name, "
            "or pass --base <ref>."
        )
    return (
        f"Could not determine a base ref: no other branch shares history within {config.max_depth} commits "
        "and the current branch has no upstream. Pass --base <ref> (for example --base origin/main)."
    )
