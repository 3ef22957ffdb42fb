from __future__ import annotations

from pathlib import Path
import logging

from lint_scope.git_exec import GitCommandError, check_revision, run_git


LOGGER = logging.getLogger(__name__)


class GitScopeError(GitCommandError):
    pass


def diff_names(base: str, scope: Path, timeout: float | None = None) -> list[str]:
    """Paths under ``scope``, relative to it, that differ from ``base``.

    Deleted files are included; names come back exactly as stored in git.
    """
    check_revision(base)
    scope = Path(scope).resolve()
    try:
        result = run_git(
            ["diff", "--name-only", "-z", base, "--relative"],
            scope,
            fatal=True,
            timeout=timeout,
        )
    except GitCommandError as exc:
        raise GitScopeError(
            f"Failed to list changed files against '{base}'. {exc.stderr or str(exc)}",
            exc.command,
            returncode=exc.returncode,
            stderr=exc.stderr,
        ) from exc

    # NUL separated, so names are neither quoted nor trimmed
    return [name for name in result.stdout.split("\0") if name]


def existing_paths(names: list[str], scope: Path) -> list[Path]:
    scope = Path(scope).resolve()
    out: list[Path] = []
    for name in names:
        path = scope / name
        # deleted in the working tree; nothing to lint
        if not path.exists():
            LOGGER.debug("skipping deleted path %s", path)
            continue
        out.append(path)
    return out


def list_changed_files(base: str, scope: Path, timeout: float | None = None) -> list[Path]:
    """Files under ``scope`` that differ from ``base`` and still exist on disk."""
    return existing_paths(diff_names(base, scope, timeout=timeout), scope)
