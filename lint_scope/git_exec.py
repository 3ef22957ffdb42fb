from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import logging
import subprocess


LOGGER = logging.getLogger(__name__)


class GitCommandError(RuntimeError):
    def __init__(self, message: str, args: list[str] | None = None, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.command = list(args or [])
        self.returncode = returncode
        self.stderr = stderr


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str = ""
    returncode: int = 0
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def check_revision(rev: str) -> str:
    """Refuse revisions git would read as an option."""
    if not rev or rev.startswith("-"):
        raise ValueError(f"Invalid revision '{rev}': must be non-empty and must not start with '-'")
    return rev


def split_lines(text: str) -> list[str]:
    out = []
    for line in (text or "").splitlines():
        p = line.strip()
        if p:
            out.append(p)
    return out


def run_git(
    args: list[str],
    cwd: Path,
    *,
    fatal: bool = False,
    timeout: float | None = None,
) -> CommandResult:
    """Run ``git <args>`` inside ``cwd``.

    A non-zero exit is returned as a failed result unless ``fatal`` is set.
    A git binary that cannot be started always raises GitCommandError.
    """
    cmd = ["git", *args]
    LOGGER.debug("running %s in %s", " ".join(cmd), cwd)

    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            capture_output=True,
            encoding="utf-8",
            errors="surrogateescape",
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        if not Path(cwd).is_dir():
            raise GitCommandError(f"Working directory does not exist: {cwd}", cmd) from exc
        raise GitCommandError("git is not installed or not available in PATH", cmd) from exc
    except (NotADirectoryError, PermissionError) as exc:
        raise GitCommandError(f"Cannot run git in {cwd}: {exc}", cmd) from exc
    except subprocess.TimeoutExpired as exc:
        if fatal:
            raise GitCommandError(f"'{' '.join(cmd)}' timed out after {timeout}s", cmd) from exc
        LOGGER.debug("%s timed out after %ss", " ".join(cmd), timeout)
        return CommandResult(stdout="", stderr="timed out", returncode=-1, timed_out=True)

    result = CommandResult(
        stdout=proc.stdout or "",
        stderr=proc.stderr or "",
        returncode=proc.returncode,
    )
    if result.returncode != 0:
        stderr = result.stderr.strip()
        if fatal:
            raise GitCommandError(
                f"'{' '.join(cmd)}' failed with exit code {result.returncode}. {stderr}".strip(),
                cmd,
                returncode=result.returncode,
                stderr=stderr,
            )
        LOGGER.debug("%s exited %s: %s", " ".join(cmd), result.returncode, stderr)
    return result


def symbolic_upstream(head: str, cwd: Path, timeout: float | None = None) -> str:
    """Short name of the branch ``head`` tracks, or "" when it tracks nothing."""
    result = run_git(["rev-parse", "--abbrev-ref", f"{head}@{{upstream}}"], cwd, timeout=timeout)
    if not result.succeeded:
        return ""
    return result.stdout.strip()


def abbrev_ref(ref: str, cwd: Path, timeout: float | None = None) -> str:
    result = run_git(["rev-parse", "--abbrev-ref", ref], cwd, timeout=timeout)
    if not result.succeeded:
        return ""
    return result.stdout.strip()


def branches_containing(commit: str, cwd: Path, timeout: float | None = None) -> list[str]:
    """Full ``refs/heads/...`` names of local branches that contain ``commit``."""
    result = run_git(
        ["branch", "--contains", commit, "--format=%(refname)"],
        cwd,
        timeout=timeout,
    )
    if not result.succeeded:
        return []
    return split_lines(result.stdout)


def ref_exists(ref: str, cwd: Path, fatal: bool = False, timeout: float | None = None) -> bool:
    result = run_git(["rev-parse", "--verify", "--quiet", ref], cwd, fatal=fatal, timeout=timeout)
    return result.succeeded
