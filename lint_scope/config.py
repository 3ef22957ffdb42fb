from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping
import os
import yaml


MAX_WALK_DEPTH = 99
CONFIG_FILENAMES = (".lint-scope.yml", ".lint-scope.yaml")
TRUTHY = {"1", "true", "yes", "on"}

DEFAULT_SCOPE = {
    "extensions": [],
    "sentinel_files": [],
    "exclude_paths": [
        ".git/**",
        "node_modules/**",
        ".venv/**",
        "venv/**",
        "__pycache__/**",
    ],
    "strategy": "last-sorted",
    "remote": "origin",
    "max_depth": MAX_WALK_DEPTH,
    "timeout_seconds": None,
}


class InvocationMode(str, Enum):
    AUTOMATED = "automated"
    INTERACTIVE = "interactive"


@dataclass(frozen=True)
class ResolverConfig:
    mode: InvocationMode
    base_branch: str | None = None
    remote: str = "origin"
    max_depth: int = MAX_WALK_DEPTH
    timeout_seconds: float | None = None
    verify_base: bool = False

    def __post_init__(self) -> None:
        if not 1 <= self.max_depth <= MAX_WALK_DEPTH:
            raise ValueError(f"max_depth must be between 1 and {MAX_WALK_DEPTH}, got {self.max_depth}")


@dataclass(frozen=True)
class ScopeConfig:
    extensions: list[str] = field(default_factory=list)
    sentinel_files: list[str] = field(default_factory=list)
    exclude_paths: list[str] = field(default_factory=lambda: list(DEFAULT_SCOPE["exclude_paths"]))
    strategy: str = "last-sorted"
    remote: str = "origin"
    max_depth: int = MAX_WALK_DEPTH
    timeout_seconds: float | None = None


def read_env_file(path: Path) -> dict[str, str]:
    """KEY=VALUE pairs from a .env file; blank lines and # comments are skipped."""
    values: dict[str, str] = {}
    if not path.is_file():
        return values

    for raw in path.read_text(errors="ignore").splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = (part.strip() for part in line.split("=", 1))
        if key:
            values[key] = value.strip('"').strip("'")
    return values


def layered_environ(*env_files: Path, environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Merge .env files under the real environment.

    Earlier files win over later ones; the process environment wins over all.
    Nothing is written back to ``os.environ``.
    """
    merged: dict[str, str] = {}
    for path in reversed(env_files):
        merged.update(read_env_file(path))
    merged.update(os.environ if environ is None else environ)
    return merged


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in TRUTHY


def resolver_config_from_env(
    environ: Mapping[str, str] | None = None,
    remote: str = "origin",
    max_depth: int = MAX_WALK_DEPTH,
    timeout_seconds: float | None = None,
    verify_base: bool = False,
) -> ResolverConfig:
    """Build the resolver's view of the process environment.

    This is the only place the CI indicator and base branch are read.
    """
    env = os.environ if environ is None else environ
    base_branch = (env.get("LINT_SCOPE_BASE_BRANCH") or env.get("GITHUB_BASE_REF") or "").strip() or None
    automated = _truthy(env.get("GITHUB_ACTIONS")) or _truthy(env.get("CI")) or bool(env.get("GITHUB_BASE_REF"))

    return ResolverConfig(
        mode=InvocationMode.AUTOMATED if automated else InvocationMode.INTERACTIVE,
        base_branch=base_branch,
        remote=remote,
        max_depth=max_depth,
        timeout_seconds=timeout_seconds,
        verify_base=verify_base,
    )


def _str_list(data: dict, key: str) -> list[str]:
    value = data.get(key)
    if value is None:
        return list(DEFAULT_SCOPE[key])
    if not isinstance(value, list):
        raise ValueError(f"Config '{key}' must be a list")
    return [str(x) for x in value]


def normalize_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


def find_scope_config(root: Path) -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = root / name
        if candidate.is_file():
            return candidate
    return None


def load_scope_config(path: str | Path | None) -> ScopeConfig:
    if not path:
        return ScopeConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    exclude_paths = list(DEFAULT_SCOPE["exclude_paths"])
    for pattern in _str_list(data, "exclude_paths"):
        if pattern not in exclude_paths:
            exclude_paths.append(pattern)

    try:
        max_depth = int(data.get("max_depth", MAX_WALK_DEPTH))
        timeout = data.get("timeout_seconds")
        timeout_seconds = float(timeout) if timeout is not None else None
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid numeric value in {path}: {exc}") from exc
    if not 1 <= max_depth <= MAX_WALK_DEPTH:
        raise ValueError(f"max_depth must be between 1 and {MAX_WALK_DEPTH}, got {max_depth}")

    return ScopeConfig(
        extensions=[e for e in (normalize_extension(x) for x in _str_list(data, "extensions")) if e],
        sentinel_files=_str_list(data, "sentinel_files"),
        exclude_paths=exclude_paths,
        strategy=str(data.get("strategy") or DEFAULT_SCOPE["strategy"]),
        remote=str(data.get("remote") or DEFAULT_SCOPE["remote"]),
        max_depth=max_depth,
        timeout_seconds=timeout_seconds,
    )
