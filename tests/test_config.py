import os
from pathlib import Path

import pytest

from lint_scope.config import (
    InvocationMode,
    find_scope_config,
    layered_environ,
    load_scope_config,
    read_env_file,
    resolver_config_from_env,
)


def test_env_without_ci_is_interactive():
    cfg = resolver_config_from_env({})
    assert cfg.mode is InvocationMode.INTERACTIVE
    assert cfg.base_branch is None
    assert cfg.max_depth == 99


def test_github_base_ref_means_automated():
    cfg = resolver_config_from_env({"GITHUB_BASE_REF": "develop"})
    assert cfg.mode is InvocationMode.AUTOMATED
    assert cfg.base_branch == "develop"


def test_ci_flag_without_base_branch():
    cfg = resolver_config_from_env({"CI": "true"})
    assert cfg.mode is InvocationMode.AUTOMATED
    assert cfg.base_branch is None


def test_explicit_base_branch_override_wins():
    cfg = resolver_config_from_env(
        {"GITHUB_ACTIONS": "true", "GITHUB_BASE_REF": "main", "LINT_SCOPE_BASE_BRANCH": "release/3"},
        remote="upstream",
    )
    assert cfg.base_branch == "release/3"
    assert cfg.remote == "upstream"


def test_load_scope_config_defaults():
    cfg = load_scope_config(None)
    assert cfg.strategy == "last-sorted"
    assert ".git/**" in cfg.exclude_paths


def test_load_scope_config_yaml(tmp_path: Path):
    path = tmp_path / ".lint-scope.yml"
    path.write_text(
        "\n".join(
            [
                "extensions: [js, .JSX]",
                "sentinel_files:",
                "  - package.json",
                "  - .eslintrc.js",
                "exclude_paths:",
                "  - dist/**",
                "strategy: named-priority",
                "max_depth: 20",
                "timeout_seconds: 5",
            ]
        )
    )

    assert find_scope_config(tmp_path) == path
    cfg = load_scope_config(path)
    assert cfg.extensions == [".js", ".jsx"]
    assert cfg.sentinel_files == ["package.json", ".eslintrc.js"]
    assert cfg.exclude_paths[-1] == "dist/**"
    assert cfg.strategy == "named-priority"
    assert cfg.max_depth == 20
    assert cfg.timeout_seconds == 5.0


def test_load_scope_config_rejects_bad_shapes(tmp_path: Path):
    path = tmp_path / "bad.yml"
    path.write_text("extensions: .js\n")
    with pytest.raises(ValueError):
        load_scope_config(path)

    path.write_text("max_depth: 500\n")
    with pytest.raises(ValueError):
        load_scope_config(path)


def test_load_scope_config_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_scope_config(tmp_path / "nope.yml")


def test_read_env_file_parses_without_touching_environ(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("LINT_SCOPE_TEST_NEW", raising=False)
    env = tmp_path / ".env"
    env.write_text("# comment\nLINT_SCOPE_TEST_NEW='added'\nexport GITHUB_BASE_REF=\"develop\"\n\nnot a pair\n")

    values = read_env_file(env)

    assert values == {"LINT_SCOPE_TEST_NEW": "added", "GITHUB_BASE_REF": "develop"}
    assert "LINT_SCOPE_TEST_NEW" not in os.environ
    assert read_env_file(tmp_path / "missing.env") == {}


def test_layered_environ_precedence(tmp_path: Path):
    first = tmp_path / "first.env"
    second = tmp_path / "second.env"
    first.write_text("A=first\nB=first\n")
    second.write_text("A=second\nB=second\nC=second\n")

    merged = layered_environ(first, second, environ={"B": "process"})

    assert merged == {"A": "first", "B": "process", "C": "second"}


def test_layered_environ_feeds_resolver_config(tmp_path: Path):
    env = tmp_path / ".env"
    env.write_text("GITHUB_BASE_REF=develop\n")

    cfg = resolver_config_from_env(layered_environ(env, environ={}))

    assert cfg.mode is InvocationMode.AUTOMATED
    assert cfg.base_branch == "develop"
