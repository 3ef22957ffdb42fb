from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import logging

import typer

from lint_scope.base_ref import get_strategy, resolve_base_ref, unresolved_message
from lint_scope.config import (
    ScopeConfig,
    find_scope_config,
    layered_environ,
    load_scope_config,
    normalize_extension,
    resolver_config_from_env,
)
from lint_scope.git_exec import GitCommandError
from lint_scope.git_scope import diff_names, existing_paths
from lint_scope.linter import LinterError, run_linter
from lint_scope.models import LintScope
from lint_scope.reporters import write_json_report, write_markdown_report
from lint_scope.selection import select_lint_targets

app = typer.Typer(help="lint-scope: run a linter only on what changed since the base ref")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every git query to stderr"),
) -> None:
    """lint-scope command group."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=2)


def _root(path: str) -> Path:
    root = Path(path).resolve()
    if not root.is_dir():
        raise _fail(f"Path does not exist: {root}")
    return root


def _scope_config(root: Path, config: str | None, extensions: list[str] | None, sentinels: list[str] | None) -> ScopeConfig:
    try:
        cfg = load_scope_config(config or find_scope_config(root))
    except (FileNotFoundError, ValueError) as exc:
        raise _fail(f"Invalid config: {exc}")

    updates = {}
    if extensions:
        updates["extensions"] = [normalize_extension(e) for e in extensions if e.strip()]
    if sentinels:
        updates["sentinel_files"] = list(sentinels)
    if updates:
        cfg = replace(cfg, **updates)
    return cfg


def _resolve(
    root: Path,
    cfg: ScopeConfig,
    head: str,
    strategy: str | None,
    remote: str | None,
    max_depth: int | None,
    timeout: float | None,
    verify_base: bool,
) -> tuple[str, str, str]:
    # .env in the invocation directory wins over the one in the scanned root
    try:
        resolver_cfg = resolver_config_from_env(
            layered_environ(Path.cwd() / ".env", root / ".env"),
            remote=remote or cfg.remote,
            max_depth=max_depth or cfg.max_depth,
            timeout_seconds=timeout if timeout is not None else cfg.timeout_seconds,
            verify_base=verify_base,
        )
        chosen = get_strategy(strategy or cfg.strategy)
    except ValueError as exc:
        raise _fail(str(exc))

    try:
        ref = resolve_base_ref(resolver_cfg, root, head=head, strategy=chosen)
    except (GitCommandError, ValueError) as exc:
        raise _fail(str(exc))

    if not ref:
        raise _fail(unresolved_message(resolver_cfg))
    return ref, resolver_cfg.mode.value, chosen.name


def _build_scope(
    path: str,
    base: str | None,
    head: str,
    config: str | None,
    extensions: list[str] | None,
    sentinels: list[str] | None,
    strategy: str | None,
    remote: str | None,
    max_depth: int | None,
    timeout: float | None,
    verify_base: bool,
) -> LintScope:
    root = _root(path)
    cfg = _scope_config(root, config, extensions, sentinels)

    if base:
        ref, mode, strategy_name = base, "manual", None
    else:
        ref, mode, strategy_name = _resolve(root, cfg, head, strategy, remote, max_depth, timeout, verify_base)

    try:
        names = diff_names(ref, root, timeout=timeout if timeout is not None else cfg.timeout_seconds)
    except (GitCommandError, ValueError) as exc:
        raise _fail(str(exc))

    return select_lint_targets(
        root,
        ref,
        existing_paths(names, root),
        cfg,
        mode=mode,
        strategy=strategy_name,
        touched=[root / name for name in names],
    )


def _write_reports(scope: LintScope, json_out: str | None, md_out: str | None) -> None:
    if json_out:
        write_json_report(scope, Path(json_out))
    if md_out:
        write_markdown_report(scope, Path(md_out))


PATH_OPT = typer.Option(".", help="Directory to scope the diff to")
HEAD_OPT = typer.Option("HEAD", help="Revision whose base should be found")
STRATEGY_OPT = typer.Option(None, help="Branch selection: named-priority|last-sorted")
REMOTE_OPT = typer.Option(None, help="Remote whose tracking refs count as pushed (default: origin)")
DEPTH_OPT = typer.Option(None, help="How many ancestors to inspect (1-99)")
TIMEOUT_OPT = typer.Option(None, help="Per git query timeout in seconds")
VERIFY_OPT = typer.Option(False, "--verify-base", help="In CI, fail if the base branch ref does not exist")


@app.command("base-ref")
def base_ref(
    path: str = PATH_OPT,
    head: str = HEAD_OPT,
    strategy: str | None = STRATEGY_OPT,
    remote: str | None = REMOTE_OPT,
    max_depth: int | None = DEPTH_OPT,
    timeout: float | None = TIMEOUT_OPT,
    verify_base: bool = VERIFY_OPT,
    config: str | None = typer.Option(None, help="lint-scope YAML config path"),
) -> None:
    """Print the base ref the current work should be compared against."""
    root = _root(path)
    cfg = _scope_config(root, config, None, None)
    ref, _, _ = _resolve(root, cfg, head, strategy, remote, max_depth, timeout, verify_base)
    typer.echo(ref)


@app.command("changed-files")
def changed_files(
    path: str = PATH_OPT,
    base: str | None = typer.Option(None, help="Compare against this ref instead of resolving one"),
    head: str = HEAD_OPT,
    config: str | None = typer.Option(None, help="lint-scope YAML config path"),
    ext: list[str] | None = typer.Option(None, "--ext", help="Only keep files with this extension (repeatable)"),
    sentinel: list[str] | None = typer.Option(None, "--sentinel", help="File whose change selects the whole tree (repeatable)"),
    strategy: str | None = STRATEGY_OPT,
    remote: str | None = REMOTE_OPT,
    max_depth: int | None = DEPTH_OPT,
    timeout: float | None = TIMEOUT_OPT,
    verify_base: bool = VERIFY_OPT,
    json_out: str | None = typer.Option(None, help="Optional JSON report output path"),
    md_out: str | None = typer.Option(None, help="Optional Markdown report output path"),
) -> None:
    """List the files a linter should look at, one per line."""
    scope = _build_scope(path, base, head, config, ext, sentinel, strategy, remote, max_depth, timeout, verify_base)
    _write_reports(scope, json_out, md_out)
    for target in scope.targets:
        typer.echo(str(target))


@app.command("run")
def run(
    linter_cmd: list[str] = typer.Argument(..., help="Linter command; target files are appended"),
    path: str = PATH_OPT,
    base: str | None = typer.Option(None, help="Compare against this ref instead of resolving one"),
    head: str = HEAD_OPT,
    config: str | None = typer.Option(None, help="lint-scope YAML config path"),
    ext: list[str] | None = typer.Option(None, "--ext", help="Only keep files with this extension (repeatable)"),
    sentinel: list[str] | None = typer.Option(None, "--sentinel", help="File whose change selects the whole tree (repeatable)"),
    strategy: str | None = STRATEGY_OPT,
    remote: str | None = REMOTE_OPT,
    max_depth: int | None = DEPTH_OPT,
    timeout: float | None = TIMEOUT_OPT,
    verify_base: bool = VERIFY_OPT,
    json_out: str | None = typer.Option(None, help="Optional JSON report output path"),
    md_out: str | None = typer.Option(None, help="Optional Markdown report output path"),
) -> None:
    """Run a linter on the changed files (use `--` before the linter command)."""
    scope = _build_scope(path, base, head, config, ext, sentinel, strategy, remote, max_depth, timeout, verify_base)
    _write_reports(scope, json_out, md_out)

    if scope.full_tree:
        typer.echo(f"Sentinel changed ({', '.join(scope.sentinels_hit)}); linting the whole tree")
    if scope.is_empty:
        typer.secho(f"Nothing to lint since {scope.base_ref}", fg=typer.colors.GREEN)
        return

    typer.echo(f"Linting {len(scope.targets)} file(s) changed since {scope.base_ref}")
    try:
        code = run_linter(linter_cmd, scope.targets, Path(scope.root))
    except LinterError as exc:
        raise _fail(str(exc))
    if code != 0:
        raise typer.Exit(code=code)


if __name__ == "__main__":
    app()
