from pathlib import Path

from lint_scope.config import ScopeConfig
from lint_scope.selection import discover_files, is_excluded, matched_sentinels, select_lint_targets


def _tree(root: Path) -> None:
    for rel in ["src/app.js", "src/util.py", "src/vendor/lib.js", "package.json", "node_modules/x/index.js"]:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("// file\n")


def test_select_filters_by_extension_and_exclusion(tmp_path: Path):
    _tree(tmp_path)
    root = tmp_path.resolve()
    changed = [root / "src/app.js", root / "src/util.py", root / "src/vendor/lib.js"]
    cfg = ScopeConfig(extensions=[".js"], exclude_paths=["src/vendor/**"])

    scope = select_lint_targets(root, "refs/heads/develop", changed, cfg)

    assert scope.targets == [root / "src/app.js"]
    assert scope.changed_files == changed
    assert not scope.full_tree


def test_sentinel_change_selects_whole_tree(tmp_path: Path):
    _tree(tmp_path)
    root = tmp_path.resolve()
    cfg = ScopeConfig(extensions=[".js"], sentinel_files=["package.json"])

    scope = select_lint_targets(root, "develop", [root / "package.json"], cfg)

    assert scope.full_tree
    assert scope.sentinels_hit == ["package.json"]
    assert scope.targets == [root / "src/app.js", root / "src/vendor/lib.js"]


def test_sentinel_glob_matches_relative_path(tmp_path: Path):
    root = tmp_path.resolve()
    changed = [root / "config/eslint/base.json", root / "src/a.js"]
    assert matched_sentinels(changed, root, ["config/eslint/*.json", "yarn.lock"]) == ["config/eslint/*.json"]
    assert matched_sentinels(changed, root, ["base.json"]) == ["base.json"]
    assert matched_sentinels(changed, root, ["other/base.json"]) == []


def test_empty_changes_is_empty_scope(tmp_path: Path):
    scope = select_lint_targets(tmp_path, "develop", [], ScopeConfig())
    assert scope.is_empty
    assert scope.targets == []


def test_discover_files_skips_default_exclusions(tmp_path: Path):
    _tree(tmp_path)
    files = list(discover_files(tmp_path, ScopeConfig().exclude_paths, [".js"]))
    rels = [p.relative_to(tmp_path).as_posix() for p in files]
    assert rels == ["src/app.js", "src/vendor/lib.js"]


def test_is_excluded_outside_root_is_false(tmp_path: Path):
    assert not is_excluded(Path("/elsewhere/a.js"), tmp_path, ["**"])


def test_deleted_sentinel_still_selects_whole_tree(tmp_path: Path):
    _tree(tmp_path)
    root = tmp_path.resolve()
    gone = root / ".eslintrc.js"
    changed = [root / "src/app.js"]
    cfg = ScopeConfig(extensions=[".js"], sentinel_files=[".eslintrc.js"])

    scope = select_lint_targets(root, "develop", changed, cfg, touched=[gone, *changed])

    assert scope.full_tree
    assert scope.sentinels_hit == [".eslintrc.js"]
    assert scope.targets == [root / "src/app.js", root / "src/vendor/lib.js"]
