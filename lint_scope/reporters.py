from __future__ import annotations

import json
from pathlib import Path

from lint_scope import __version__
from lint_scope.models import LintScope


def write_json_report(scope: LintScope, path: Path) -> None:
    payload = scope.to_dict()
    payload["tool"] = {"name": "lint-scope", "version": __version__}
    path.write_text(json.dumps(payload, indent=2))


def build_markdown_report(scope: LintScope) -> str:
    s = scope.summary()
    lines = [
        "# lint-scope report",
        "",
        f"- **Root:** `{scope.root}`",
        f"- **Base Ref:** `{scope.base_ref}`",
        f"- **Mode:** {scope.mode}",
        f"- **Strategy:** {scope.strategy or 'n/a'}",
        f"- **Changed Files:** {s['changed']}",
        f"- **Lint Targets:** {s['targets']}",
        f"- **Full Tree:** {'yes' if scope.full_tree else 'no'}",
        "",
    ]

    if scope.sentinels_hit:
        lines.extend(["## Sentinel files changed", ""])
        lines.extend([f"- `{name}`" for name in scope.sentinels_hit])
        lines.append("")

    lines.extend(["## Targets", ""])
    if scope.is_empty:
        lines.append("Nothing to lint.")
    else:
        lines.extend([f"- `{rel}`" for rel in scope.relative_targets()])

    return "\n".join(lines)


def write_markdown_report(scope: LintScope, path: Path) -> None:
    path.write_text(build_markdown_report(scope))
