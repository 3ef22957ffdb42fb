from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class LintScope:
    root: str
    base_ref: str
    mode: str
    strategy: str | None
    changed_files: list[Path]
    targets: list[Path]
    full_tree: bool = False
    sentinels_hit: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.targets

    def relative_targets(self) -> list[str]:
        root = Path(self.root)
        out = []
        for path in self.targets:
            try:
                out.append(path.relative_to(root).as_posix())
            except ValueError:
                out.append(str(path))
        return out

    def summary(self) -> dict[str, int]:
        return {
            "changed": len(self.changed_files),
            "targets": len(self.targets),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "root": str(Path(self.root).resolve()),
            "base_ref": self.base_ref,
            "mode": self.mode,
            "strategy": self.strategy,
            "summary": self.summary(),
            "full_tree": self.full_tree,
            "sentinels_hit": list(self.sentinels_hit),
            "changed_files": [str(p) for p in self.changed_files],
            "targets": [str(p) for p in self.targets],
        }
