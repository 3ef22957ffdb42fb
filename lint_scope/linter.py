from __future__ import annotations

from pathlib import Path
import logging
import subprocess


LOGGER = logging.getLogger(__name__)


class LinterError(RuntimeError):
    pass


def run_linter(command: list[str], files: list[Path], cwd: Path) -> int:
    """Run ``command`` with ``files`` appended and return its exit code.

    Output is left on the terminal; nothing about it is interpreted here.
    """
    if not command:
        raise LinterError("No linter command given")

    cmd = [*command, *(str(f) for f in files)]
    LOGGER.debug("running linter %s on %d file(s)", command[0], len(files))
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), check=False)
    except FileNotFoundError as exc:
        raise LinterError(f"Linter '{command[0]}' is not installed or not available in PATH") from exc
    return proc.returncode
