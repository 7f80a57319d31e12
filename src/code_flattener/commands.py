"""
Blocking execution of external tools (`wp`, `git`).

Calls have no timeout: a hanging tool hangs the run. A missing executable is
reported as exit code 127 instead of raising, so callers only ever inspect a
`CommandResult`.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class CommandResult:
    """Exit status and decoded output of one external command."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str], Path | None], CommandResult]


def run_command(cmd: Sequence[str], cwd: Path | None = None) -> CommandResult:
    """Run `cmd` in `cwd`, capturing stdout and stderr as text."""
    try:
        proc = subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except FileNotFoundError:
        return CommandResult(127, "", f"Command not found: {cmd[0] if cmd else 'unknown'}")
    except OSError as e:
        return CommandResult(1, "", f"Error executing command: {e!s}")
    return CommandResult(proc.returncode, proc.stdout or "", proc.stderr or "")
