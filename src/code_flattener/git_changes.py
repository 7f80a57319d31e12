"""
Optional trailer with the repository's uncommitted changes.

Every git failure is non-fatal: the section simply omits what could not be read.
"""

from __future__ import annotations

import logging
from pathlib import Path

from code_flattener.commands import CommandRunner, run_command

log = logging.getLogger(__name__)


def find_git_root(start: Path) -> Path | None:
    """Nearest directory at or above `start` that contains a `.git` directory."""
    current = start.resolve()
    while True:
        if (current / ".git").is_dir():
            return current
        if current.parent == current:
            return None
        current = current.parent


def _fenced(title: str, lang: str, body: str) -> str:
    return f"## {title}:\n```{lang}\n{body}\n```\n\n"


def collect_git_changes(
    repo: Path,
    include_staged: bool = True,
    include_unstaged: bool = True,
    verbose: bool = False,
    runner: CommandRunner = run_command,
) -> str:
    """Render `git status` and the staged/unstaged diffs of `repo` as text."""
    out = ["\n\n# --- Git Changes ---\n", f"# Repository: {repo}\n\n"]

    status = runner(["git", "status", "--porcelain", "-uall"], repo)
    if status.ok:
        if status.stdout.strip():
            out.append(_fenced("Git Status", "bash", status.stdout.strip()))
        else:
            out.append("## Git Status: No uncommitted changes.\n\n")
    elif verbose:
        log.warning("'git status' failed: %s", status.stderr.strip())

    diffs: list[tuple[str, list[str]]] = []
    if include_staged:
        diffs.append(("Git Diff (Staged)", ["git", "diff", "--staged"]))
    if include_unstaged:
        diffs.append(("Git Diff (Unstaged)", ["git", "diff"]))

    for title, cmd in diffs:
        result = runner(cmd, repo)
        if result.ok:
            if result.stdout.strip():
                out.append(_fenced(title, "diff", result.stdout.strip()))
        elif verbose:
            log.warning("'%s' failed: %s", " ".join(cmd), result.stderr.strip())

    return "".join(out)
