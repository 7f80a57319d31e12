"""Gitignore and `.flattenerignore` handling using pathspec."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import pathspec

log = logging.getLogger(__name__)

IGNORE_FILENAME = ".flattenerignore"


def _read_ignore_file(path: Path) -> pathspec.PathSpec | None:
    """
    Compile an ignore file, skipping blank lines and `#` comments. Returns `None`
    if it is unreadable or holds no patterns.
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.warning("Could not read %s: %s", path, e)
        return None
    lines = [line for line in text.splitlines() if line.strip() and not line.strip().startswith("#")]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitignore", lines)


def load_gitignore(directory: Path) -> pathspec.PathSpec | None:
    """
    Read `.gitignore` in the given directory and return a compiled `PathSpec`,
    or `None` if the file doesn't exist or is empty.
    """
    gitignore = directory / ".gitignore"
    if not gitignore.is_file():
        return None
    return _read_ignore_file(gitignore)


def find_ignore_file(start_dir: Path) -> Path | None:
    """Walk up from `start_dir` looking for `.flattenerignore`; first found wins."""
    current = start_dir.resolve()
    while True:
        candidate = current / IGNORE_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


@dataclass(frozen=True)
class IgnoreFile:
    """Compiled ignore patterns, anchored at the directory holding the file."""

    base: Path
    spec: pathspec.PathSpec

    def matches(self, path: Path) -> bool:
        try:
            rel = path.relative_to(self.base)
        except ValueError:
            return False
        return self.spec.match_file(rel.as_posix())


def load_flattener_ignore(start_dir: Path) -> IgnoreFile | None:
    """Patterns from the nearest `.flattenerignore` at or above `start_dir`, or `None`."""
    path = find_ignore_file(start_dir)
    if path is None:
        return None
    log.debug("Using ignore file %s", path)
    spec = _read_ignore_file(path)
    if spec is None:
        return None
    return IgnoreFile(path.parent, spec)
