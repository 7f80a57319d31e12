"""
Aggregator: the shared output buffer and file counter.

Safe to call from many worker threads. Blocks are formatted before the lock is
taken, so the critical section is only the append and the increment.
"""

from __future__ import annotations

import threading
from pathlib import Path


def format_block(path: Path | str, content: str, extension: str, markdown: bool) -> str:
    """Render one file as a plain or fenced block."""
    if markdown:
        return f"\n\n```{extension}\n# --- File: {path} ---\n{content}\n```\n"
    return f"\n\n# --- File: {path} ---\n\n{content}"


class Aggregator:
    def __init__(self, markdown: bool = False) -> None:
        self.markdown = markdown
        self._lock = threading.Lock()
        self._parts: list[str] = []
        self._paths: list[Path] = []
        self._count = 0

    def add(self, path: Path, content: str, extension: str) -> None:
        """Append the formatted block for one admitted file."""
        block = format_block(path, content, extension, self.markdown)
        with self._lock:
            self._parts.append(block)
            self._paths.append(path)
            self._count += 1

    def record(self, path: Path) -> None:
        """Count a file without content (dry runs)."""
        with self._lock:
            self._paths.append(path)
            self._count += 1

    @property
    def content(self) -> str:
        with self._lock:
            return "".join(self._parts)

    @property
    def file_count(self) -> int:
        with self._lock:
            return self._count

    @property
    def processed_paths(self) -> list[Path]:
        """Paths in the order they were added."""
        with self._lock:
            return list(self._paths)
