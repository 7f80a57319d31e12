"""Writing the flattened result to stdout or a file."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from strif import atomic_output_file

log = logging.getLogger(__name__)


def write_atomic(output_path: Path, content: str) -> None:
    """Write output atomically, creating parent directories as needed."""
    with atomic_output_file(output_path, make_parents=True) as temp_path:
        Path(temp_path).write_text(content, encoding="utf-8")


def write_output(content: str, output_path: Path | None, stream: TextIO | None = None) -> None:
    """Send `content` to `output_path`, or to `stream` (stdout) when no path is given."""
    if output_path is None:
        (stream or sys.stdout).write(content)
        return
    write_atomic(output_path, content)
    log.info("Flattened code written to: %s", output_path)
