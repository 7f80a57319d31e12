"""Binary file detection: extension denylist first, then a content sniff."""

from __future__ import annotations

from pathlib import Path

from code_flattener.selection.defaults import BINARY_EXTENSIONS, SNIFF_BYTES

# Control bytes that still count as text.
_TEXT_CONTROLS = frozenset({9, 10, 13})


def has_binary_extension(path: Path) -> bool:
    return path.suffix[1:].lower() in BINARY_EXTENSIONS


def looks_binary(data: bytes) -> bool:
    """True if `data` holds a NUL or any control byte other than tab, LF or CR."""
    return any(b < 32 and b not in _TEXT_CONTROLS for b in data)


def is_binary_file(path: Path) -> bool:
    """
    Decide whether `path` is binary. Unreadable files are not reported as binary;
    the read that follows admission reports them instead.
    """
    if has_binary_extension(path):
        return True
    try:
        with path.open("rb") as f:
            head = f.read(SNIFF_BYTES)
    except OSError:
        return False
    return looks_binary(head)
