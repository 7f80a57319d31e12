"""Per-entry metadata produced by traversal."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ScanEntry:
    """
    One filesystem path seen during traversal.

    `size` is `None` for directories and for files whose metadata could not be read.
    """

    path: Path
    is_dir: bool
    size: int | None = None

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def extension(self) -> str:
        """Last suffix without the dot (`rs` for `lib.rs`), empty if none."""
        return self.path.suffix[1:]

    @property
    def suffixes(self) -> list[str]:
        """
        Every dotted tail of the basename, longest first: `.env.local` and
        `.local` for `.env.local`, `.d.ts` and `.ts` for `x.d.ts`.
        """
        name = self.name
        return [name[i:] for i, ch in enumerate(name) if ch == "."]

    def relative_to(self, root: Path) -> Path:
        """Path relative to `root`, or the path itself if it is not under `root`."""
        try:
            return self.path.relative_to(root)
        except ValueError:
            return self.path
