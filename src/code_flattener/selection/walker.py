"""
Directory traversal leaf.

Walks one root with `os.walk()`, pruning excluded directories in place so their
subtrees are never visited, honoring `.gitignore` files from the root down, and
yielding a `ScanEntry` for every directory and file it keeps.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Collection, Iterator, Sequence
from pathlib import Path

import pathspec

from code_flattener.options import ResolvedOptions
from code_flattener.selection.defaults import (
    BUILD_DIRS,
    NODE_MODULES_DIR,
    VCS_DIRS,
    WORDPRESS_CORE_DIRS,
)
from code_flattener.selection.ignore import load_gitignore
from code_flattener.selection.types import ScanEntry

log = logging.getLogger(__name__)

PruneHook = Callable[[str], bool]
"""Receives a directory basename; returns True to skip that whole subtree."""


def prune_hooks_for(options: ResolvedOptions) -> list[PruneHook]:
    """Early-pruning hooks implied by the run's exclusion toggles."""
    hooks: list[PruneHook] = []
    if options.exclude_node_modules:
        hooks.append(lambda name: name == NODE_MODULES_DIR)
    if options.exclude_build_dirs:
        hooks.append(lambda name: name in BUILD_DIRS)
    if options.exclude_hidden_dirs:
        hooks.append(lambda name: name.startswith("."))
    if options.is_wordpress:
        hooks.append(lambda name: name in WORDPRESS_CORE_DIRS)
    return hooks


class TreeWalker:
    """
    Enumerates the descendants of `root` down to `max_depth` (children of the
    root are depth 1). VCS metadata directories are never entered. Hidden files
    are skipped unless their name is listed in `hidden_files`.
    """

    def __init__(
        self,
        root: Path,
        max_depth: int = 100,
        prune_hooks: Sequence[PruneHook] = (),
        respect_gitignore: bool = True,
        hidden_files: Collection[str] = (),
    ) -> None:
        self.root = root
        self.max_depth = max_depth
        self._prune_hooks = list(prune_hooks)
        self._respect_gitignore = respect_gitignore
        self._hidden_files = frozenset(hidden_files)
        # Cache gitignore specs per directory to avoid re-reading from disk.
        self._gitignore_cache: dict[Path, pathspec.PathSpec | None] = {}

    def walk(self) -> Iterator[ScanEntry]:
        for dirpath, dirnames, filenames in os.walk(self.root):
            current = Path(dirpath)
            depth = len(current.relative_to(self.root).parts) + 1
            if depth > self.max_depth:
                dirnames[:] = []
                continue

            chain = self._gitignore_chain(current) if self._respect_gitignore else []

            # Prune excluded directories in-place (prevents descent)
            dirnames.sort()
            dirnames[:] = [d for d in dirnames if not self._is_dir_pruned(current / d, chain)]
            for d in dirnames:
                yield ScanEntry(current / d, is_dir=True)
            if depth == self.max_depth:
                dirnames[:] = []

            for filename in sorted(filenames):
                if filename.startswith(".") and filename not in self._hidden_files:
                    continue
                filepath = current / filename
                if self._is_ignored(filepath, chain, is_dir=False):
                    continue
                yield ScanEntry(filepath, is_dir=False, size=_file_size(filepath))

    def _is_dir_pruned(
        self, path: Path, chain: list[tuple[Path, pathspec.PathSpec]]
    ) -> bool:
        name = path.name
        if name in VCS_DIRS:
            return True
        if any(hook(name) for hook in self._prune_hooks):
            log.debug("Pruned directory: %s", path)
            return True
        return self._is_ignored(path, chain, is_dir=True)

    def _is_ignored(
        self, path: Path, chain: list[tuple[Path, pathspec.PathSpec]], is_dir: bool
    ) -> bool:
        for base, spec in chain:
            rel = path.relative_to(base).as_posix()
            if spec.match_file(rel + "/" if is_dir else rel):
                return True
        return False

    def _gitignore_chain(self, directory: Path) -> list[tuple[Path, pathspec.PathSpec]]:
        """Collect all gitignore specs from the root down to `directory` (inclusive)."""
        specs: list[tuple[Path, pathspec.PathSpec]] = []
        current = self.root
        for part in (None, *directory.relative_to(self.root).parts):
            if part is not None:
                current = current / part
            spec = self._get_gitignore(current)
            if spec is not None:
                specs.append((current, spec))
        return specs

    def _get_gitignore(self, directory: Path) -> pathspec.PathSpec | None:
        """Load and cache gitignore for a directory."""
        if directory not in self._gitignore_cache:
            self._gitignore_cache[directory] = load_gitignore(directory)
        return self._gitignore_cache[directory]


def _file_size(path: Path) -> int | None:
    try:
        return path.stat().st_size
    except OSError:
        return None


def walk(root: Path, options: ResolvedOptions) -> list[ScanEntry]:
    """Enumerate `root` once, up front, with the run's depth limit and prune hooks."""
    walker = TreeWalker(
        root,
        max_depth=options.max_depth,
        prune_hooks=prune_hooks_for(options),
        hidden_files=[Path(f).name for f in options.allowed_filenames],
    )
    return list(walker.walk())
