"""
FilterPipeline: the admit/reject decision for one scanned entry.

Stages run in a fixed order and the first rejection wins:

1. directories
2. `.flattenerignore` patterns
3. exclude-directory prefixes
4. include-directory prefixes (exclusive when configured)
5. exclude globs
6. include globs (exclusive when configured, even if empty)
7. excluded WordPress plugins
8. binary content
9. WordPress strict inclusion (explicit theme/plugin selection)
10. WordPress core-file denylist

Admission only gates whether an entry reaches the final extension/filename test,
`is_allowed()`, which the caller applies with the resolved allow lists.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

import pathspec

from code_flattener.options import ResolvedOptions, has_dir_prefix
from code_flattener.profiles.wordpress import PLUGINS_DIR, THEMES_DIR, WP_CONFIG
from code_flattener.selection.binary import is_binary_file
from code_flattener.selection.defaults import WORDPRESS_CORE_FILES
from code_flattener.selection.ignore import IgnoreFile, load_flattener_ignore
from code_flattener.selection.types import ScanEntry

log = logging.getLogger(__name__)

# Sentinel: the strict WordPress stage admitted the entry outright.
_ADMIT = "admit"


def _path_forms(rel: Path) -> list[str]:
    """The native-separator form of `rel` plus its forward-slash form, if different."""
    native = str(rel)
    forward = native.replace("\\", "/")
    return [native] if native == forward else [native, forward]


def compile_globs(patterns: Iterable[str]) -> pathspec.PathSpec:
    """
    Compile shell globs with gitignore wildmatch rules: `**/` spans zero or more
    directories, and a pattern without `/` matches a basename at any depth.
    Backslash separators are read as `/`.
    """
    return pathspec.PathSpec.from_lines("gitignore", [p.replace("\\", "/") for p in patterns])


def spec_matches(spec: pathspec.PathSpec, rel: Path) -> bool:
    """Match a root-relative path in both its native and forward-slash forms."""
    return any(spec.match_file(form) for form in _path_forms(rel))


def glob_matches(pattern: str, rel: Path) -> bool:
    """Single-pattern convenience form of `compile_globs` + `spec_matches`."""
    return spec_matches(compile_globs([pattern]), rel)


def _compile_optional(patterns: Sequence[str] | None) -> pathspec.PathSpec | None:
    return None if patterns is None else compile_globs(patterns)


def _slug(raw: str) -> str:
    return raw.replace("\\", "/").split("/", 1)[0].lower()


class FilterPipeline:
    """
    Admission decisions for entries under one scan root.

    Pure with respect to its inputs, except that the ignore-file patterns are
    loaded lazily, once, and shared by every worker.
    """

    def __init__(self, root: Path, options: ResolvedOptions) -> None:
        self.root = root
        self.options = options
        self._resolved_root = root.resolve()
        self._ignore_lock = threading.Lock()
        self._ignore_loaded = False
        self._ignore_file: IgnoreFile | None = None
        self._exclude_globs = _compile_optional(options.exclude_globs)
        self._include_globs = _compile_optional(options.include_globs)
        self._stages: list[tuple[str, Callable[[ScanEntry, Path], bool | str]]] = [
            ("directory", self._reject_directory),
            ("ignore-file", self._reject_ignored),
            ("exclude-dirs", self._reject_excluded_dir),
            ("include-dirs", self._reject_outside_include_dirs),
            ("exclude-globs", self._reject_excluded_glob),
            ("include-globs", self._reject_outside_include_globs),
            ("wp-exclude-plugins", self._reject_excluded_plugin),
            ("binary", self._reject_binary),
            ("wp-strict-inclusion", self._strict_wordpress),
            ("wp-core-files", self._reject_wordpress_core),
        ]

    def admit(self, entry: ScanEntry) -> bool:
        return self.rejection_reason(entry) is None

    def rejection_reason(self, entry: ScanEntry) -> str | None:
        """Name of the stage that rejects `entry`, or `None` if it is admitted."""
        rel = entry.relative_to(self.root)
        for name, stage in self._stages:
            verdict = stage(entry, rel)
            if verdict == _ADMIT:
                return None
            if verdict:
                return name
        return None

    @property
    def ignore_file(self) -> IgnoreFile | None:
        with self._ignore_lock:
            if not self._ignore_loaded:
                self._ignore_file = load_flattener_ignore(self.root)
                self._ignore_loaded = True
        return self._ignore_file

    # Stages return True to reject, False to continue, or _ADMIT to stop and admit.

    def _reject_directory(self, entry: ScanEntry, rel: Path) -> bool:
        return entry.is_dir

    def _reject_ignored(self, entry: ScanEntry, rel: Path) -> bool:
        ignore = self.ignore_file
        return ignore is not None and ignore.matches(self._resolved_root / rel)

    def _reject_excluded_dir(self, entry: ScanEntry, rel: Path) -> bool:
        rel_str = rel.as_posix()
        return any(has_dir_prefix(rel_str, d) for d in self.options.exclude_dirs or ())

    def _reject_outside_include_dirs(self, entry: ScanEntry, rel: Path) -> bool:
        include_dirs = self.options.include_dirs
        if include_dirs is None:
            return False
        rel_str = rel.as_posix()
        return not any(has_dir_prefix(rel_str, d) for d in include_dirs)

    def _reject_excluded_glob(self, entry: ScanEntry, rel: Path) -> bool:
        return self._exclude_globs is not None and spec_matches(self._exclude_globs, rel)

    def _reject_outside_include_globs(self, entry: ScanEntry, rel: Path) -> bool:
        if self._include_globs is None:
            return False
        return not spec_matches(self._include_globs, rel)

    def _reject_excluded_plugin(self, entry: ScanEntry, rel: Path) -> bool:
        excludes = self.options.wp_exclude_plugins
        if not excludes:
            return False
        rel_lower = rel.as_posix().lower()
        for raw in excludes:
            if has_dir_prefix(rel_lower, f"{PLUGINS_DIR}/{_slug(raw)}"):
                log.debug("Excluding plugin '%s' path: %s", raw, rel)
                return True
        return False

    def _reject_binary(self, entry: ScanEntry, rel: Path) -> bool:
        return is_binary_file(entry.path)

    def _strict_wordpress(self, entry: ScanEntry, rel: Path) -> bool | str:
        if not self.options.wordpress_strict:
            return False
        rel_lower = rel.as_posix().lower()
        if rel_lower == WP_CONFIG:
            return _ADMIT
        for raw in self.options.wp_include_only_plugins or ():
            if has_dir_prefix(rel_lower, f"{PLUGINS_DIR}/{_slug(raw)}"):
                return _ADMIT
        theme = self.options.wp_include_theme
        if theme and has_dir_prefix(rel_lower, f"{THEMES_DIR}/{theme.lower()}"):
            return _ADMIT
        return True

    def _reject_wordpress_core(self, entry: ScanEntry, rel: Path) -> bool:
        return self.options.is_wordpress and entry.name in WORDPRESS_CORE_FILES


def is_allowed(
    entry: ScanEntry,
    root: Path,
    extensions: Sequence[str],
    filenames: Sequence[str],
    include_globs: Sequence[str] | None,
) -> bool:
    """
    Final allow test applied after admission.

    An entry passes on a matching dotted suffix, a matching basename, a matching
    root-relative path (for filenames that contain `/`), or whenever include globs
    are configured, since glob admission already scoped the selection.
    """
    if include_globs is not None:
        return True
    if any(suffix in extensions for suffix in entry.suffixes):
        return True
    if entry.name in filenames:
        return True
    rel = entry.relative_to(root).as_posix()
    return rel in filenames
