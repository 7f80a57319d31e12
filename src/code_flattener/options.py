"""
Effective run configuration.

`ResolvedOptions` is built once per run, after CLI > config file > profile
precedence has been applied, and never mutated afterwards. For include globs,
`None` means "no restriction" while a tuple, even an empty one, restricts the
selection to matching paths. A profile that lists no globs leaves the option
unset; only an explicit override can produce an empty restriction.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any

from code_flattener.errors import ConfigError
from code_flattener.profiles.model import SECONDARY_FIELDS, Profile, dedup, normalize_extension
from code_flattener.profiles.wordpress import WORDPRESS_PROFILE

DEFAULT_MAX_SIZE_MB = 2.0
MAX_SIZE_CAP_MB = 100.0
DEFAULT_MAX_DEPTH = 100


def _tuple_or_none(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


def normalize_rel_dir(value: str) -> str:
    """Forward-slash relative directory with no leading `./` or trailing slash."""
    parts = [p for p in PurePosixPath(value.replace("\\", "/")).parts if p not in (".", "/")]
    return "/".join(parts)


@dataclass(frozen=True)
class ResolvedOptions:
    """Immutable effective configuration for one run."""

    target_dirs: tuple[Path, ...] = (Path("."),)
    output: Path | None = None
    profile: str | None = None

    extensions: tuple[str, ...] = ()
    allowed_filenames: tuple[str, ...] = ()
    include_globs: tuple[str, ...] | None = None
    exclude_globs: tuple[str, ...] | None = None
    include_dirs: tuple[str, ...] | None = None
    exclude_dirs: tuple[str, ...] | None = None

    max_size: float = DEFAULT_MAX_SIZE_MB
    max_depth: int = DEFAULT_MAX_DEPTH

    markdown: bool = False
    gpt4_tokens: bool = False
    include_git_changes: bool = False
    no_staged_diff: bool = False
    no_unstaged_diff: bool = False
    exclude_node_modules: bool = False
    exclude_build_dirs: bool = False
    exclude_hidden_dirs: bool = False
    parallel: bool = False
    dry_run: bool = False
    verbose: bool = False

    wp_exclude_plugins: tuple[str, ...] | None = None
    wp_include_only_plugins: tuple[str, ...] | None = None
    wp_include_theme: str | None = None

    @property
    def max_file_size(self) -> int:
        """Size limit in bytes."""
        return int(self.max_size * 1024 * 1024)

    @property
    def is_wordpress(self) -> bool:
        return self.profile == WORDPRESS_PROFILE

    @property
    def wordpress_strict(self) -> bool:
        """Explicit single-target WordPress selection: only named packages survive."""
        return self.is_wordpress and bool(self.wp_include_only_plugins or self.wp_include_theme)

    def validate(self) -> None:
        """Raise `ConfigError` for settings that make the run meaningless or unsafe."""
        for include_dir in self.include_dirs or ():
            for exclude_dir in self.exclude_dirs or ():
                if has_dir_prefix(exclude_dir, include_dir):
                    raise ConfigError(
                        f"Conflict: exclude directory '{exclude_dir}' is within "
                        f"include directory '{include_dir}'"
                    )
        if self.max_size > MAX_SIZE_CAP_MB:
            raise ConfigError(f"Max file size cannot exceed {MAX_SIZE_CAP_MB:g}MB")
        if self.max_size <= 0:
            raise ConfigError("Max file size must be positive")
        if self.max_depth < 0:
            raise ConfigError("Max depth cannot be negative")
        if not self.extensions and not self.allowed_filenames and self.include_globs is None:
            raise ConfigError("No allowed extensions, filenames, or include globs specified")


def has_dir_prefix(path: str, parent: str) -> bool:
    """Component-wise prefix test on normalized relative paths."""
    if not parent:
        return True
    return path == parent or path.startswith(parent + "/")


def build_options(settings: Mapping[str, Any], profile: Profile | None = None) -> ResolvedOptions:
    """
    Finalize merged CLI/config `settings` against an optional resolved `profile`.

    `settings` values are `None` when neither the CLI nor the config file set
    them; those fall back to the profile, then to the built-in defaults.
    """
    values: dict[str, Any] = {k: v for k, v in settings.items() if v is not None}

    if profile is not None:
        if "extensions" not in values:
            values["extensions"] = profile.allowed_extensions
        if "allowed_filenames" not in values:
            values["allowed_filenames"] = profile.allowed_filenames
        # Empty profile globs mean "no restriction", never "match nothing".
        if "include_globs" not in values and profile.include_globs:
            values["include_globs"] = profile.include_globs
        for key in SECONDARY_FIELDS:
            if key not in values and getattr(profile, key) is not None:
                values[key] = getattr(profile, key)

    targets = values.get("target_dirs") or ["."]
    output = values.get("output")
    opts = ResolvedOptions(
        target_dirs=tuple(Path(t) for t in targets),
        output=Path(output) if output else None,
        profile=values.get("profile"),
        extensions=dedup(normalize_extension(e) for e in values.get("extensions", ())),
        allowed_filenames=dedup(values.get("allowed_filenames", ())),
        include_globs=_tuple_or_none(values.get("include_globs")),
        exclude_globs=_tuple_or_none(values.get("exclude_globs")),
        include_dirs=_dirs(values.get("include_dirs")),
        exclude_dirs=_dirs(values.get("exclude_dirs")),
        max_size=float(values.get("max_size", DEFAULT_MAX_SIZE_MB)),
        max_depth=int(values.get("max_depth", DEFAULT_MAX_DEPTH)),
        markdown=bool(values.get("markdown", False)),
        gpt4_tokens=bool(values.get("gpt4_tokens", False)),
        include_git_changes=bool(values.get("include_git_changes", False)),
        no_staged_diff=bool(values.get("no_staged_diff", False)),
        no_unstaged_diff=bool(values.get("no_unstaged_diff", False)),
        exclude_node_modules=bool(values.get("exclude_node_modules", False)),
        exclude_build_dirs=bool(values.get("exclude_build_dirs", False)),
        exclude_hidden_dirs=bool(values.get("exclude_hidden_dirs", False)),
        parallel=bool(values.get("parallel", False)),
        dry_run=bool(values.get("dry_run", False)),
        verbose=bool(values.get("verbose", False)),
        wp_exclude_plugins=_tuple_or_none(values.get("wp_exclude_plugins")),
        wp_include_only_plugins=_tuple_or_none(values.get("wp_include_only_plugins")),
        wp_include_theme=values.get("wp_include_theme"),
    )
    opts.validate()
    return opts


def _dirs(value: Any) -> tuple[str, ...] | None:
    dirs = _tuple_or_none(value)
    if dirs is None:
        return None
    return tuple(normalize_rel_dir(d) for d in dirs)
