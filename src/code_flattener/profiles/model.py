"""
Profile value types and the inheritance merge rule.

A `Profile` is a fully resolved, immutable filter template. A `CustomProfileDef`
is the partial, user-authored form read from config, which only the resolver
turns into a `Profile`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

# Optional scalar knobs inherited with "child overrides, parent is fallback".
SECONDARY_FIELDS: tuple[str, ...] = (
    "markdown",
    "max_size",
    "gpt4_tokens",
    "include_git_changes",
    "no_staged_diff",
    "no_unstaged_diff",
    "include_dirs",
    "exclude_dirs",
    "exclude_globs",
    "exclude_node_modules",
    "exclude_build_dirs",
    "exclude_hidden_dirs",
    "max_depth",
)

# Fields that are list-valued in config but stored as tuples on profiles.
_SEQUENCE_FIELDS = frozenset({"include_dirs", "exclude_dirs", "exclude_globs"})


def normalize_extension(ext: str) -> str:
    """Return `ext` in leading-dot form: `rs` and `.rs` both become `.rs`."""
    ext = ext.strip()
    if not ext:
        return ext
    return ext if ext.startswith(".") else f".{ext}"


def dedup(items: Iterable[str]) -> tuple[str, ...]:
    """Drop duplicates and empty strings, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for item in items:
        if item and item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)


def _as_tuple(value: Any) -> tuple[str, ...] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class Profile:
    """
    A named bundle of file-selection rules.

    Set-valued fields are ordered tuples without duplicates. Secondary knobs are
    `None` when the profile does not set them, so that merging and option
    precedence can tell "not configured" apart from an explicit value.
    """

    name: str
    description: str = ""
    allowed_extensions: tuple[str, ...] = ()
    allowed_filenames: tuple[str, ...] = ()
    include_globs: tuple[str, ...] = ()

    markdown: bool | None = None
    max_size: float | None = None
    gpt4_tokens: bool | None = None
    include_git_changes: bool | None = None
    no_staged_diff: bool | None = None
    no_unstaged_diff: bool | None = None
    include_dirs: tuple[str, ...] | None = None
    exclude_dirs: tuple[str, ...] | None = None
    exclude_globs: tuple[str, ...] | None = None
    exclude_node_modules: bool | None = None
    exclude_build_dirs: bool | None = None
    exclude_hidden_dirs: bool | None = None
    max_depth: int | None = None

    def __post_init__(self) -> None:
        # Frozen, so normalize through object.__setattr__.
        if not self.description:
            object.__setattr__(self, "description", self.name)
        object.__setattr__(
            self,
            "allowed_extensions",
            dedup(normalize_extension(e) for e in self.allowed_extensions),
        )
        object.__setattr__(self, "allowed_filenames", dedup(self.allowed_filenames))
        object.__setattr__(self, "include_globs", dedup(self.include_globs))
        for name in _SEQUENCE_FIELDS:
            object.__setattr__(self, name, _as_tuple(getattr(self, name)))

    def merge_with(self, child: Profile) -> Profile:
        """
        Merge this (parent) profile with `child` and return the result.

        Extensions, filenames and include globs are unioned: parent order first,
        then new child members. Secondary knobs take the child's value when set,
        otherwise the parent's. The description and name always come from the child.
        """
        secondary = {
            key: getattr(child, key) if getattr(child, key) is not None else getattr(self, key)
            for key in SECONDARY_FIELDS
        }
        return Profile(
            name=child.name,
            description=child.description,
            allowed_extensions=self.allowed_extensions + child.allowed_extensions,
            allowed_filenames=self.allowed_filenames + child.allowed_filenames,
            include_globs=self.include_globs + child.include_globs,
            **secondary,
        )


@dataclass(frozen=True)
class CustomProfileDef:
    """
    A user-defined, possibly partial profile from a `[profiles.<name>]` table.

    `extends` names a parent (built-in, probe-backed or another custom profile).
    """

    description: str | None = None
    extends: str | None = None
    allowed_extensions: tuple[str, ...] | None = None
    allowed_filenames: tuple[str, ...] | None = None
    include_globs: tuple[str, ...] | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_child_profile(self, name: str) -> Profile:
        """Build the child half of a resolution; absent fields stay empty or `None`."""
        return Profile(
            name=name,
            description=self.description or name,
            allowed_extensions=self.allowed_extensions or (),
            allowed_filenames=self.allowed_filenames or (),
            include_globs=self.include_globs or (),
            **{key: self.extra.get(key) for key in SECONDARY_FIELDS},
        )


# Config keys accepted for the main fields of a custom profile table.
_CUSTOM_KEY_ALIASES: dict[str, str] = {
    "profile": "extends",
    "extensions": "allowed_extensions",
    "allowed-filenames": "allowed_filenames",
    "include-globs": "include_globs",
}


def parse_custom_profile(data: dict[str, Any]) -> tuple[CustomProfileDef, list[str]]:
    """
    Parse one `[profiles.<name>]` table.

    Returns the definition and the list of keys that were not recognized, so the
    config loader can warn about them.
    """
    main: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    unknown: list[str] = []
    for raw_key, value in data.items():
        key = _CUSTOM_KEY_ALIASES.get(raw_key, raw_key.replace("-", "_"))
        if key in ("description", "extends"):
            main[key] = None if value is None else str(value)
        elif key in ("allowed_extensions", "allowed_filenames", "include_globs"):
            main[key] = _as_tuple(value)
        elif key in SECONDARY_FIELDS:
            extra[key] = value
        else:
            unknown.append(raw_key)
    return CustomProfileDef(extra=extra, **main), unknown
