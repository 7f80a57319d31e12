"""
TOML-based config file loading for code-flattener.

Uses the file given with `--config`, or searches for `.flattener.toml`,
`flattener.toml`, or `pyproject.toml [tool.flattener]` walking up from the
current directory. Config values are merged with CLI flags using three-way
precedence: explicit CLI flags > config file > profile/built-in defaults.
Custom profiles live in `[profiles.<name>]` tables.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

from code_flattener.errors import ConfigError
from code_flattener.profiles.model import CustomProfileDef, parse_custom_profile

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]

log = logging.getLogger(__name__)


@dataclass
class FlattenerConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    profile: str | None = None
    # Selection
    extensions: list[str] | None = None
    allowed_filenames: list[str] | None = None
    include_globs: list[str] | None = None
    exclude_globs: list[str] | None = None
    include_dirs: list[str] | None = None
    exclude_dirs: list[str] | None = None
    exclude_node_modules: bool | None = None
    exclude_build_dirs: bool | None = None
    exclude_hidden_dirs: bool | None = None
    max_size: float | None = None
    max_depth: int | None = None
    # Output
    markdown: bool | None = None
    gpt4_tokens: bool | None = None
    include_git_changes: bool | None = None
    no_staged_diff: bool | None = None
    no_unstaged_diff: bool | None = None
    parallel: bool | None = None
    # Custom profiles
    profiles: dict[str, CustomProfileDef] | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".flattener.toml", "flattener.toml", "pyproject.toml"]

_PROFILES_KEY = "profiles"

_VALID_FIELDS = {f.name for f in fields(FlattenerConfig)} - {_PROFILES_KEY}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.flattener.toml` >
    `flattener.toml` > `pyproject.toml` (only if it has `[tool.flattener]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                if filename == "pyproject.toml":
                    # Only use pyproject.toml if it has [tool.flattener]
                    if _pyproject_has_flattener_section(candidate):
                        return candidate
                else:
                    return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _pyproject_has_flattener_section(path: Path) -> bool:
    """Check if a pyproject.toml has a [tool.flattener] section."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return "flattener" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> FlattenerConfig:
    """
    Load a `FlattenerConfig` from a TOML file. Supports standalone
    `flattener.toml` / `.flattener.toml` and `pyproject.toml` (extracts
    `[tool.flattener]`). Read and parse failures are fatal.
    """
    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse config file: {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("flattener", {})

    return _parse_config_data(data, config_path)


def load_config_for(explicit: Path | None, start_dir: Path) -> FlattenerConfig | None:
    """
    The config for this run: the explicit `--config` path, which must exist, or
    the nearest discovered config file, or `None`.
    """
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigError(f"Configuration file not found at: {explicit}")
        return load_config(explicit)
    found = find_config_file(start_dir)
    if found is None:
        return None
    log.debug("Using config file %s", found)
    return load_config(found)


def _parse_config_data(data: dict[str, Any], source: Path | None = None) -> FlattenerConfig:
    """Parse a flat or sectioned TOML dict into FlattenerConfig."""
    where = f" in {source}" if source else ""

    # Flatten sections (e.g. [selection]) into top level; [profiles] is kept apart.
    flat: dict[str, Any] = {}
    profiles_data: dict[str, Any] = {}
    for key, value in data.items():
        if key == _PROFILES_KEY and isinstance(value, dict):
            profiles_data = cast(dict[str, Any], value)
        elif isinstance(value, dict):
            for sub_key, sub_value in cast(dict[str, Any], value).items():
                flat[sub_key] = sub_value
        else:
            flat[key] = value

    # Map kebab-case to snake_case
    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = key.replace("-", "_")
        if snake_key in _VALID_FIELDS:
            mapped[snake_key] = value
        else:
            log.warning("Ignoring unrecognized config key '%s'%s", key, where)

    profiles: dict[str, CustomProfileDef] = {}
    for name, table in profiles_data.items():
        if not isinstance(table, dict):
            raise ConfigError(f"Profile '{name}' must be a table{where}")
        definition, unknown = parse_custom_profile(cast(dict[str, Any], table))
        for key in unknown:
            log.warning("Ignoring unrecognized key '%s' in profile '%s'%s", key, name, where)
        profiles[name] = definition

    return FlattenerConfig(profiles=profiles or None, **mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: FlattenerConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(FlattenerConfig):
        if cfg_field.name == _PROFILES_KEY:
            continue
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None:
            continue  # Not set in config

        # Skip if CLI explicitly set this flag
        if cfg_field.name in explicit_flags:
            continue

        # Apply config value to CLI options
        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts
