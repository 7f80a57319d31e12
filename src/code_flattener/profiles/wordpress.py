"""
Path-aware WordPress profile source.

The `wordpress` profile depends on what is actually installed: only the active
theme and the active plugins belong in the output, not the whole CMS tree.
Inventory comes from `wp-cli` when it is available, otherwise from the plugin
directory on disk. Every failure degrades to the next tier; the probe never
raises.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from code_flattener.commands import CommandRunner, run_command
from code_flattener.profiles.model import Profile

log = logging.getLogger(__name__)

WORDPRESS_PROFILE = "wordpress"

PLUGINS_DIR = "wp-content/plugins"
THEMES_DIR = "wp-content/themes"

# Always-allowed anchor file for any WordPress selection.
WP_CONFIG = "wp-config.php"

THEME_ENTRY_FILES: tuple[str, ...] = ("functions.php", "style.css")

# Permissive set used when the selection is already scoped by explicit paths.
PERMISSIVE_EXTENSIONS: tuple[str, ...] = (
    ".php",
    ".js",
    ".css",
    ".scss",
    ".sass",
    ".less",
    ".html",
    ".htm",
    ".md",
    ".mdx",
    ".json",
    ".xml",
    ".yml",
    ".yaml",
    ".ini",
    ".env",
    ".env.local",
    ".env.development",
    ".env.production",
    ".txt",
)

# Blanket allow for probed sites. PHP is deliberately absent: PHP files are only
# admitted through the per-package filename list.
CURATED_EXTENSIONS: tuple[str, ...] = (
    ".js",
    ".css",
    ".scss",
    ".sass",
    ".less",
    ".json",
    ".txt",
    ".md",
)

STATIC_FILENAMES: tuple[str, ...] = (
    WP_CONFIG,
    "wp-cli.yml",
    "composer.json",
    "package.json",
    "webpack.config.js",
    "tailwind.config.js",
    "postcss.config.js",
)


class ProbeSource(Enum):
    """Where an inventory came from."""

    TOOL = "tool"
    FILESYSTEM_FALLBACK = "filesystem_fallback"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ProbeResult:
    """Tagged inventory result: the names found and the tier that produced them."""

    source: ProbeSource
    names: list[str] = field(default_factory=list)


def _leading_segment(name: str) -> str:
    return name.replace("\\", "/").split("/", 1)[0]


def _rel_or_abs(path: Path, root: Path) -> str:
    """Root-relative forward-slash path when possible, absolute otherwise."""
    try:
        rel = path.relative_to(root)
    except ValueError:
        return path.as_posix()
    return rel.as_posix()


class WordPressProbe:
    """Profile source for `wordpress`, backed by `wp-cli` and directory scanning."""

    def __init__(self, runner: CommandRunner = run_command) -> None:
        self._run = runner

    def supports(self, name: str) -> bool:
        return name == WORDPRESS_PROFILE

    def names(self) -> list[str]:
        return [WORDPRESS_PROFILE]

    def resolve_static(self, name: str) -> Profile | None:
        """Conservative, content-independent default for listings and path-less use."""
        if not self.supports(name):
            return None
        return Profile(
            name=WORDPRESS_PROFILE,
            description="WordPress site with active theme and plugins.",
            allowed_extensions=PERMISSIVE_EXTENSIONS,
            allowed_filenames=STATIC_FILENAMES,
        )

    def resolve_for_path(
        self,
        name: str,
        root_path: Path,
        include_only_plugins: Sequence[str] | None = None,
        exclude_plugins: Sequence[str] | None = None,
        include_theme: str | None = None,
    ) -> Profile | None:
        """Build a profile from the live content of the site at `root_path`."""
        if not self.supports(name):
            return None

        if include_only_plugins or include_theme:
            log.info("Using explicit include profile for WordPress")
            filenames = [WP_CONFIG]
            if include_theme:
                filenames.extend(self._theme_files(root_path, include_theme))
            for plugin in include_only_plugins or []:
                filenames.extend(self._plugin_files(root_path, _leading_segment(plugin)))
            return Profile(
                name=WORDPRESS_PROFILE,
                description="WordPress site with specific theme/plugins.",
                allowed_extensions=PERMISSIVE_EXTENSIONS,
                allowed_filenames=tuple(filenames),
            )

        excluded = {e.lower() for e in (_leading_segment(x) for x in exclude_plugins or [])}
        filenames = [WP_CONFIG]

        theme = self.inventory_theme(root_path)
        if theme.names:
            filenames.extend(self._theme_files(root_path, theme.names[0]))

        plugins = self.inventory_plugins(root_path)
        log.debug("Plugin inventory from %s: %s", plugins.source.value, plugins.names)
        for plugin in plugins.names:
            slug = _leading_segment(plugin)
            if slug.lower() in excluded:
                log.info("Excluding plugin '%s'", slug)
                continue
            filenames.extend(self._plugin_files(root_path, slug))

        return Profile(
            name=WORDPRESS_PROFILE,
            description="WordPress site with active theme and plugins (path-aware).",
            allowed_extensions=CURATED_EXTENSIONS,
            allowed_filenames=tuple(filenames),
        )

    def inventory_plugins(self, root_path: Path) -> ProbeResult:
        """Active plugins from `wp-cli`, falling back to the plugin directory listing."""
        names = self._wp_list(root_path, "plugin")
        if names:
            return ProbeResult(ProbeSource.TOOL, names)

        plugins_dir = root_path / PLUGINS_DIR
        if not plugins_dir.is_dir():
            return ProbeResult(ProbeSource.UNAVAILABLE)
        try:
            found = sorted(
                p.name for p in plugins_dir.iterdir() if p.is_dir() and not p.name.startswith(".")
            )
        except OSError as e:
            log.warning("Could not list %s: %s", plugins_dir, e)
            return ProbeResult(ProbeSource.UNAVAILABLE)
        return ProbeResult(ProbeSource.FILESYSTEM_FALLBACK, found)

    def inventory_theme(self, root_path: Path) -> ProbeResult:
        """
        Active theme from `wp-cli`. There is no filesystem fallback: which theme
        is active cannot be read from the tree.
        """
        names = self._wp_list(root_path, "theme")
        if names:
            return ProbeResult(ProbeSource.TOOL, names[:1])
        return ProbeResult(ProbeSource.UNAVAILABLE)

    def _wp_list(self, root_path: Path, kind: str) -> list[str] | None:
        """Run `wp <kind> list` and return item names, or `None` on any failure."""
        log.info("Running `wp %s list` in %s", kind, root_path)
        result = self._run(["wp", kind, "list", "--format=json", "--status=active"], root_path)
        if not result.ok:
            log.debug("`wp %s list` failed (%d): %s", kind, result.returncode, result.stderr.strip())
            return None
        try:
            items = json.loads(result.stdout)
        except json.JSONDecodeError:
            log.debug("`wp %s list` returned malformed JSON", kind)
            return None
        if not isinstance(items, list):
            return None
        return [
            str(item["name"])
            for item in items
            if isinstance(item, dict) and isinstance(item.get("name"), str)
        ]

    def _theme_files(self, root_path: Path, theme: str) -> list[str]:
        theme_dir = root_path / THEMES_DIR / theme
        return [
            _rel_or_abs(theme_dir / f, root_path)
            for f in THEME_ENTRY_FILES
            if (theme_dir / f).exists()
        ]

    def _plugin_files(self, root_path: Path, slug: str) -> list[str]:
        main = root_path / PLUGINS_DIR / slug / f"{slug}.php"
        return [_rel_or_abs(main, root_path)] if main.exists() else []
