#!/usr/bin/env python3
"""
code-flattener: Flatten a project's source files into one LLM-ready text bundle

Common usage:
  code-flattener --profile rust .
  code-flattener --profile nextjs-ts-prisma --markdown -o bundle.md app/
  code-flattener --extensions py,toml --exclude-dirs tests .
  code-flattener --list-profiles

Profiles can be defined or extended in `.flattener.toml` under
`[profiles.<name>]`, with `extends = "<parent>"`.
"""

from __future__ import annotations

import argparse
import dataclasses
import importlib.metadata
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from code_flattener.config import load_config_for, merge_cli_with_config
from code_flattener.errors import FlattenerError
from code_flattener.flatten import flatten, prepare_options
from code_flattener.output import write_output
from code_flattener.profiles import ProfileResolver, ProfileStore, WordPressProbe

log = logging.getLogger(__name__)


@dataclass
class Options:
    """
    Command-line options for the code-flattener tool. Selection fields are
    `None` when not given on the command line, so config and profile values can
    fill them in.
    """

    target_dirs: list[str]
    output: str | None = None
    profile: str | None = None
    config: str | None = None
    list_profiles: bool = False
    version: bool = False
    verbose: bool = False
    dry_run: bool = False
    parallel: bool | None = None
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
    # WordPress
    wp_exclude_plugins: list[str] | None = None
    wp_include_only_plugins: list[str] | None = None
    wp_include_theme: str | None = None


# Options that only steer the CLI itself and never reach the run settings.
_CLI_ONLY = {"config", "list_profiles", "version"}

# Options whose presence on the command line beats the config file.
_MERGEABLE = {
    f.name for f in dataclasses.fields(Options) if f.default is None and f.name not in _CLI_ONLY
}


def _comma_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _word_list(value: str) -> list[str]:
    return [item for item in re.split(r"[\s,]+", value) if item]


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)` where `explicit_flags` holds the option
    names the user actually passed (for config merge precedence).
    """
    # Use the module's docstring as the description
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="code-flattener",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "target_dirs",
        nargs="*",
        default=["."],
        help="One or more directories to scan (default: current directory)",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        default=None,
        help="Output file for the flattened code (default: stdout)",
    )
    parser.add_argument("-p", "--profile", type=str, default=None, help="Profile to use")
    parser.add_argument(
        "--list-profiles",
        action="store_true",
        help="List all available profiles and their descriptions",
    )
    parser.add_argument(
        "-e",
        "--extensions",
        type=_comma_list,
        default=None,
        metavar="EXTS",
        help="Comma-separated list of allowed file extensions (overrides profile)",
    )
    parser.add_argument(
        "-a",
        "--allowed-filenames",
        type=_word_list,
        default=None,
        metavar="NAMES",
        help="Space-separated list of specific filenames to include (overrides profile)",
    )
    parser.add_argument(
        "--max-size",
        type=float,
        default=None,
        metavar="MB",
        help="Maximum file size to process in megabytes (default: 2.0, max: 100)",
    )
    parser.add_argument(
        "--markdown",
        action="store_true",
        default=None,
        help="Wrap each file in a Markdown code block",
    )
    parser.add_argument(
        "--gpt4-tokens",
        action="store_true",
        default=None,
        help="Count tokens with the GPT-4 tokenizer instead of whitespace splitting",
    )
    parser.add_argument(
        "-g",
        "--include-git-changes",
        action="store_true",
        default=None,
        help="Append a section with current git status and diffs",
    )
    parser.add_argument(
        "--no-staged-diff",
        action="store_true",
        default=None,
        help="Do not include staged changes (git diff --staged); requires -g",
    )
    parser.add_argument(
        "--no-unstaged-diff",
        action="store_true",
        default=None,
        help="Do not include unstaged changes (git diff); requires -g",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Print verbose output")
    parser.add_argument("-c", "--config", type=str, default=None, help="Configuration file path")
    parser.add_argument(
        "--include-dirs",
        type=_comma_list,
        default=None,
        metavar="DIRS",
        help="Comma-separated list of directories to include (relative to target)",
    )
    parser.add_argument(
        "--exclude-dirs",
        type=_comma_list,
        default=None,
        metavar="DIRS",
        help="Comma-separated list of directories to exclude (relative to target)",
    )
    parser.add_argument(
        "--exclude-node-modules",
        action="store_true",
        default=None,
        help="Exclude node_modules directories",
    )
    parser.add_argument(
        "--exclude-build-dirs",
        action="store_true",
        default=None,
        help="Exclude target/, build/ and dist/ directories",
    )
    parser.add_argument(
        "--exclude-hidden-dirs",
        action="store_true",
        default=None,
        help="Exclude hidden directories (starting with .)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum directory depth to traverse (default: 100)",
    )
    parser.add_argument(
        "--exclude-globs",
        type=_comma_list,
        default=None,
        metavar="GLOBS",
        help="Comma-separated list of glob patterns to exclude",
    )
    parser.add_argument(
        "--include-globs",
        type=_comma_list,
        default=None,
        metavar="GLOBS",
        help="Comma-separated list of glob patterns to include "
        "(an empty value restricts the selection to nothing)",
    )
    parser.add_argument(
        "--parallel", action="store_true", default=None, help="Enable parallel processing"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Log which files would be processed without reading them",
    )
    parser.add_argument(
        "--wp-exclude-plugins",
        type=_comma_list,
        default=None,
        metavar="SLUGS",
        help="WordPress: comma-separated list of plugin slugs to exclude",
    )
    parser.add_argument(
        "--wp-include-only-plugins",
        type=_comma_list,
        default=None,
        metavar="SLUGS",
        help="WordPress: comma-separated list of plugin slugs to exclusively include",
    )
    parser.add_argument(
        "--wp-include-theme",
        type=str,
        default=None,
        metavar="THEME",
        help="WordPress: theme to include",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    if (opts.no_staged_diff or opts.no_unstaged_diff) and not opts.include_git_changes:
        parser.error("--no-staged-diff and --no-unstaged-diff require --include-git-changes")

    options = Options(**vars(opts))
    explicit_flags = {name for name in _MERGEABLE if getattr(options, name) is not None}
    return options, explicit_flags


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )


def render_profile_list(resolver: ProfileResolver) -> str:
    """Human-readable listing of every available profile."""
    lines = ["Available Profiles:"]
    for name, description in resolver.list_all():
        lines.append(f"  - {name}: {description}")
        profile = resolver.resolve(name)
        if profile is not None:
            lines.append(f"    Extensions: {', '.join(profile.allowed_extensions)}")
            if profile.allowed_filenames:
                lines.append(f"    Allowed Filenames: {', '.join(profile.allowed_filenames)}")
        lines.append("")
    return "\n".join(lines)


def _run_settings(options: Options) -> dict[str, Any]:
    settings = dataclasses.asdict(options)
    for name in _CLI_ONLY:
        settings.pop(name)
    return settings


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the code-flattener CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    options, explicit_flags = _parse_args(args)
    _configure_logging(options.verbose)

    # Display version information if requested
    if options.version:
        try:
            version = importlib.metadata.version("code-flattener")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    try:
        config_path = Path(options.config) if options.config else None
        config = load_config_for(config_path, Path.cwd())
        resolver = ProfileResolver(
            ProfileStore.default(),
            config.profiles if config else None,
            [WordPressProbe()],
        )

        if options.list_profiles:
            print(render_profile_list(resolver))
            return 0

        merge_cli_with_config(options, config, explicit_flags)
        resolved = prepare_options(_run_settings(options), resolver)
        result = flatten(resolved)
        write_output(result.content, resolved.output)
    except FlattenerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        # Catch other potential file or processing errors.
        print(f"Error: {e}", file=sys.stderr)
        return 2

    log.info("Total files processed: %d", result.file_count)
    log.info("Approximate token count: %d", result.token_count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
