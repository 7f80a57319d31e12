"""
Run orchestration: profile resolution, traversal, admission and aggregation.

Each target root is enumerated once, up front, on the calling thread. The entry
list is then processed either sequentially (stable output order) or by a thread
pool, where each worker filters and reads its own entries and only the
aggregator is shared.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from code_flattener.aggregator import Aggregator
from code_flattener.commands import CommandRunner, run_command
from code_flattener.errors import PathSafetyError, ProfileNotFoundError
from code_flattener.git_changes import collect_git_changes, find_git_root
from code_flattener.options import ResolvedOptions, build_options
from code_flattener.profiles.model import Profile
from code_flattener.profiles.resolver import ProfileResolver
from code_flattener.selection.pipeline import FilterPipeline, is_allowed
from code_flattener.selection.types import ScanEntry
from code_flattener.selection.walker import walk
from code_flattener.tokens import count_tokens

log = logging.getLogger(__name__)


@dataclass
class FlattenResult:
    content: str
    file_count: int
    token_count: int
    processed_paths: list[Path] = field(default_factory=list)


def resolve_profile(resolver: ProfileResolver, settings: Mapping[str, Any]) -> Profile | None:
    """
    Resolve the run's profile, path-aware against the first target root.
    A named profile that no source knows is fatal.
    """
    name = settings.get("profile")
    if not name:
        return None
    targets = settings.get("target_dirs") or ["."]
    profile = resolver.resolve_for_path(
        name,
        Path(targets[0]).resolve(),
        include_only_plugins=settings.get("wp_include_only_plugins"),
        exclude_plugins=settings.get("wp_exclude_plugins"),
        include_theme=settings.get("wp_include_theme"),
    )
    if profile is None:
        raise ProfileNotFoundError(name)
    log.info("Using profile '%s': %s", name, profile.description)
    return profile


def prepare_options(settings: Mapping[str, Any], resolver: ProfileResolver) -> ResolvedOptions:
    """Apply the resolved profile beneath the merged CLI/config settings and validate."""
    options = build_options(settings, resolve_profile(resolver, settings))
    log.info(
        "Effective profile settings - extensions: %s, allowed_filenames: %s, "
        "include_globs: %s, max_size: %sMB",
        list(options.extensions),
        list(options.allowed_filenames),
        None if options.include_globs is None else list(options.include_globs),
        options.max_size,
    )
    return options


def canonicalize_root(target: Path) -> Path:
    """Resolve a target root to an existing absolute directory."""
    try:
        root = target.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PathSafetyError(f"Failed to canonicalize path: {target}: {e}") from e
    if not root.is_dir():
        raise PathSafetyError(f"Target is not a directory: {target}")
    return root


def is_safe_path(path: Path, base: Path) -> bool:
    """True if `path`, with symlinks resolved, stays inside `base`."""
    try:
        return path.resolve().is_relative_to(base)
    except (OSError, RuntimeError):
        return False


def process_entry(
    entry: ScanEntry,
    root: Path,
    pipeline: FilterPipeline,
    options: ResolvedOptions,
    aggregator: Aggregator,
) -> None:
    """Decide one entry and, if it is selected, read it into the aggregator."""
    reason = pipeline.rejection_reason(entry)
    if reason is not None:
        if not entry.is_dir:
            log.debug("Rejected (%s): %s", reason, entry.path)
        return
    if not is_allowed(
        entry, root, options.extensions, options.allowed_filenames, options.include_globs
    ):
        return
    if not is_safe_path(entry.path, root):
        log.warning("Skipping path outside of %s: %s", root, entry.path)
        return

    # Dry runs never touch file contents.
    if options.dry_run:
        log.info("DRY-RUN: would process %s", entry.path)
        aggregator.record(entry.path)
        return

    if entry.size is None:
        log.warning("Failed to get metadata for %s", entry.path)
        return
    if entry.size > options.max_file_size:
        log.info("Skipping large file: %s", entry.path)
        return

    try:
        content = entry.path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        log.warning("Failed to read file %s: %s", entry.path, e)
        return

    aggregator.add(entry.path, content, entry.extension)
    log.debug("Processed: %s", entry.path)


def _process_sequential(
    entries: list[ScanEntry],
    root: Path,
    pipeline: FilterPipeline,
    options: ResolvedOptions,
    aggregator: Aggregator,
) -> None:
    for entry in entries:
        process_entry(entry, root, pipeline, options, aggregator)


def _process_parallel(
    entries: list[ScanEntry],
    root: Path,
    pipeline: FilterPipeline,
    options: ResolvedOptions,
    aggregator: Aggregator,
) -> None:
    with ThreadPoolExecutor() as pool:
        # Consume the iterator so worker exceptions surface here.
        list(pool.map(lambda e: process_entry(e, root, pipeline, options, aggregator), entries))


def flatten(options: ResolvedOptions, runner: CommandRunner = run_command) -> FlattenResult:
    """Run one full pass over every target root and return the assembled result."""
    aggregator = Aggregator(markdown=options.markdown)
    process = _process_parallel if options.parallel else _process_sequential

    log.info("Starting code flattening")
    log.debug("Target directories: %s", [str(t) for t in options.target_dirs])
    for target in options.target_dirs:
        root = canonicalize_root(target)
        entries = walk(root, options)
        log.debug("Enumerated %d entries under %s", len(entries), root)
        process(entries, root, FilterPipeline(root, options), options, aggregator)

    if options.dry_run:
        content = ""
    else:
        content = aggregator.content
        if options.include_git_changes:
            repo = find_git_root(options.target_dirs[0])
            if repo is not None:
                content += collect_git_changes(
                    repo,
                    include_staged=not options.no_staged_diff,
                    include_unstaged=not options.no_unstaged_diff,
                    verbose=options.verbose,
                    runner=runner,
                )
            else:
                log.warning("No git repository found above %s", options.target_dirs[0])

    return FlattenResult(
        content=content,
        file_count=aggregator.file_count,
        token_count=count_tokens(content, options.gpt4_tokens),
        processed_paths=aggregator.processed_paths,
    )
