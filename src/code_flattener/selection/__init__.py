"""
File selection: traversal, ignore files, binary detection and the admission
pipeline.

Usage::

    from code_flattener.selection import FilterPipeline, is_allowed, walk

    pipeline = FilterPipeline(root, options)
    for entry in walk(root, options):
        if pipeline.admit(entry) and is_allowed(
            entry, root, options.extensions, options.allowed_filenames, options.include_globs
        ):
            ...
"""

from code_flattener.selection.binary import is_binary_file
from code_flattener.selection.pipeline import FilterPipeline, glob_matches, is_allowed
from code_flattener.selection.types import ScanEntry
from code_flattener.selection.walker import TreeWalker, prune_hooks_for, walk

__all__ = [
    "FilterPipeline",
    "ScanEntry",
    "TreeWalker",
    "glob_matches",
    "is_allowed",
    "is_binary_file",
    "prune_hooks_for",
    "walk",
]
