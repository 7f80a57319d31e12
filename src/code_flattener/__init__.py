"""
code-flattener: profile-driven selection of project source files, flattened
into a single text bundle for LLM context.
"""

from code_flattener.flatten import FlattenResult, flatten, prepare_options
from code_flattener.options import ResolvedOptions, build_options

__all__ = [
    "FlattenResult",
    "ResolvedOptions",
    "build_options",
    "flatten",
    "prepare_options",
]
