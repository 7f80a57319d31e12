"""
Exception hierarchy for code-flattener.

Only fatal conditions are raised. Resolution degradations and per-file problems
are logged and absorbed where they occur.
"""

from __future__ import annotations


class FlattenerError(Exception):
    """Base class for errors that abort a run."""


class ConfigError(FlattenerError):
    """Invalid configuration, detected before any traversal starts."""


class ProfileNotFoundError(ConfigError):
    """The requested top-level profile does not exist in any source."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Profile '{name}' not found (use --list-profiles to see choices)")
        self.name = name


class PathSafetyError(FlattenerError):
    """A target root cannot be canonicalized or escapes its own tree."""
