"""
Built-in profiles and the read-only `ProfileStore` that serves them.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from code_flattener.profiles.model import Profile

BUILT_IN_PROFILES: tuple[Profile, ...] = (
    Profile(
        name="nextjs-ts-prisma",
        description="Next.js, TypeScript, Prisma project files.",
        allowed_extensions=(
            # Code
            ".ts",
            ".tsx",
            ".js",
            ".jsx",
            ".vue",
            ".svelte",
            # Styles and markup
            ".css",
            ".scss",
            ".sass",
            ".less",
            ".html",
            ".htm",
            # Docs
            ".md",
            ".mdx",
            # Data and schema
            ".json",
            ".graphql",
            ".gql",
            ".prisma",
            ".yml",
            ".yaml",
            ".xml",
            ".toml",
            ".ini",
            # Environment
            ".env",
            ".env.local",
            ".env.development",
            ".env.production",
        ),
        allowed_filenames=(
            "next.config.js",
            "tailwind.config.js",
            "postcss.config.js",
            "middleware.ts",
            "middleware.js",
            "schema.prisma",
        ),
    ),
    Profile(
        name="cpp-cmake",
        description="C/C++ and CMake project files.",
        allowed_extensions=(
            ".c",
            ".cpp",
            ".cc",
            ".cxx",
            ".h",
            ".hpp",
            ".hh",
            ".ino",
            ".cmake",
            ".txt",
            ".md",
            ".json",
            ".xml",
            ".yml",
            ".yaml",
            ".ini",
            ".proto",
            ".fbs",
        ),
        allowed_filenames=("CMakeLists.txt",),
    ),
    Profile(
        name="rust",
        description="Rust project files.",
        allowed_extensions=(".rs", ".toml", ".md", ".yml", ".yaml", ".sh", ".json", ".html"),
        allowed_filenames=("Cargo.toml", "Cargo.lock", "build.rs", ".rustfmt.toml"),
    ),
)


class ProfileStore:
    """
    Immutable registry of named profiles.

    Built once at startup and handed to the resolver; unknown names simply
    return `None`.
    """

    def __init__(self, profiles: Mapping[str, Profile]) -> None:
        self._profiles: Mapping[str, Profile] = MappingProxyType(dict(profiles))

    @classmethod
    def default(cls) -> ProfileStore:
        return cls({p.name: p for p in BUILT_IN_PROFILES})

    def get(self, name: str) -> Profile | None:
        return self._profiles.get(name)

    def list(self) -> list[tuple[str, str]]:
        return sorted((name, p.description) for name, p in self._profiles.items())

    def __contains__(self, name: object) -> bool:
        return name in self._profiles
