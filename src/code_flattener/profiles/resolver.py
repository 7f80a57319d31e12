"""
ProfileResolver: turns a profile name into one concrete `Profile`.

Sources are consulted in a fixed priority order: custom definitions from config,
then environment probes, then the built-in store. Custom profiles may extend any
other profile; inheritance chains are folded from the root down with
`Profile.merge_with`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Protocol

from code_flattener.errors import ProfileNotFoundError
from code_flattener.profiles.builtins import ProfileStore
from code_flattener.profiles.model import CustomProfileDef, Profile

log = logging.getLogger(__name__)


class ProfileSource(Protocol):
    """Anything that can look up a profile by name and list what it offers."""

    def get(self, name: str) -> Profile | None: ...

    def list(self) -> list[tuple[str, str]]: ...


class EnvironmentProbe(Protocol):
    """A profile source whose result depends on the content of the target tree."""

    def supports(self, name: str) -> bool: ...

    def names(self) -> list[str]: ...

    def resolve_static(self, name: str) -> Profile | None: ...

    def resolve_for_path(
        self,
        name: str,
        root_path: Path,
        include_only_plugins: Sequence[str] | None = None,
        exclude_plugins: Sequence[str] | None = None,
        include_theme: str | None = None,
    ) -> Profile | None: ...


class _ProbeSource:
    """Adapts an `EnvironmentProbe` to the `ProfileSource` shape (static mode)."""

    def __init__(self, probe: EnvironmentProbe) -> None:
        self.probe = probe

    def get(self, name: str) -> Profile | None:
        return self.probe.resolve_static(name) if self.probe.supports(name) else None

    def list(self) -> list[tuple[str, str]]:
        result: list[tuple[str, str]] = []
        for name in self.probe.names():
            profile = self.probe.resolve_static(name)
            if profile is not None:
                result.append((name, profile.description))
        return result


class _CustomSource:
    """Custom definitions, resolved recursively through the owning resolver."""

    def __init__(self, resolver: ProfileResolver, defs: Mapping[str, CustomProfileDef]) -> None:
        self._resolver = resolver
        self.defs = defs

    def get(self, name: str) -> Profile | None:
        custom = self.defs.get(name)
        if custom is None:
            return None
        return self._resolver._resolve_custom(name, custom, frozenset())

    def list(self) -> list[tuple[str, str]]:
        result: list[tuple[str, str]] = []
        for name, custom in self.defs.items():
            if custom.description:
                desc = custom.description
            elif custom.extends:
                desc = f"Custom profile extending {custom.extends}"
            else:
                desc = name
            result.append((name, desc))
        return result


class ProfileResolver:
    """
    Resolves profile names against custom, probe-backed and built-in sources.

    The store is passed in explicitly so there is no hidden global registry.
    """

    def __init__(
        self,
        store: ProfileStore | None = None,
        custom_profiles: Mapping[str, CustomProfileDef] | None = None,
        probes: Iterable[EnvironmentProbe] = (),
    ) -> None:
        self._store = store if store is not None else ProfileStore.default()
        self._custom = _CustomSource(self, dict(custom_profiles or {}))
        self._probes = [_ProbeSource(p) for p in probes]
        self.sources: list[ProfileSource] = [self._custom, *self._probes, self._store]

    def resolve(self, name: str) -> Profile | None:
        """Return the fully merged profile for `name`, or `None` if no source has it."""
        return self._resolve(name, frozenset())

    def require(self, name: str) -> Profile:
        """Like `resolve`, but a missing profile is a fatal configuration error."""
        profile = self.resolve(name)
        if profile is None:
            raise ProfileNotFoundError(name)
        return profile

    def resolve_for_path(
        self,
        name: str,
        root_path: Path,
        include_only_plugins: Sequence[str] | None = None,
        exclude_plugins: Sequence[str] | None = None,
        include_theme: str | None = None,
    ) -> Profile | None:
        """
        Path-aware resolution: a probe that claims `name` inspects `root_path`.
        Custom definitions still shadow probes, as in `resolve`.
        """
        if name not in self._custom.defs:
            for source in self._probes:
                if source.probe.supports(name):
                    return source.probe.resolve_for_path(
                        name,
                        root_path,
                        include_only_plugins=include_only_plugins,
                        exclude_plugins=exclude_plugins,
                        include_theme=include_theme,
                    )
        return self.resolve(name)

    def list_all(self) -> list[tuple[str, str]]:
        """All `(name, description)` pairs, custom names winning, sorted by name."""
        listing: dict[str, str] = {}
        for source in self.sources:
            for name, desc in source.list():
                listing.setdefault(name, desc)
        return sorted(listing.items())

    def _resolve(self, name: str, visiting: frozenset[str]) -> Profile | None:
        custom = self._custom.defs.get(name)
        if custom is not None:
            return self._resolve_custom(name, custom, visiting)
        for source in self.sources[1:]:
            profile = source.get(name)
            if profile is not None:
                return profile
        return None

    def _resolve_custom(
        self, name: str, custom: CustomProfileDef, visiting: frozenset[str]
    ) -> Profile:
        child = custom.to_child_profile(name)
        parent_name = custom.extends
        if not parent_name:
            return child

        visiting = visiting | {name}
        if parent_name in visiting:
            if parent_name == name:
                log.warning("Profile '%s' extends itself. Ignoring parent.", name)
            else:
                log.warning(
                    "Profile '%s' extends '%s', which is already being resolved "
                    "(inheritance cycle). Ignoring parent.",
                    name,
                    parent_name,
                )
            return child

        log.debug("Resolving parent '%s' for custom profile '%s'", parent_name, name)
        parent = self._resolve(parent_name, visiting)
        if parent is None:
            log.warning("Parent profile '%s' not found for '%s'", parent_name, name)
            return child
        return parent.merge_with(child)
