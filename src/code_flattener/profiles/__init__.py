"""
Profile model, built-in store, environment probes and the resolver.

Usage::

    from code_flattener.profiles import ProfileResolver, ProfileStore, WordPressProbe

    resolver = ProfileResolver(ProfileStore.default(), custom_profiles, [WordPressProbe()])
    profile = resolver.require("rust")
"""

from code_flattener.profiles.builtins import BUILT_IN_PROFILES, ProfileStore
from code_flattener.profiles.model import CustomProfileDef, Profile, parse_custom_profile
from code_flattener.profiles.resolver import EnvironmentProbe, ProfileResolver, ProfileSource
from code_flattener.profiles.wordpress import ProbeResult, ProbeSource, WordPressProbe

__all__ = [
    "BUILT_IN_PROFILES",
    "CustomProfileDef",
    "EnvironmentProbe",
    "ProbeResult",
    "ProbeSource",
    "Profile",
    "ProfileResolver",
    "ProfileSource",
    "ProfileStore",
    "WordPressProbe",
    "parse_custom_profile",
]
