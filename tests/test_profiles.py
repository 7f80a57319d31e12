"""Tests for profile values, the merge rule and the built-in store."""

from __future__ import annotations

import pytest

from code_flattener.profiles import BUILT_IN_PROFILES, Profile, ProfileStore, parse_custom_profile
from code_flattener.profiles.model import dedup, normalize_extension


def test_normalize_extension():
    assert normalize_extension("rs") == ".rs"
    assert normalize_extension(".rs") == ".rs"
    assert normalize_extension(" py ") == ".py"
    assert normalize_extension("") == ""


def test_dedup_keeps_first_seen_order():
    assert dedup(["b", "a", "b", "", "c", "a"]) == ("b", "a", "c")


def test_profile_normalizes_fields():
    profile = Profile(
        name="p",
        allowed_extensions=("rs", ".rs", "toml"),
        allowed_filenames=("Cargo.toml", "Cargo.toml"),
        include_globs=("src/*", "src/*"),
    )
    assert profile.allowed_extensions == (".rs", ".toml")
    assert profile.allowed_filenames == ("Cargo.toml",)
    assert profile.include_globs == ("src/*",)
    # Description defaults to the name
    assert profile.description == "p"


def test_merge_unions_parent_first():
    parent = Profile(name="base", allowed_extensions=(".py", ".md"), allowed_filenames=("a",))
    child = Profile(name="child", allowed_extensions=(".md", ".toml"), allowed_filenames=("b",))
    merged = parent.merge_with(child)
    assert merged.name == "child"
    assert merged.allowed_extensions == (".py", ".md", ".toml")
    assert merged.allowed_filenames == ("a", "b")


def test_merge_description_comes_from_child():
    parent = Profile(name="base", description="Base profile")
    child = Profile(name="child")
    assert parent.merge_with(child).description == "child"


def test_merge_secondary_knobs_child_overrides():
    parent = Profile(name="base", markdown=True, max_size=5.0, exclude_dirs=("a",))
    child = Profile(name="child", max_size=1.0)
    merged = parent.merge_with(child)
    assert merged.markdown is True
    assert merged.max_size == 1.0
    assert merged.exclude_dirs == ("a",)
    assert merged.max_depth is None


def test_merge_is_associative():
    a = Profile(name="a", allowed_extensions=(".a", ".x"), max_depth=3)
    b = Profile(name="b", allowed_extensions=(".b", ".x"), markdown=True)
    c = Profile(name="c", allowed_extensions=(".c", ".a"), max_depth=7)
    left = a.merge_with(b).merge_with(c)
    right = a.merge_with(b.merge_with(c))
    assert left == right
    assert left.allowed_extensions == (".a", ".x", ".b", ".c")


def test_parse_custom_profile_aliases():
    definition, unknown = parse_custom_profile(
        {
            "profile": "rust",
            "extensions": ["py"],
            "allowed-filenames": ["Makefile"],
            "max-size": 4.0,
            "exclude_dirs": ["vendor"],
            "colour": "blue",
        }
    )
    assert definition.extends == "rust"
    assert definition.allowed_extensions == ("py",)
    assert definition.allowed_filenames == ("Makefile",)
    assert definition.extra == {"max_size": 4.0, "exclude_dirs": ["vendor"]}
    assert unknown == ["colour"]


def test_custom_def_to_child_profile():
    definition, _ = parse_custom_profile({"description": "Mine", "extensions": ["py"], "markdown": True})
    child = definition.to_child_profile("mine")
    assert child.name == "mine"
    assert child.description == "Mine"
    assert child.allowed_extensions == (".py",)
    assert child.markdown is True
    assert child.include_globs == ()


def test_builtin_rust_profile():
    store = ProfileStore.default()
    rust = store.get("rust")
    assert rust is not None
    assert ".rs" in rust.allowed_extensions
    assert "Cargo.lock" in rust.allowed_filenames


def test_store_lists_sorted_names():
    store = ProfileStore.default()
    names = [name for name, _ in store.list()]
    assert names == sorted(p.name for p in BUILT_IN_PROFILES)
    assert "cpp-cmake" in store
    assert store.get("missing") is None


def test_profile_is_immutable():
    profile = Profile(name="p")
    with pytest.raises(AttributeError):
        profile.name = "q"  # type: ignore[misc]
