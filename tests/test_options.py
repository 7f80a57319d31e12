"""Tests for building and validating the effective run options."""

from __future__ import annotations

import pytest

from code_flattener.errors import ConfigError
from code_flattener.options import build_options, has_dir_prefix, normalize_rel_dir
from code_flattener.profiles import Profile


def test_normalize_rel_dir():
    assert normalize_rel_dir("./src/") == "src"
    assert normalize_rel_dir("src\\gen") == "src/gen"
    assert normalize_rel_dir("a/./b") == "a/b"


def test_has_dir_prefix():
    assert has_dir_prefix("src/a.py", "src")
    assert has_dir_prefix("src", "src")
    assert not has_dir_prefix("srcx/a.py", "src")
    assert has_dir_prefix("anything", "")


def test_defaults():
    options = build_options({"extensions": ["py"]})
    assert options.max_size == 2.0
    assert options.max_file_size == 2 * 1024 * 1024
    assert options.max_depth == 100
    assert options.include_globs is None
    assert options.parallel is False


def test_profile_fills_unset_values():
    profile = Profile(
        name="p",
        allowed_extensions=(".rs",),
        allowed_filenames=("Cargo.toml",),
        max_size=5.0,
        exclude_dirs=("target",),
    )
    options = build_options({"max_size": None, "extensions": None}, profile)
    assert options.extensions == (".rs",)
    assert options.allowed_filenames == ("Cargo.toml",)
    assert options.max_size == 5.0
    assert options.exclude_dirs == ("target",)


def test_settings_beat_profile():
    profile = Profile(name="p", allowed_extensions=(".rs",), max_depth=2)
    options = build_options({"extensions": ["py"], "max_depth": 8}, profile)
    assert options.extensions == (".py",)
    assert options.max_depth == 8


def test_profile_without_globs_leaves_them_unset():
    profile = Profile(name="p", allowed_extensions=(".rs",))
    assert build_options({}, profile).include_globs is None


def test_profile_globs_apply():
    profile = Profile(name="p", include_globs=("src/*",))
    assert build_options({}, profile).include_globs == ("src/*",)


def test_explicit_empty_globs_restrict():
    options = build_options({"extensions": ["py"], "include_globs": []})
    assert options.include_globs == ()


def test_include_globs_alone_are_enough():
    options = build_options({"include_globs": ["*.py"]})
    assert options.extensions == ()


@pytest.mark.parametrize(
    ("settings", "message"),
    [
        ({"extensions": ["py"], "max_size": 101}, "cannot exceed"),
        ({"extensions": ["py"], "max_size": 0}, "must be positive"),
        ({"extensions": ["py"], "max_depth": -1}, "cannot be negative"),
        ({}, "No allowed extensions"),
        (
            {"extensions": ["py"], "include_dirs": ["src"], "exclude_dirs": ["./src/gen/"]},
            "Conflict",
        ),
    ],
)
def test_validation_errors(settings: dict[str, object], message: str):
    with pytest.raises(ConfigError, match=message):
        build_options(settings)


def test_wordpress_strict_flag():
    options = build_options(
        {"extensions": ["php"], "profile": "wordpress", "wp_include_theme": "twenty"}
    )
    assert options.is_wordpress
    assert options.wordpress_strict
    assert not build_options({"extensions": ["php"], "wp_include_theme": "x"}).wordpress_strict
