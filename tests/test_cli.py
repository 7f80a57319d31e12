"""CLI integration tests for flattening runs."""

from __future__ import annotations

from pathlib import Path

import pytest

from code_flattener.cli import _parse_args, main  # pyright: ignore[reportPrivateUsage]


def _make_tree(root: Path) -> None:
    """Create a minimal project directory tree for testing."""
    (root / "src").mkdir()
    (root / "src" / "lib.rs").write_text("pub fn lib() {}\n")
    (root / "src" / "util.py").write_text("print('hello')\n")
    (root / "README.md").write_text("# Root\n")
    nm = root / "node_modules" / "pkg"
    nm.mkdir(parents=True)
    (nm / "index.js").write_text("module.exports = 1;\n")


def test_parse_args_tracks_explicit_flags() -> None:
    options, explicit = _parse_args(["-e", "rs,py", "--max-depth", "3", "src"])
    assert options.extensions == ["rs", "py"]
    assert options.max_depth == 3
    assert options.target_dirs == ["src"]
    assert explicit == {"extensions", "max_depth"}


def test_parse_args_empty_include_globs() -> None:
    options, explicit = _parse_args(["--include-globs", ""])
    assert options.include_globs == []
    assert "include_globs" in explicit


def test_parse_args_space_separated_filenames() -> None:
    options, _ = _parse_args(["-a", "Cargo.toml Cargo.lock"])
    assert options.allowed_filenames == ["Cargo.toml", "Cargo.lock"]


def test_flatten_to_stdout(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    assert main(["-e", "rs", "."]) == 0
    out = capsys.readouterr().out
    assert "# --- File: " in out
    assert "pub fn lib() {}" in out
    assert "print('hello')" not in out


def test_flatten_to_output_file(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "out" / "bundle.md"
    assert main(["-e", "py,js", "--exclude-node-modules", "--markdown", "-o", str(target), "src"]) == 0
    text = target.read_text()
    assert "```py\n" in text
    assert "module.exports" not in text
    assert capsys.readouterr().out == ""


def test_config_file_applies(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    (tmp_path / ".flattener.toml").write_text('extensions = ["md"]\n')
    monkeypatch.chdir(tmp_path)
    assert main(["."]) == 0
    out = capsys.readouterr().out
    assert "# Root" in out
    assert "pub fn lib" not in out


def test_cli_flag_beats_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    (tmp_path / ".flattener.toml").write_text('extensions = ["md"]\n')
    monkeypatch.chdir(tmp_path)
    assert main(["-e", "rs", "."]) == 0
    out = capsys.readouterr().out
    assert "pub fn lib" in out
    assert "# Root" not in out


def test_custom_profile_from_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    (tmp_path / ".flattener.toml").write_text(
        '[profiles.mixed]\nextensions = ["rs", "py"]\nexclude-node-modules = true\n'
    )
    monkeypatch.chdir(tmp_path)
    assert main(["--profile", "mixed", "."]) == 0
    out = capsys.readouterr().out
    assert "pub fn lib" in out
    assert "print('hello')" in out
    assert "module.exports" not in out


def test_list_profiles(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / ".flattener.toml").write_text('[profiles.mine]\nextends = "rust"\n')
    monkeypatch.chdir(tmp_path)
    assert main(["--list-profiles"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("Available Profiles:")
    assert "  - rust: Rust project files." in out
    assert "  - mine: Custom profile extending rust" in out
    assert "  - wordpress: " in out
    assert "Allowed Filenames: Cargo.toml" in out


def test_unknown_profile_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["--profile", "nope", "."]) == 1
    assert "Error: Profile 'nope' not found" in capsys.readouterr().err


def test_missing_explicit_config_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["-c", "missing.toml", "-e", "rs", "."]) == 1
    assert "Configuration file not found" in capsys.readouterr().err


def test_conflicting_dirs_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    code = main(["-e", "rs", "--include-dirs", "src", "--exclude-dirs", "src/gen", "."])
    assert code == 1
    assert "Conflict" in capsys.readouterr().err


def test_no_selection_exit_code(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["."]) == 1
    assert "No allowed extensions" in capsys.readouterr().err


def test_dry_run_writes_nothing(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    target = tmp_path / "bundle.txt"
    assert main(["-e", "rs", "--dry-run", "-o", str(target), "."]) == 0
    assert target.read_text() == ""


def test_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--version"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("v") or out.startswith("unknown")
