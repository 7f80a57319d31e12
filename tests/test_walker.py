"""Tests for directory traversal and early pruning."""

from __future__ import annotations

from pathlib import Path

from code_flattener.options import ResolvedOptions
from code_flattener.selection import TreeWalker, prune_hooks_for, walk


def _touch(root: Path, *rels: str) -> None:
    for rel in rels:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("x\n")


def _files(root: Path, options: ResolvedOptions) -> list[str]:
    return [e.relative_to(root).as_posix() for e in walk(root, options) if not e.is_dir]


def test_walk_yields_dirs_and_files_sorted(tmp_path: Path):
    _touch(tmp_path, "b.txt", "a.txt", "pkg/z.py", "pkg/y.py")
    entries = list(TreeWalker(tmp_path).walk())
    dirs = [e.relative_to(tmp_path).as_posix() for e in entries if e.is_dir]
    files = [e.relative_to(tmp_path).as_posix() for e in entries if not e.is_dir]
    assert dirs == ["pkg"]
    assert files == ["a.txt", "b.txt", "pkg/y.py", "pkg/z.py"]


def test_walk_records_sizes(tmp_path: Path):
    (tmp_path / "f.txt").write_text("12345")
    (entry,) = list(TreeWalker(tmp_path).walk())
    assert entry.size == 5


def test_vcs_dirs_never_entered(tmp_path: Path):
    _touch(tmp_path, ".git/config", ".hg/x", ".svn/y", "src/a.py")
    assert _files(tmp_path, ResolvedOptions()) == ["src/a.py"]


def test_hidden_dirs_walked_unless_excluded(tmp_path: Path):
    _touch(tmp_path, ".github/ci.yml", "a.py")
    assert sorted(_files(tmp_path, ResolvedOptions())) == [".github/ci.yml", "a.py"]
    assert _files(tmp_path, ResolvedOptions(exclude_hidden_dirs=True)) == ["a.py"]


def test_node_modules_and_build_dirs(tmp_path: Path):
    _touch(tmp_path, "node_modules/p/i.js", "target/debug/x", "dist/b.js", "build/c", "src/a.js")
    assert len(_files(tmp_path, ResolvedOptions())) == 5
    options = ResolvedOptions(exclude_node_modules=True, exclude_build_dirs=True)
    assert _files(tmp_path, options) == ["src/a.js"]


def test_wordpress_core_dirs_pruned(tmp_path: Path):
    _touch(tmp_path, "wp-admin/a.php", "wp-includes/b.php", "wp-content/c.php")
    assert _files(tmp_path, ResolvedOptions(profile="wordpress")) == ["wp-content/c.php"]
    assert len(_files(tmp_path, ResolvedOptions(profile="rust"))) == 3


def test_max_depth(tmp_path: Path):
    _touch(tmp_path, "top.txt", "a/one.txt", "a/b/two.txt")
    assert _files(tmp_path, ResolvedOptions(max_depth=1)) == ["top.txt"]
    assert _files(tmp_path, ResolvedOptions(max_depth=2)) == ["top.txt", "a/one.txt"]
    assert _files(tmp_path, ResolvedOptions(max_depth=0)) == []


def test_gitignore_respected(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("*.log\nout/\n")
    _touch(tmp_path, "a.py", "debug.log", "out/gen.py", "sub/x.log")
    assert _files(tmp_path, ResolvedOptions()) == ["a.py"]


def test_nested_gitignore_is_scoped(tmp_path: Path):
    _touch(tmp_path, "a/keep.txt", "a/drop.txt", "b/drop.txt")
    (tmp_path / "a" / ".gitignore").write_text("drop.txt\n")
    files = _files(tmp_path, ResolvedOptions())
    assert "a/drop.txt" not in files
    assert "b/drop.txt" in files
    assert "a/keep.txt" in files


def test_prune_hooks_for_defaults():
    assert prune_hooks_for(ResolvedOptions()) == []
    hooks = prune_hooks_for(ResolvedOptions(exclude_node_modules=True))
    assert any(h("node_modules") for h in hooks)
    assert not any(h("src") for h in hooks)


def test_hidden_files_skipped(tmp_path: Path):
    _touch(tmp_path, ".env.local", ".env", "app.ts", "src/.secret.ts", ".github/ci.yml")
    assert sorted(_files(tmp_path, ResolvedOptions())) == [".github/ci.yml", "app.ts"]


def test_hidden_files_kept_when_named(tmp_path: Path):
    _touch(tmp_path, ".rustfmt.toml", ".env", "lib.rs")
    options = ResolvedOptions(allowed_filenames=(".rustfmt.toml",))
    assert _files(tmp_path, options) == [".rustfmt.toml", "lib.rs"]
