"""Tests for codeprompt.walker."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from codeprompt.errors import Diagnostic
from codeprompt.ignore import IgnoreResolver
from codeprompt.models import FileKind, MatchDecision
from codeprompt.patterns import PatternSet
from codeprompt.selection import Selector
from codeprompt.walker import classify, walk_files


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _walk(
    root: Path,
    include: Sequence[str] = (),
    exclude: Sequence[str] = (),
    standard_filters: bool = True,
    diagnostics: Optional[List[Diagnostic]] = None,
    excluded: Optional[List[MatchDecision]] = None,
    skip: Sequence[Path] = (),
) -> List[str]:
    selector = Selector(PatternSet(include), PatternSet(exclude))
    diagnostics = diagnostics if diagnostics is not None else []
    resolver = IgnoreResolver(root, enabled=standard_filters, diagnostics=diagnostics)
    return [c.rel_path for c, _ in walk_files(root, selector, resolver, diagnostics, excluded, skip)]


def test_walk_is_depth_first_and_lexicographic(tmp_path: Path) -> None:
    for rel in ("c.txt", "b.txt", "a/z.txt", "a/b/c.txt", "B.txt"):
        _write(tmp_path / rel, "x\n")

    assert _walk(tmp_path) == ["B.txt", "a/b/c.txt", "a/z.txt", "b.txt", "c.txt"]


def test_walk_is_lazy(tmp_path: Path) -> None:
    _write(tmp_path / "a.txt", "x\n")
    _write(tmp_path / "b.txt", "x\n")
    selector = Selector(PatternSet(), PatternSet())
    resolver = IgnoreResolver(tmp_path)

    walker = walk_files(tmp_path, selector, resolver, [])
    first, decision = next(walker)
    assert first.rel_path == "a.txt"
    assert decision.included
    assert [c.rel_path for c, _ in walker] == ["b.txt"]
    assert list(walker) == []


def test_ignored_directory_is_pruned(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "build/\n")
    _write(tmp_path / "build" / "c.rs", "fn c() {}\n")
    _write(tmp_path / "build" / "deep" / "d.rs", "fn d() {}\n")
    _write(tmp_path / "a.rs", "fn a() {}\n")
    excluded: List[MatchDecision] = []

    assert _walk(tmp_path, excluded=excluded) == ["a.rs"]
    assert MatchDecision("build/", False, "ignore", "build/") in excluded
    assert not any(d.path.startswith("build/c") or d.path.startswith("build/deep") for d in excluded)


def test_excluded_directory_glob_prunes(tmp_path: Path) -> None:
    _write(tmp_path / "node_modules" / "pkg" / "index.js", "x\n")
    _write(tmp_path / "app.js", "x\n")
    excluded: List[MatchDecision] = []

    assert _walk(tmp_path, exclude=["node_modules/"], excluded=excluded) == ["app.js"]
    assert MatchDecision("node_modules/", False, "exclude", "node_modules/") in excluded


def test_hidden_entries_depend_on_standard_filters(tmp_path: Path) -> None:
    _write(tmp_path / ".env", "SECRET=1\n")
    _write(tmp_path / ".config" / "settings.toml", "a = 1\n")
    _write(tmp_path / "main.py", "pass\n")

    assert _walk(tmp_path) == ["main.py"]
    assert _walk(tmp_path, standard_filters=False) == [".config/settings.toml", ".env", "main.py"]


def test_binary_files_are_skipped_with_diagnostic(tmp_path: Path) -> None:
    (tmp_path / "image.png").write_bytes(b"\x89PNG\x00\x00data")
    _write(tmp_path / "main.py", "pass\n")
    diagnostics: List[Diagnostic] = []

    assert _walk(tmp_path, diagnostics=diagnostics) == ["main.py"]
    assert [d.path for d in diagnostics] == ["image.png"]
    assert classify(tmp_path / "image.png")[0] is FileKind.BINARY
    assert classify(tmp_path / "main.py") == (FileKind.TEXT, None)


def test_files_excluded_by_pattern_are_not_read(tmp_path: Path) -> None:
    (tmp_path / "blob.bin").write_bytes(b"\x00\x01")
    _write(tmp_path / "main.py", "pass\n")
    diagnostics: List[Diagnostic] = []
    excluded: List[MatchDecision] = []

    assert _walk(tmp_path, exclude=["*.bin"], diagnostics=diagnostics, excluded=excluded) == ["main.py"]
    assert diagnostics == []
    assert MatchDecision("blob.bin", False, "exclude", "*.bin") in excluded


def test_skip_paths_leave_out_the_output_file(tmp_path: Path) -> None:
    _write(tmp_path / "code_prompt.txt", "old output\n")
    _write(tmp_path / "main.py", "pass\n")

    assert _walk(tmp_path, skip=[tmp_path / "code_prompt.txt"]) == ["main.py"]


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_symlinked_directories_are_not_followed(tmp_path: Path) -> None:
    _write(tmp_path / "real" / "a.txt", "x\n")
    os.symlink(tmp_path / "real", tmp_path / "loop")
    os.symlink(tmp_path / "missing", tmp_path / "dangling")
    diagnostics: List[Diagnostic] = []

    assert _walk(tmp_path, diagnostics=diagnostics) == ["real/a.txt"]
    assert [d.path for d in diagnostics] == ["dangling"]
    assert "broken symlink" in diagnostics[0].message
