"""Tests for codeprompt.ignore."""

from __future__ import annotations

from pathlib import Path
from typing import List

from codeprompt.errors import Diagnostic
from codeprompt.ignore import EMPTY_RULES, IgnoreResolver, parse_ignore_lines


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_later_rules_override_earlier_ones() -> None:
    diagnostics: List[Diagnostic] = []
    rules = EMPTY_RULES.extend(parse_ignore_lines(["*.log\n", "!keep.log\n"], "", ".gitignore", diagnostics))

    assert rules.is_ignored("debug.log")
    assert not rules.is_ignored("keep.log")
    assert not rules.is_ignored("main.py")
    assert diagnostics == []


def test_comments_and_blank_lines_are_not_rules() -> None:
    rules = parse_ignore_lines(["# a comment\n", "\n", "   \n", "dist/\n"], "", ".gitignore", [])
    assert [r.pattern for r in rules] == ["dist/"]


def test_malformed_line_is_skipped_with_warning() -> None:
    diagnostics: List[Diagnostic] = []
    rules = parse_ignore_lines(["!\n", "*.tmp\n"], "", ".gitignore", diagnostics)

    assert [r.pattern for r in rules] == ["*.tmp"]
    assert len(diagnostics) == 1
    assert "line 1" in diagnostics[0].message


def test_directory_only_rule_does_not_match_files() -> None:
    rules = EMPTY_RULES.extend(parse_ignore_lines(["build/\n"], "", ".gitignore", []))
    assert rules.is_ignored("build", is_dir=True)
    assert rules.is_ignored("build/c.rs")
    assert not rules.is_ignored("build")


def test_rules_apply_relative_to_their_directory() -> None:
    rules = EMPTY_RULES.extend(parse_ignore_lines(["/out\n"], "pkg", "pkg/.gitignore", []))
    assert rules.is_ignored("pkg/out", is_dir=True)
    assert not rules.is_ignored("out", is_dir=True)
    assert not rules.is_ignored("other/out", is_dir=True)


def test_deeper_directory_rules_do_not_leak_to_siblings(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.log\n")
    _write(tmp_path / "a" / ".gitignore", "!keep.log\n")

    resolver = IgnoreResolver(tmp_path)
    root_rules = resolver.root_rules()
    a_rules = resolver.for_directory(root_rules, "a")
    b_rules = resolver.for_directory(root_rules, "b")

    assert not a_rules.is_ignored("a/keep.log")
    assert a_rules.is_ignored("a/other.log")
    assert b_rules.is_ignored("b/keep.log")
    assert root_rules.is_ignored("keep.log")


def test_decide_returns_last_matching_rule(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*.log\n")
    _write(tmp_path / "a" / ".ignore", "!keep.log\n")

    resolver = IgnoreResolver(tmp_path)
    rules = resolver.for_directory(resolver.root_rules(), "a")

    rule = rules.decide("a/keep.log")
    assert rule is not None and rule.negate
    assert str(rule) == "a/!keep.log"
    assert str(rules.decide("a/x.log")) == "*.log"


def test_git_info_exclude_is_honored_at_root(tmp_path: Path) -> None:
    _write(tmp_path / ".git" / "info" / "exclude", "secrets.txt\n")
    rules = IgnoreResolver(tmp_path).root_rules()
    assert rules.is_ignored("secrets.txt")


def test_disabled_resolver_reads_nothing(tmp_path: Path) -> None:
    _write(tmp_path / ".gitignore", "*\n")
    resolver = IgnoreResolver(tmp_path, enabled=False)

    rules = resolver.for_directory(resolver.root_rules(), "sub")
    assert rules.rules == []
    assert not rules.is_ignored("anything.py")
    assert not resolver.is_hidden(".env")


def test_hidden_entries_only_skipped_when_enabled(tmp_path: Path) -> None:
    assert IgnoreResolver(tmp_path).is_hidden(".env")
    assert not IgnoreResolver(tmp_path).is_hidden("env")


def test_unreadable_ignore_file_is_a_warning(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_bytes(b"\xff\xfe*.log\n")
    resolver = IgnoreResolver(tmp_path)

    rules = resolver.root_rules()
    assert rules.rules == []
    assert resolver.diagnostics and resolver.diagnostics[0].path == ".gitignore"
