"""
Layered .gitignore / .ignore handling.

Rules are collected per directory while walking. Each directory's effective
rule set is its parent's set plus one new layer holding the rules of its own
ignore files, so rules found deeper never leak to siblings above them.
Evaluation runs outermost layer first, innermost last, and the last rule
that matches decides (``!pattern`` re-includes).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pathspec

from .errors import Diagnostic

IGNORE_FILENAMES: Tuple[str, ...] = (".gitignore", ".ignore")
GIT_EXCLUDE_FILE = Path(".git") / "info" / "exclude"


@dataclass(frozen=True)
class IgnoreRule:
    """One ignore-file line compiled relative to the directory it came from."""

    pattern: str
    negate: bool
    origin: str
    spec: pathspec.PathSpec = field(compare=False, repr=False)

    def matches(self, rel_path: str, is_dir: bool = False) -> bool:
        if self.origin:
            prefix = self.origin + "/"
            if not rel_path.startswith(prefix):
                return False
            rel_path = rel_path[len(prefix):]
        target = rel_path + "/" if is_dir else rel_path
        return self.spec.match_file(target)

    def __str__(self) -> str:
        text = f"!{self.pattern}" if self.negate else self.pattern
        return f"{self.origin}/{text}" if self.origin else text


@dataclass(frozen=True)
class IgnoreRuleSet:
    """Ignore rules indexed by directory depth, root layer first."""

    layers: Tuple[Tuple[IgnoreRule, ...], ...] = ()

    def extend(self, rules: Sequence[IgnoreRule]) -> "IgnoreRuleSet":
        return IgnoreRuleSet(self.layers + (tuple(rules),))

    @property
    def rules(self) -> List[IgnoreRule]:
        return [rule for layer in self.layers for rule in layer]

    def decide(self, rel_path: str, is_dir: bool = False) -> Optional[IgnoreRule]:
        """Return the last rule matching *rel_path*, or ``None``."""
        decided: Optional[IgnoreRule] = None
        for layer in self.layers:
            for rule in layer:
                if rule.matches(rel_path, is_dir):
                    decided = rule
        return decided

    def is_ignored(self, rel_path: str, is_dir: bool = False) -> bool:
        rule = self.decide(rel_path, is_dir)
        return rule is not None and not rule.negate


EMPTY_RULES = IgnoreRuleSet()


def parse_ignore_lines(
    lines: Sequence[str],
    origin: str,
    source: str,
    diagnostics: List[Diagnostic],
) -> List[IgnoreRule]:
    """Compile ignore-file *lines*; malformed lines are skipped with a warning."""
    rules: List[IgnoreRule] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip() or line.startswith("#"):
            continue

        negate = line.startswith("!")
        body = line[1:] if negate else line
        if not body.strip():
            diagnostics.append(Diagnostic(source, f"line {lineno}: empty negation pattern skipped"))
            continue

        try:
            spec = pathspec.PathSpec.from_lines("gitwildmatch", [body])
        except ValueError as e:
            diagnostics.append(Diagnostic(source, f"line {lineno}: invalid pattern '{line}' skipped ({e})"))
            continue

        rules.append(IgnoreRule(pattern=body, negate=negate, origin=origin, spec=spec))
    return rules


class IgnoreResolver:
    """Builds the effective :class:`IgnoreRuleSet` for each directory.

    With ``enabled=False`` nothing is read and every rule set is empty.
    """

    def __init__(
        self,
        root: Path,
        enabled: bool = True,
        filenames: Sequence[str] = IGNORE_FILENAMES,
        diagnostics: Optional[List[Diagnostic]] = None,
    ) -> None:
        self.root = root
        self.enabled = enabled
        self.filenames = tuple(filenames)
        self.diagnostics: List[Diagnostic] = diagnostics if diagnostics is not None else []

    def _load(self, path: Path, origin: str) -> List[IgnoreRule]:
        if not path.is_file():
            return []
        source = path.relative_to(self.root).as_posix()
        try:
            with path.open("r", encoding="utf-8") as fh:
                lines = fh.readlines()
        except (OSError, UnicodeDecodeError) as e:
            self.diagnostics.append(Diagnostic(source, f"could not read ignore file: {e}"))
            return []
        return parse_ignore_lines(lines, origin, source, self.diagnostics)

    def root_rules(self) -> IgnoreRuleSet:
        """Rules for the root: ``.git/info/exclude`` then the root ignore files."""
        if not self.enabled:
            return EMPTY_RULES
        rules = self._load(self.root / GIT_EXCLUDE_FILE, "")
        for name in self.filenames:
            rules.extend(self._load(self.root / name, ""))
        return EMPTY_RULES.extend(rules)

    def for_directory(self, parent: IgnoreRuleSet, rel_dir: str) -> IgnoreRuleSet:
        """Return *parent* extended with the ignore files found in *rel_dir*."""
        if not self.enabled:
            return parent
        directory = self.root / rel_dir
        rules: List[IgnoreRule] = []
        for name in self.filenames:
            rules.extend(self._load(directory / name, rel_dir))
        if not rules:
            return parent
        return parent.extend(rules)

    def is_hidden(self, name: str) -> bool:
        """Dot-entries are skipped only while standard filters are on."""
        return self.enabled and name.startswith(".")
