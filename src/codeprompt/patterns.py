"""
Include/exclude pattern matching for codeprompt.

Globs use the gitignore wildcard dialect provided by :mod:`pathspec`
(``*``, ``**``, ``?``, ``[...]``, leading ``/`` anchoring, trailing ``/`` for
directories) extended with ``{a,b}`` brace alternation. A pattern written as
``re:<expr>`` is a regular expression searched against the relative path.

All matching is case-sensitive and runs on forward-slash relative paths.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

import pathspec

from .errors import ConfigurationError

REGEX_PREFIX = "re:"


# Pattern list parsing

def split_patterns(text: Optional[str]) -> List[str]:
    """Split a comma-separated pattern list, keeping ``{a,b}`` groups intact.

    >>> split_patterns("*.png,*.ico,lib/{generated,l10n}*")
    ['*.png', '*.ico', 'lib/{generated,l10n}*']
    """
    if not text:
        return []

    patterns: List[str] = []
    current: List[str] = []
    depth = 0
    for ch in text:
        if ch == "{":
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
        elif ch == "," and depth == 0:
            patterns.append("".join(current))
            current = []
            continue
        current.append(ch)
    patterns.append("".join(current))

    return [p.strip() for p in patterns if p.strip()]


def _split_alternatives(body: str) -> List[str]:
    options: List[str] = []
    current: List[str] = []
    depth = 0
    escaped = False
    for ch in body:
        if escaped:
            current.append(ch)
            escaped = False
            continue
        if ch == "\\":
            escaped = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            options.append("".join(current))
            current = []
            continue
        current.append(ch)
    options.append("".join(current))
    return options


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternation (nestable) into plain glob patterns.

    A group without a comma (``{a}``) is left as literal text.
    """
    depth = 0
    start = -1
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                raise ConfigurationError(f"Unbalanced '}}' in pattern '{pattern}'")
            depth -= 1
            if depth == 0:
                options = _split_alternatives(pattern[start + 1 : i])
                if len(options) > 1:
                    prefix, suffix = pattern[:start], pattern[i + 1 :]
                    expanded: List[str] = []
                    for option in options:
                        expanded.extend(expand_braces(prefix + option + suffix))
                    return expanded
        i += 1

    if depth:
        raise ConfigurationError(f"Unbalanced '{{' in pattern '{pattern}'")
    return [pattern]


# Compiled patterns

class CompiledPattern:
    """One include/exclude expression compiled for repeated matching."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._regex: Optional["re.Pattern[str]"] = None
        self._spec: Optional[pathspec.PathSpec] = None

        if text.startswith(REGEX_PREFIX):
            try:
                self._regex = re.compile(text[len(REGEX_PREFIX):])
            except re.error as e:
                raise ConfigurationError(f"Invalid regular expression '{text}': {e}")
            return

        globs = []
        for alt in expand_braces(text):
            if alt.startswith("!"):
                raise ConfigurationError(
                    f"Negated pattern '{text}' is not allowed here; use an exclude pattern"
                )
            if alt.startswith("#"):
                alt = "\\" + alt
            globs.append(alt)
        try:
            self._spec = pathspec.PathSpec.from_lines("gitwildmatch", globs)
        except ValueError as e:
            raise ConfigurationError(f"Invalid glob pattern '{text}': {e}")

    @property
    def is_regex(self) -> bool:
        return self._regex is not None

    def matches(self, rel_path: str) -> bool:
        if self._regex is not None:
            return self._regex.search(rel_path) is not None
        return self._spec.match_file(rel_path)

    def matches_dir(self, rel_dir: str) -> bool:
        """True when the glob covers directory *rel_dir* and so all of its contents."""
        if self._spec is None:
            return False
        return self._spec.match_file(rel_dir.rstrip("/") + "/")

    def __repr__(self) -> str:
        return f"CompiledPattern({self.text!r})"


class PatternSet:
    """An ordered set of patterns; a path matches the set if any pattern matches."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns: List[CompiledPattern] = [CompiledPattern(p) for p in patterns]

    @classmethod
    def from_string(cls, text: Optional[str]) -> "PatternSet":
        return cls(split_patterns(text))

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def __len__(self) -> int:
        return len(self.patterns)

    def match(self, rel_path: str) -> Optional[str]:
        """Return the text of the first pattern matching *rel_path*, else ``None``."""
        for pattern in self.patterns:
            if pattern.matches(rel_path):
                return pattern.text
        return None

    def match_dir(self, rel_dir: str) -> Optional[str]:
        for pattern in self.patterns:
            if pattern.matches_dir(rel_dir):
                return pattern.text
        return None


def compile_patterns(patterns: Sequence[str]) -> PatternSet:
    """Compile *patterns*, failing fast with :class:`ConfigurationError`."""
    return PatternSet(patterns)
