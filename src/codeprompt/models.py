"""
Data types shared by the selection and assembly pipeline.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_OUTPUT_FILE = "code_prompt.txt"


@dataclass(frozen=True)
class SelectionConfig:
    """Resolved settings for one run. Pattern lists are kept as tuples."""

    root: Path = Path(".")
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    standard_filters: bool = True
    strip_comments: bool = False
    strip_empty_lines: bool = False
    line_numbers: bool = False
    show_matched: bool = False
    output_path: Path = Path(DEFAULT_OUTPUT_FILE)
    include_overrides_ignore: bool = False
    jobs: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", Path(self.root))
        object.__setattr__(self, "output_path", Path(self.output_path))
        object.__setattr__(self, "include", tuple(self.include))
        object.__setattr__(self, "exclude", tuple(self.exclude))


class FileKind(enum.Enum):
    TEXT = "text"
    BINARY = "binary"
    UNREADABLE = "unreadable"


@dataclass(frozen=True)
class FileCandidate:
    rel_path: str
    abs_path: Path
    kind: FileKind = FileKind.TEXT


@dataclass(frozen=True)
class MatchDecision:
    """Outcome of the selection policy for one path.

    ``source`` names the rule family that decided (``include``, ``exclude``,
    ``ignore``, ``hidden``, ``output``, ``skipped``) and ``pattern`` the exact
    pattern or ignore rule, when there is one.
    """

    path: str
    included: bool
    source: Optional[str] = None
    pattern: Optional[str] = None

    def describe(self) -> str:
        verb = "included" if self.included else "excluded"
        if self.source is None:
            return f"{self.path} {verb}"
        if self.pattern is None:
            return f"{self.path} {verb} ({self.source})"
        return f"{self.path} {verb} by {self.source} '{self.pattern}'"


@dataclass(frozen=True)
class TransformedContent:
    path: str
    lines: Tuple[str, ...] = field(default_factory=tuple)
    language: str = ""
