"""
Per-file text transforms: comment-line stripping, empty-line stripping and
line numbering, applied in that order.

Comment stripping is lexical and best-effort: a line is dropped when its
trimmed text starts with a single-line comment marker for the file's
language. Block comments (``/* ... */``, ``<!-- ... -->``, docstrings) are
not interpreted. Batch files also drop ``REM`` lines (any case, optionally
prefixed with ``@``).

With line numbers on and stripping off, removing the ``<n>\\t`` prefixes gives
the file back exactly when it ends with a newline and has no BOM: a missing
final newline is added on output and a leading BOM is dropped on read.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, List, Tuple, Union

from .errors import Diagnostic
from .models import FileCandidate, SelectionConfig, TransformedContent

_HASH = ("#",)
_SLASHES = ("//",)
_DASHES = ("--",)

_COMMENT_MARKERS: Dict[str, Tuple[str, ...]] = {
    ".py": _HASH,
    ".pyi": _HASH,
    ".rb": _HASH,
    ".sh": _HASH,
    ".bash": _HASH,
    ".zsh": _HASH,
    ".pl": _HASH,
    ".r": _HASH,
    ".jl": _HASH,
    ".ex": _HASH,
    ".exs": _HASH,
    ".yaml": _HASH,
    ".yml": _HASH,
    ".toml": _HASH,
    ".cfg": ("#", ";"),
    ".ini": (";", "#"),
    ".ps1": _HASH,
    ".psm1": _HASH,
    ".psd1": _HASH,
    ".rs": _SLASHES,
    ".go": _SLASHES,
    ".c": _SLASHES,
    ".h": _SLASHES,
    ".cc": _SLASHES,
    ".cpp": _SLASHES,
    ".cxx": _SLASHES,
    ".hpp": _SLASHES,
    ".cs": _SLASHES,
    ".fs": _SLASHES,
    ".fsx": _SLASHES,
    ".java": _SLASHES,
    ".kt": _SLASHES,
    ".kts": _SLASHES,
    ".scala": _SLASHES,
    ".swift": _SLASHES,
    ".dart": _SLASHES,
    ".js": _SLASHES,
    ".jsx": _SLASHES,
    ".mjs": _SLASHES,
    ".ts": _SLASHES,
    ".tsx": _SLASHES,
    ".php": ("//", "#"),
    ".sql": _DASHES,
    ".lua": _DASHES,
    ".hs": _DASHES,
    ".el": (";",),
    ".lisp": (";",),
    ".clj": (";",),
    ".asm": (";",),
    ".tex": ("%",),
    ".erl": ("%",),
    ".bat": ("::",),
    ".cmd": ("::",),
    ".vbs": ("'",),
    # prose and markup formats have no single-line comment syntax
    ".md": (),
    ".txt": (),
    ".rst": (),
    ".json": (),
    ".csv": (),
    ".html": (),
    ".htm": (),
    ".xml": (),
    ".css": (),
}
_DEFAULT_MARKERS: Tuple[str, ...] = ("#", "//")

_BATCH_SUFFIXES = (".bat", ".cmd")
_BATCH_REM = re.compile(r"@?rem(?:\s|$)", re.IGNORECASE)

_LANG_MAP: Dict[str, str] = {
    ".rs": "rust",
    ".go": "go",
    ".swift": "swift",
    ".dart": "dart",
    ".js": "javascript",
    ".ts": "typescript",
    ".py": "python",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".xml": "xml",
    ".toml": "toml",
    ".java": "java",
    ".sh": "bash",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".json": "json",
    ".md": "markdown",
    ".sql": "sql",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cc": "cpp",
    ".cxx": "cpp",
    ".kt": "kotlin",
    ".kts": "kotlin",
    ".r": "r",
    ".ex": "elixir",
    ".exs": "elixir",
    ".hs": "haskell",
    ".pl": "perl",
    ".cs": "csharp",
    ".fs": "fsharp",
    ".fsx": "fsharp",
    ".rb": "ruby",
    ".php": "php",
    ".csv": "csv",
    ".bat": "batch",
    ".cmd": "batch",
    ".ps1": "powershell",
    ".psm1": "powershell",
    ".psd1": "powershell",
    ".ps1xml": "powershell",
    ".vbs": "vbscript",
}


def _suffix(rel_path: str) -> str:
    return PurePosixPath(rel_path).suffix.lower()


def language_for(rel_path: str) -> str:
    """Fenced-block language tag for *rel_path*, or ``""`` when unknown."""
    return _LANG_MAP.get(_suffix(rel_path), "")


def comment_markers(rel_path: str) -> Tuple[str, ...]:
    return _COMMENT_MARKERS.get(_suffix(rel_path), _DEFAULT_MARKERS)


def is_comment_line(trimmed: str, rel_path: str, markers: Tuple[str, ...]) -> bool:
    if markers and trimmed.startswith(markers):
        return True
    return _suffix(rel_path) in _BATCH_SUFFIXES and _BATCH_REM.match(trimmed) is not None


def split_lines(text: str) -> List[str]:
    """Split on ``\\n`` only; a final newline does not start an extra line."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def transform(
    text: str,
    rel_path: str,
    strip_comments: bool = False,
    strip_empty_lines: bool = False,
    line_numbers: bool = False,
) -> TransformedContent:
    markers = comment_markers(rel_path) if strip_comments else ()

    kept: List[str] = []
    for lineno, line in enumerate(split_lines(text), start=1):
        trimmed = line.strip()
        if strip_comments and is_comment_line(trimmed, rel_path, markers):
            continue
        if strip_empty_lines and not trimmed:
            continue
        # numbers refer to the source line, so stripped lines leave gaps
        kept.append(f"{lineno}\t{line}" if line_numbers else line)

    return TransformedContent(path=rel_path, lines=tuple(kept), language=language_for(rel_path))


def read_text(candidate: FileCandidate) -> str:
    """Decode *candidate* as strict UTF-8 (a leading BOM is dropped)."""
    return candidate.abs_path.read_bytes().decode("utf-8-sig")


def filter_file(
    candidate: FileCandidate, config: SelectionConfig
) -> Union[TransformedContent, Diagnostic]:
    """Read and transform one file; problems come back as a :class:`Diagnostic`."""
    try:
        text = read_text(candidate)
    except UnicodeDecodeError as e:
        return Diagnostic(candidate.rel_path, f"not valid UTF-8 text, skipped ({e.reason})")
    except OSError as e:
        return Diagnostic(candidate.rel_path, f"could not read file: {e}")

    return transform(
        text,
        candidate.rel_path,
        strip_comments=config.strip_comments,
        strip_empty_lines=config.strip_empty_lines,
        line_numbers=config.line_numbers,
    )
