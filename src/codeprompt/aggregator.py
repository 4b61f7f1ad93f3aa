"""
Assemble transformed files into the final document and write it out.
"""

from __future__ import annotations

import os
import re
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from .errors import OutputError
from .models import TransformedContent

_BACKTICK_RUN = re.compile(r"^\s*(`{3,})")


def _fence_for(lines: Tuple[str, ...]) -> str:
    """A backtick fence longer than any fence-like run inside the body."""
    longest = 2
    for line in lines:
        m = _BACKTICK_RUN.match(line)
        if m:
            longest = max(longest, len(m.group(1)))
    return "`" * (longest + 1)


@dataclass(frozen=True)
class Section:
    path: str
    language: str
    lines: Tuple[str, ...]

    def render(self) -> str:
        fence = _fence_for(self.lines)
        parts = [f"## {self.path}\n\n", f"{fence}{self.language}\n"]
        parts.extend(f"{line}\n" for line in self.lines)
        parts.append(f"{fence}\n\n")
        return "".join(parts)


class OutputDocument:
    """Append-only list of per-file sections, rendered in insertion order."""

    def __init__(self) -> None:
        self.sections: List[Section] = []

    def append(self, content: TransformedContent) -> None:
        self.sections.append(Section(content.path, content.language, content.lines))

    def __len__(self) -> int:
        return len(self.sections)

    @property
    def paths(self) -> List[str]:
        return [s.path for s in self.sections]

    def render(self) -> str:
        return "".join(section.render() for section in self.sections)

    def write(self, out_path: Path) -> int:
        """Write the rendered document to *out_path*; returns bytes written."""
        return write_atomic(out_path, self.render())


def aggregate(contents: Iterable[TransformedContent]) -> OutputDocument:
    document = OutputDocument()
    for content in contents:
        document.append(content)
    return document


def write_atomic(out_path: Path, text: str) -> int:
    """Write *text* next to *out_path* then rename it into place.

    The target is either fully replaced or left untouched.
    """
    out_dir = out_path.parent
    if not out_dir.exists():
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputError(f"Could not create output directory '{out_dir}': {e}")

    data = text.encode("utf-8")
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{out_path.name}.", suffix=".tmp", dir=out_dir)
    except OSError as e:
        raise OutputError(f"Could not write to output file '{out_path}': {e}")

    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        os.chmod(tmp_name, _target_mode(out_path))
        os.replace(tmp_name, out_path)
    except OSError as e:
        _discard(tmp_name)
        raise OutputError(f"Could not write to output file '{out_path}': {e}")
    except BaseException:
        _discard(tmp_name)
        raise

    return len(data)


def _target_mode(out_path: Path) -> int:
    """Mode of the file being replaced, or the umask default for a new one."""
    try:
        return stat.S_IMODE(out_path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _discard(tmp_name: str) -> None:
    if os.path.exists(tmp_name):
        os.unlink(tmp_name)
