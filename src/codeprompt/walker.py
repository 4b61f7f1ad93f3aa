"""
Depth-first directory traversal.

Entries are visited in lexicographic order at each level. Directories that
an ignore rule or an exclude glob covers are pruned without being listed.
Symlinked directories are never entered.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Collection, Iterator, List, Optional, Tuple

from .errors import Diagnostic
from .ignore import IgnoreResolver, IgnoreRuleSet
from .models import FileCandidate, FileKind, MatchDecision
from .selection import Selector

BINARY_SNIFF_BYTES = 8192


def _is_binary(data: bytes) -> bool:
    return b"\0" in data


def classify(path: Path) -> Tuple[FileKind, Optional[str]]:
    """Sniff the head of *path*; returns the kind and a reason when not text."""
    try:
        with path.open("rb") as fh:
            head = fh.read(BINARY_SNIFF_BYTES)
    except OSError as e:
        return FileKind.UNREADABLE, f"could not read file: {e}"
    if _is_binary(head):
        return FileKind.BINARY, "binary file skipped"
    return FileKind.TEXT, None


def walk_files(
    root: Path,
    selector: Selector,
    resolver: IgnoreResolver,
    diagnostics: List[Diagnostic],
    excluded: Optional[List[MatchDecision]] = None,
    skip_paths: Collection[Path] = (),
) -> Iterator[Tuple[FileCandidate, MatchDecision]]:
    """Yield ``(candidate, decision)`` for every selected text file under *root*.

    Recoverable problems are appended to *diagnostics*; every path that is
    left out is recorded in *excluded* when a list is given.
    """
    if excluded is None:
        excluded = []
    skip = {Path(p) for p in skip_paths}

    def _walk(directory: Path, rel_dir: str, rules: IgnoreRuleSet) -> Iterator[Tuple[FileCandidate, MatchDecision]]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            diagnostics.append(Diagnostic(rel_dir or ".", f"could not list directory: {e}"))
            return

        for entry in entries:
            rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name

            try:
                is_link = entry.is_symlink()
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError as e:
                diagnostics.append(Diagnostic(rel, f"could not stat entry: {e}"))
                continue

            if resolver.is_hidden(entry.name) and not selector.reveals_hidden(rel, is_dir):
                excluded.append(MatchDecision(rel, False, "hidden"))
                continue

            if is_dir:
                pruned = selector.prune(rel, rules)
                if pruned is not None:
                    excluded.append(pruned)
                    continue
                yield from _walk(Path(entry.path), rel, resolver.for_directory(rules, rel))
                continue

            path = Path(entry.path)
            if is_link and path.is_dir():
                excluded.append(MatchDecision(rel, False, "symlink"))
                continue
            if not path.is_file():
                reason = "broken symlink" if is_link else "not a regular file"
                diagnostics.append(Diagnostic(rel, f"{reason}, skipped"))
                continue
            if path in skip:
                excluded.append(MatchDecision(rel, False, "output"))
                continue

            decision = selector.decide(rel, rules)
            if not decision.included:
                excluded.append(decision)
                continue

            kind, problem = classify(path)
            if kind is not FileKind.TEXT:
                diagnostics.append(Diagnostic(rel, problem or kind.value))
                excluded.append(MatchDecision(rel, False, "skipped", kind.value))
                continue

            yield FileCandidate(rel, path, kind), decision

    yield from _walk(root, "", resolver.root_rules())
