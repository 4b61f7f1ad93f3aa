"""
Core logic for codeprompt: walk → select → filter → aggregate.
"""

from __future__ import annotations

import os
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .aggregator import OutputDocument
from .content import filter_file
from .errors import ConfigurationError, Diagnostic, OutputError
from .ignore import IgnoreResolver
from .models import FileCandidate, MatchDecision, SelectionConfig, TransformedContent
from .selection import Selector
from .walker import walk_files

_Selected = Tuple[FileCandidate, MatchDecision]
_Filtered = Tuple[FileCandidate, MatchDecision, Union[TransformedContent, Diagnostic]]


@dataclass
class RunResult:
    """What a run selected, skipped and wrote."""

    matched: List[MatchDecision] = field(default_factory=list)
    excluded: List[MatchDecision] = field(default_factory=list)
    warnings: List[Diagnostic] = field(default_factory=list)
    document: Optional[OutputDocument] = None
    output_path: Optional[Path] = None
    bytes_written: int = 0

    @property
    def matched_paths(self) -> List[str]:
        return [d.path for d in self.matched]


# Configuration helpers

def load_extra_patterns(config_path: Path) -> List[str]:
    """Read newline-separated exclude patterns from *config_path*."""
    if not config_path.exists():
        raise ConfigurationError(f"Config file '{config_path}' does not exist")

    if not config_path.is_file():
        raise ConfigurationError(f"'{config_path}' is not a file")

    try:
        with config_path.open("r", encoding="utf-8") as fh:
            return [ln.strip() for ln in fh if ln.strip() and not ln.lstrip().startswith("#")]
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Could not read config file '{config_path}': {e}")


def resolve_root(root: Path) -> Path:
    try:
        resolved = Path(root).resolve()
    except (OSError, RuntimeError) as e:
        raise ConfigurationError(f"Could not resolve root path '{root}': {e}")

    if not resolved.exists():
        raise ConfigurationError(f"Root directory '{root}' does not exist")

    if not resolved.is_dir():
        raise ConfigurationError(f"Root path '{root}' is not a directory")

    return resolved


def resolve_output(out_path: Path) -> Path:
    try:
        return Path(out_path).resolve()
    except (OSError, RuntimeError) as e:
        raise OutputError(f"Could not resolve output path '{out_path}': {e}")


def worker_count(jobs: int) -> int:
    """``0`` means one worker per CPU core."""
    if jobs <= 0:
        return os.cpu_count() or 1
    return jobs


# Pipeline

def select_files(
    config: SelectionConfig,
    diagnostics: List[Diagnostic],
    excluded: Optional[List[MatchDecision]] = None,
) -> Iterator[_Selected]:
    """Validate *config* and lazily yield the selected files in walk order.

    Configuration errors are raised here, before the first entry is visited.
    """
    root = resolve_root(config.root)
    selector = Selector.from_config(config)
    out_path = resolve_output(config.output_path)
    resolver = IgnoreResolver(root, enabled=config.standard_filters, diagnostics=diagnostics)
    return walk_files(root, selector, resolver, diagnostics, excluded, skip_paths=(out_path,))


def _filter_in_order(selected: Iterable[_Selected], config: SelectionConfig) -> Iterator[_Filtered]:
    jobs = worker_count(config.jobs)
    if jobs == 1:
        for candidate, decision in selected:
            yield candidate, decision, filter_file(candidate, config)
        return

    # bounded look-ahead; results are handed back in submission order
    with ThreadPoolExecutor(max_workers=jobs) as executor:
        pending = deque()
        for candidate, decision in selected:
            pending.append((candidate, decision, executor.submit(filter_file, candidate, config)))
            if len(pending) >= jobs * 2:
                c, d, future = pending.popleft()
                yield c, d, future.result()
        while pending:
            c, d, future = pending.popleft()
            yield c, d, future.result()


def run(config: SelectionConfig) -> RunResult:
    """Run the full pipeline for *config*.

    In show-matched mode only the selection decisions are returned and the
    output path is never touched. Otherwise the document is rendered in memory
    and written once, atomically; nothing is written when no file survives.
    """
    result = RunResult()
    selected = select_files(config, result.warnings, result.excluded)

    # files are read in both modes so show-matched lists exactly what a run writes
    document = OutputDocument()
    for candidate, decision, outcome in _filter_in_order(selected, config):
        if isinstance(outcome, Diagnostic):
            result.warnings.append(outcome)
            result.excluded.append(MatchDecision(candidate.rel_path, False, "skipped", "decode"))
            continue
        result.matched.append(decision)
        if not config.show_matched:
            document.append(outcome)

    if config.show_matched:
        return result

    result.document = document
    if not document:
        return result

    out_path = resolve_output(config.output_path)
    result.bytes_written = document.write(out_path)
    result.output_path = out_path
    return result
