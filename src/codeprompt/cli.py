"""
CLI entrypoint for codeprompt package.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from colorama import init as colorama_init

from . import __version__, console
from .core import RunResult, load_extra_patterns, run
from .errors import ConfigurationError, OutputError
from .models import DEFAULT_OUTPUT_FILE, SelectionConfig
from .patterns import split_patterns


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="codeprompt",
        description="Consolidate a source tree into one prompt-ready text file.",
    )
    p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path(DEFAULT_OUTPUT_FILE),
        help=f"Output file (default: {DEFAULT_OUTPUT_FILE})",
    )
    p.add_argument("-d", "--dir", type=Path, default=Path("."), help="Directory to search for files")
    p.add_argument("-e", "--exclude", help="Glob patterns to exclude files (comma separated)")
    p.add_argument("-i", "--include", help="Glob patterns to include files (comma separated)")
    p.add_argument(
        "--config",
        type=Path,
        help="Path to a file with extra exclude patterns (one per line)",
    )
    p.add_argument("-l", "--line-number", action="store_true", help="Prefix lines with their line number")
    p.add_argument(
        "-f",
        "--standard-filter",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Respect .gitignore/.ignore files and skip hidden entries (default: on)",
    )
    p.add_argument(
        "--include-overrides-ignore",
        action="store_true",
        help="Let an explicit include pattern select files that ignore rules exclude",
    )
    p.add_argument("--strip-comments", action="store_true", help="Drop single-line comment lines")
    p.add_argument("--ignore-empty-lines", action="store_true", help="Drop empty lines")
    p.add_argument(
        "--show-matched",
        action="store_true",
        help="Only list the matched files; no output file is written",
    )
    p.add_argument("--skip-confirm", action="store_true", help="Overwrite the output file without asking")
    p.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Worker threads for reading files (0 = one per CPU core, default 1)",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def _config_from_args(ns: argparse.Namespace) -> SelectionConfig:
    exclude = split_patterns(ns.exclude)
    if ns.config:
        exclude.extend(load_extra_patterns(ns.config.resolve()))
    return SelectionConfig(
        root=ns.dir,
        include=split_patterns(ns.include),
        exclude=exclude,
        standard_filters=ns.standard_filter,
        strip_comments=ns.strip_comments,
        strip_empty_lines=ns.ignore_empty_lines,
        line_numbers=ns.line_number,
        show_matched=ns.show_matched,
        output_path=ns.output,
        include_overrides_ignore=ns.include_overrides_ignore,
        jobs=ns.jobs,
    )


def ask_continue(message: str, default: bool = True) -> bool:
    """Ask a yes/no question; an empty answer returns *default*."""
    suffix = "[Y/n]" if default else "[y/N]"
    answer = input(f"{message} {suffix}: ").strip().lower()
    if not answer:
        return default
    return answer in ("y", "yes")


def _report(result: RunResult, config: SelectionConfig, verbose: bool) -> None:
    if verbose:
        for decision in result.excluded:
            console.info(decision.describe())

    for warning in result.warnings:
        console.warn(str(warning))

    if not result.matched:
        print("No files found matching the criteria.")
        return

    if config.show_matched:
        root = config.root.resolve()
        print("\nMatched files:")
        for decision in result.matched:
            try:
                size = console.format_file_size((root / decision.path).stat().st_size)
            except OSError:
                size = "N/A"
            print(f"{decision.path}: {size}")

    print(f"\nFound {console.highlight(str(len(result.matched)))} files matching the criteria.")

    if result.output_path is not None:
        size = console.format_file_size(result.bytes_written)
        console.success(f"==> {result.output_path} ({console.highlight(size)})")


def main(argv: Optional[List[str]] = None) -> None:
    try:
        ns = _parse_args(argv)
        colorama_init()

        try:
            config = _config_from_args(ns)
        except ConfigurationError as e:
            console.error(str(e))
            sys.exit(1)

        if ns.verbose and ns.config:
            console.info(f"Loaded extra patterns from {ns.config}")

        out_path = config.output_path
        if not config.show_matched and out_path.exists() and not ns.skip_confirm:
            if not ask_continue(f"Output file {console.highlight(str(out_path))} already exists.\nOverwrite?"):
                print("Aborted.")
                return

        if ns.verbose:
            console.info(f"Scanning {config.root.resolve()} …")

        try:
            result = run(config)
        except (ConfigurationError, OutputError) as e:
            console.error(str(e))
            sys.exit(1)

        _report(result, config, ns.verbose)

    except KeyboardInterrupt:
        print("\nCancelled.", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        console.error(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
