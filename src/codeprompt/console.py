"""
Coloured terminal messages for the codeprompt CLI.
"""

from __future__ import annotations

import sys

from colorama import Fore, Style

PREFIX = "[codeprompt]"


def _paint(color: str, text: str) -> str:
    return f"{color}{text}{Style.RESET_ALL}"


def info(msg: str) -> None:
    print(f"{PREFIX} {msg}")


def warn(msg: str) -> None:
    print(_paint(Fore.YELLOW, f"{PREFIX} ! {msg}"))


def success(msg: str) -> None:
    print(_paint(Fore.GREEN, f"{PREFIX} {msg}"))


def error(msg: str) -> None:
    print(_paint(Fore.RED, f"Error: {msg}"), file=sys.stderr)


def highlight(text: str, color: str = Fore.CYAN) -> str:
    return _paint(color, text)


def format_file_size(size_in_bytes: float) -> str:
    """Human-readable size using 1024-based units."""
    kb = 1024.0
    mb = kb * 1024.0
    gb = mb * 1024.0

    if size_in_bytes < kb:
        return f"{size_in_bytes:.0f} B"
    if size_in_bytes < mb:
        return f"{size_in_bytes / kb:.1f} KB"
    if size_in_bytes < gb:
        return f"{size_in_bytes / mb:.1f} MB"
    return f"{size_in_bytes / gb:.2f} GB"
