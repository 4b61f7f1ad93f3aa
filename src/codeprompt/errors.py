"""
Exceptions and diagnostics for codeprompt.
"""

from __future__ import annotations

from dataclasses import dataclass


class CodePromptError(Exception): ...
class ConfigurationError(CodePromptError): ...
class OutputError(CodePromptError): ...


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem recorded during a run."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message
