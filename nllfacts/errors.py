"""
nllfacts.errors
===============

Exception types raised by the fact front-ends.

The analysis engine itself never raises on structurally valid facts: borrow
conflicts are reported as data in :attr:`nllfacts.output.Output.errors`.
Only the front-ends (program parsing/lowering and fact-file loading) fail,
and they fail with one of the types below.

Hierarchy
---------
::

    NllFactsError
    ├── ParseError        - malformed program text, dangling block references
    └── FactsLoadError    - malformed or unreadable tab-delimited fact files
"""

from __future__ import annotations

from typing import Optional


class NllFactsError(Exception):
    """Base class for all nllfacts errors."""


class ParseError(NllFactsError):
    """Raised when program text cannot be turned into facts.

    Parameters
    ----------
    message:
        Human-readable reason.
    line, column:
        1-based location of the problem, when known.
    """

    def __init__(
        self,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        if self.column is None:
            return f"{self.line}: {self.message}"
        return f"{self.line}:{self.column}: {self.message}"


class FactsLoadError(NllFactsError):
    """Raised when a facts directory or one of its files is malformed."""
