"""Errors raised while reading or writing recfiles."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recfile.database import Database


class RecfileError(Exception):
    """Base error for this package."""


class FormatError(RecfileError, ValueError):
    """
    Raised when recfile text breaks the format grammar, or when a database
    cannot be written back without breaking it.

    `line` is the number of the last raw line consumed when the problem was
    found. `database` holds whatever the reader had assembled before the
    failure; callers must not trust it as a complete file.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.database: Database | None = None

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line})"
