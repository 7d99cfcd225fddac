"""Exception hierarchy raised by the PGN reader."""

from __future__ import annotations


class PgnError(Exception):
    """Base class for every error raised by this package."""


class PgnStructureError(PgnError):
    """Movetext or tag section is malformed (unbalanced nesting, early EOF...)."""

    def __init__(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} (line {self.line}, column {self.column})"


class PgnReaderError(PgnError):
    """Wraps any failure that happened while reading one game."""

    MESSAGE = "a parsing error occurred"

    def __init__(self, cause: BaseException) -> None:
        super().__init__(self.MESSAGE)
        self.cause = cause


class ReaderClosedError(PgnError):
    """The reader was used after its stream had been released."""
