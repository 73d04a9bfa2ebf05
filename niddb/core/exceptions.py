"""niddb custom exceptions."""

from __future__ import annotations


class NidDbError(Exception):
    """Base exception for niddb errors."""


class LoadError(NidDbError):
    """A database or signature file could not be loaded."""


class FileUnreadableError(LoadError):
    """The input file could not be opened."""


class UnknownFormatError(LoadError):
    """The input file extension does not map to a known format."""


class MalformedDocumentError(LoadError):
    """The input file does not match the expected schema."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None) -> None:
        if line is not None and column is not None:
            message = f"line: {line}, column: {column}, {message}"
        super().__init__(message)
        self.line = line
        self.column = column
