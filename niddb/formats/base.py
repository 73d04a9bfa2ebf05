"""Protocol for NID database parsers."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Protocol

if TYPE_CHECKING:
    from niddb.formats.models import ParsedLibrary


class InputFormat(Enum):
    """Supported NID database encodings."""

    MARKUP = "xml"
    DOCUMENT = "json"
    LINES = "yml"


_EXTENSIONS = {
    ".xml": InputFormat.MARKUP,
    ".json": InputFormat.DOCUMENT,
    ".yml": InputFormat.LINES,
    ".yaml": InputFormat.LINES,
}

KNOWN_EXTENSIONS = tuple(_EXTENSIONS)


def detect_format(file: Path) -> InputFormat | None:
    """Map a file extension to its input format, or None if unknown."""
    return _EXTENSIONS.get(file.suffix.lower())


class NidParser(Protocol):
    """Protocol for NID database parsers."""

    format: InputFormat

    def parse(self, stream: BinaryIO, source: Path) -> Iterator[ParsedLibrary]:
        """Parse an open stream, yielding each library once it is validated."""
        ...

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        ...
