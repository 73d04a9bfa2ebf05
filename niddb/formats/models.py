"""Data models for format parser results."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ParsedSymbol:
    """A NID/name pair read from a database file (before linking)."""

    name: str
    nid: int


@dataclass
class ParsedLibrary:
    """A library read from a database file (before linking)."""

    library_name: str
    image_name: str
    image_file: str
    flags: int = 0
    is_kernel: bool | None = None
    functions: list[ParsedSymbol] = field(default_factory=list)
    variables: list[ParsedSymbol] = field(default_factory=list)
