"""Data models for niddb."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SymbolKind(Enum):
    """Kinds of imported symbols."""

    FUNCTION = "function"
    VARIABLE = "variable"


class ResolutionSource(Enum):
    """Where a resolved name came from."""

    MASTER = "master"
    LIBRARY = "library"
    SYSLIB = "syslib"
    GENERATED = "generated"


@dataclass(frozen=True)
class SymbolRecord:
    """An imported function or variable."""

    nid: int
    name: str
    kind: SymbolKind


@dataclass(frozen=True)
class LibraryEntry:
    """A library with its NID records, functions first then variables."""

    library_name: str
    image_name: str
    image_file: str
    flags: int
    records: tuple[SymbolRecord, ...]
    function_count: int
    variable_count: int
    is_kernel: bool | None = None

    @property
    def functions(self) -> tuple[SymbolRecord, ...]:
        return self.records[: self.function_count]

    @property
    def variables(self) -> tuple[SymbolRecord, ...]:
        return self.records[self.function_count :]

    def find(self, nid: int) -> SymbolRecord | None:
        """Return the first record with the given NID."""
        for record in self.records:
            if record.nid == nid:
                return record
        return None


@dataclass(frozen=True)
class Resolution:
    """Result of resolving a (library, NID) pair."""

    name: str
    source: ResolutionSource
    library: LibraryEntry | None = None


@dataclass(frozen=True)
class FunctionSignature:
    """Argument and return type strings for a named function."""

    name: str
    argument_spec: str = ""
    return_spec: str = ""


@dataclass
class LoadStats:
    """Statistics from a multi-file load."""

    files: int = 0
    libraries: int = 0
    symbols: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"LoadStats(files={self.files}, libraries={self.libraries}, "
            f"symbols={self.symbols}, skipped={self.skipped}, errors={len(self.errors)})"
        )
