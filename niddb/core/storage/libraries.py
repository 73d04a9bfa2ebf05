"""Library storage operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from niddb.core.models import LibraryEntry, SymbolKind, SymbolRecord

if TYPE_CHECKING:
    from niddb.formats.models import ParsedLibrary, ParsedSymbol

logger = logging.getLogger(__name__)

MASTER_NID_MAPPER = "MasterNidMapper"


class LibraryStorage:
    """Ordered store of library entries, most recently loaded first.

    Entries are appended internally and iterated in reverse, so the newest
    entry is always scanned first.
    """

    def __init__(self) -> None:
        self._entries: list[LibraryEntry] = []
        self._master: LibraryEntry | None = None

    def insert(self, parsed: ParsedLibrary) -> LibraryEntry:
        """Build an entry from a parsed library and link it at the front."""
        records = tuple(_records(parsed.functions, SymbolKind.FUNCTION)) + tuple(
            _records(parsed.variables, SymbolKind.VARIABLE)
        )
        entry = LibraryEntry(
            library_name=parsed.library_name,
            image_name=parsed.image_name,
            image_file=parsed.image_file,
            flags=parsed.flags,
            records=records,
            function_count=len(parsed.functions),
            variable_count=len(parsed.variables),
            is_kernel=parsed.is_kernel,
        )
        self._entries.append(entry)

        if entry.library_name == MASTER_NID_MAPPER:
            if self._master is None:
                logger.debug("Found master NID table")
                self._master = entry
            else:
                logger.debug("Ignoring additional master NID table from %s", entry.image_file)
        return entry

    @property
    def master(self) -> LibraryEntry | None:
        """The master override entry, if one has been loaded."""
        return self._master

    def __iter__(self) -> Iterator[LibraryEntry]:
        return reversed(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def all(self) -> list[LibraryEntry]:
        """Return all entries, most recently loaded first."""
        return list(self)

    def find_by_name(self, library_name: str) -> Iterator[LibraryEntry]:
        """Yield every entry with the given library name, in scan order."""
        for entry in self:
            if entry.library_name == library_name:
                yield entry

    def find_dependency(self, library_name: str) -> str | None:
        """Get the image file that declares a library, or None."""
        entry = next(self.find_by_name(library_name), None)
        if entry is None:
            return None
        return entry.image_file

    def symbol_count(self) -> int:
        return sum(len(entry.records) for entry in self._entries)

    def clear(self) -> None:
        """Drop all entries, including the master override."""
        self._entries.clear()
        self._master = None


def _records(symbols: list[ParsedSymbol], kind: SymbolKind) -> Iterator[SymbolRecord]:
    for symbol in symbols:
        yield SymbolRecord(nid=symbol.nid, name=symbol.name, kind=kind)
