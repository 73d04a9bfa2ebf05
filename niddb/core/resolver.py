"""NID to name resolution.

Lookup precedence:
1. Master override: when a MasterNidMapper table is loaded, only its records
   are searched and the library name is ignored.
2. Scoped scan: every library with a matching name, most recently loaded
   first, records in stored order.
3. Built-in system exports, for the ``syslib`` library only.
4. A generated ``<library>_XXXXXXXX`` name (``syslib_XXXXXXXX`` without one).
"""

from __future__ import annotations

import logging

from niddb.core.models import Resolution, ResolutionSource
from niddb.core.storage import LibraryStorage

logger = logging.getLogger(__name__)

SYSTEM_EXPORT_LIBRARY = "syslib"

SYSLIB_EXPORTS: dict[int, str] = {
    0x70FBA1E7: "module_process_param",
    0x6C2224BA: "module_info",
    0x935CD196: "module_start",
    0x79F8E492: "module_stop",
    0x913482A9: "module_exit",
}


class Resolver:
    """Resolves (library, NID) pairs against a library storage."""

    def __init__(self, libraries: LibraryStorage) -> None:
        self._libraries = libraries

    def lookup(self, library_name: str | None, nid: int) -> Resolution:
        """Resolve a NID and report where the name came from. Never fails."""
        master = self._libraries.master
        if master is not None:
            record = master.find(nid)
            if record is not None:
                logger.debug("Using %s, nid %08X", record.name, nid)
                return Resolution(record.name, ResolutionSource.MASTER, master)
        elif library_name is not None:
            for entry in self._libraries.find_by_name(library_name):
                record = entry.find(nid)
                if record is not None:
                    logger.debug("Using %s, nid %08X", record.name, nid)
                    return Resolution(record.name, ResolutionSource.LIBRARY, entry)

        if library_name == SYSTEM_EXPORT_LIBRARY and nid in SYSLIB_EXPORTS:
            return Resolution(SYSLIB_EXPORTS[nid], ResolutionSource.SYSLIB)

        logger.debug("Using default name")
        return Resolution(generate_name(library_name, nid), ResolutionSource.GENERATED)

    def resolve(self, library_name: str | None, nid: int) -> str:
        """Resolve a NID to a name. Never fails."""
        return self.lookup(library_name, nid).name


def generate_name(library_name: str | None, nid: int) -> str:
    """Build the fallback name for an unknown NID."""
    if library_name is None:
        return f"syslib_{nid:08X}"
    return f"{library_name}_{nid:08X}"
