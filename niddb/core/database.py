"""Database facade that owns all loaded libraries and signatures."""

from __future__ import annotations

import logging
from pathlib import Path

from niddb.core.exceptions import FileUnreadableError, UnknownFormatError
from niddb.core.models import FunctionSignature, LibraryEntry, Resolution
from niddb.core.resolver import Resolver
from niddb.core.storage import LibraryStorage, SignatureStorage
from niddb.formats import detect_format, get_parser

logger = logging.getLogger(__name__)


class NidDatabase:
    """Facade that coordinates loading, resolution and signature lookup.

    Files are loaded once, then queried any number of times. A file that
    fails part way through keeps the libraries linked before the failure.
    """

    def __init__(self) -> None:
        self.libraries = LibraryStorage()
        self.signatures = SignatureStorage()
        self._resolver = Resolver(self.libraries)

    def close(self) -> None:
        """Release all libraries and signatures."""
        self.libraries.clear()
        self.signatures.clear()

    def __enter__(self) -> NidDatabase:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()

    def load_file(self, file: Path) -> int:
        """Load a NID database file, dispatching on its extension.

        Returns:
            Number of libraries linked from the file

        Raises:
            UnknownFormatError: The extension is not .xml, .json or .yml
            FileUnreadableError: The file could not be opened
            MalformedDocumentError: The file does not match its format's schema
        """
        file = Path(file)
        input_format = detect_format(file)
        if input_format is None:
            raise UnknownFormatError(f"unknown NID file type {file}")

        try:
            stream = file.open("rb")
        except OSError as e:
            raise FileUnreadableError(f"could not open {file}: {e}") from e

        count = 0
        with stream:
            for parsed in get_parser(input_format).parse(stream, file):
                self.libraries.insert(parsed)
                count += 1

        logger.debug("Loaded %d libraries from %s", count, file)
        return count

    def load_signature_file(self, file: Path) -> int:
        """Load a function signature file. Returns the number of signatures added."""
        return self.signatures.load(Path(file))

    def resolve(self, library_name: str | None, nid: int) -> str:
        """Resolve a NID to a name. Never fails."""
        return self._resolver.resolve(library_name, nid)

    def lookup(self, library_name: str | None, nid: int) -> Resolution:
        """Resolve a NID and report which table produced the name."""
        return self._resolver.lookup(library_name, nid)

    def find_dependency(self, library_name: str) -> str | None:
        """Get the image file that declares a library, or None."""
        return self.libraries.find_dependency(library_name)

    def all_libraries(self) -> list[LibraryEntry]:
        """Get all libraries, most recently loaded first."""
        return self.libraries.all()

    def find_signature(self, name: str) -> FunctionSignature | None:
        """Get the signature for a function name, or None."""
        return self.signatures.find(name)

    def get_stats(self) -> dict[str, int | str | None]:
        """Get database statistics."""
        master = self.libraries.master
        return {
            "libraries": len(self.libraries),
            "symbols": self.libraries.symbol_count(),
            "signatures": len(self.signatures),
            "master": master.image_file if master is not None else None,
        }
