"""
Storage layer: in-memory tables built from the loaded databases.

This module provides the owned data split by concern:

Components:
    - LibraryStorage: Library entries, most recently loaded first, plus the
      master override entry (the first library named MasterNidMapper)
    - SignatureStorage: Function signatures from ``name|args|return`` files

Entries are immutable once linked and are released together when the
owning NidDatabase is closed.
"""

from niddb.core.storage.libraries import MASTER_NID_MAPPER, LibraryStorage
from niddb.core.storage.signatures import SignatureStorage, parse_signature_line

__all__ = [
    "MASTER_NID_MAPPER",
    "LibraryStorage",
    "SignatureStorage",
    "parse_signature_line",
]
