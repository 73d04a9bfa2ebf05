"""
Core module: data models, exceptions, storage and resolution.

This module provides the foundational types and the in-memory index:

Models (models.py):
    - SymbolRecord: An imported function or variable (NID + name)
    - LibraryEntry: A library with its records, functions first
    - FunctionSignature: Argument/return type strings for a function
    - Resolution/ResolutionSource: A resolved name and where it came from

Exceptions (exceptions.py):
    - NidDbError: Base exception for all niddb errors
    - LoadError: A file could not be loaded (FileUnreadableError,
      UnknownFormatError, MalformedDocumentError)

Storage (storage/):
    - LibraryStorage: Most-recent-first library index with master override
    - SignatureStorage: Function signature table

Resolver (resolver.py):
    - Resolver: Override -> scoped scan -> syslib table -> generated name

The NidDatabase facade (database.py) and the multi-file NidLoader
(loader.py) are imported from their modules directly.
"""

from niddb.core.exceptions import (
    FileUnreadableError,
    LoadError,
    MalformedDocumentError,
    NidDbError,
    UnknownFormatError,
)
from niddb.core.models import (
    FunctionSignature,
    LibraryEntry,
    LoadStats,
    Resolution,
    ResolutionSource,
    SymbolKind,
    SymbolRecord,
)
from niddb.core.resolver import SYSLIB_EXPORTS, SYSTEM_EXPORT_LIBRARY, Resolver, generate_name
from niddb.core.storage import MASTER_NID_MAPPER, LibraryStorage, SignatureStorage

__all__ = [
    # Models
    "SymbolRecord",
    "SymbolKind",
    "LibraryEntry",
    "FunctionSignature",
    "Resolution",
    "ResolutionSource",
    "LoadStats",
    # Exceptions
    "NidDbError",
    "LoadError",
    "FileUnreadableError",
    "UnknownFormatError",
    "MalformedDocumentError",
    # Storage
    "LibraryStorage",
    "SignatureStorage",
    "MASTER_NID_MAPPER",
    # Resolution
    "Resolver",
    "generate_name",
    "SYSLIB_EXPORTS",
    "SYSTEM_EXPORT_LIBRARY",
]
