"""Vita-style JSON import database parser.

Layout::

    {"<library>": {"nid": int, "modules": {
        "<module>": {"nid": int, "kernel": bool,
                     "functions": {"<name>": int}, "variables": {"<name>": int}}}}}

Validation is strict: the first missing or mistyped field aborts the load.
Modules validated before the failure have already been yielded.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any, BinaryIO

from niddb.core.exceptions import MalformedDocumentError
from niddb.formats.base import InputFormat, detect_format
from niddb.formats.models import ParsedLibrary, ParsedSymbol
from niddb.formats.scalars import U32_MAX

logger = logging.getLogger(__name__)


class VitaJsonParser:
    """Parser for JSON import databases."""

    format = InputFormat.DOCUMENT

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        return detect_format(file) is self.format

    def parse(self, stream: BinaryIO, source: Path) -> Iterator[ParsedLibrary]:
        """Parse a JSON import database and yield one library per module."""
        try:
            libs = json.load(stream)
        except json.JSONDecodeError as e:
            raise MalformedDocumentError(e.msg, e.lineno, e.colno) from e
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"{source}: cannot decode: {e}") from e
        except RecursionError as e:
            raise MalformedDocumentError(f"{source}: document nested too deeply") from e

        if not isinstance(libs, dict):
            raise MalformedDocumentError("modules is not an object")

        for lib_name, lib_data in libs.items():
            if not isinstance(lib_data, dict):
                raise MalformedDocumentError(f"library {lib_name} is not an object")
            if not _is_integer(lib_data.get("nid")):
                raise MalformedDocumentError(f"library {lib_name}: nid is not an integer")
            modules = lib_data.get("modules")
            if not isinstance(modules, dict):
                raise MalformedDocumentError(f"library {lib_name}: modules is not an object")

            for mod_name, mod_data in modules.items():
                yield self._parse_module(mod_name, mod_data)

    def _parse_module(self, mod_name: str, mod_data: Any) -> ParsedLibrary:
        if not isinstance(mod_data, dict):
            raise MalformedDocumentError(f"module {mod_name} is not an object")

        nid = mod_data.get("nid")
        if not _is_integer(nid):
            raise MalformedDocumentError(f"module {mod_name}: nid is not an integer")
        kernel = mod_data.get("kernel")
        if not isinstance(kernel, bool):
            raise MalformedDocumentError(f"module {mod_name}: kernel is not a boolean")
        functions = mod_data.get("functions")
        if not isinstance(functions, dict):
            raise MalformedDocumentError(f"module {mod_name}: functions is not an object")
        variables = mod_data.get("variables", {})
        if not isinstance(variables, dict):
            raise MalformedDocumentError(f"module {mod_name}: variables is not an object")

        logger.debug("Library %s", mod_name)
        return ParsedLibrary(
            library_name=mod_name,
            image_name=mod_name,
            image_file=mod_name,
            flags=_u32(nid, f"module {mod_name}: nid"),
            is_kernel=kernel,
            functions=_read_nids(functions, "function"),
            variables=_read_nids(variables, "variable"),
        )


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _u32(value: int, what: str) -> int:
    if not 0 <= value <= U32_MAX:
        raise MalformedDocumentError(f"{what} does not fit in 32 bits")
    return value


def _read_nids(group: dict[str, Any], kind: str) -> list[ParsedSymbol]:
    symbols = []
    for name, nid in group.items():
        if not _is_integer(nid):
            raise MalformedDocumentError(f"{kind} {name}: nid is not an integer")
        symbols.append(ParsedSymbol(name=name, nid=_u32(nid, f"{kind} {name}: nid")))
        logger.debug("Read %s:%s nid:0x%08X", kind, name, nid)
    return symbols
