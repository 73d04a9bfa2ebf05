"""
Format parsers: read NID databases into parsed libraries.

This module provides the ingestion layer that converts database files into
structured data (libraries and their NID records) for linking.

Components:
    - NidParser: Protocol defining the parser interface
    - InputFormat: The supported encodings, selected by file extension
    - PsplibdocParser: PSPLIBDOC XML (lenient, bad entries are skipped)
    - VitaJsonParser: JSON import databases (strict)
    - VitaYamlParser: YAML import databases (strict, errors carry line/column)

All parsers share one logical schema: a library has a name, an optional
numeric flags/nid value, an optional kernel marker and two groups of
(name, NID) pairs, functions and variables.

Adding a new format:
    1. Add an InputFormat member and its extensions
    2. Create a parser class implementing the NidParser protocol
    3. Register it in get_parser()
"""

from niddb.formats.base import KNOWN_EXTENSIONS, InputFormat, NidParser, detect_format
from niddb.formats.models import ParsedLibrary, ParsedSymbol
from niddb.formats.psplibdoc import PsplibdocParser
from niddb.formats.vita_json import VitaJsonParser
from niddb.formats.vita_yaml import VitaYamlParser

_PARSERS: dict[InputFormat, type[NidParser]] = {
    InputFormat.MARKUP: PsplibdocParser,
    InputFormat.DOCUMENT: VitaJsonParser,
    InputFormat.LINES: VitaYamlParser,
}


def get_parser(input_format: InputFormat) -> NidParser:
    """Return a parser for the given input format."""
    return _PARSERS[input_format]()


__all__ = [
    "KNOWN_EXTENSIONS",
    "InputFormat",
    "NidParser",
    "ParsedLibrary",
    "ParsedSymbol",
    "PsplibdocParser",
    "VitaJsonParser",
    "VitaYamlParser",
    "detect_format",
    "get_parser",
]
