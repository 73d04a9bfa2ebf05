"""PSPLIBDOC XML parser.

Parsing is lenient: entries without a NID or NAME, and libraries without a
NAME, are skipped rather than reported. Only an unreadable or ill-formed
document is an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO
from xml.etree import ElementTree

from niddb.core.exceptions import MalformedDocumentError
from niddb.formats.base import InputFormat, detect_format
from niddb.formats.models import ParsedLibrary, ParsedSymbol
from niddb.formats.scalars import parse_hex_u32

logger = logging.getLogger(__name__)

_ROOT_TAG = "PSPLIBDOC"
_DEFAULT_PRX = "unknown.prx"


class PsplibdocParser:
    """Parser for PSPLIBDOC XML files using xml.etree."""

    format = InputFormat.MARKUP

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        return detect_format(file) is self.format

    def parse(self, stream: BinaryIO, source: Path) -> Iterator[ParsedLibrary]:
        """Parse a PSPLIBDOC document and yield its libraries."""
        try:
            root = ElementTree.parse(stream).getroot()
        except ElementTree.ParseError as e:
            line, column = e.position
            raise MalformedDocumentError(
                f"{source}: not a well-formed XML document", line, column + 1
            ) from e

        logger.debug("Loaded XML file %s", source)
        if root.tag != _ROOT_TAG:
            logger.warning("%s: root element is <%s>, expected <%s>", source, root.tag, _ROOT_TAG)
            return

        for prxfile in _children(root, "PRXFILES", "PRXFILE"):
            logger.debug("Found PRXFILE")
            yield from self._parse_prxfile(prxfile)

    def _parse_prxfile(self, prxfile: ElementTree.Element) -> Iterator[ParsedLibrary]:
        prx = _text(prxfile, "PRX") or _DEFAULT_PRX
        prx_name = _text(prxfile, "PRXNAME")
        if prx_name is None:
            return

        for library in _children(prxfile, "LIBRARIES", "LIBRARY"):
            parsed = self._parse_library(library, prx_name, prx)
            if parsed is not None:
                yield parsed

    def _parse_library(
        self, library: ElementTree.Element, prx_name: str, prx: str
    ) -> ParsedLibrary | None:
        name = _text(library, "NAME")
        if name is None:
            return None

        logger.debug("Library %s", name)
        flags = 0
        flags_text = _text(library, "FLAGS")
        if flags_text is not None:
            try:
                flags = parse_hex_u32(flags_text)
            except ValueError:
                logger.warning("Library %s: ignoring invalid FLAGS %r", name, flags_text)

        return ParsedLibrary(
            library_name=name,
            image_name=prx_name,
            image_file=prx,
            flags=flags,
            functions=_read_nids(library, "FUNCTIONS", "FUNCTION"),
            variables=_read_nids(library, "VARIABLES", "VARIABLE"),
        )


def _children(element: ElementTree.Element, group: str, tag: str) -> list[ElementTree.Element]:
    """Return the <tag> children of the first <group> child of element."""
    container = element.find(group)
    if container is None:
        return []
    return container.findall(tag)


def _text(element: ElementTree.Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def _read_nids(library: ElementTree.Element, group: str, tag: str) -> list[ParsedSymbol]:
    symbols = []
    for element in _children(library, group, tag):
        nid_text = _text(element, "NID")
        name = _text(element, "NAME")
        if nid_text is None or name is None:
            continue
        try:
            nid = parse_hex_u32(nid_text)
        except ValueError:
            logger.debug("Skipping %s %s: invalid NID %r", tag.lower(), name, nid_text)
            continue
        logger.debug("Read %s:%s nid:0x%08X", tag.lower(), name, nid)
        symbols.append(ParsedSymbol(name=name, nid=nid))
    return symbols
