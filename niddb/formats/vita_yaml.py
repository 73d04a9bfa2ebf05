"""Vita-style YAML import database parser.

Layout::

    modules:
      <module>:
        nid: 0x...
        libraries:
          <library>:
            kernel: false
            nid: 0x...
            functions: {<name>: 0x...}
            variables: {<name>: 0x...}

The document is walked as a node graph (``yaml.compose``) so that every
structural error can carry the line and column of the offending node.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO

import yaml

from niddb.core.exceptions import MalformedDocumentError
from niddb.formats.base import InputFormat, detect_format
from niddb.formats.models import ParsedLibrary, ParsedSymbol
from niddb.formats.scalars import parse_bool, parse_u32

logger = logging.getLogger(__name__)

_NULL_TAG = "tag:yaml.org,2002:null"


class VitaYamlParser:
    """Parser for YAML import databases."""

    format = InputFormat.LINES

    def supports(self, file: Path) -> bool:
        """Check if this parser supports the given file."""
        return detect_format(file) is self.format

    def parse(self, stream: BinaryIO, source: Path) -> Iterator[ParsedLibrary]:
        """Parse a YAML import database and yield its libraries."""
        root = _compose(stream, source)

        if not isinstance(root, yaml.MappingNode):
            raise _error(root, f"expecting root node to be a mapping, got '{_node_type(root)}'.")
        if not root.value:
            raise _error(root, "expecting at least one entry within root mapping, got 0.")

        for key, value in root.value:
            if not isinstance(key, yaml.ScalarNode):
                continue
            if key.value != "modules":
                line, column = _position(key)
                logger.warning(
                    "%s: line: %d, column: %d, unknown tag '%s'.", source, line, column, key.value
                )
                continue
            for module_key, module in _mapping(value, "modules"):
                _require_scalar(module_key, "module key")
                yield from self._parse_module(module)

    def _parse_module(self, module: yaml.Node) -> Iterator[ParsedLibrary]:
        for key, value in _mapping(module, "module"):
            _require_scalar(key, "module key")
            if key.value == "nid":
                _u32(value, "module nid")
            elif key.value == "libraries":
                for library_key, library in _mapping(value, "libraries"):
                    _require_scalar(library_key, "library key")
                    yield self._parse_library(library_key.value, library)
            else:
                raise _error(key, f"unrecognised module key '{key.value}'.")

    def _parse_library(self, name: str, library: yaml.Node) -> ParsedLibrary:
        parsed = ParsedLibrary(library_name=name, image_name=name, image_file=name)

        for key, value in _mapping(library, "library"):
            _require_scalar(key, "library key")
            if key.value == "kernel":
                _require_scalar(value, "library syscall flag")
                try:
                    parsed.is_kernel = parse_bool(value.value)
                except ValueError as e:
                    raise _error(
                        value,
                        f"could not convert library flag to boolean, got '{value.value}'. "
                        "expected 'true' or 'false'.",
                    ) from e
            elif key.value == "functions":
                parsed.functions = _read_nids(value, "function")
            elif key.value == "variables":
                parsed.variables = _read_nids(value, "variable")
            elif key.value == "nid":
                parsed.flags = _u32(value, "library nid")
            else:
                raise _error(key, f"unrecognised library key '{key.value}'.")

        logger.debug(
            "Library %s: %d functions, %d variables",
            name,
            len(parsed.functions),
            len(parsed.variables),
        )
        return parsed


def _compose(stream: BinaryIO, source: Path) -> yaml.Node:
    """Compose the single document of a stream into a node graph."""
    try:
        documents = list(yaml.compose_all(stream, Loader=yaml.SafeLoader))
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        if mark is None:
            raise MalformedDocumentError(f"{source}: {e.problem or e}") from e
        raise MalformedDocumentError(str(e.problem or e), mark.line + 1, mark.column + 1) from e
    except yaml.YAMLError as e:
        raise MalformedDocumentError(f"{source}: {e}") from e
    except RecursionError as e:
        raise MalformedDocumentError(f"{source}: document nested too deeply") from e

    if len(documents) != 1:
        raise MalformedDocumentError(
            f"{source}: expecting a single yaml document, got: {len(documents)}"
        )
    return documents[0]


def _position(node: yaml.Node) -> tuple[int, int]:
    return node.start_mark.line + 1, node.start_mark.column + 1


def _error(node: yaml.Node, message: str) -> MalformedDocumentError:
    line, column = _position(node)
    return MalformedDocumentError(message, line, column)


def _node_type(node: yaml.Node) -> str:
    if isinstance(node, yaml.ScalarNode):
        return "scalar"
    if isinstance(node, yaml.MappingNode):
        return "mapping"
    if isinstance(node, yaml.SequenceNode):
        return "sequence"
    return type(node).__name__


def _mapping(node: yaml.Node, what: str) -> list[tuple[yaml.Node, yaml.Node]]:
    """Return the key/value pairs of a mapping node. An empty value counts as {}."""
    if isinstance(node, yaml.ScalarNode) and node.tag == _NULL_TAG:
        return []
    if not isinstance(node, yaml.MappingNode):
        raise _error(node, f"expecting {what} to be a mapping, got '{_node_type(node)}'.")
    return node.value


def _require_scalar(node: yaml.Node, what: str) -> None:
    if not isinstance(node, yaml.ScalarNode):
        raise _error(node, f"expecting {what} to be scalar, got '{_node_type(node)}'.")


def _u32(node: yaml.Node, what: str) -> int:
    _require_scalar(node, what)
    try:
        return parse_u32(node.value)
    except ValueError as e:
        raise _error(
            node, f"could not convert {what} '{node.value}' to 32 bit integer."
        ) from e


def _read_nids(node: yaml.Node, kind: str) -> list[ParsedSymbol]:
    symbols = []
    for key, value in _mapping(node, f"{kind}s"):
        _require_scalar(key, kind)
        nid = _u32(value, f"{kind} nid")
        symbols.append(ParsedSymbol(name=key.value, nid=nid))
    return symbols
