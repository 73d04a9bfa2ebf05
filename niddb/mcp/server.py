"""MCP server implementation for niddb."""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from niddb.core.database import NidDatabase
from niddb.core.exceptions import LoadError, NidDbError
from niddb.core.loader import NidLoader, get_default_nid_dir
from niddb.core.models import LibraryEntry
from niddb.formats.scalars import parse_u32

server = Server("niddb")


def _get_paths() -> tuple[str, ...]:
    """Database paths from NIDDB_PATH, or the default directory."""
    env = os.environ.get("NIDDB_PATH")
    if env:
        return tuple(p for p in env.split(os.pathsep) if p)
    default = get_default_nid_dir(Path.cwd())
    if not default.exists():
        raise FileNotFoundError(
            f"No NID databases found. Set NIDDB_PATH or create {default}."
        )
    return (str(default),)


@lru_cache(maxsize=1)
def _load(paths: tuple[str, ...], functions: str | None) -> tuple[NidDatabase, tuple[str, ...]]:
    """Load every path, keeping going past files that fail. Returns the errors too."""
    db = NidDatabase()
    stats = NidLoader(db).load_paths([Path(p) for p in paths])
    errors = list(stats.errors)
    if functions:
        try:
            db.load_signature_file(Path(functions))
        except LoadError as e:
            errors.append(str(e))
    return db, tuple(errors)


def _get_db() -> NidDatabase:
    """Get the database for the configured paths, loading it once."""
    db, _ = _load(_get_paths(), os.environ.get("NIDDB_FUNCTIONS"))
    return db


def _handle_stats() -> dict[str, Any]:
    """Handle nid_stats tool."""
    db, errors = _load(_get_paths(), os.environ.get("NIDDB_FUNCTIONS"))
    return {**db.get_stats(), "load_errors": list(errors)}


def _library_to_dict(entry: LibraryEntry) -> dict[str, Any]:
    """Convert a LibraryEntry to a JSON-serializable dict."""
    return {
        "name": entry.library_name,
        "image_name": entry.image_name,
        "image_file": entry.image_file,
        "flags": f"0x{entry.flags:08X}",
        "kernel": entry.is_kernel,
        "functions": entry.function_count,
        "variables": entry.variable_count,
    }


@server.list_tools()  # type: ignore[no-untyped-call, untyped-decorator]
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="nid_resolve",
            description=(
                "Resolve an imported NID of a library to its name. Always returns a name; "
                "unknown NIDs get a generated '<library>_XXXXXXXX' name."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "library": {
                        "type": "string",
                        "description": "Library name the NID is imported from",
                    },
                    "nid": {
                        "type": "string",
                        "description": "NID as decimal or 0x-prefixed hex",
                    },
                },
                "required": ["library", "nid"],
            },
        ),
        Tool(
            name="nid_libraries",
            description="List loaded libraries, most recently loaded first.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {
                        "type": "string",
                        "description": "Only list libraries with this name (optional)",
                    },
                },
            },
        ),
        Tool(
            name="nid_dependency",
            description="Find the image file that declares a library.",
            inputSchema={
                "type": "object",
                "properties": {
                    "library": {"type": "string", "description": "Library name"},
                },
                "required": ["library"],
            },
        ),
        Tool(
            name="nid_signature",
            description="Get the argument and return types of a function by name.",
            inputSchema={
                "type": "object",
                "properties": {
                    "name": {"type": "string", "description": "Function name"},
                },
                "required": ["name"],
            },
        ),
        Tool(
            name="nid_stats",
            description=(
                "Get statistics about the loaded NID databases, including files that "
                "failed to load."
            ),
            inputSchema={
                "type": "object",
                "properties": {},
            },
        ),
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "nid_resolve":
            result = _handle_resolve(arguments["library"], arguments["nid"])
        elif name == "nid_libraries":
            result = _handle_libraries(arguments.get("name"))
        elif name == "nid_dependency":
            result = _handle_dependency(arguments["library"])
        elif name == "nid_signature":
            result = _handle_signature(arguments["name"])
        elif name == "nid_stats":
            result = _handle_stats()
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except (FileNotFoundError, KeyError, NidDbError, ValueError) as e:
        return [TextContent(type="text", text=json.dumps({"error": str(e)}))]


def _handle_resolve(library: str, nid: str) -> dict[str, Any]:
    """Handle nid_resolve tool."""
    db = _get_db()
    value = parse_u32(str(nid))
    result = db.lookup(library, value)
    return {
        "library": library,
        "nid": f"0x{value:08X}",
        "name": result.name,
        "source": result.source.value,
        "image_file": result.library.image_file if result.library else None,
    }


def _handle_libraries(name: str | None) -> dict[str, Any]:
    """Handle nid_libraries tool."""
    entries = _get_db().all_libraries()
    return {
        "results": [
            _library_to_dict(e) for e in entries if name is None or e.library_name == name
        ],
    }


def _handle_dependency(library: str) -> dict[str, Any]:
    """Handle nid_dependency tool."""
    image_file = _get_db().find_dependency(library)
    if image_file is None:
        return {"error": f"No image declares '{library}'"}
    return {"library": library, "image_file": image_file}


def _handle_signature(name: str) -> dict[str, Any]:
    """Handle nid_signature tool."""
    signature = _get_db().find_signature(name)
    if signature is None:
        return {"error": f"No signature for '{name}'"}
    return {
        "name": signature.name,
        "arguments": signature.argument_spec,
        "returns": signature.return_spec,
    }


async def serve() -> None:
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())
