"""
MCP server for niddb.

Exposes NID resolution to LLMs via the Model Context Protocol.

Tools:
    - nid_resolve: Resolve a library NID to a name
    - nid_libraries: List loaded libraries
    - nid_dependency: Find the image that declares a library
    - nid_signature: Look up a function signature
    - nid_stats: Get database statistics

Configuration:
    NIDDB_PATH: Database files/directories, separated by os.pathsep
        (default: .niddb/ in the working directory)
    NIDDB_FUNCTIONS: Optional function signature file

Usage:
    Run: niddb-mcp
"""

import asyncio

from niddb.mcp.server import serve as _serve


def serve() -> None:
    """Entry point for the MCP server."""
    asyncio.run(_serve())


__all__ = ["serve"]
