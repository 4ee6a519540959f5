"""MCP server entry point for netdump.

Exposes the netdump operations as tools via the Model Context Protocol
using the official Python MCP SDK with stdio transport. Every tool call
opens its own session, since the server handles one command per
connection.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import DEFAULT_BCA_PATH, DEFAULT_GAME_PATH, DEFAULT_PORT, DEFAULT_PROTOCOL_VERSION
from .dispatcher import Operation, run
from .errors import NetdumpError
from .sinks import sink_factory

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "netdump",
    instructions="Dump discs from and control a Wii running netdump",
)


def _perform(
    host: str,
    operation: Operation,
    port: int,
    version: int,
    path: str | None = None,
) -> dict[str, Any]:
    """Run one operation and flatten its outcome into a tool result."""
    factory = sink_factory(path) if path is not None else None
    try:
        result = run(host, operation, port=port, version=version, sink_factory=factory)
    except (NetdumpError, ValueError) as e:
        logger.error("%s on %s:%d failed: %s", operation.value, host, port, e)
        return {"ok": False, "operation": operation.value, "error": str(e)}

    response = result.to_dict()
    if path is not None and result.ok:
        response["path"] = path
    return response


# ─── DISC TOOLS ───────────────────────────────────────────────────────

@mcp.tool()
def get_disc_info(
    host: str,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict[str, Any]:
    """Read the disc type, game name and internal name of the inserted disc.

    Args:
        host: Hostname or IP of the Wii.
        port: netdump port (default 9875).
        version: Protocol version spoken by the server.
    """
    return _perform(host, Operation.GET_DISC_INFO, port, version)


@mcp.tool()
def dump_game(
    host: str,
    path: str = DEFAULT_GAME_PATH,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict[str, Any]:
    """Dump the full disc image to a local file.

    This can take a long time: images are up to several gigabytes.

    Args:
        host: Hostname or IP of the Wii.
        path: Local file to write the image to.
        port: netdump port (default 9875).
        version: Protocol version spoken by the server.
    """
    return _perform(host, Operation.DUMP_GAME, port, version, path)


@mcp.tool()
def dump_bca(
    host: str,
    path: str = DEFAULT_BCA_PATH,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict[str, Any]:
    """Dump the 64-byte Burst Cutting Area to a local file.

    Args:
        host: Hostname or IP of the Wii.
        path: Local file to write the BCA to.
        port: netdump port (default 9875).
        version: Protocol version spoken by the server.
    """
    return _perform(host, Operation.DUMP_BCA, port, version, path)


# ─── CONSOLE TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def eject_disc(
    host: str,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict[str, Any]:
    """Eject the disc from the drive."""
    return _perform(host, Operation.EJECT_DISC, port, version)


@mcp.tool()
def exit_program(
    host: str,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict[str, Any]:
    """Exit the netdump program on the Wii. Only protocol version 1 has it."""
    return _perform(host, Operation.EXIT_PROGRAM, port, version)


@mcp.tool()
def shutdown(
    host: str,
    port: int = DEFAULT_PORT,
    version: int = DEFAULT_PROTOCOL_VERSION,
) -> dict[str, Any]:
    """Shut the Wii down."""
    return _perform(host, Operation.SHUTDOWN, port, version)


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
