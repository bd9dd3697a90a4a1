"""Logbook Search MCP server - Main entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# MCP imports are optional - only needed when running the server
try:
    from mcp.server import Server  # pragma: no cover
    from mcp.server.stdio import stdio_server  # pragma: no cover
    from mcp.types import Tool, TextContent  # pragma: no cover
    HAS_MCP = True  # pragma: no cover
except ImportError:
    HAS_MCP = False
    Server = None  # type: ignore
    Tool = None  # type: ignore
    TextContent = None  # type: ignore

from .backend import LogSearchClient
from .config import SearchConfig, load_config
from .engine import SearchCompiler
from .params import raw_parameters_from_query_string
from .tools import execute_tool, make_tools

logger = logging.getLogger(__name__)


def create_server(config: SearchConfig) -> "Server":
    """Create and configure the MCP server.

    Args:
        config: Search configuration

    Returns:
        Configured MCP Server instance

    Raises:
        ImportError: If MCP package is not installed
    """
    if not HAS_MCP:
        raise ImportError(
            "MCP package not installed. Install with: pip install logbook-search[mcp]"
        )

    server = Server("logbook-search")
    compiler = SearchCompiler(config)
    client = LogSearchClient(config)
    tool_defs = make_tools(config)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """Return list of available tools."""
        return [
            Tool(
                name=t["name"],
                description=t["description"],
                inputSchema=t["inputSchema"],
            )
            for t in tool_defs.values()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle tool invocation."""
        result = await execute_tool(compiler, client, name, arguments or {})
        return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]

    return server


async def run_server(config: SearchConfig) -> None:
    """Run the MCP server with stdio transport."""
    if not HAS_MCP:
        raise ImportError(
            "MCP package not installed. Install with: pip install logbook-search[mcp]"
        )

    server = create_server(config)  # pragma: no cover

    async with stdio_server() as (read_stream, write_stream):  # pragma: no cover
        await server.run(  # pragma: no cover
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def compile_query_string(config: SearchConfig, query_string: str) -> dict[str, Any]:
    """Compile a URL query string and return the result as a dict."""
    compiler = SearchCompiler(config)
    result = compiler.compile(raw_parameters_from_query_string(query_string))
    return result.to_dict()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Logbook Search - compile and run log entry searches over MCP"
    )
    parser.add_argument(
        "--project-root",
        "-p",
        type=Path,
        default=Path.cwd(),
        help="Directory searched for a config file (default: current directory)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in project root)",
    )
    parser.add_argument(
        "--compile",
        metavar="QUERY_STRING",
        help="Print the compiled search for a query string (e.g. 'tags=beam&sort=up') and exit",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for stderr output (default: WARNING)",
    )

    args = parser.parse_args()

    # stdout carries the MCP stream, so logs go to stderr
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    project_root = args.project_root.resolve()

    try:
        config = load_config(project_root, args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.compile is not None:
        result = compile_query_string(config, args.compile)
        print(json.dumps(result, indent=2))
        if not result["success"]:
            sys.exit(2)
        return

    # Check for MCP before running in server mode
    if not HAS_MCP:
        print("Error: MCP package not installed.", file=sys.stderr)
        print("Install with: pip install logbook-search[mcp]", file=sys.stderr)
        sys.exit(1)

    logger.info("Starting logbook-search server for index %s", config.index)
    asyncio.run(run_server(config))


if __name__ == "__main__":  # pragma: no cover
    main()
