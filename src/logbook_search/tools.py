"""MCP tool definitions wrapping the search compiler and client."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

from .backend import LogSearchClient
from .config import SearchConfig
from .engine import SearchCompiler
from .errors import SearchBackendError, SearchError
from .params import coerce_raw_parameters

PARAMS_DESCRIPTION = (
    "Search parameters as sent in a query string. Keys are case-insensitive; "
    "values may be a string or a list of strings. Recognized keys: "
    "text/desc/description, title, phrase, fuzzy, logbooks, tags, "
    "properties (name.value), owner, level, start, end, includeevents, "
    "sort (asc/up or desc/down), size/limit, from/offset."
)


def make_tools(config: SearchConfig) -> dict[str, dict]:
    """Create MCP tool definitions.

    Returns:
        Dict mapping tool names to their definitions.
    """

    tools = {}

    # ========== log_search_compile ==========
    tools["log_search_compile"] = {
        "name": "log_search_compile",
        "description": "Validate search parameters and return the canonical criteria and compiled query without executing it.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "params": {
                    "type": "object",
                    "description": PARAMS_DESCRIPTION,
                },
            },
        },
    }

    # ========== log_search ==========
    tools["log_search"] = {
        "name": "log_search",
        "description": (
            f"Search log entries in index '{config.index}'. Results are sorted by "
            f"creation time, most recent first unless sort=asc; at most "
            f"{config.max_size} entries per page."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "params": {
                    "type": "object",
                    "description": PARAMS_DESCRIPTION,
                },
            },
        },
    }

    # ========== service_info ==========
    tools["service_info"] = {
        "name": "service_info",
        "description": "Report service version and Elasticsearch cluster status.",
        "inputSchema": {
            "type": "object",
            "properties": {},
        },
    }

    return tools


async def execute_tool(
    compiler: SearchCompiler,
    client: Optional[LogSearchClient],
    name: str,
    arguments: dict[str, Any],
) -> dict[str, Any]:
    """Execute a search tool and return the result.

    Args:
        compiler: SearchCompiler instance
        client: LogSearchClient, required by log_search and service_info
        name: Tool name
        arguments: Tool arguments

    Returns:
        Result dict with success status and data or error
    """
    try:
        if name in ("log_search_compile", "log_search"):
            raw = coerce_raw_parameters(arguments.get("params"))
            result = compiler.compile(raw)
            if not result.ok:
                return {
                    "success": False,
                    "error": result.error.message,
                    "error_type": result.error.category,
                    "parameter": result.error.parameter,
                }
            criteria, query = result.unwrap()

            if name == "log_search_compile":
                return {
                    "success": True,
                    "criteria": criteria.to_dict(),
                    "index": query.index,
                    "body": query.to_body(),
                }

            if client is None:
                raise SearchBackendError("No search backend configured")
            results = await asyncio.to_thread(client.search, query)
            return {
                "success": True,
                "criteria": criteria.to_dict(),
                **results.to_dict(),
            }

        elif name == "service_info":
            if client is None:
                raise SearchBackendError("No search backend configured")
            info = await asyncio.to_thread(client.info)
            return {
                "success": True,
                **info,
            }

        else:
            return {
                "success": False,
                "error": f"Unknown tool: {name}",
            }

    except SearchBackendError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "search_backend_error",
        }

    except SearchError as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "internal_error",
        }

    except Exception as e:
        return {
            "success": False,
            "error": str(e),
            "error_type": "unexpected_error",
        }
