"""Tool definition endpoint."""

from __future__ import annotations

from typing import Any

from app.errors import McpError, success_response
from app.mcp_router import mcp_router
from tools.mcp_tools import ToolSchemaError, load_tool_definitions, to_mcp_tools

TOOL_LIST_FORMATS = {"function", "mcp"}


@mcp_router.get("/tools")
def list_tool_schemas(format: str = "function") -> dict[str, Any]:
    """Return tool definitions, either function-style or as MCP entries."""
    if format not in TOOL_LIST_FORMATS:
        raise McpError(
            "INVALID_FORMAT",
            f"format must be one of: {', '.join(sorted(TOOL_LIST_FORMATS))}.",
            {"format": format},
        )
    try:
        tools = load_tool_definitions()
    except ToolSchemaError as exc:
        raise McpError(
            "TOOL_SCHEMA_ERROR",
            "Tool definitions could not be loaded.",
            {"error": str(exc)},
        ) from exc
    if format == "mcp":
        tools = to_mcp_tools(tools)
    return success_response({"tools": tools})
