"""MCP handler registration."""

# ruff: noqa: F401

from __future__ import annotations

from fastapi import FastAPI

from app.mcp_constants import ACTIVITY_LOG_FILENAME
from app.mcp_router import mcp_router

# Import modules to register routes with the shared router.
from app import mcp_activity, mcp_rpc, mcp_tasks, mcp_tools_endpoint

# Re-export endpoints for tests and direct imports.
from app.mcp_activity import read_activity_log
from app.mcp_rpc import dispatch_rpc, event_stream, handle_mcp
from app.mcp_tasks import (
    add_task,
    get_tasks_by_date,
    list_tasks,
    query_tasks,
    remove_task,
    toggle_task,
    update_task,
)
from app.mcp_tools_endpoint import list_tool_schemas


def register_mcp_handlers(app: FastAPI) -> None:
    """Attach MCP routes to the FastAPI application."""
    app.include_router(mcp_router)
