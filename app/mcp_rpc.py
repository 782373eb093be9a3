"""JSON-RPC 2.0 dispatcher and SSE keepalive channel for MCP clients."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, AsyncIterator, Awaitable, Callable

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response, StreamingResponse

from app.errors import McpError
from app.mcp_activity import read_activity_log
from app.mcp_constants import (
    DEFAULT_SSE_KEEPALIVE_SECONDS,
    MCP_PROTOCOL_VERSION,
    SERVER_NAME,
    SERVER_VERSION,
)
from app.mcp_router import mcp_router
from app.mcp_tasks import TASK_TOOLS
from tools.mcp_tools import ToolSchemaError, load_tool_definitions, to_mcp_tools

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
TOOL_ERROR = -32000

RPC_TOOLS = {**TASK_TOOLS, "read_activity_log": read_activity_log}


def _rpc_result(request_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _rpc_error(
    request_id: Any, code: int, message: str, data: Any = None
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}


def _call_tool(request_id: Any, params: Any, request: Request) -> dict[str, Any]:
    if not isinstance(params, dict):
        return _rpc_error(request_id, INVALID_REQUEST, "params must be an object")

    name = params.get("name")
    tool = RPC_TOOLS.get(name) if isinstance(name, str) else None
    if tool is None:
        return _rpc_error(request_id, TOOL_ERROR, f"Unknown tool: {name}")

    arguments = params.get("arguments")
    if arguments is None:
        arguments = {}
    try:
        envelope = tool(arguments, request)
    except McpError as exc:
        logger.warning("Tool %s failed: %s", name, exc.error.code)
        return _rpc_error(request_id, TOOL_ERROR, str(exc), exc.error.to_dict())

    text = json.dumps(envelope["data"], indent=2, ensure_ascii=False)
    return _rpc_result(request_id, {"content": [{"type": "text", "text": text}]})


def dispatch_rpc(message: dict[str, Any], request: Request) -> dict[str, Any] | None:
    """Handle one JSON-RPC message; notifications produce no response."""
    method = message.get("method")
    request_id = message.get("id")
    logger.debug("JSON-RPC %s id=%s", method, request_id)

    if "id" not in message:
        return None

    if method == "initialize":
        return _rpc_result(
            request_id,
            {
                "protocolVersion": MCP_PROTOCOL_VERSION,
                "serverInfo": {"name": SERVER_NAME, "version": SERVER_VERSION},
                "capabilities": {"tools": {}},
            },
        )

    if method == "tools/list":
        try:
            tools = to_mcp_tools(load_tool_definitions())
        except ToolSchemaError as exc:
            return _rpc_error(request_id, TOOL_ERROR, str(exc))
        return _rpc_result(request_id, {"tools": tools})

    if method == "tools/call":
        return _call_tool(request_id, message.get("params"), request)

    return _rpc_error(request_id, METHOD_NOT_FOUND, f"Method not found: {method}")


@mcp_router.post("/mcp")
async def handle_mcp(request: Request) -> Response:
    """Accept one JSON-RPC request per POST."""
    body = await request.body()
    try:
        message = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return JSONResponse(
            status_code=400,
            content=_rpc_error(None, PARSE_ERROR, "Parse error", str(exc)),
        )
    if not isinstance(message, dict):
        return JSONResponse(
            status_code=400,
            content=_rpc_error(None, INVALID_REQUEST, "Invalid Request"),
        )

    response = await run_in_threadpool(dispatch_rpc, message, request)
    if response is None:
        return Response(status_code=202)
    return JSONResponse(content=response)


async def sse_events(
    is_disconnected: Callable[[], Awaitable[bool]], keepalive_seconds: float
) -> AsyncIterator[str]:
    yield f"data: {json.dumps({'type': 'connected'})}\n\n"
    while True:
        await asyncio.sleep(keepalive_seconds)
        if await is_disconnected():
            return
        yield ": keepalive\n\n"


@mcp_router.get("/sse")
async def event_stream(request: Request) -> StreamingResponse:
    config = getattr(request.app.state, "config", None)
    keepalive_seconds = getattr(
        config, "sse_keepalive_seconds", DEFAULT_SSE_KEEPALIVE_SECONDS
    )
    return StreamingResponse(
        sse_events(request.is_disconnected, keepalive_seconds),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
