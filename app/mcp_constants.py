"""Shared constants for MCP endpoints."""

from __future__ import annotations

SERVER_NAME = "tasks-mcp"
SERVER_VERSION = "1.1.0"
MCP_PROTOCOL_VERSION = "2024-11-05"

ALLOWED_MARKDOWN_EXTENSIONS = {".md", ".markdown"}
ACTIVITY_LOG_FILENAME = "activity.log"

DEFAULT_DAILY_NOTES_FOLDER = "Daily Notes"
DEFAULT_DAILY_NOTE_FORMAT = "YYYY-MM-DD"
DEFAULT_SSE_KEEPALIVE_SECONDS = 30.0

TASK_PRIORITIES = {"highest", "high", "medium", "low", "lowest"}
TASK_STATUSES = {"incomplete", "complete", "cancelled", "in_progress"}
