"""Activity log of task mutations.

Each vault keeps an append-only JSON-lines file at its root. An entry names
the tool that ran, the document and line it touched, and the commit that
recorded it (empty when git versioning is off).
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import Request

from app.errors import McpError, success_response
from app.mcp_constants import ACTIVITY_LOG_FILENAME
from app.mcp_payload import _ensure_payload_dict, _optional_string, _reject_unknown_fields
from app.mcp_router import mcp_router
from app.vault_scope import get_request_vault_root

DEFAULT_ACTIVITY_LIMIT = 50


def _activity_log_path(vault_root: Path) -> Path:
    return vault_root / ACTIVITY_LOG_FILENAME


def _append_activity_log(vault_root: Path, entry: dict[str, Any]) -> None:
    log_path = _activity_log_path(vault_root)
    payload = json.dumps(entry, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    with log_path.open("a", encoding="utf-8") as log_file:
        log_file.write(payload + "\n")
        log_file.flush()
        os.fsync(log_file.fileno())


def _build_activity_entry(
    operation: str,
    document_path: str,
    summary: str,
    commit_sha: str | None,
    *,
    line_number: int | None = None,
) -> dict[str, Any]:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "operation": operation,
        "path": document_path,
        "lineNumber": line_number,
        "summary": summary,
        "commitSha": commit_sha or "",
    }


def _entry_time(entry: dict[str, Any]) -> datetime | None:
    try:
        entry_time = datetime.fromisoformat(entry.get("timestamp"))
    except (TypeError, ValueError):
        return None
    if entry_time.tzinfo is None:
        entry_time = entry_time.replace(tzinfo=timezone.utc)
    return entry_time


def _read_activity_entries(
    vault_root: Path,
    *,
    since: datetime | None = None,
    limit: int = DEFAULT_ACTIVITY_LIMIT,
    operation: str | None = None,
    document_path: str | None = None,
) -> list[dict[str, Any]]:
    """Return the newest matching entries, oldest first.

    Unreadable lines are skipped; a naive ``since`` is taken as UTC.
    """
    log_path = _activity_log_path(vault_root)
    if not log_path.exists():
        return []
    if since is not None and since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)

    entries: list[dict[str, Any]] = []
    for line in log_path.read_text(encoding="utf-8").splitlines():
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(entry, dict):
            continue
        if operation is not None and entry.get("operation") != operation:
            continue
        if document_path is not None and entry.get("path") != document_path:
            continue
        if since is not None:
            entry_time = _entry_time(entry)
            if entry_time is not None and entry_time < since:
                continue
        entries.append(entry)
    return entries[-limit:]


@mcp_router.post("/tool:read_activity_log")
def read_activity_log(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Read recent task mutations, optionally narrowed by tool or document."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"limit", "since", "operation", "filePath"})

    limit = payload.get("limit", DEFAULT_ACTIVITY_LIMIT)
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise McpError(
            "INVALID_TYPE",
            "limit must be a positive integer.",
            {"limit": str(limit)},
        )

    since = None
    since_value = _optional_string(payload, "since")
    if since_value is not None:
        try:
            since = datetime.fromisoformat(since_value)
        except ValueError as exc:
            raise McpError(
                "INVALID_DATE",
                "since must be an ISO 8601 date-time.",
                {"since": since_value},
            ) from exc

    entries = _read_activity_entries(
        get_request_vault_root(request),
        since=since,
        limit=limit,
        operation=_optional_string(payload, "operation"),
        document_path=_optional_string(payload, "filePath"),
    )
    return success_response({"entries": entries})
