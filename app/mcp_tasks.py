"""Task-related MCP endpoints."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable

from dulwich.repo import Repo
from fastapi import Request

from app.errors import McpError, success_response
from app.mcp_activity import _append_activity_log, _build_activity_entry
from app.mcp_constants import TASK_PRIORITIES, TASK_STATUSES
from app.mcp_git import (
    _commit_document_change,
    _ensure_git_repo,
    _rollback_document_change,
)
from app.mcp_payload import (
    _ensure_payload_dict,
    _optional_choice,
    _optional_date,
    _optional_string,
    _optional_string_list,
    _reject_unknown_fields,
)
from app.mcp_router import mcp_router
from app.task_capability import get_recurrence_toggler, toggle_with_capability
from app.task_filters import query_tasks as filter_tasks
from app.task_ids import encode_task_id, resolve_task_address
from app.task_markdown import (
    UNSET,
    TaskFields,
    TaskUpdate,
    build_task_markdown,
    rebuild_task_line,
    toggle_task_line,
)
from app.task_model import PRIORITY_NONE, Task
from app.task_parser import parse_task_line
from app.vault import DocumentChange, Vault
from app.vault_scope import get_request_vault, git_commits_enabled

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = {"taskId", "filePath", "lineNumber"}
UPDATE_FIELDS = {
    "description",
    "dueDate",
    "scheduledDate",
    "startDate",
    "priority",
    "tags",
    "recurrence",
    "status",
}


@mcp_router.post("/tool:add_task")
def add_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Append a new task line, defaulting to today's daily note."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(
        payload,
        {
            "description",
            "filePath",
            "dueDate",
            "scheduledDate",
            "startDate",
            "priority",
            "tags",
            "recurrence",
        },
    )

    description = _optional_string(payload, "description", single_line=True)
    if not description or not description.strip():
        raise McpError(
            "MISSING_DESCRIPTION",
            "description is required.",
            {"fields": ["description"]},
        )

    fields = TaskFields(
        description=description.strip(),
        due_date=_optional_date(payload, "dueDate"),
        scheduled_date=_optional_date(payload, "scheduledDate"),
        start_date=_optional_date(payload, "startDate"),
        priority=_optional_choice(
            payload, "priority", TASK_PRIORITIES, "INVALID_PRIORITY"
        ),
        tags=_optional_string_list(payload, "tags", single_line=True) or (),
        recurrence=_optional_string(payload, "recurrence", single_line=True),
    )

    vault = get_request_vault(request)
    file_path = _optional_string(payload, "filePath") or vault.daily_note_path(
        _local_today()
    )
    task_line = build_task_markdown(fields)

    repo = _prepare_repo(request, vault)
    change = vault.append_line(file_path, task_line)
    # The document always ends with a newline after an append.
    line_number = change.updated.count("\n")
    commit_sha = _record_change(
        repo, vault, change, "add_task", "add task", line_number=line_number
    )

    return success_response(
        {
            "success": True,
            "taskId": encode_task_id(change.path, line_number),
            "filePath": change.path,
            "lineNumber": line_number,
            "task": task_line,
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:update_task")
def update_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Rewrite a task line with partial field overrides."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, ADDRESS_FIELDS | UPDATE_FIELDS)

    file_path, line_number = resolve_task_address(
        payload.get("taskId"), payload.get("filePath"), payload.get("lineNumber")
    )
    update = _build_task_update(payload)

    vault = get_request_vault(request)
    task = _load_task(vault, file_path, line_number)
    new_line = rebuild_task_line(task, update)

    repo = _prepare_repo(request, vault)
    old_line, change = vault.replace_line(file_path, line_number, new_line)
    commit_sha = _record_change(
        repo, vault, change, "update_task", "update task", line_number=line_number
    )

    return success_response(
        {
            "success": True,
            "filePath": change.path,
            "lineNumber": line_number,
            "oldTask": old_line,
            "newTask": new_line,
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:remove_task")
def remove_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Delete the addressed line from its document."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, ADDRESS_FIELDS)

    file_path, line_number = resolve_task_address(
        payload.get("taskId"), payload.get("filePath"), payload.get("lineNumber")
    )

    vault = get_request_vault(request)
    repo = _prepare_repo(request, vault)
    removed_line, change = vault.remove_line(file_path, line_number)
    commit_sha = _record_change(
        repo, vault, change, "remove_task", "remove task", line_number=line_number
    )

    return success_response(
        {
            "success": True,
            "filePath": change.path,
            "lineNumber": line_number,
            "removedTask": removed_line,
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:toggle_task")
def toggle_task(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Toggle a task between done and not done."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, ADDRESS_FIELDS)

    file_path, line_number = resolve_task_address(
        payload.get("taskId"), payload.get("filePath"), payload.get("lineNumber")
    )

    vault = get_request_vault(request)
    current_line = vault.line_at(file_path, line_number)
    new_line = toggle_with_capability(
        get_recurrence_toggler(request), current_line, file_path
    )
    if new_line is None:
        task = _load_task(vault, file_path, line_number)
        new_line = toggle_task_line(current_line, task)

    repo = _prepare_repo(request, vault)
    old_line, change = vault.replace_line(file_path, line_number, new_line)
    commit_sha = _record_change(
        repo, vault, change, "toggle_task", "toggle task", line_number=line_number
    )

    return success_response(
        {
            "success": True,
            "filePath": change.path,
            "lineNumber": line_number,
            "oldTask": old_line,
            "newTask": new_line,
            "commitSha": commit_sha,
        }
    )


@mcp_router.post("/tool:list_tasks")
def list_tasks(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """List tasks from one document or the whole vault."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"filePath"})

    vault = get_request_vault(request)
    tasks = vault.scan_tasks(_optional_string(payload, "filePath"))
    return success_response({"tasks": _serialize_tasks(tasks)})


@mcp_router.post("/tool:query_tasks")
def query_tasks(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Filter tasks with the line-per-predicate query language."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"query", "filePath"})

    query = _optional_string(payload, "query")
    if query is None:
        raise McpError(
            "MISSING_QUERY",
            "query is required.",
            {"fields": ["query"]},
        )

    vault = get_request_vault(request)
    tasks = vault.scan_tasks(_optional_string(payload, "filePath"))
    matched = filter_tasks(tasks, query, today=_today())
    return success_response({"tasks": _serialize_tasks(matched)})


@mcp_router.post("/tool:get_tasks_by_date")
def get_tasks_by_date(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Find tasks due on a date, optionally with open overdue tasks."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"date", "includeOverdue"})

    if payload.get("date") is None:
        raise McpError(
            "MISSING_DATE",
            "date is required.",
            {"fields": ["date"]},
        )
    due = _optional_date(payload, "date")

    include_overdue = payload.get("includeOverdue", False)
    if not isinstance(include_overdue, bool):
        raise McpError(
            "INVALID_TYPE",
            "includeOverdue must be a boolean.",
            {"includeOverdue": str(include_overdue)},
        )

    if include_overdue:
        query = f"has due date\ndue before {due} or due {due}\nnot done"
    else:
        query = f"due {due}"

    vault = get_request_vault(request)
    matched = filter_tasks(vault.scan_tasks(), query, today=_today())
    return success_response({"tasks": _serialize_tasks(matched)})


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _local_today() -> date:
    # Daily notes are named by the local calendar day.
    return date.today()


def _serialize_tasks(tasks: list[Task]) -> list[dict[str, Any]]:
    return [task.to_dict() for task in tasks]


def _load_task(vault: Vault, file_path: str, line_number: int) -> Task:
    line = vault.line_at(file_path, line_number)
    task = parse_task_line(line, file_path, line_number)
    if task is None:
        raise McpError(
            "TASK_NOT_FOUND",
            f"No task found at {file_path}:{line_number}",
            {"filePath": file_path, "lineNumber": line_number},
        )
    return task


def _provided(payload: dict[str, Any], key: str) -> bool:
    return payload.get(key) is not None


def _build_task_update(payload: dict[str, Any]) -> TaskUpdate:
    description = UNSET
    if _provided(payload, "description"):
        description = _optional_string(payload, "description", single_line=True)

    tags = UNSET
    if _provided(payload, "tags"):
        tags = _optional_string_list(payload, "tags", single_line=True)

    def _date_or_unset(key: str) -> Any:
        if not _provided(payload, key):
            return UNSET
        return _optional_date(payload, key, allow_empty=True)

    priority = UNSET
    if _provided(payload, "priority"):
        priority = _optional_choice(
            payload,
            "priority",
            TASK_PRIORITIES | {PRIORITY_NONE},
            "INVALID_PRIORITY",
        )

    status = UNSET
    if _provided(payload, "status"):
        status = _optional_choice(payload, "status", TASK_STATUSES, "INVALID_STATUS")

    recurrence = UNSET
    if _provided(payload, "recurrence"):
        recurrence = _optional_string(payload, "recurrence", single_line=True)

    return TaskUpdate(
        description=description,
        due_date=_date_or_unset("dueDate"),
        scheduled_date=_date_or_unset("scheduledDate"),
        start_date=_date_or_unset("startDate"),
        priority=priority,
        tags=tags,
        recurrence=recurrence,
        status=status,
    )


def _prepare_repo(request: Request, vault: Vault) -> Repo | None:
    if not git_commits_enabled(request):
        return None
    return _ensure_git_repo(vault.root)


def _record_change(
    repo: Repo | None,
    vault: Vault,
    change: DocumentChange,
    operation: str,
    summary: str,
    *,
    line_number: int,
) -> str | None:
    """Commit a completed write when versioning is on, then log it."""
    commit_sha = None
    if repo is not None:
        try:
            commit_sha = _commit_document_change(repo, change.path, operation)
        except Exception as exc:
            _rollback_document_change(repo, change)
            raise McpError(
                "GIT_ERROR",
                "Git commit failed; mutation rolled back.",
                {"path": change.path, "operation": operation},
            ) from exc

    _append_activity_log(
        vault.root,
        _build_activity_entry(
            operation, change.path, summary, commit_sha, line_number=line_number
        ),
    )
    logger.info(
        "%s %s:%d commit=%s", operation, change.path, line_number, commit_sha or "-"
    )
    return commit_sha


TASK_TOOLS: dict[str, Callable[[dict[str, Any], Request], dict[str, Any]]] = {
    "add_task": add_task,
    "update_task": update_task,
    "remove_task": remove_task,
    "toggle_task": toggle_task,
    "list_tasks": list_tasks,
    "query_tasks": query_tasks,
    "get_tasks_by_date": get_tasks_by_date,
}
