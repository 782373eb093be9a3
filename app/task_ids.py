"""Task identifier encoding and caller address resolution."""

from __future__ import annotations

from typing import Any

from app.errors import AmbiguousAddressError, MalformedIdentifierError, McpError

TASK_ID_SEPARATOR = ":"


def encode_task_id(document_path: str, line_number: int) -> str:
    return f"{document_path}{TASK_ID_SEPARATOR}{line_number}"


def decode_task_id(identifier: str) -> tuple[str, int]:
    """Split an identifier on its last separator into (path, line number).

    Paths may themselves contain the separator; only the trailing segment is
    read as the line number.
    """
    document_path, separator, raw_line = identifier.rpartition(TASK_ID_SEPARATOR)
    if not separator:
        raise MalformedIdentifierError(
            identifier,
            f"Invalid task ID format: {identifier}. "
            "Expected format: filePath:lineNumber",
        )
    if not raw_line.isascii() or not raw_line.isdigit():
        raise MalformedIdentifierError(
            identifier, f"Invalid line number in task ID: {identifier}"
        )
    return document_path, int(raw_line)


def resolve_task_address(
    task_id: Any, file_path: Any, line_number: Any
) -> tuple[str, int]:
    """Resolve a task address from either an identifier or a path/line pair."""
    if task_id:
        if not isinstance(task_id, str):
            raise McpError(
                "INVALID_TYPE",
                "taskId must be a string.",
                {"taskId": str(task_id), "type": type(task_id).__name__},
            )
        return decode_task_id(task_id)

    if not file_path or line_number is None:
        raise AmbiguousAddressError()
    if not isinstance(file_path, str):
        raise McpError(
            "INVALID_TYPE",
            "filePath must be a string.",
            {"filePath": str(file_path), "type": type(file_path).__name__},
        )
    if isinstance(line_number, bool) or not isinstance(line_number, int):
        raise McpError(
            "INVALID_TYPE",
            "lineNumber must be an integer.",
            {"lineNumber": str(line_number)},
        )
    return file_path, line_number
