"""Structured error types for MCP responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class ErrorResponse:
    """Serializable error payload returned by MCP handlers."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class McpError(RuntimeError):
    """Exception carrying a structured error response."""

    def __init__(
        self, code: str, message: str, details: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message)
        self.error = ErrorResponse(
            code=code, message=message, details=dict(details or {})
        )


class MalformedIdentifierError(McpError):
    """Raised when a task id lacks the separator or a numeric line segment."""

    def __init__(self, identifier: str, message: str) -> None:
        super().__init__("MALFORMED_IDENTIFIER", message, {"taskId": identifier})


class InvalidLineNumberError(McpError):
    """Raised when a line number falls outside the addressed document."""

    def __init__(self, path: str, line_number: int, line_count: int) -> None:
        super().__init__(
            "INVALID_LINE_NUMBER",
            f"Invalid line number: {line_number}. File has {line_count} lines.",
            {"path": path, "lineNumber": line_number, "lineCount": line_count},
        )


class AmbiguousAddressError(McpError):
    def __init__(self) -> None:
        super().__init__(
            "AMBIGUOUS_ADDRESS",
            "Either taskId or both filePath and lineNumber are required.",
            {"fields": ["taskId", "filePath", "lineNumber"]},
        )


def success_response(payload: dict[str, Any]) -> dict[str, Any]:
    """Wrap a successful MCP response in the standard envelope."""
    return {"ok": True, "data": payload}


def error_response(error: ErrorResponse) -> dict[str, Any]:
    """Wrap an error response in the standard envelope."""
    return {"ok": False, "error": error.to_dict()}
