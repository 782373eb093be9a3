"""Payload validation helpers for MCP endpoints."""

from __future__ import annotations

import re
from typing import Any

from app.errors import McpError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LINE_BREAK = re.compile(r"[\r\n]")


def _ensure_payload_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise McpError(
            "INVALID_TYPE",
            "Payload must be an object.",
            {"type": type(payload).__name__},
        )
    return payload


def _reject_unknown_fields(payload: dict[str, Any], allowed_fields: set[str]) -> None:
    unknown_fields = sorted(set(payload) - allowed_fields)
    if unknown_fields:
        raise McpError(
            "UNKNOWN_FIELD",
            "Unknown fields are not allowed.",
            {"fields": unknown_fields},
        )


def _reject_line_breaks(key: str, value: str) -> None:
    if _LINE_BREAK.search(value):
        raise McpError(
            "MULTILINE_VALUE",
            f"{key} must not contain line breaks.",
            {key: value},
        )


def _optional_string(
    payload: dict[str, Any], key: str, *, single_line: bool = False
) -> str | None:
    """Read a string field; task line fields pass ``single_line``."""
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise McpError(
            "INVALID_TYPE",
            f"{key} must be a string.",
            {key: str(value), "type": type(value).__name__},
        )
    if single_line:
        _reject_line_breaks(key, value)
    return value


def _optional_string_list(
    payload: dict[str, Any], key: str, *, single_line: bool = False
) -> list[str] | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise McpError(
            "INVALID_TYPE",
            f"{key} must be an array of strings.",
            {key: str(value)},
        )
    if single_line:
        for item in value:
            _reject_line_breaks(key, item)
    return [item.strip() for item in value if item.strip()]


def _optional_date(
    payload: dict[str, Any], key: str, *, allow_empty: bool = False
) -> str | None:
    """Read a YYYY-MM-DD field; an empty string is only kept when allowed."""
    value = _optional_string(payload, key)
    if value is None:
        return None
    value = value.strip()
    if value == "" and allow_empty:
        return value
    if not _ISO_DATE.match(value):
        raise McpError(
            "INVALID_DATE",
            f"{key} must use YYYY-MM-DD format.",
            {key: value},
        )
    return value


def _optional_choice(
    payload: dict[str, Any], key: str, choices: set[str], code: str
) -> str | None:
    value = _optional_string(payload, key)
    if value is None:
        return None
    if value not in choices:
        raise McpError(
            code,
            f"{key} must be one of: {', '.join(sorted(choices))}.",
            {key: value},
        )
    return value
