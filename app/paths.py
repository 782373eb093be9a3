"""Path validation utilities for enforcing the vault boundary."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from app.errors import McpError
from app.mcp_constants import ALLOWED_MARKDOWN_EXTENSIONS


def validate_path(vault_root: Path, raw_path: str) -> Path:
    """Validate a vault-relative path and return the absolute path it names."""
    if not isinstance(raw_path, str):
        raise McpError(
            "INVALID_TYPE",
            "Path must be a string.",
            {"path": str(raw_path), "type": type(raw_path).__name__},
        )

    candidate = PurePosixPath(raw_path.replace("\\", "/"))

    if candidate.is_absolute():
        raise McpError(
            "ABSOLUTE_PATH",
            "Absolute paths are not allowed.",
            {"path": raw_path},
        )

    if ".." in candidate.parts:
        raise McpError(
            "PATH_TRAVERSAL",
            "Path traversal is not allowed.",
            {"path": raw_path},
        )

    if _contains_symlink(vault_root, candidate):
        raise McpError(
            "PATH_SYMLINK",
            "Symlinked paths are not allowed.",
            {"path": raw_path},
        )

    return vault_root.joinpath(*candidate.parts)


def validate_markdown_path(vault_root: Path, raw_path: str) -> Path:
    resolved = validate_path(vault_root, raw_path)
    if resolved.suffix.lower() not in ALLOWED_MARKDOWN_EXTENSIONS:
        raise McpError(
            "NOT_MARKDOWN",
            "Only markdown files are allowed.",
            {"path": raw_path},
        )
    return resolved


def _contains_symlink(vault_root: Path, relative_path: PurePosixPath) -> bool:
    current = vault_root
    for segment in relative_path.parts:
        current = current / segment
        if current.is_symlink():
            return True
    return False
