"""Request-scoped access to the configured vault."""

from __future__ import annotations

from pathlib import Path

from fastapi import Request

from app.mcp_constants import DEFAULT_DAILY_NOTE_FORMAT, DEFAULT_DAILY_NOTES_FOLDER
from app.vault import Vault

SERVICE_TOKEN_HEADER = "X-Tasks-Service-Token"
AUTH_EXEMPT_PATHS = {"/health"}


def _request_config(request: Request) -> object | None:
    return getattr(request.app.state, "config", None)


def get_request_vault_root(request: Request) -> Path:
    """Resolve and create the vault root for a request."""
    config = _request_config(request)
    if config is not None and hasattr(config, "vault_path"):
        vault_root = Path(config.vault_path)
    else:
        vault_root = Path(request.app.state.vault_path)
    vault_root.mkdir(parents=True, exist_ok=True)
    return vault_root


def get_request_vault(request: Request) -> Vault:
    config = _request_config(request)
    return Vault(
        get_request_vault_root(request),
        daily_notes_folder=getattr(
            config, "daily_notes_folder", DEFAULT_DAILY_NOTES_FOLDER
        ),
        daily_note_format=getattr(
            config, "daily_note_format", DEFAULT_DAILY_NOTE_FORMAT
        ),
    )


def git_commits_enabled(request: Request) -> bool:
    config = _request_config(request)
    if config is not None:
        return bool(getattr(config, "git_commits", False))
    return bool(getattr(request.app.state, "git_commits", False))
