"""Configuration loading for the tasks MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from app.mcp_constants import (
    DEFAULT_DAILY_NOTE_FORMAT,
    DEFAULT_DAILY_NOTES_FOLDER,
    DEFAULT_SSE_KEEPALIVE_SECONDS,
)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3789
DEFAULT_LOG_LEVEL = "INFO"
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class AppConfig:
    vault_path: Path
    service_token: str | None
    git_commits: bool = False
    daily_notes_folder: str = DEFAULT_DAILY_NOTES_FOLDER
    daily_note_format: str = DEFAULT_DAILY_NOTE_FORMAT
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    sse_keepalive_seconds: float = DEFAULT_SSE_KEEPALIVE_SECONDS


def _read_dotenv_value(dotenv_path: Path, key: str) -> str | None:
    """Read a single key from a .env file without mutating the environment."""
    if not dotenv_path.is_file():
        return None
    try:
        content = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].strip()
        if "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        if name.strip() != key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return value or None
    return None


def _read_setting(dotenv_path: Path, key: str) -> str | None:
    value = os.environ.get(key)
    if value is None:
        value = _read_dotenv_value(dotenv_path, key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _read_bool(raw_value: str | None, *, default: bool, key: str) -> bool:
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if not normalized:
        return default
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{key} must be a boolean value.")


def _read_port(raw_value: str | None, *, key: str) -> int:
    if raw_value is None:
        return DEFAULT_PORT
    try:
        port = int(raw_value)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer.") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"{key} must be between 1 and 65535.")
    return port


def _read_seconds(raw_value: str | None, *, key: str) -> float:
    if raw_value is None:
        return DEFAULT_SSE_KEEPALIVE_SECONDS
    try:
        seconds = float(raw_value)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number of seconds.") from exc
    if seconds <= 0:
        raise ConfigError(f"{key} must be positive.")
    return seconds


def load_config() -> AppConfig:
    """Load configuration from the environment, falling back to ./.env."""
    dotenv_path = Path.cwd() / ".env"

    vault_key = "TASKS_MCP_VAULT_PATH"
    raw_path = _read_setting(dotenv_path, vault_key)
    if not raw_path:
        raise ConfigError(
            "TASKS_MCP_VAULT_PATH is required; set it to the vault root path."
        )

    git_key = "TASKS_MCP_GIT_COMMITS"
    git_commits = _read_bool(
        _read_setting(dotenv_path, git_key), default=False, key=git_key
    )

    log_key = "TASKS_MCP_LOG_LEVEL"
    log_level = (_read_setting(dotenv_path, log_key) or DEFAULT_LOG_LEVEL).upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"{log_key} must be one of: {', '.join(sorted(LOG_LEVELS))}.")

    return AppConfig(
        vault_path=Path(raw_path).expanduser().resolve(),
        service_token=_read_setting(dotenv_path, "TASKS_MCP_SERVICE_TOKEN"),
        git_commits=git_commits,
        daily_notes_folder=_read_setting(dotenv_path, "TASKS_MCP_DAILY_NOTES_FOLDER")
        or DEFAULT_DAILY_NOTES_FOLDER,
        daily_note_format=_read_setting(dotenv_path, "TASKS_MCP_DAILY_NOTE_FORMAT")
        or DEFAULT_DAILY_NOTE_FORMAT,
        host=_read_setting(dotenv_path, "TASKS_MCP_HOST") or DEFAULT_HOST,
        port=_read_port(
            _read_setting(dotenv_path, "TASKS_MCP_PORT"), key="TASKS_MCP_PORT"
        ),
        log_level=log_level,
        sse_keepalive_seconds=_read_seconds(
            _read_setting(dotenv_path, "TASKS_MCP_SSE_KEEPALIVE_SECONDS"),
            key="TASKS_MCP_SSE_KEEPALIVE_SECONDS",
        ),
    )
