"""Command-line launcher for the tasks MCP server."""

from __future__ import annotations

import sys

import uvicorn

from app.config import ConfigError, load_config
from app.logging_setup import setup_logging


def main() -> int:
    try:
        config = load_config()
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2

    setup_logging(config.log_level)
    uvicorn.run(
        "app.main:app",
        host=config.host,
        port=config.port,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
