"""Console logging for the service process."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class _ServiceNoiseFilter(logging.Filter):
    """Keep our own records; let third-party loggers through at WARNING+."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "app" or record.name.startswith("app."):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str | int = logging.INFO) -> None:
    """Install a single stderr handler on the root logger.

    Call once, before the server starts.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    root.setLevel(level)

    # Remove pre-existing handlers to avoid duplicates.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.addFilter(_ServiceNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
