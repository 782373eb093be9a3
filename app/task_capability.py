"""Optional recurrence-aware toggle capability."""

from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class RecurrenceToggler(Protocol):
    def try_toggle_with_recurrence(self, line: str, document_path: str) -> str | None:
        """Return the replacement text for a toggled line, or None to decline.

        The replacement may span several lines when a recurring task spawns
        its next occurrence.
        """


def get_recurrence_toggler(request: Any) -> RecurrenceToggler | None:
    return getattr(request.app.state, "recurrence_toggler", None)


def toggle_with_capability(
    toggler: RecurrenceToggler | None, line: str, document_path: str
) -> str | None:
    if toggler is None:
        return None
    result = toggler.try_toggle_with_recurrence(line, document_path)
    if result is None:
        logger.debug("Recurrence toggler declined %s", document_path)
    return result
