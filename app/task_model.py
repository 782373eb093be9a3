"""Task record and the marker vocabularies shared by the parser and builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class TaskStatus(str, Enum):
    """Lifecycle state derived from the bracketed status character."""

    INCOMPLETE = "incomplete"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    IN_PROGRESS = "in_progress"


class TaskPriority(str, Enum):
    HIGHEST = "highest"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    LOWEST = "lowest"


# Unrecognized custom markers fall back to incomplete.
STATUS_BY_MARKER: dict[str, TaskStatus] = {
    " ": TaskStatus.INCOMPLETE,
    "x": TaskStatus.COMPLETE,
    "X": TaskStatus.COMPLETE,
    "-": TaskStatus.CANCELLED,
    "/": TaskStatus.IN_PROGRESS,
}

MARKER_BY_STATUS: dict[TaskStatus, str] = {
    TaskStatus.INCOMPLETE: " ",
    TaskStatus.COMPLETE: "x",
    TaskStatus.CANCELLED: "-",
    TaskStatus.IN_PROGRESS: "/",
}

DUE_GLYPH = "\U0001F4C5"  # calendar
DUE_ALT_GLYPH = "\U0001F5D3"  # spiral calendar, optionally followed by VS16
SCHEDULED_GLYPH = "⏳"  # hourglass
START_GLYPH = "\U0001F6EB"  # departure
CREATED_GLYPH = "➕"  # heavy plus
RECURRENCE_GLYPH = "\U0001F501"  # repeat

# Ordered so the doubled glyph is tried before its single-glyph prefix.
PRIORITY_GLYPHS: dict[TaskPriority, str] = {
    TaskPriority.HIGHEST: "⏫⏫",
    TaskPriority.HIGH: "⏫",
    TaskPriority.MEDIUM: "\U0001F53C",
    TaskPriority.LOW: "\U0001F53D",
    TaskPriority.LOWEST: "⏬",
}

PRIORITY_NONE = "none"


def status_for_marker(marker: str) -> TaskStatus:
    return STATUS_BY_MARKER.get(marker, TaskStatus.INCOMPLETE)


@dataclass(frozen=True)
class Task:
    """A task line resolved into structured fields.

    Tasks are rebuilt from document text on every scan and never stored;
    edits produce a new line rather than mutating an instance.
    """

    identifier: str
    description: str
    status: TaskStatus
    status_marker: str
    document_path: str
    line_number: int
    original_text: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    due_date: str | None = None
    scheduled_date: str | None = None
    start_date: str | None = None
    created_date: str | None = None
    priority: TaskPriority | None = None
    recurrence: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.identifier,
            "description": self.description,
            "status": self.status.value,
            "statusSymbol": self.status_marker,
            "filePath": self.document_path,
            "lineNumber": self.line_number,
            "tags": list(self.tags),
            "dueDate": self.due_date,
            "scheduledDate": self.scheduled_date,
            "startDate": self.start_date,
            "createdDate": self.created_date,
            "priority": self.priority.value if self.priority else None,
            "recurrence": self.recurrence,
            "originalMarkdown": self.original_text,
        }
