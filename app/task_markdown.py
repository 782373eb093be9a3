"""Serialization of task fields back into markdown task lines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Sequence

from app.task_model import (
    DUE_GLYPH,
    MARKER_BY_STATUS,
    PRIORITY_GLYPHS,
    PRIORITY_NONE,
    RECURRENCE_GLYPH,
    SCHEDULED_GLYPH,
    START_GLYPH,
    Task,
    TaskPriority,
    TaskStatus,
)
from app.task_parser import LIST_PREFIX_PATTERN, strip_metadata

_STATUS_BRACKET_PATTERN = re.compile(r"\[.\]")


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskFields:
    """Field set accepted when creating a task line."""

    description: str
    due_date: str | None = None
    scheduled_date: str | None = None
    start_date: str | None = None
    priority: str | None = None
    tags: Sequence[str] = ()
    recurrence: str | None = None


@dataclass(frozen=True)
class TaskUpdate:
    """Partial overrides for an existing task.

    UNSET keeps the previous value. An empty string removes a date or the
    recurrence, ``"none"`` removes the priority, and a tag list replaces the
    previous tags entirely.
    """

    description: Any = UNSET
    due_date: Any = UNSET
    scheduled_date: Any = UNSET
    start_date: Any = UNSET
    priority: Any = UNSET
    tags: Any = UNSET
    recurrence: Any = UNSET
    status: Any = UNSET


def normalize_tag(tag: str) -> str:
    return tag if tag.startswith("#") else f"#{tag}"


def _priority_glyph(priority: str | None) -> str | None:
    if not priority:
        return None
    try:
        return PRIORITY_GLYPHS[TaskPriority(priority)]
    except ValueError:
        return None


def build_task_markdown(
    fields: TaskFields,
    *,
    indent: str = "",
    marker: str = "-",
    status_marker: str = " ",
) -> str:
    """Render a task line in the canonical field order.

    Order: description, priority, recurrence, start, scheduled, due, tags.
    Tools that read these lines rely on this order, so it must not change.
    """
    parts = [f"{indent}{marker} [{status_marker}] {fields.description}"]

    glyph = _priority_glyph(fields.priority)
    if glyph:
        parts.append(glyph)
    if fields.recurrence:
        parts.append(f"{RECURRENCE_GLYPH} {fields.recurrence}")
    if fields.start_date:
        parts.append(f"{START_GLYPH} {fields.start_date}")
    if fields.scheduled_date:
        parts.append(f"{SCHEDULED_GLYPH} {fields.scheduled_date}")
    if fields.due_date:
        parts.append(f"{DUE_GLYPH} {fields.due_date}")
    if fields.tags:
        parts.append(" ".join(normalize_tag(tag) for tag in fields.tags))

    return " ".join(parts)


def _override(current: Any, value: Any, *, removal: str = "") -> Any:
    if value is UNSET:
        return current
    if value == removal:
        return None
    return value


def rebuild_task_line(task: Task, update: TaskUpdate | None = None) -> str:
    """Re-serialize an existing task with the given overrides applied."""
    update = update or TaskUpdate()

    if update.description is UNSET:
        description = strip_metadata(task.description)
    else:
        description = update.description

    status_marker = task.status_marker
    if update.status is not UNSET:
        try:
            status_marker = MARKER_BY_STATUS[TaskStatus(update.status)]
        except ValueError:
            pass

    current_priority = task.priority.value if task.priority else None
    tags = task.tags if update.tags is UNSET else tuple(update.tags)

    prefix = LIST_PREFIX_PATTERN.match(task.original_text)
    indent = prefix.group("indent") if prefix else ""
    marker = prefix.group("marker") if prefix else "-"

    fields = TaskFields(
        description=description,
        due_date=_override(task.due_date, update.due_date),
        scheduled_date=_override(task.scheduled_date, update.scheduled_date),
        start_date=_override(task.start_date, update.start_date),
        priority=_override(current_priority, update.priority, removal=PRIORITY_NONE),
        tags=tags,
        recurrence=_override(task.recurrence, update.recurrence),
    )
    return build_task_markdown(
        fields, indent=indent, marker=marker, status_marker=status_marker
    )


def toggle_task_line(line: str, task: Task) -> str:
    """Flip a task between done and not done by swapping its status marker.

    Completed tasks reopen; every other status becomes complete. Dates and
    recurrence are left untouched.
    """
    new_marker = " " if task.status is TaskStatus.COMPLETE else "x"
    return _STATUS_BRACKET_PATTERN.sub(f"[{new_marker}]", line, count=1)
