"""Task line parsing.

A task line is a list item (``-``, ``*``, ``+`` or ``1.``/``1)``), optionally
indented or quoted, followed by a bracketed status character. Everything after
the bracket is the content, which is run through one extractor per metadata
category. Each extractor keeps the first value it finds (tags keep all of
them) and removes every occurrence of its token from the description, so the
returned description carries no metadata.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from app.task_ids import encode_task_id
from app.task_model import (
    CREATED_GLYPH,
    DUE_ALT_GLYPH,
    DUE_GLYPH,
    PRIORITY_GLYPHS,
    RECURRENCE_GLYPH,
    SCHEDULED_GLYPH,
    START_GLYPH,
    Task,
    TaskPriority,
    status_for_marker,
)

TASK_LINE_PATTERN = re.compile(
    r"^(?P<indent>[\s>]*)(?P<marker>[-*+]|[0-9]+[.)]) +\[(?P<status>.)\] *(?P<content>.*)"
)
LIST_PREFIX_PATTERN = re.compile(r"^(?P<indent>[\s>]*)(?P<marker>[-*+]|[0-9]+[.)])")

TAG_PATTERN = re.compile(r"(?:^|\s)(#[^\s!@#$%^&*(),.?\":{}|<>]+)")
# Only recognized tags are removed, together with any trailing punctuation.
TAG_STRIP_PATTERN = re.compile(r"(?:^|\s)#[^\s!@#$%^&*(),.?\":{}|<>]+\S*")

_DATE = r"(\d{4}-\d{2}-\d{2})"

_PRIORITY_BY_GLYPH = {glyph: priority for priority, glyph in PRIORITY_GLYPHS.items()}
PRIORITY_PATTERN = re.compile(
    "|".join(re.escape(glyph) for glyph in PRIORITY_GLYPHS.values())
)


@dataclass(frozen=True)
class _FieldExtractor:
    name: str
    pattern: re.Pattern[str]

    def first(self, content: str) -> str | None:
        match = self.pattern.search(content)
        return match.group(1) if match else None

    def strip(self, text: str) -> str:
        return self.pattern.sub(" ", text)


_FIELD_EXTRACTORS = (
    _FieldExtractor(
        "due_date",
        re.compile(
            f"(?:{re.escape(DUE_GLYPH)}|{re.escape(DUE_ALT_GLYPH)}\ufe0f?)\\s?{_DATE}"
        ),
    ),
    _FieldExtractor(
        "scheduled_date", re.compile(f"{re.escape(SCHEDULED_GLYPH)}\\s?{_DATE}")
    ),
    _FieldExtractor("start_date", re.compile(f"{re.escape(START_GLYPH)}\\s?{_DATE}")),
    _FieldExtractor(
        "created_date", re.compile(f"{re.escape(CREATED_GLYPH)}\\s?{_DATE}")
    ),
    # Only the first whitespace-delimited token is captured.
    _FieldExtractor("recurrence", re.compile(f"{re.escape(RECURRENCE_GLYPH)}\\s?(\\S*)")),
)


@dataclass(frozen=True)
class LineMetadata:
    """Metadata collected from one task line's content."""

    description: str
    tags: tuple[str, ...] = ()
    due_date: str | None = None
    scheduled_date: str | None = None
    start_date: str | None = None
    created_date: str | None = None
    priority: TaskPriority | None = None
    recurrence: str | None = None


def first_priority(content: str) -> TaskPriority | None:
    match = PRIORITY_PATTERN.search(content)
    if match is None:
        return None
    return _PRIORITY_BY_GLYPH[match.group(0)]


def strip_metadata(text: str) -> str:
    """Remove every recognized metadata token and collapse whitespace."""
    for extractor in _FIELD_EXTRACTORS:
        text = extractor.strip(text)
    text = PRIORITY_PATTERN.sub(" ", text)
    text = TAG_STRIP_PATTERN.sub(" ", text)
    return " ".join(text.split())


def extract_metadata(content: str) -> LineMetadata:
    fields = {extractor.name: extractor.first(content) for extractor in _FIELD_EXTRACTORS}
    return LineMetadata(
        description=strip_metadata(content),
        tags=tuple(TAG_PATTERN.findall(content)),
        priority=first_priority(content),
        **fields,
    )


def parse_task_line(line: str, document_path: str, line_number: int) -> Task | None:
    """Parse one line into a Task, or return None when it is not a task."""
    match = TASK_LINE_PATTERN.match(line)
    if match is None:
        return None

    status_marker = match.group("status")
    metadata = extract_metadata(match.group("content").strip())
    return Task(
        identifier=encode_task_id(document_path, line_number),
        description=metadata.description,
        status=status_for_marker(status_marker),
        status_marker=status_marker,
        document_path=document_path,
        line_number=line_number,
        original_text=line,
        tags=metadata.tags,
        due_date=metadata.due_date,
        scheduled_date=metadata.scheduled_date,
        start_date=metadata.start_date,
        created_date=metadata.created_date,
        priority=metadata.priority,
        recurrence=metadata.recurrence,
    )


def parse_document(document_path: str, content: str) -> list[Task]:
    tasks: list[Task] = []
    for line_number, line in enumerate(content.split("\n"), start=1):
        task = parse_task_line(line, document_path, line_number)
        if task is not None:
            tasks.append(task)
    return tasks
