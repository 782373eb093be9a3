"""Filesystem document store over the vault root.

Documents are addressed by vault-relative POSIX paths and lines by 1-based
numbers. Content is split and rejoined on ``\\n`` only, so a trailing newline
shows up as a final empty line and survives a rewrite unchanged.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from app.errors import InvalidLineNumberError, McpError
from app.mcp_constants import (
    ALLOWED_MARKDOWN_EXTENSIONS,
    DEFAULT_DAILY_NOTE_FORMAT,
    DEFAULT_DAILY_NOTES_FOLDER,
)
from app.mcp_utils import _atomic_write, _join_with_newline
from app.paths import validate_markdown_path
from app.task_model import Task
from app.task_parser import parse_document

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentChange:
    """A completed write, with enough state to undo it."""

    path: str
    target: Path
    original: str | None
    updated: str

    @property
    def created(self) -> bool:
        return self.original is None


class Vault:
    def __init__(
        self,
        root: Path,
        *,
        daily_notes_folder: str = DEFAULT_DAILY_NOTES_FOLDER,
        daily_note_format: str = DEFAULT_DAILY_NOTE_FORMAT,
    ) -> None:
        self.root = Path(root)
        self.daily_notes_folder = daily_notes_folder
        self.daily_note_format = daily_note_format

    def resolve(self, path: str) -> Path:
        return validate_markdown_path(self.root, path)

    def relative(self, target: Path) -> str:
        return target.relative_to(self.root).as_posix()

    def list_documents(self) -> list[str]:
        """List markdown documents, skipping symlinks and dot-directories."""
        documents: list[str] = []
        if not self.root.is_dir():
            return documents
        for current, dirnames, filenames in os.walk(self.root, followlinks=False):
            dir_path = Path(current)
            dirnames[:] = sorted(
                name
                for name in dirnames
                if not name.startswith(".") and not (dir_path / name).is_symlink()
            )
            for filename in filenames:
                file_path = dir_path / filename
                if file_path.is_symlink():
                    continue
                if file_path.suffix.lower() not in ALLOWED_MARKDOWN_EXTENSIONS:
                    continue
                documents.append(self.relative(file_path))
        return sorted(documents)

    def documents_for(self, file_path: str | None) -> list[str]:
        """Documents to scan: the named file if it exists, otherwise the vault."""
        if file_path is None:
            return self.list_documents()
        target = self.resolve(file_path)
        if not target.is_file():
            return []
        return [self.relative(target)]

    def read(self, path: str) -> str:
        target = self.resolve(path)
        if not target.exists():
            raise McpError(
                "FILE_NOT_FOUND",
                f"File not found: {path}",
                {"path": path},
            )
        if not target.is_file():
            raise McpError(
                "INVALID_PATH",
                "Path must reference a file.",
                {"path": path},
            )
        try:
            return target.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise McpError(
                "INVALID_ENCODING",
                "Markdown file must be UTF-8 encoded.",
                {"path": path},
            ) from exc

    def read_lines(self, path: str) -> list[str]:
        return self.read(path).split("\n")

    def line_at(self, path: str, line_number: int) -> str:
        lines = self.read_lines(path)
        _check_line_number(path, line_number, len(lines))
        return lines[line_number - 1]

    def write(self, path: str, content: str) -> DocumentChange:
        target = self.resolve(path)
        original = target.read_text(encoding="utf-8") if target.exists() else None
        target.parent.mkdir(parents=True, exist_ok=True)
        _atomic_write(target, content)
        return DocumentChange(
            path=self.relative(target),
            target=target,
            original=original,
            updated=content,
        )

    def replace_line(
        self, path: str, line_number: int, text: str
    ) -> tuple[str, DocumentChange]:
        """Replace one line and return the previous line with the change."""
        lines = self.read_lines(path)
        _check_line_number(path, line_number, len(lines))
        previous = lines[line_number - 1]
        lines[line_number - 1] = text
        return previous, self.write(path, "\n".join(lines))

    def remove_line(self, path: str, line_number: int) -> tuple[str, DocumentChange]:
        lines = self.read_lines(path)
        _check_line_number(path, line_number, len(lines))
        removed = lines.pop(line_number - 1)
        return removed, self.write(path, "\n".join(lines))

    def append_line(self, path: str, text: str) -> DocumentChange:
        """Append a line, creating the document and its folders if needed."""
        target = self.resolve(path)
        if target.exists() and not target.is_file():
            raise McpError(
                "INVALID_PATH",
                f"{path} is not a file",
                {"path": path},
            )
        existing = self.read(path) if target.exists() else ""
        return self.write(path, _join_with_newline(existing, text) + "\n")

    def scan_tasks(self, file_path: str | None = None) -> list[Task]:
        """Parse every task in scope, in document then line order."""
        tasks: list[Task] = []
        for document in self.documents_for(file_path):
            try:
                content = self.read(document)
            except McpError as exc:
                if exc.error.code != "INVALID_ENCODING" or file_path is not None:
                    raise
                logger.warning("Skipping non UTF-8 document %s", document)
                continue
            tasks.extend(parse_document(document, content))
        return tasks

    def daily_note_path(self, today: date) -> str:
        filename = (
            self.daily_note_format.replace("YYYY", f"{today.year:04d}")
            .replace("MM", f"{today.month:02d}")
            .replace("DD", f"{today.day:02d}")
        )
        if not filename.endswith(".md"):
            filename += ".md"
        folder = self.daily_notes_folder.strip("/")
        return f"{folder}/{filename}" if folder else filename


def _check_line_number(path: str, line_number: int, line_count: int) -> None:
    if line_number < 1 or line_number > line_count:
        raise InvalidLineNumberError(path, line_number, line_count)
