"""Git helpers for versioning vault mutations."""

from __future__ import annotations

import logging
from pathlib import Path

from dulwich import porcelain
from dulwich.repo import Repo

from app.errors import McpError
from app.mcp_utils import _atomic_write
from app.vault import DocumentChange

logger = logging.getLogger(__name__)


def _ensure_git_repo(vault_root: Path) -> Repo:
    git_dir = vault_root / ".git"
    try:
        if git_dir.exists():
            return Repo(str(vault_root))
        return porcelain.init(str(vault_root))
    except Exception as exc:
        raise McpError(
            "GIT_ERROR",
            "Git repository could not be initialized.",
            {"path": str(vault_root)},
        ) from exc


def _commit_document_change(repo: Repo, relative_path: str, operation: str) -> str:
    repo.get_worktree().stage([relative_path])
    commit_sha = porcelain.commit(repo, message=f"{operation}: {relative_path}")
    if isinstance(commit_sha, bytes):
        return commit_sha.decode("ascii")
    return str(commit_sha)


def _rollback_document_change(repo: Repo | None, change: DocumentChange) -> None:
    """Restore the pre-write content, or remove a document the write created."""
    if change.original is None:
        try:
            if change.target.exists():
                change.target.unlink()
        except OSError:
            logger.warning("Could not remove %s during rollback", change.path)
    else:
        _atomic_write(change.target, change.original)

    if repo is None:
        return
    try:
        repo.get_worktree().stage([change.path])
    except Exception:
        logger.warning("Could not restage %s during rollback", change.path)
