"""JSON payloads and error lines printed by the CLI."""

import json
from typing import Iterable, List, Optional

from worktree_manager.models.repository import RepositoryRecord
from worktree_manager.models.worktree import WorktreeRecord


def format_error_line(kind: str, message: str) -> str:
    """
    Format the single human-readable error line.

    Example:
        "error[branch_in_use]: branch 'x' is already checked out at /repo-x"
    """
    lines = [line.strip() for line in str(message).splitlines() if line.strip()]
    return f"error[{kind}]: {'; '.join(lines)}"


def error_payload(kind: str, message: str) -> dict:
    return {"success": False, "error": f"{kind}: {message}"}


def list_payload(repositories: Iterable[RepositoryRecord], with_repository: bool = False) -> List[dict]:
    """
    Build the ``wt list --json`` array.

    Args:
        repositories: Repositories in discovery order
        with_repository: Add a "repository" key to every entry (``--all``)

    Records whose status was read (``--status``) also carry a "status" object.
    """
    entries = []
    for repository in repositories:
        for record in repository.worktrees:
            entry = record.to_dict()
            if record.status is not None:
                entry["status"] = {
                    "dirty": record.status.dirty,
                    "ahead": record.status.ahead,
                    "behind": record.status.behind,
                    "modified_count": record.status.modified_count,
                    "untracked_count": record.status.untracked_count,
                }
            if with_repository:
                entry["repository"] = repository.name
            entries.append(entry)
    return entries


def add_payload(record: WorktreeRecord) -> dict:
    return {
        "success": True,
        "worktree": {"path": record.path, "branch": record.branch_display},
    }


def remove_payload(record: WorktreeRecord) -> dict:
    return {
        "success": True,
        "removed": True,
        "branch": record.branch_display,
        "path": record.path,
    }


def prune_payload(pruned: List[str]) -> dict:
    return {"pruned": list(pruned), "count": len(pruned)}


def to_json(payload, indent: Optional[int] = 2) -> str:
    return json.dumps(payload, indent=indent, ensure_ascii=False)
