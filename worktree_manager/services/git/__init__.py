"""Git-related services for worktree-manager."""

from .parser import parse_porcelain, parse_status
from .status import read_log, read_status
from .worktrees import WorktreeRegistry, default_worktree_path, resolve_repository, sanitize_branch

__all__ = [
    "parse_porcelain",
    "parse_status",
    "read_log",
    "read_status",
    "WorktreeRegistry",
    "default_worktree_path",
    "resolve_repository",
    "sanitize_branch",
]
