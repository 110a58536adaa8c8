"""Branch, flag and sync formatting utilities."""

from typing import Optional

from worktree_manager.constants import SYMBOL_AHEAD, SYMBOL_BEHIND, SYMBOL_MAIN
from worktree_manager.models.worktree import WorktreeRecord, WorktreeStatus


def format_branch_name(record: WorktreeRecord) -> str:
    """
    Format the branch of a worktree with the main worktree indicator.

    Args:
        record: Worktree record

    Returns:
        Branch display text, suffixed with * for the main worktree
    """
    return record.branch_display + (SYMBOL_MAIN if record.is_main else "")


def format_flags(record: WorktreeRecord) -> str:
    """
    Format the administrative flags of a worktree.

    Example:
        "main", "locked: on usb drive, prunable", ""
    """
    return ", ".join(record.flags)


def format_sync(ahead: int, behind: int) -> str:
    """
    Format commits ahead of and behind the upstream.

    Args:
        ahead: Commits not yet pushed
        behind: Commits not yet pulled

    Returns:
        "↑2 ↓1", "↑2", "↓1", or "" when in sync
    """
    parts = []
    if ahead:
        parts.append(f"{SYMBOL_AHEAD}{ahead}")
    if behind:
        parts.append(f"{SYMBOL_BEHIND}{behind}")
    return " ".join(parts)


def format_changes(status: Optional[WorktreeStatus]) -> str:
    """
    Format the working tree state.

    Returns:
        "clean", "3 modified, 1 untracked", or "" when the status was never read
    """
    if status is None:
        return ""
    if not status.dirty:
        return "clean"
    parts = []
    if status.modified_count:
        parts.append(f"{status.modified_count} modified")
    if status.untracked_count:
        parts.append(f"{status.untracked_count} untracked")
    return ", ".join(parts)


def format_candidate_label(record: WorktreeRecord) -> str:
    """Short ``branch (path)`` label used by the removal picker and prompts."""
    return f"{record.branch_display} ({record.path})"
