"""Worktree data models."""

from dataclasses import dataclass, field
from typing import List, Optional

from worktree_manager.constants import (
    DETACHED_DISPLAY,
    LOCAL_BRANCH_PREFIX,
    REMOTE_BRANCH_PREFIX,
)


def shorten_ref(ref: str) -> str:
    """Strip ``refs/heads/`` or ``refs/remotes/`` from a fully qualified ref."""
    for prefix in (LOCAL_BRANCH_PREFIX, REMOTE_BRANCH_PREFIX):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return ref


@dataclass
class WorktreeStatus:
    """Working tree state of one worktree, computed on demand."""

    ahead: int = 0
    behind: int = 0
    modified_count: int = 0
    untracked_count: int = 0

    @property
    def dirty(self) -> bool:
        return self.modified_count + self.untracked_count > 0


@dataclass(frozen=True)
class ChangedFile:
    """One line of status output: single-character code and path."""

    code: str
    path: str


@dataclass
class StatusSummary:
    """Parsed output of ``git status --porcelain=v1 --branch``."""

    branch: Optional[str] = None  # None when HEAD is detached
    upstream: Optional[str] = None
    ahead: int = 0
    behind: int = 0
    upstream_gone: bool = False
    files: List[ChangedFile] = field(default_factory=list)

    @property
    def untracked_count(self) -> int:
        return sum(1 for f in self.files if f.code == "?")

    @property
    def modified_count(self) -> int:
        return len(self.files) - self.untracked_count

    @property
    def dirty(self) -> bool:
        return bool(self.files)

    def to_status(self) -> WorktreeStatus:
        """Reduce the summary to the counters stored on a WorktreeRecord."""
        return WorktreeStatus(
            ahead=self.ahead,
            behind=self.behind,
            modified_count=self.modified_count,
            untracked_count=self.untracked_count,
        )


@dataclass
class WorktreeRecord:
    """Information about a git worktree."""

    path: str
    head_commit: str = ""
    branch_ref: Optional[str] = None  # refs/heads/<name>, None when detached
    is_main: bool = False  # Is this the main working tree?
    is_bare: bool = False
    is_detached: bool = False
    is_locked: bool = False
    lock_reason: Optional[str] = None
    is_prunable: bool = False
    prunable_reason: Optional[str] = None
    status: Optional[WorktreeStatus] = field(default=None, compare=False)

    @property
    def branch_name(self) -> Optional[str]:
        """Branch without its ref prefix, or None for a detached checkout."""
        return shorten_ref(self.branch_ref) if self.branch_ref else None

    @property
    def branch_display(self) -> str:
        return self.branch_name or DETACHED_DISPLAY

    @property
    def flags(self) -> List[str]:
        """Administrative flags for display."""
        result = []
        if self.is_main:
            result.append("main")
        if self.is_bare:
            result.append("bare")
        if self.is_locked:
            result.append(f"locked: {self.lock_reason}" if self.lock_reason else "locked")
        if self.is_prunable:
            result.append(f"prunable: {self.prunable_reason}" if self.prunable_reason else "prunable")
        return result

    def to_dict(self) -> dict:
        """Stable JSON representation used by ``wt list --json``."""
        return {
            "path": self.path,
            "branch": self.branch_display,
            "head": self.head_commit,
            "is_main": self.is_main,
        }

    def __str__(self) -> str:
        """String representation of worktree."""
        main_marker = " (main)" if self.is_main else ""
        return f"{self.branch_display} @ {self.path}{main_marker}"
