"""Data models for worktree-manager."""

from .worktree import ChangedFile, StatusSummary, WorktreeRecord, WorktreeStatus, shorten_ref
from .repository import RepositoryRecord
from .action import Action, ActionMessage, InteractionState

__all__ = [
    "ChangedFile",
    "StatusSummary",
    "WorktreeRecord",
    "WorktreeStatus",
    "shorten_ref",
    "RepositoryRecord",
    "Action",
    "ActionMessage",
    "InteractionState",
]
