"""Repository data model."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from worktree_manager.models.worktree import WorktreeRecord


@dataclass
class RepositoryRecord:
    """One repository and its worktrees (main worktree first)."""

    root: str
    worktrees: List[WorktreeRecord] = field(default_factory=list)
    common_dir: Optional[str] = None  # Shared .git directory identifying the repository

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.root)) or self.root
