"""Preview generation for the interactive picker."""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from worktree_manager.config import PreviewConfig
from worktree_manager.constants import DETACHED_DISPLAY, GIT_MARKER, UNKNOWN_DISPLAY
from worktree_manager.exceptions import WorktreeManagerError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.worktree import ChangedFile, StatusSummary, WorktreeRecord
from worktree_manager.services.git.status import read_log, read_status
from worktree_manager.services.process import CommandRunner

logger = get_logger(__name__)


def repository_name_for(path: str) -> Optional[str]:
    """Derive the repository name of a worktree from its ``.git`` entry.

    The main worktree holds a ``.git`` directory; a linked worktree holds
    a ``.git`` file pointing at ``<repo>/.git/worktrees/<name>``.
    """
    marker = os.path.join(path, GIT_MARKER)
    if os.path.isdir(marker):
        return os.path.basename(os.path.normpath(path))
    if not os.path.isfile(marker):
        return None

    try:
        with open(marker, encoding="utf-8") as f:
            content = f.read().strip()
    except OSError:
        return None
    if not content.startswith("gitdir:"):
        return None

    gitdir = content[len("gitdir:"):].strip()
    if not os.path.isabs(gitdir):
        gitdir = os.path.join(path, gitdir)
    common_dir = os.path.dirname(os.path.dirname(os.path.normpath(gitdir)))
    if os.path.basename(common_dir) == GIT_MARKER:
        return os.path.basename(os.path.dirname(common_dir))
    # Bare repository such as project.git
    name = os.path.basename(common_dir)
    return name[:-4] if name.endswith(".git") else name


@dataclass
class Preview:
    """Everything shown for one highlighted candidate.

    ``status`` and ``commits`` are None when the corresponding git call
    failed; the section is then rendered as unavailable.
    """

    repository: str
    branch: str
    path: str
    status: Optional[StatusSummary] = None
    commits: Optional[List[str]] = None
    max_files: int = 10
    errors: List[str] = field(default_factory=list)

    @property
    def shown_files(self) -> List[ChangedFile]:
        return self.status.files[:self.max_files] if self.status else []

    @property
    def hidden_file_count(self) -> int:
        return max(len(self.status.files) - self.max_files, 0) if self.status else 0

    def to_dict(self) -> dict:
        """JSON representation used by ``wt preview --json``."""
        status = None
        if self.status is not None:
            status = {
                "dirty": self.status.dirty,
                "ahead": self.status.ahead,
                "behind": self.status.behind,
                "upstream": self.status.upstream,
                "modified_count": self.status.modified_count,
                "untracked_count": self.status.untracked_count,
                "files": [{"status": f.code, "path": f.path} for f in self.shown_files],
                "more_files": self.hidden_file_count,
            }
        return {
            "repository": self.repository,
            "branch": self.branch,
            "path": self.path,
            "status": status,
            "commits": self.commits,
        }


class PreviewGenerator:
    """Builds the status block shown next to the picker.

    Exactly two git calls are made per preview (status and log). A failing
    call degrades its own section and never aborts the preview, since the
    picker invokes this repeatedly while the cursor moves.
    """

    def __init__(self, runner: CommandRunner, config: Optional[PreviewConfig] = None, timeout: Optional[float] = None):
        """Initialize the generator.

        Args:
            runner: Command runner for the status and log queries
            config: Commit and file limits
            timeout: Per-call timeout in seconds (the runner default otherwise)
        """
        self.runner = runner
        self.config = config or PreviewConfig()
        self.timeout = timeout

    def generate(self, path: str, record: Optional[WorktreeRecord] = None) -> Preview:
        """Collect the preview of the worktree at ``path``.

        Args:
            path: Worktree directory
            record: Listing record of the worktree, used for the branch when status is unavailable
        """
        abs_path = os.path.abspath(os.path.expanduser(path))
        preview = Preview(
            repository=repository_name_for(abs_path) or UNKNOWN_DISPLAY,
            branch=record.branch_display if record else UNKNOWN_DISPLAY,
            path=abs_path,
            max_files=self.config.max_files,
        )

        try:
            preview.status = read_status(self.runner, abs_path, timeout=self.timeout)
            preview.branch = preview.status.branch or DETACHED_DISPLAY
        except WorktreeManagerError as e:
            logger.debug(f"Status unavailable for {abs_path}: {e}")
            preview.errors.append(str(e))

        try:
            preview.commits = read_log(self.runner, abs_path, self.config.commit_count, timeout=self.timeout)
        except WorktreeManagerError as e:
            logger.debug(f"History unavailable for {abs_path}: {e}")
            preview.errors.append(str(e))

        return preview

    def populate_status(self, record: WorktreeRecord) -> WorktreeRecord:
        """Fill ``record.status`` from a fresh status query."""
        record.status = read_status(self.runner, record.path, timeout=self.timeout).to_status()
        return record
