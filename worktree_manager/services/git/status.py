"""Read-only per-worktree queries (status and history)."""

from typing import List, Optional

from worktree_manager.models.worktree import StatusSummary
from worktree_manager.services.git.parser import parse_status
from worktree_manager.services.process import CommandRunner


def read_status(runner: CommandRunner, path: str, timeout: Optional[float] = None) -> StatusSummary:
    """Run ``git status --porcelain=v1 --branch`` in ``path`` and parse it.

    Raises:
        ToolInvocationError, TimedOutError: git failed or hung
        ParseError: The output was not in the expected format
    """
    output = runner.check(
        ["git", "-C", path, "status", "--porcelain=v1", "--branch"],
        timeout=timeout,
        idempotent=True,
    )
    return parse_status(output)


def read_log(runner: CommandRunner, path: str, count: int, timeout: Optional[float] = None) -> List[str]:
    """Return the ``count`` most recent commits of ``path`` as one-line summaries, newest first."""
    output = runner.check(
        ["git", "-C", path, "log", "-n", str(count), "--oneline", "--decorate"],
        timeout=timeout,
        idempotent=True,
    )
    return [line for line in output.splitlines() if line.strip()]
