"""Custom exceptions for worktree-manager"""

from typing import List, Optional, Sequence


class WorktreeManagerError(Exception):
    """Base exception for all worktree-manager errors.

    ``kind`` is the stable identifier used in ``--json`` error output and
    ``exit_code`` is the process status the CLI exits with.
    """

    kind = "error"
    exit_code = 1

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def describe(self) -> str:
        """Return ``<kind>: <message>`` for machine-readable output."""
        return f"{self.kind}: {self}"


class ParseError(WorktreeManagerError):
    """Exception raised when git output does not match the expected format."""

    kind = "parse_error"
    exit_code = 3

    def __init__(self, message: str, line_number: int):
        self.line_number = line_number
        super().__init__(f"{message} (line {line_number})")


class BranchInUseError(WorktreeManagerError):
    """Exception raised when a branch is already checked out in another worktree."""

    kind = "branch_in_use"

    def __init__(self, branch: str, path: str):
        self.branch = branch
        self.path = path
        super().__init__(f"branch '{branch}' is already checked out at {path}")


class PathExistsError(WorktreeManagerError):
    """Exception raised when the target path of a new worktree is not empty."""

    kind = "path_exists"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"path already exists: {path} (choose a different path with --path)")


class NotFoundError(WorktreeManagerError):
    """Exception raised when a worktree, branch or repository cannot be found."""

    kind = "not_found"
    exit_code = 2


class AmbiguousTargetError(WorktreeManagerError):
    """Exception raised when a removal target matches several worktrees."""

    kind = "ambiguous_target"

    def __init__(self, target: str, paths: Sequence[str]):
        self.target = target
        self.paths: List[str] = list(paths)
        super().__init__(f"target '{target}' matches multiple worktrees: {', '.join(self.paths)}")


class ConfirmationRequiredError(WorktreeManagerError):
    """Exception raised when a destructive operation needs explicit confirmation."""

    kind = "confirmation_required"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"worktree at {path} {reason}; use --force to remove anyway")


class MainWorktreeError(WorktreeManagerError):
    """Exception raised when attempting to remove the main worktree."""

    kind = "main_worktree"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"cannot remove the main worktree: {path}")


class TimedOutError(WorktreeManagerError):
    """Exception raised when an external command exceeds its timeout."""

    kind = "timed_out"
    exit_code = 3

    def __init__(self, command: Sequence[str], timeout: float):
        self.command = list(command)
        self.timeout = timeout
        super().__init__(f"'{' '.join(self.command)}' did not complete within {timeout:g}s")


class ToolInvocationError(WorktreeManagerError):
    """Exception raised when an external command exits with a non-zero status.

    The command's stderr is kept verbatim so git's own diagnostics reach
    the user.
    """

    kind = "tool_error"
    exit_code = 3

    def __init__(self, command: Sequence[str], status: Optional[int], stderr: str = ""):
        self.command = list(command)
        self.status = status
        self.stderr = stderr.strip()

        error_msg = f"'{' '.join(self.command)}' failed"
        if status is not None:
            error_msg += f" (exit {status})"
        if self.stderr:
            error_msg += f": {self.stderr}"

        super().__init__(error_msg)


class ProtocolError(WorktreeManagerError):
    """Exception raised for invalid selector output or action transitions."""

    kind = "protocol_error"


class ConfigError(WorktreeManagerError):
    """Exception raised when the configuration file cannot be read or written."""

    kind = "config_error"
    exit_code = 4
