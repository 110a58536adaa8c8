"""External command execution.

Every git invocation in worktree-manager goes through ``CommandRunner`` so
that parsing, registry and preview logic can be exercised against scripted
output without a real git binary.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Sequence

import git

from worktree_manager.constants import DEFAULT_GIT_TIMEOUT
from worktree_manager.exceptions import TimedOutError, ToolInvocationError
from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)

TIMEOUT_MARKER = "Timeout:"


@dataclass
class CommandResult:
    """Captured outcome of one external command."""

    argv: List[str]
    status: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.status == 0

    def check(self) -> "CommandResult":
        """Raise ToolInvocationError unless the command succeeded."""
        if not self.ok:
            raise ToolInvocationError(self.argv, self.status, self.stderr)
        return self


class CommandRunner:
    """Runs external commands with a timeout and captures their output."""

    def __init__(self, timeout: float = DEFAULT_GIT_TIMEOUT):
        """Initialize the runner.

        Args:
            timeout: Default timeout in seconds for each invocation
        """
        self.timeout = timeout

    def run(
        self,
        argv: Sequence[str],
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        idempotent: bool = False,
    ) -> CommandResult:
        """Run a command and return its result without checking the status.

        Args:
            argv: Program and arguments
            cwd: Working directory (defaults to the current directory)
            timeout: Override of the default timeout
            idempotent: Read-only commands are retried once after a timeout

        Raises:
            TimedOutError: The command exceeded its timeout (on every attempt)
            ToolInvocationError: The program could not be started
        """
        argv = list(argv)
        timeout = timeout or self.timeout
        try:
            return self._execute(argv, cwd, timeout)
        except TimedOutError:
            if not idempotent:
                raise
            logger.debug(f"Retrying after timeout: {' '.join(argv)}")
        return self._execute(argv, cwd, timeout)

    def check(
        self,
        argv: Sequence[str],
        cwd: Optional[str] = None,
        timeout: Optional[float] = None,
        idempotent: bool = False,
    ) -> str:
        """Run a command, raise ToolInvocationError on failure and return stdout."""
        return self.run(argv, cwd=cwd, timeout=timeout, idempotent=idempotent).check().stdout

    def _execute(self, argv: List[str], cwd: Optional[str], timeout: float) -> CommandResult:
        logger.debug(f"Running {' '.join(argv)} (cwd={cwd or '.'}, timeout={timeout}s)")
        started = time.monotonic()
        try:
            status, stdout, stderr = git.Git(cwd).execute(
                argv,
                with_extended_output=True,
                with_exceptions=False,
                kill_after_timeout=timeout,
                strip_newline_in_stdout=False,
            )
        except git.exc.GitCommandNotFound as e:
            raise ToolInvocationError(argv, None, f"cannot execute {argv[0]}: {e}") from e

        # GitPython kills the child once the timeout expires and replaces stderr with its marker
        if status != 0 and stderr.startswith(TIMEOUT_MARKER) and time.monotonic() - started >= timeout:
            raise TimedOutError(argv, timeout)

        return CommandResult(argv=argv, status=status, stdout=stdout, stderr=stderr)
