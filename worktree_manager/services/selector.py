"""External fuzzy selector (fzf) invocation."""

import shlex
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence

from worktree_manager.config import FzfConfig
from worktree_manager.constants import (
    CANDIDATE_DELIMITER,
    KEY_EDIT,
    KEY_INFO,
    SELECTOR_INTERRUPTED,
    SELECTOR_NO_MATCH,
)
from worktree_manager.exceptions import ToolInvocationError
from worktree_manager.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class SelectorResult:
    """Exit status and raw output of one selector run."""

    argv: List[str]
    status: int
    stdout: str
    stderr: str = ""

    @property
    def cancelled(self) -> bool:
        return self.status in (SELECTOR_NO_MATCH, SELECTOR_INTERRUPTED)


def preview_command(field: str = "{3}", config_file: Optional[str] = None) -> str:
    """Shell command fzf runs for the highlighted candidate."""
    parts = [shlex.quote(sys.executable), "-m", "worktree_manager"]
    if config_file:
        parts += ["--config", shlex.quote(config_file)]
    parts += ["preview", "--path", field]
    return " ".join(parts)


class Selector:
    """Runs fzf over candidate lines.

    Candidates go to fzf's stdin; fzf draws on the terminal itself and
    prints the pressed key and chosen line on stdout. The user decides
    how long this takes, so no timeout applies.
    """

    def __init__(self, config: Optional[FzfConfig] = None, executable: str = "fzf"):
        self.config = config or FzfConfig()
        self.executable = executable

    def build_args(
        self,
        prompt: str,
        header: Optional[str] = None,
        preview: Optional[str] = None,
        expect: Sequence[str] = (),
        columns: Optional[str] = None,
    ) -> List[str]:
        """Build the fzf command line."""
        args = [
            self.executable,
            "--height", self.config.height,
            "--layout", self.config.layout,
            "--prompt", prompt,
        ]
        if columns:
            args += ["--delimiter", CANDIDATE_DELIMITER, "--with-nth", columns]
        if preview:
            args += ["--preview", preview, "--preview-window", self.config.preview_window]
        if header:
            args += ["--header", header]
        if expect:
            args += ["--expect", ",".join(expect)]
        return args

    def run(self, lines: Sequence[str], argv: List[str]) -> SelectorResult:
        """Feed ``lines`` to the selector and wait for the user.

        Raises:
            ToolInvocationError: fzf is not installed or could not be started
        """
        logger.debug(f"Running selector with {len(lines)} candidates")
        try:
            proc = subprocess.run(
                argv,
                input="".join(f"{line}\n" for line in lines),
                stdout=subprocess.PIPE,
                text=True,
            )
        except OSError as e:
            raise ToolInvocationError(argv, None, f"failed to start {self.executable} (is it installed?): {e}") from e
        return SelectorResult(argv=argv, status=proc.returncode, stdout=proc.stdout or "")

    def choose_worktree(self, lines: Sequence[str], header: str, config_file: Optional[str] = None) -> SelectorResult:
        """Run the worktree picker with preview and action keys."""
        argv = self.build_args(
            prompt="Worktree> ",
            header=header,
            preview=preview_command(config_file=config_file),
            expect=(KEY_EDIT, KEY_INFO),
            columns="1,2",
        )
        return self.run(lines, argv)

    def pick(self, lines: Sequence[str], prompt: str, header: Optional[str] = None, columns: Optional[str] = None) -> Optional[str]:
        """Let the user pick one line; None when cancelled.

        Raises:
            ToolInvocationError: fzf failed
        """
        argv = self.build_args(prompt=prompt, header=header, columns=columns)
        result = self.run(lines, argv)
        if result.cancelled:
            return None
        if result.status != 0:
            raise ToolInvocationError(argv, result.status, result.stderr)
        selection = result.stdout.rstrip("\n")
        return selection or None
