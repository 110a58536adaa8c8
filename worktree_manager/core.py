"""Core functionality for worktree-manager"""

import os
from typing import List, Optional

from worktree_manager.config import Config
from worktree_manager.constants import CREATE_BRANCH_OPTION, SELECTOR_HEADER
from worktree_manager.exceptions import NotFoundError, ToolInvocationError, WorktreeManagerError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.action import ActionMessage
from worktree_manager.models.repository import RepositoryRecord
from worktree_manager.models.worktree import WorktreeRecord
from worktree_manager.services.candidates import CandidateProjector
from worktree_manager.services.discovery import RepositoryDiscovery
from worktree_manager.services.git.worktrees import WorktreeRegistry, resolve_repository
from worktree_manager.services.preview_service import Preview, PreviewGenerator
from worktree_manager.services.process import CommandRunner
from worktree_manager.services.protocol import InteractionSession
from worktree_manager.services.selector import Selector

logger = get_logger(__name__)


class WorktreeManager:
    """Main class tying configuration, git access and the picker together."""

    def __init__(
        self,
        config: Config,
        cwd: Optional[str] = None,
        runner: Optional[CommandRunner] = None,
        selector: Optional[Selector] = None,
        config_file: Optional[str] = None,
    ):
        """Initialize WorktreeManager.

        Args:
            config: Loaded configuration
            cwd: Directory the command was started from (current directory by default)
            runner: Command runner for git (built from the configured timeout otherwise)
            selector: fzf wrapper (built from the fzf section otherwise)
            config_file: Explicit config path, forwarded to the preview command
        """
        self.config = config
        self.cwd = cwd or os.getcwd()
        self.runner = runner or CommandRunner(timeout=config.timeouts.git)
        self.selector = selector or Selector(config.fzf)
        self.config_file = config_file
        self._registry: Optional[WorktreeRegistry] = None

    @property
    def registry(self) -> WorktreeRegistry:
        """Registry of the repository containing the working directory.

        Raises:
            NotFoundError: The working directory is not inside a git repository
        """
        if self._registry is None:
            try:
                self._registry = resolve_repository(self.cwd, self.runner)
            except ToolInvocationError as e:
                logger.debug(f"Repository lookup failed: {e}")
                raise NotFoundError(f"not inside a git repository: {self.cwd}") from e
        return self._registry

    def discovery(self) -> RepositoryDiscovery:
        discovery_config = self.config.auto_discovery
        return RepositoryDiscovery(
            discovery_config.expanded_paths(),
            self.runner,
            max_depth=discovery_config.max_depth,
        )

    def repositories(self, all_repositories: bool = False) -> List[RepositoryRecord]:
        """Collect the repositories to show.

        With ``all_repositories`` the configured search roots are walked;
        the current repository (when inside one) always comes first.

        Raises:
            NotFoundError: Nothing to show (not in a repository and no discovery)
        """
        if not all_repositories:
            return [self.registry.snapshot()]

        repositories: List[RepositoryRecord] = []
        try:
            repositories.append(self.registry.snapshot())
        except NotFoundError:
            logger.debug("Not inside a repository, relying on discovery")

        if not self.config.auto_discovery.enabled:
            logger.info("Auto-discovery is disabled in the config")
        else:
            known = {repo.common_dir for repo in repositories}
            for repository in self.discovery().discover():
                if repository.common_dir and repository.common_dir in known:
                    continue
                known.add(repository.common_dir)
                repositories.append(repository)

        if not repositories:
            raise NotFoundError(
                "no repositories found; run inside a repository or configure "
                "discovery paths with 'wt config set-discovery-paths'"
            )
        return repositories

    def preview(self, path: str) -> Preview:
        """Build the preview of the worktree at ``path``; never fails on git errors."""
        generator = PreviewGenerator(self.runner, self.config.preview, timeout=self.config.timeouts.preview)
        return generator.generate(path)

    def populate_status(self, repositories: List[RepositoryRecord]) -> None:
        """Read the working tree state of every existing worktree.

        A worktree whose status cannot be read keeps ``status`` unset.
        """
        generator = PreviewGenerator(self.runner, self.config.preview)
        for repository in repositories:
            for record in repository.worktrees:
                if record.is_bare or not os.path.isdir(record.path):
                    continue
                try:
                    generator.populate_status(record)
                except WorktreeManagerError as e:
                    logger.warning(f"Cannot read status of {record.path}: {e}")

    def run_interactive(self, all_repositories: bool = False) -> ActionMessage:
        """Show the picker and return the chosen action.

        Raises:
            NotFoundError: No worktrees to pick from
            ToolInvocationError: The selector failed
        """
        projector = CandidateProjector(self.repositories(all_repositories))
        if not len(projector):
            raise NotFoundError("no worktrees to choose from")

        session = InteractionSession(projector)
        result = self.selector.choose_worktree(projector.lines(), SELECTOR_HEADER, config_file=self.config_file)
        return session.feed(result)

    def pick_worktree_to_remove(self) -> Optional[WorktreeRecord]:
        """Let the user pick one of the linked worktrees; None when cancelled.

        Raises:
            NotFoundError: The repository has no linked worktrees
        """
        repository = self.registry.snapshot()
        linked = RepositoryRecord(
            root=repository.root,
            worktrees=[wt for wt in repository.worktrees if not wt.is_main],
            common_dir=repository.common_dir,
        )
        projector = CandidateProjector([linked])
        if not len(projector):
            raise NotFoundError("no linked worktrees to remove")

        line = self.selector.pick(projector.lines(), prompt="Remove worktree> ", columns="2,3")
        return projector.resolve(line) if line else None

    def pick_branch_to_add(self) -> Optional[str]:
        """Let the user pick a branch that has no worktree yet.

        Returns:
            The local branch name, CREATE_BRANCH_OPTION when the user wants
            a new branch, or None when cancelled
        """
        choices = [CREATE_BRANCH_OPTION] + self.registry.available_branches()
        choice = self.selector.pick(choices, prompt="Branch> ", header="Select a branch for the new worktree")
        if choice is None or choice == CREATE_BRANCH_OPTION:
            return choice
        return self.registry.local_branch_for(choice)
