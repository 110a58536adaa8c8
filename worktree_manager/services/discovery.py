"""Discovery of git repositories below configured search roots."""

import os
from collections import deque
from typing import Deque, List, Sequence, Tuple

from worktree_manager.constants import DEFAULT_MAX_DEPTH, GIT_MARKER
from worktree_manager.exceptions import TimedOutError, ToolInvocationError
from worktree_manager.logging_config import get_logger
from worktree_manager.models.repository import RepositoryRecord
from worktree_manager.services.git.worktrees import WorktreeRegistry, resolve_repository
from worktree_manager.services.process import CommandRunner

logger = get_logger(__name__)


def has_git_marker(path: str) -> bool:
    """Check for a ``.git`` entry (directory for a repository, file for a linked worktree)."""
    return os.path.exists(os.path.join(path, GIT_MARKER))


class RepositoryDiscovery:
    """Breadth-first, depth-limited search for repository roots.

    A directory holding a ``.git`` entry is reported and its subtree is
    not searched any further, so worktrees nested inside a checkout are
    not mistaken for separate repositories. Symlinked directories are
    never followed, which keeps the walk finite on cyclic links.
    """

    def __init__(self, search_roots: Sequence[str], runner: CommandRunner, max_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize discovery.

        Args:
            search_roots: Directories to search (already expanded)
            runner: Command runner handed to every discovered registry
            max_depth: Deepest directory level examined; a root is level 0
        """
        self.search_roots = list(search_roots)
        self.runner = runner
        self.max_depth = max_depth

    def find_repository_dirs(self) -> List[str]:
        """Walk the search roots and return repository directories.

        Results are resolved, deduplicated and kept in first-seen order.
        Missing roots and unreadable directories are skipped.
        """
        found: List[str] = []
        seen = set()

        for root in self.search_roots:
            if not os.path.exists(root):
                logger.warning(f"Search path does not exist: {root}")
                continue
            if not os.path.isdir(root):
                logger.warning(f"Search path is not a directory: {root}")
                continue

            queue: Deque[Tuple[str, int]] = deque([(os.path.realpath(root), 0)])
            while queue:
                path, depth = queue.popleft()

                if has_git_marker(path):
                    if path not in seen:
                        seen.add(path)
                        found.append(path)
                    continue

                if depth >= self.max_depth:
                    continue

                try:
                    with os.scandir(path) as entries:
                        children = sorted(
                            entry.path for entry in entries
                            if entry.is_dir(follow_symlinks=False)
                        )
                except OSError as e:
                    logger.debug(f"Skipping unreadable directory {path}: {e}")
                    continue

                queue.extend((child, depth + 1) for child in children)

        logger.debug(f"Found {len(found)} repository directories")
        return found

    def registries(self) -> List[WorktreeRegistry]:
        """Open a registry for each discovered repository.

        Directories that belong to the same repository (a main worktree
        and a linked worktree that both sit under a search root) collapse
        into the first registry found. Directories git rejects are skipped.
        """
        registries: List[WorktreeRegistry] = []
        identities = set()

        for path in self.find_repository_dirs():
            try:
                registry = resolve_repository(path, self.runner)
            except (ToolInvocationError, TimedOutError) as e:
                logger.warning(f"Skipping {path}: {e}")
                continue

            identity = registry.common_dir or os.path.realpath(registry.repo_root)
            if identity in identities:
                logger.debug(f"{path} belongs to an already discovered repository")
                continue
            identities.add(identity)
            registries.append(registry)

        return registries

    def discover(self) -> List[RepositoryRecord]:
        """Discover repositories and list the worktrees of each.

        Raises:
            ParseError: A repository's worktree listing is malformed
        """
        repositories: List[RepositoryRecord] = []
        for registry in self.registries():
            try:
                repositories.append(registry.snapshot())
            except (ToolInvocationError, TimedOutError) as e:
                logger.warning(f"Failed to list worktrees for {registry.name}: {e}")
        return repositories
