"""Worktree operations service for worktree-manager."""

import os
import re
from typing import List, Optional

from worktree_manager.constants import LOCAL_BRANCH_PREFIX
from worktree_manager.exceptions import (
    AmbiguousTargetError,
    BranchInUseError,
    ConfirmationRequiredError,
    MainWorktreeError,
    NotFoundError,
    ParseError,
    PathExistsError,
)
from worktree_manager.logging_config import get_logger
from worktree_manager.models.repository import RepositoryRecord
from worktree_manager.models.worktree import WorktreeRecord
from worktree_manager.services.git.parser import parse_porcelain
from worktree_manager.services.git.status import read_status
from worktree_manager.services.process import CommandRunner

logger = get_logger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# "Removing worktrees/<name>: <reason>"
_PRUNE_LINE = re.compile(r"^Removing (?:worktrees/)?([^:]+): (.*)$")


def sanitize_branch(branch: str) -> str:
    """Replace characters that are unsafe in a directory name with '-'."""
    return _UNSAFE_PATH_CHARS.sub("-", branch)


def default_worktree_path(repo_root: str, branch: str) -> str:
    """Derive ``<parent of root>/<repo name>-<sanitized branch>``.

    Example:
        /home/user/repos/app + feature/new-ui -> /home/user/repos/app-feature-new-ui
    """
    root = os.path.normpath(repo_root)
    return os.path.join(os.path.dirname(root), f"{os.path.basename(root)}-{sanitize_branch(branch)}")


def same_path(a: str, b: str) -> bool:
    """Compare two paths after resolving symlinks and relative segments."""
    return os.path.realpath(a) == os.path.realpath(b)


def _admin_name_matches(name: str, path: str) -> bool:
    """git names admin entries after the worktree's basename, adding digits on collision."""
    base = os.path.basename(os.path.normpath(path))
    return name == base or (name.startswith(base) and name[len(base):].isdigit())


def resolve_repository(path: str, runner: CommandRunner) -> "WorktreeRegistry":
    """Open the registry of the repository containing ``path``.

    Raises:
        ToolInvocationError: ``path`` is not inside a git repository
    """
    toplevel = runner.check(
        ["git", "rev-parse", "--show-toplevel"], cwd=path, idempotent=True
    ).strip()
    common_dir = runner.check(
        ["git", "rev-parse", "--git-common-dir"], cwd=path, idempotent=True
    ).strip()
    if not os.path.isabs(common_dir):
        common_dir = os.path.join(toplevel or path, common_dir)
    return WorktreeRegistry(toplevel, runner, common_dir=os.path.realpath(common_dir))


class WorktreeRegistry:
    """The worktrees of one repository.

    Every operation asks git and re-parses its output; nothing is cached,
    so the next ``list()`` always reflects what is on disk.
    """

    def __init__(self, repo_root: str, runner: CommandRunner, common_dir: Optional[str] = None):
        """Initialize the registry.

        Args:
            repo_root: Top-level directory of the repository
            runner: Command runner used for every git invocation
            common_dir: Shared .git directory, when already known
        """
        self.repo_root = repo_root
        self.runner = runner
        self.common_dir = common_dir

    @property
    def name(self) -> str:
        return os.path.basename(os.path.normpath(self.repo_root))

    def _git(self, *args: str, idempotent: bool = False) -> str:
        return self.runner.check(["git", *args], cwd=self.repo_root, idempotent=idempotent)

    def list(self) -> List[WorktreeRecord]:
        """Get information about all worktrees, main worktree first.

        Raises:
            ParseError: The listing is empty or malformed
            ToolInvocationError: git failed
        """
        output = self._git("worktree", "list", "--porcelain", idempotent=True)
        worktrees = parse_porcelain(output)
        if not worktrees:
            raise ParseError("git listed no worktrees", 1)

        logger.debug(f"Found {len(worktrees)} worktrees in {self.repo_root}")
        for wt in worktrees:
            logger.debug(f"  {wt}")
        return worktrees

    def snapshot(self) -> RepositoryRecord:
        """List the worktrees and wrap them in a RepositoryRecord.

        The record's root is the main worktree's path as reported by git,
        so a registry opened from a linked worktree still yields the
        repository's primary checkout.
        """
        worktrees = self.list()
        return RepositoryRecord(root=worktrees[0].path, worktrees=worktrees, common_dir=self.common_dir)

    def find_by_path(self, path: str, worktrees: Optional[List[WorktreeRecord]] = None) -> Optional[WorktreeRecord]:
        """Return the worktree at ``path``, if any."""
        for wt in worktrees if worktrees is not None else self.list():
            if same_path(wt.path, path):
                return wt
        return None

    def resolve(self, target: str, worktrees: Optional[List[WorktreeRecord]] = None) -> WorktreeRecord:
        """Find a worktree by exact path first, then by branch name.

        Raises:
            NotFoundError: Nothing matches
            AmbiguousTargetError: Several worktrees carry the branch name
        """
        worktrees = worktrees if worktrees is not None else self.list()

        by_path = self.find_by_path(os.path.abspath(os.path.expanduser(target)), worktrees)
        if by_path is not None:
            return by_path

        matches = [
            wt for wt in worktrees
            if wt.branch_ref and target in (wt.branch_ref, wt.branch_name)
        ]
        if not matches:
            raise NotFoundError(f"no worktree found matching '{target}'")
        if len(matches) > 1:
            raise AmbiguousTargetError(target, [wt.path for wt in matches])
        return matches[0]

    def branch_exists(self, branch: str) -> bool:
        """Check if a branch exists locally or on any remote."""
        result = self.runner.run(
            ["git", "show-ref", "--verify", "--quiet", f"{LOCAL_BRANCH_PREFIX}{branch}"],
            cwd=self.repo_root,
            idempotent=True,
        )
        if result.ok:
            return True

        remote = self._git("branch", "-r", "--list", f"*/{branch}", idempotent=True)
        return bool(remote.strip())

    def remotes(self) -> List[str]:
        """Names of the configured remotes."""
        output = self._git("remote", idempotent=True)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def local_branch_for(self, choice: str) -> str:
        """Map a picked branch to the local branch name ('origin/feature' -> 'feature')."""
        remote, sep, rest = choice.partition("/")
        if sep and rest and remote in self.remotes():
            return rest
        return choice

    def available_branches(self) -> List[str]:
        """Local and remote branches that are not checked out in any worktree."""
        checked_out = {wt.branch_name for wt in self.list() if wt.branch_name}

        branches = []
        local = self._git("branch", "--format=%(refname:short)", idempotent=True)
        for line in local.splitlines():
            branch = line.strip()
            if branch and branch not in checked_out:
                branches.append(branch)

        remote = self._git("branch", "-r", "--format=%(refname:short)", idempotent=True)
        for line in remote.splitlines():
            branch = line.strip()
            # Skip HEAD pointers such as "origin/HEAD" or bare "origin"
            if not branch or "/" not in branch or branch.endswith("/HEAD"):
                continue
            if branch.split("/", 1)[1] not in checked_out:
                branches.append(branch)

        return sorted(set(branches))

    def add(self, branch: str, explicit_path: Optional[str] = None, track_remote: Optional[str] = None) -> WorktreeRecord:
        """Create a worktree for ``branch``.

        Args:
            branch: Branch to check out (created when it does not exist)
            explicit_path: Target directory; derived from the repository name otherwise
            track_remote: Remote whose ``<remote>/<branch>`` the new branch tracks

        Returns:
            The freshly listed record of the new worktree

        Raises:
            BranchInUseError: The branch is already checked out
            PathExistsError: The target exists and is not an empty directory
            ToolInvocationError: git refused to create the worktree
        """
        worktrees = self.list()
        if explicit_path:
            target = os.path.abspath(os.path.expanduser(explicit_path))
        else:
            main = worktrees[0]
            target = default_worktree_path(self.repo_root if main.is_bare else main.path, branch)

        branch_ref = f"{LOCAL_BRANCH_PREFIX}{branch}"
        for wt in worktrees:
            if wt.branch_ref == branch_ref:
                raise BranchInUseError(branch, wt.path)

        if os.path.lexists(target) and not (os.path.isdir(target) and not os.listdir(target)):
            raise PathExistsError(target)

        if track_remote:
            args = ["worktree", "add", "--track", "-b", branch, target, f"{track_remote}/{branch}"]
        elif self.branch_exists(branch):
            args = ["worktree", "add", target, branch]
        else:
            args = ["worktree", "add", "-b", branch, target]

        logger.info(f"Creating worktree for {branch} at {target}")
        self._git(*args)

        created = self.find_by_path(target)
        if created is None:
            raise NotFoundError(f"git did not list the new worktree at {target}")
        return created

    def remove(self, target: str, force: bool = False) -> WorktreeRecord:
        """Remove the worktree identified by path or branch name.

        Without ``force`` a worktree with uncommitted or untracked files is
        left alone; the caller asks the user and retries with ``force``.

        Raises:
            NotFoundError, AmbiguousTargetError: ``target`` does not identify one worktree
            MainWorktreeError: ``target`` is the main worktree
            ConfirmationRequiredError: The worktree is dirty and ``force`` is False
            ToolInvocationError: git refused the removal
        """
        worktree = self.resolve(target)

        if worktree.is_main:
            raise MainWorktreeError(worktree.path)

        if not force and os.path.isdir(worktree.path):
            summary = read_status(self.runner, worktree.path)
            worktree.status = summary.to_status()
            if summary.dirty:
                raise ConfirmationRequiredError(
                    worktree.path,
                    f"has {summary.modified_count} modified and {summary.untracked_count} untracked files",
                )

        args = ["worktree", "remove"]
        if force:
            args.append("--force")
            if worktree.is_locked:
                # git needs the flag twice to remove a locked worktree
                args.append("--force")
        args.append(worktree.path)

        self._git(*args)
        logger.info(f"Removed worktree at {worktree.path}")
        return worktree

    def _admin_entry_path(self, name: str) -> Optional[str]:
        """Map an administrative entry (``.git/worktrees/<name>``) to its worktree path."""
        if not self.common_dir:
            return None
        gitdir_file = os.path.join(self.common_dir, "worktrees", name, "gitdir")
        try:
            with open(gitdir_file, encoding="utf-8") as f:
                gitdir = f.read().strip()
        except OSError:
            return None
        if not gitdir:
            return None
        if not os.path.isabs(gitdir):
            gitdir = os.path.join(os.path.dirname(gitdir_file), gitdir)
        return os.path.dirname(os.path.normpath(gitdir))

    def prune(self) -> List[str]:
        """Prune stale worktree metadata.

        git decides what is stale; a dry run first tells which entries it
        will drop so their paths can be reported.

        Returns:
            Paths of the pruned worktrees, in listing order
        """
        before = self.list()

        dry_run = self.runner.run(
            ["git", "worktree", "prune", "--dry-run", "--verbose"],
            cwd=self.repo_root,
            idempotent=True,
        ).check()

        stale_entries = 0
        candidates: List[str] = []
        for line in (dry_run.stdout + "\n" + dry_run.stderr).splitlines():
            match = _PRUNE_LINE.match(line.strip())
            if not match:
                continue
            stale_entries += 1
            name = match.group(1)
            path = self._admin_entry_path(name)
            if path is None:
                # No gitdir file left: fall back to git's prunable flag
                path = next(
                    (wt.path for wt in before if wt.is_prunable and _admin_name_matches(name, wt.path)),
                    None,
                )
            if path is not None:
                candidates.append(path)

        if not stale_entries:
            logger.info("No stale worktrees found")
            return []

        # entries without a recoverable path are still dropped, just not reported
        self._git("worktree", "prune")
        logger.info(f"Pruned {stale_entries} stale worktree entries")

        after = self.list()
        return [
            wt.path for wt in before
            if any(same_path(wt.path, c) for c in candidates)
            and not any(same_path(wt.path, a.path) for a in after)
        ]
