"""Pytest fixtures for worktree-manager tests"""
import tempfile
from pathlib import Path

import git
import pytest

from worktree_manager.exceptions import TimedOutError
from worktree_manager.services.process import CommandResult, CommandRunner


class FakeRunner(CommandRunner):
    """CommandRunner answering from a script instead of running programs.

    Responses are keyed by the full argv tuple. A response is a
    CommandResult-like tuple ``(status, stdout, stderr)``, an exception
    instance to raise, or a list of those consumed one per call.
    """

    def __init__(self, responses=None):
        super().__init__(timeout=5)
        self.responses = dict(responses or {})
        self.calls = []

    def add(self, argv, stdout="", status=0, stderr=""):
        self.responses[tuple(argv)] = (status, stdout, stderr)

    def _execute(self, argv, cwd, timeout):
        self.calls.append(list(argv))
        response = self.responses.get(tuple(argv))
        if isinstance(response, list):
            response = response.pop(0) if response else None
        if response is None:
            return CommandResult(argv=list(argv), status=1, stdout="", stderr=f"unexpected command: {argv}")
        if isinstance(response, Exception):
            raise response
        status, stdout, stderr = response
        return CommandResult(argv=list(argv), status=status, stdout=stdout, stderr=stderr)


def init_repo(path: Path, branch: str = "main") -> git.Repo:
    """Create a repository with one commit on ``branch``."""
    path.mkdir(parents=True, exist_ok=True)
    repo = git.Repo.init(path)

    # Configure git user for commits
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@example.com")

    readme = path / "README.md"
    readme.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", branch)
    return repo


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing (symlinks resolved, as git reports paths)."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository for testing."""
    repo = init_repo(temp_dir / "test_repo")
    yield repo
    repo.close()


@pytest.fixture
def git_repo_with_worktree(git_repo):
    """Repository with a linked worktree for branch feature/login."""
    repo_path = Path(git_repo.working_dir)
    worktree_path = repo_path.parent / "test_repo-feature-login"
    git_repo.git.worktree("add", "-b", "feature/login", str(worktree_path))
    yield git_repo, worktree_path


@pytest.fixture
def runner():
    """Real command runner with a short timeout."""
    return CommandRunner(timeout=10)


@pytest.fixture
def fake_runner():
    return FakeRunner()


@pytest.fixture
def timed_out():
    """Factory for the exception a hung command raises."""
    def make(*argv):
        return TimedOutError(list(argv), 5)
    return make


@pytest.fixture
def isolated_config(temp_dir, monkeypatch):
    """Point the config location at an empty temporary directory."""
    config_home = temp_dir / "config-home"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("VISUAL", raising=False)
    monkeypatch.delenv("EDITOR", raising=False)
    return config_home / "worktree-manager" / "config.yaml"


@pytest.fixture
def make_repo():
    """Factory creating repositories at arbitrary paths; closed after the test."""
    repos = []

    def make(path: Path, branch: str = "main") -> git.Repo:
        repo = init_repo(path, branch)
        repos.append(repo)
        return repo

    yield make
    for repo in repos:
        repo.close()
