"""Tests for the command-line interface"""
import json
from pathlib import Path

import pytest

from worktree_manager.cli.args import parse_args
from worktree_manager.cli.main import main
from worktree_manager.services.selector import Selector, SelectorResult


@pytest.fixture
def in_repo(git_repo, isolated_config, monkeypatch):
    """Run commands from inside the test repository with an empty config."""
    monkeypatch.chdir(git_repo.working_dir)
    return git_repo


def run_json(capsys, *argv):
    status = main(list(argv))
    out = capsys.readouterr().out
    return status, json.loads(out)


class TestParseArgs:
    """Test command-line parsing."""

    def test_no_command_means_interactive(self):
        args = parse_args([])
        assert args.command == "interactive"
        assert args.all is False

    def test_global_flags(self):
        args = parse_args(["-v", "--config", "/tmp/wt.yaml", "list", "--json", "--all"])
        assert args.verbose is True
        assert args.config == "/tmp/wt.yaml"
        assert args.json is True
        assert args.all is True

    def test_add_options(self):
        args = parse_args(["add", "feature/x", "-p", "/tmp/x", "--track", "origin", "-q"])
        assert args.branch == "feature/x"
        assert args.path == "/tmp/x"
        assert args.track == "origin"
        assert args.quiet is True

    def test_unknown_shell_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["init", "powershell"])


class TestListCommand:
    """Test wt list."""

    def test_list_json(self, in_repo, capsys):
        status, data = run_json(capsys, "list", "--json")

        assert status == 0
        assert len(data) == 1
        entry = data[0]
        assert entry["path"] == in_repo.working_dir
        assert entry["branch"] == "main"
        assert entry["is_main"] is True
        assert len(entry["head"]) == 7
        assert "repository" not in entry

    def test_list_with_status(self, in_repo, capsys):
        (Path(in_repo.working_dir) / "scratch.txt").write_text("wip\n")

        status, data = run_json(capsys, "list", "--status", "--json")

        assert status == 0
        assert data[0]["status"] == {
            "dirty": True,
            "ahead": 0,
            "behind": 0,
            "modified_count": 0,
            "untracked_count": 1,
        }

    def test_list_table(self, in_repo, capsys):
        assert main(["list"]) == 0
        out = capsys.readouterr().out
        assert "main" in out
        assert "Branch" in out

    def test_outside_repository(self, temp_dir, isolated_config, monkeypatch, capsys):
        outside = temp_dir / "not-a-repo"
        outside.mkdir()
        monkeypatch.chdir(outside)

        assert main(["list"]) == 2
        assert capsys.readouterr().err.startswith("error[not_found]:")

    def test_list_all_uses_discovery(self, temp_dir, make_repo, isolated_config, monkeypatch, capsys):
        projects = temp_dir / "projects"
        make_repo(projects / "alpha")
        make_repo(projects / "beta")
        outside = temp_dir / "elsewhere"
        outside.mkdir()
        monkeypatch.chdir(outside)

        assert main(["config", "set-discovery-paths", str(projects)]) == 0
        capsys.readouterr()
        status, data = run_json(capsys, "list", "--all", "--json")

        assert status == 0
        assert [entry["repository"] for entry in data] == ["alpha", "beta"]


class TestWorktreeCommands:
    """Test add, remove and prune."""

    def test_add_then_list(self, in_repo, capsys):
        status, data = run_json(capsys, "add", "feature/x", "--json")

        expected = str(Path(in_repo.working_dir).parent / "test_repo-feature-x")
        assert status == 0
        assert data == {"success": True, "worktree": {"path": expected, "branch": "feature/x"}}

        _, listing = run_json(capsys, "list", "--json")
        assert expected in [entry["path"] for entry in listing]

    def test_add_branch_in_use(self, in_repo, capsys):
        status, data = run_json(capsys, "add", "main", "--json")
        assert status == 1
        assert data["success"] is False
        assert data["error"].startswith("branch_in_use: ")

    def test_remove_json(self, in_repo, capsys):
        main(["add", "topic", "-q"])
        capsys.readouterr()

        status, data = run_json(capsys, "remove", "topic", "--json")

        assert status == 0
        assert data["success"] is True
        assert data["removed"] is True
        assert data["branch"] == "topic"

    def test_remove_detached_json(self, in_repo, capsys):
        detached = str(Path(in_repo.working_dir).parent / "test_repo-detached")
        in_repo.git.worktree("add", "--detach", detached)

        status, data = run_json(capsys, "remove", detached, "--force", "--json")

        assert status == 0
        assert data["branch"] == "(detached)"
        assert data["path"] == detached

    def test_remove_dirty_without_force(self, in_repo, capsys):
        main(["add", "topic", "--json"])
        added = json.loads(capsys.readouterr().out)["worktree"]["path"]
        (Path(added) / "scratch.txt").write_text("wip\n")

        status, data = run_json(capsys, "remove", "topic", "--json")
        assert status == 1
        assert data["error"].startswith("confirmation_required: ")

        status, data = run_json(capsys, "remove", "topic", "--force", "--json")
        assert status == 0

    def test_remove_unknown_target(self, in_repo, capsys):
        assert main(["remove", "nope"]) == 2
        err = capsys.readouterr().err
        assert err.startswith("error[not_found]: ")
        assert err.count("\n") == 1

    def test_remove_main_worktree(self, in_repo, capsys):
        status, data = run_json(capsys, "remove", "main", "--json")
        assert status == 1
        assert data["error"].startswith("main_worktree: ")

    def test_prune_nothing(self, in_repo, capsys):
        status, data = run_json(capsys, "prune", "--json")
        assert status == 0
        assert data == {"pruned": [], "count": 0}


class TestInteractiveCommand:
    """Test the picker flow with a scripted selector."""

    def test_edit_action(self, in_repo, monkeypatch, capsys):
        def choose(self, lines, header, config_file=None):
            return SelectorResult(argv=["fzf"], status=0, stdout=f"ctrl-e\n{lines[0]}\n")

        monkeypatch.setattr(Selector, "choose_worktree", choose)

        assert main([]) == 0
        assert capsys.readouterr().out == f"edit|{in_repo.working_dir}\n"

    def test_cancel_prints_nothing(self, in_repo, monkeypatch, capsys):
        def choose(self, lines, header, config_file=None):
            return SelectorResult(argv=["fzf"], status=130, stdout="")

        monkeypatch.setattr(Selector, "choose_worktree", choose)

        assert main(["interactive"]) == 0
        assert capsys.readouterr().out == ""


class TestPreviewCommand:
    """Test wt preview."""

    def test_preview_json(self, in_repo, capsys):
        status, data = run_json(capsys, "preview", "--path", in_repo.working_dir, "--json")

        assert status == 0
        assert data["repository"] == "test_repo"
        assert data["branch"] == "main"
        assert data["status"]["dirty"] is False
        assert data["commits"][0].endswith("Initial commit")

    def test_preview_text(self, in_repo, capsys, monkeypatch):
        monkeypatch.delenv("FZF_PREVIEW_COLUMNS", raising=False)
        assert main(["preview", "--path", in_repo.working_dir]) == 0
        out = capsys.readouterr().out
        assert "Repo:   test_repo" in out
        assert "Recent commits:" in out


class TestConfigAndInit:
    """Test wt config and wt init."""

    def test_config_init(self, isolated_config, capsys):
        assert main(["config", "init"]) == 0
        assert isolated_config.exists()
        assert main(["config", "init"]) == 0
        assert "already exists" in capsys.readouterr().err

    def test_set_editor(self, isolated_config, capsys):
        assert main(["config", "set-editor", "hx"]) == 0
        capsys.readouterr()
        assert main(["config", "editor"]) == 0
        assert capsys.readouterr().out == "hx\n"

    def test_config_show_json(self, isolated_config, capsys):
        status, data = run_json(capsys, "config", "show", "--json")
        assert status == 0
        assert data["fzf"]["height"] == "40%"

    def test_malformed_config(self, isolated_config, capsys):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("fzf: [unclosed\n")

        assert main(["config", "show"]) == 4
        assert capsys.readouterr().err.startswith("error[config_error]:")

    def test_explicit_config_path(self, temp_dir, isolated_config, capsys):
        custom = temp_dir / "custom.yaml"
        assert main(["--config", str(custom), "config", "set-editor", "nano"]) == 0
        assert custom.exists()
        assert not isolated_config.exists()

    @pytest.mark.parametrize("shell", ["bash", "zsh", "fish"])
    def test_init_snippet(self, shell, capsys):
        assert main(["init", shell]) == 0
        out = capsys.readouterr().out
        assert "command wt" in out
        assert "cd|" in out
        assert "edit|" in out
        assert "info|" in out
