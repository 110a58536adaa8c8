"""Tests for formatting and display"""
from rich.console import Console

from worktree_manager.formatters import (
    format_branch_name,
    format_changes,
    format_error_line,
    format_flags,
    format_sync,
    list_payload,
    remove_payload,
)
from worktree_manager.models import RepositoryRecord, WorktreeRecord, WorktreeStatus
from worktree_manager.services.display_service import DisplayService, row_style


def make_repository():
    return RepositoryRecord(
        root="/repos/app",
        worktrees=[
            WorktreeRecord(path="/repos/app", head_commit="1111111", branch_ref="refs/heads/main", is_main=True),
            WorktreeRecord(
                path="/repos/app-old",
                head_commit="2222222",
                branch_ref="refs/heads/old",
                is_locked=True,
                lock_reason="usb",
                is_prunable=True,
            ),
        ],
    )


class TestWorktreeFormatters:
    """Test column formatting."""

    def test_branch_name(self):
        repository = make_repository()
        assert format_branch_name(repository.worktrees[0]) == "main*"
        assert format_branch_name(repository.worktrees[1]) == "old"

    def test_flags(self):
        assert format_flags(make_repository().worktrees[1]) == "locked: usb, prunable"

    def test_sync(self):
        assert format_sync(2, 1) == "↑2 ↓1"
        assert format_sync(0, 3) == "↓3"
        assert format_sync(0, 0) == ""

    def test_changes(self):
        assert format_changes(None) == ""
        assert format_changes(WorktreeStatus()) == "clean"
        assert format_changes(WorktreeStatus(modified_count=2, untracked_count=1)) == "2 modified, 1 untracked"


class TestOutputFormatters:
    """Test JSON payloads and error lines."""

    def test_error_line_collapses_newlines(self):
        line = format_error_line("tool_error", "'git worktree add' failed: fatal: a\nhint: b\n")
        assert line == "error[tool_error]: 'git worktree add' failed: fatal: a; hint: b"

    def test_list_payload(self):
        repository = make_repository()
        assert list_payload([repository]) == [
            {"path": "/repos/app", "branch": "main", "head": "1111111", "is_main": True},
            {"path": "/repos/app-old", "branch": "old", "head": "2222222", "is_main": False},
        ]
        assert all(entry["repository"] == "app" for entry in list_payload([repository], with_repository=True))

    def test_remove_payload(self):
        record = make_repository().worktrees[1]
        assert remove_payload(record) == {"success": True, "removed": True, "branch": "old", "path": "/repos/app-old"}


class TestDisplayService:
    """Test the list table."""

    def test_row_styles(self):
        repository = make_repository()
        assert row_style(repository.worktrees[0]) == "cyan"
        assert row_style(repository.worktrees[1]) == "yellow"
        assert row_style(WorktreeRecord(path="/x", branch_ref="refs/heads/x")) is None

    def test_repository_column_only_with_all(self):
        console = Console(record=True, width=200)
        service = DisplayService(console)

        service.display_worktree_table([make_repository()])
        assert "Repository" not in console.export_text()

        service.display_worktree_table([make_repository()], show_repository=True)
        text = console.export_text()
        assert "Repository" in text
        assert "/repos/app-old" in text

    def test_empty_listing(self):
        console = Console(record=True, width=120)
        DisplayService(console).display_worktree_table([])
        assert "No worktrees found" in console.export_text()
