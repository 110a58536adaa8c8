"""Tests for worktree listing parsing"""
import pytest

from worktree_manager.exceptions import ParseError
from worktree_manager.services.git.parser import parse_porcelain

LISTING = (
    "worktree /home/user/repos/app\n"
    "HEAD 1234567890abcdef1234567890abcdef12345678\n"
    "branch refs/heads/main\n"
    "\n"
    "worktree /home/user/repos/app-feature-login\n"
    "HEAD abcdef1234567890abcdef1234567890abcdef12\n"
    "branch refs/heads/feature/login\n"
    "locked on usb drive\n"
    "\n"
    "worktree /home/user/repos/app-detached\n"
    "HEAD fedcba9876543210fedcba9876543210fedcba98\n"
    "detached\n"
    "prunable gitdir file points to non-existent location\n"
    "\n"
)


class TestParsePorcelain:
    """Test parsing of git worktree list --porcelain."""

    def test_parses_all_stanzas(self):
        records = parse_porcelain(LISTING)
        assert [r.path for r in records] == [
            "/home/user/repos/app",
            "/home/user/repos/app-feature-login",
            "/home/user/repos/app-detached",
        ]

    def test_first_record_is_main_only(self):
        records = parse_porcelain(LISTING)
        assert records[0].is_main is True
        assert not any(r.is_main for r in records[1:])

    def test_branch_and_head(self):
        records = parse_porcelain(LISTING)
        assert records[1].branch_ref == "refs/heads/feature/login"
        assert records[1].branch_name == "feature/login"
        assert records[1].head_commit == "abcdef1"

    def test_flags(self):
        records = parse_porcelain(LISTING)
        assert records[1].is_locked is True
        assert records[1].lock_reason == "on usb drive"
        assert records[2].is_detached is True
        assert records[2].branch_ref is None
        assert records[2].branch_display == "(detached)"
        assert records[2].is_prunable is True
        assert records[2].prunable_reason == "gitdir file points to non-existent location"

    def test_bare_locked_without_reason(self):
        output = (
            "worktree /srv/app.git\n"
            "bare\n"
            "\n"
            "worktree /srv/app-main\n"
            "HEAD 1234567890abcdef1234567890abcdef12345678\n"
            "branch refs/heads/main\n"
            "locked\n"
            "\n"
        )
        records = parse_porcelain(output)
        assert records[0].is_bare is True
        assert records[0].is_main is True
        assert records[1].is_locked is True
        assert records[1].lock_reason is None

    def test_parsing_is_pure(self):
        assert parse_porcelain(LISTING) == parse_porcelain(LISTING)

    def test_crlf_line_endings(self):
        records = parse_porcelain(LISTING.replace("\n", "\r\n"))
        assert len(records) == 3
        assert records[0].branch_ref == "refs/heads/main"

    def test_unknown_keys_are_ignored(self):
        output = (
            "worktree /repo\n"
            "HEAD 1234567890abcdef1234567890abcdef12345678\n"
            "branch refs/heads/main\n"
            "future-key some value\n"
            "\n"
        )
        assert parse_porcelain(output)[0].path == "/repo"

    def test_path_with_spaces(self):
        output = (
            "worktree /home/user/my repos/app\n"
            "HEAD 1234567890abcdef1234567890abcdef12345678\n"
            "branch refs/heads/main\n"
            "\n"
        )
        assert parse_porcelain(output)[0].path == "/home/user/my repos/app"

    def test_empty_output(self):
        assert parse_porcelain("") == []


class TestParsePorcelainErrors:
    """Test that malformed listings are rejected."""

    def test_unterminated_stanza(self):
        output = LISTING.rstrip("\n")
        with pytest.raises(ParseError) as exc_info:
            parse_porcelain(output)
        assert "unterminated" in str(exc_info.value)

    def test_missing_head(self):
        output = "worktree /repo\nbranch refs/heads/main\n\n"
        with pytest.raises(ParseError) as exc_info:
            parse_porcelain(output)
        assert exc_info.value.line_number == 1

    def test_missing_branch_and_detached(self):
        output = "worktree /repo\nHEAD 1234567890abcdef1234567890abcdef12345678\n\n"
        with pytest.raises(ParseError):
            parse_porcelain(output)

    def test_attribute_outside_stanza(self):
        with pytest.raises(ParseError) as exc_info:
            parse_porcelain("HEAD 1234567\n\n")
        assert exc_info.value.line_number == 1

    def test_worktree_line_inside_open_stanza(self):
        output = (
            "worktree /repo\n"
            "HEAD 1234567890abcdef1234567890abcdef12345678\n"
            "worktree /other\n"
        )
        with pytest.raises(ParseError) as exc_info:
            parse_porcelain(output)
        assert exc_info.value.line_number == 3

    def test_worktree_without_path(self):
        with pytest.raises(ParseError):
            parse_porcelain("worktree\n\n")

    def test_branch_without_ref(self):
        output = "worktree /repo\nHEAD 1234567890abcdef1234567890abcdef12345678\nbranch\n\n"
        with pytest.raises(ParseError):
            parse_porcelain(output)
