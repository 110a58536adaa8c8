"""Formatting utilities for worktree-manager.

This package provides the functions that turn records into display text,
organized into logical modules:
- worktree: Branch, flags and sync formatting for tables and pickers
- preview: The preview block shown next to the picker
- output: JSON payloads and error lines of the CLI
"""

# Worktree formatters
from .worktree import (
    format_branch_name,
    format_flags,
    format_sync,
    format_changes,
    format_candidate_label,
)

# Preview formatters
from .preview import format_preview

# Output formatters
from .output import (
    format_error_line,
    error_payload,
    list_payload,
    add_payload,
    remove_payload,
    prune_payload,
    to_json,
)

__all__ = [
    # Worktree
    "format_branch_name",
    "format_flags",
    "format_sync",
    "format_changes",
    "format_candidate_label",
    # Preview
    "format_preview",
    # Output
    "format_error_line",
    "error_payload",
    "list_payload",
    "add_payload",
    "remove_payload",
    "prune_payload",
    "to_json",
]
